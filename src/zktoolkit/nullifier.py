"""Scoped nullifiers for double-spend detection.

A nullifier is ``H(secret, scope)``: deterministic for a given secret and
scope, distinct across scopes, and revealing nothing about the secret.
Spent nullifiers are tracked in a caller-owned :class:`NullifierSet`.

:class:`NullifierSet` is not synchronised. Callers adding to one set from
several threads must serialise those calls themselves, otherwise two
concurrent adds of the same nullifier may both report it as new.

Example:
    >>> registry = NullifierRegistry(oracle)
    >>> n = registry.create("my_voter_secret", "election:2024")
    >>> spent = registry.create_set("election:2024")
    >>> registry.add_to_set(spent, n.nullifier)
    True
    >>> registry.add_to_set(spent, n.nullifier)
    False
"""

import logging
import secrets
from collections.abc import Callable, Iterator, Sequence

from pydantic import BaseModel, ConfigDict

from zktoolkit.config.schema import NullifierConfig
from zktoolkit.field import FieldCodec
from zktoolkit.oracle import FieldHashOracle

logger = logging.getLogger(__name__)


class Nullifier(BaseModel):
    """A nullifier bound to its scope."""

    model_config = ConfigDict(frozen=True)

    nullifier: str
    scope: str
    algorithm: str


class NullifierVerifyResult(BaseModel):
    """Outcome of checking a nullifier against a secret and scope."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    nullifier: str
    expected_nullifier: str
    scope: str


class NullifierSet:
    """Mutable set of spent nullifiers.

    Members are stored normalised: lowercase, and hex values re-rendered at
    canonical width so differently padded spellings of one element match.
    The scope is informational and not checked against added members.
    """

    def __init__(self, scope: str, codec: FieldCodec | None = None):
        self.scope = scope
        self._codec = codec or FieldCodec()
        self._members: set[str] = set()

    def normalize(self, nullifier: str) -> str:
        return self._codec.normalize_hex(nullifier)

    def add(self, nullifier: str) -> bool:
        """Insert *nullifier*; return False if it was already present."""
        key = self.normalize(nullifier)
        if key in self._members:
            return False
        self._members.add(key)
        return True

    def __contains__(self, nullifier: object) -> bool:
        if not isinstance(nullifier, str):
            return False
        return self.normalize(nullifier) in self._members

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._members))

    def __repr__(self) -> str:
        return f"NullifierSet(scope={self.scope!r}, size={len(self)})"


class NullifierRegistry:
    """Derive, verify and track nullifiers."""

    def __init__(
        self,
        oracle: FieldHashOracle,
        codec: FieldCodec | None = None,
        config: NullifierConfig | None = None,
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
    ):
        self._oracle = oracle
        self._codec = codec or FieldCodec()
        self._config = config or NullifierConfig()
        self._random_bytes = random_bytes

    def _derive(self, secret: str, scope: str) -> str:
        digest = self._oracle.hash([self._codec.encode(secret), self._codec.encode(scope)])
        return self._codec.to_hex(digest)

    def create(self, secret: str, scope: str) -> Nullifier:
        """Derive the nullifier for *secret* within *scope*."""
        return Nullifier(
            nullifier=self._derive(secret, scope),
            scope=scope,
            algorithm=self._oracle.name,
        )

    def verify(self, nullifier: str, secret: str, scope: str) -> NullifierVerifyResult:
        """Check that *nullifier* was derived from *secret* and *scope*."""
        expected = self._derive(secret, scope)
        return NullifierVerifyResult(
            valid=self._codec.hex_equal(expected, nullifier),
            nullifier=nullifier,
            expected_nullifier=expected,
            scope=scope,
        )

    def create_set(self, scope: str) -> NullifierSet:
        """Create an empty spent-nullifier set for *scope*."""
        return NullifierSet(scope, codec=self._codec)

    def add_to_set(self, nullifier_set: NullifierSet, nullifier: str) -> bool:
        """Mark *nullifier* as spent.

        Returns:
            True if it was new, False if it was already spent (a double
            spend). The set is left unchanged in the latter case.
        """
        added = nullifier_set.add(nullifier)
        if not added:
            logger.warning(
                "Double spend detected in scope %r: %s", nullifier_set.scope, nullifier[:18]
            )
        return added

    def is_in_set(self, nullifier_set: NullifierSet, nullifier: str) -> bool:
        """Check whether *nullifier* has been spent, without modifying the set."""
        return nullifier in nullifier_set

    def generate_secret(self) -> str:
        """Return a fresh random secret as ``0x``-prefixed hex."""
        return "0x" + self._random_bytes(self._config.secret_bytes).hex()

    def create_batch(self, secret: str, scopes: Sequence[str]) -> list[Nullifier]:
        """Derive one nullifier per scope, preserving input order."""
        return [self.create(secret, scope) for scope in scopes]
