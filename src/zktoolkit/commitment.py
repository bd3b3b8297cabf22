"""Salted hash commitments: C = H(value, salt).

A commitment hides ``value`` as long as the salt is uniformly random and
kept secret, and binds the committer to it as long as the oracle is
collision resistant. Salts are either drawn from the randomness source or
derived from a caller passphrase; a short passphrase weakens hiding, so it
is logged and flagged on the result rather than silently accepted.

Example:
    >>> scheme = CommitmentScheme(oracle)
    >>> c = scheme.create(100, "my_random_secret_phrase")
    >>> scheme.reveal(c.commitment, 100, "my_random_secret_phrase").valid
    True
"""

import logging
import secrets
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict

from zktoolkit.config.schema import CommitmentConfig
from zktoolkit.field import FieldCodec, FieldInput
from zktoolkit.oracle import FieldHashOracle

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class Commitment(BaseModel):
    """A commitment together with what is needed to open it later.

    Attributes:
        commitment: Canonical hex of ``H(value, salt)``.
        salt: The salt used, returned even when derived from a caller secret.
        value: String form of the committed value, for audit and display only.
        algorithm: Name of the oracle that produced the commitment.
        weak_secret: True when the salt came from a passphrase shorter than
            the configured minimum.
    """

    model_config = ConfigDict(frozen=True)

    commitment: str
    salt: str
    value: str
    algorithm: str
    weak_secret: bool = False


class RevealResult(BaseModel):
    """Outcome of opening a commitment with a passphrase."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    commitment: str
    revealed_value: str
    salt: str


class CommitmentVerifyResult(BaseModel):
    """Outcome of checking a commitment against a value and a raw salt."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    commitment: str
    expected_commitment: str | None = None
    error: str | None = None


def _display(value: FieldInput) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


# ---------------------------------------------------------------------------
# Scheme
# ---------------------------------------------------------------------------


class CommitmentScheme:
    """Create, reveal and verify salted hash commitments."""

    def __init__(
        self,
        oracle: FieldHashOracle,
        codec: FieldCodec | None = None,
        config: CommitmentConfig | None = None,
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
    ):
        self._oracle = oracle
        self._codec = codec or FieldCodec()
        self._config = config or CommitmentConfig()
        self._random_bytes = random_bytes

    def _generate_salt(self) -> str:
        return "0x" + self._random_bytes(self._config.salt_bytes).hex()

    def _commit(self, value: FieldInput, salt: str) -> str:
        value_field = self._codec.encode_value(value)
        salt_field = self._codec.parse_hex(salt)
        return self._codec.to_hex(self._oracle.hash([value_field, salt_field]))

    def create(self, value: FieldInput, secret: str | None = None) -> Commitment:
        """Commit to *value*.

        Args:
            value: Integer, byte buffer, hex literal, decimal string or text.
            secret: Optional passphrase the salt is derived from. When
                omitted a fresh random salt is drawn.

        Returns:
            The commitment, its salt and the stringified value.
        """
        weak = False
        if secret is None:
            salt = self._generate_salt()
        else:
            salt = self._codec.pad_secret(secret)
            if len(secret.encode("utf-8")) < self._config.min_secret_bytes:
                weak = True
                logger.warning(
                    "Commitment secret is shorter than %d bytes; hiding is weakened",
                    self._config.min_secret_bytes,
                )

        commitment = self._commit(value, salt)
        logger.debug("Created commitment %s", commitment[:16])

        return Commitment(
            commitment=commitment,
            salt=salt,
            value=_display(value),
            algorithm=self._oracle.name,
            weak_secret=weak,
        )

    def reveal(self, commitment: str, value: FieldInput, secret: str) -> RevealResult:
        """Open *commitment* with the passphrase it was created from.

        The salt is re-derived from *secret* exactly as in :meth:`create`.
        A mismatch yields ``valid=False``; nothing is raised.
        """
        salt = self._codec.pad_secret(secret)
        recomputed = self._commit(value, salt)
        valid = self._codec.hex_equal(recomputed, commitment)

        if not valid:
            logger.debug("Commitment %s did not open with the supplied secret", commitment[:16])

        return RevealResult(
            valid=valid,
            commitment=commitment,
            revealed_value=_display(value),
            salt=salt,
        )

    def verify(self, commitment: str, value: FieldInput, salt: str) -> CommitmentVerifyResult:
        """Check *commitment* against *value* and a raw hex *salt*.

        Use this when the salt was exchanged out of band instead of being
        derived from a passphrase.
        """
        try:
            expected = self._commit(value, salt)
        except ValueError as exc:
            return CommitmentVerifyResult(
                valid=False,
                commitment=commitment,
                error=f"Invalid salt: {exc}",
            )

        valid = self._codec.hex_equal(expected, commitment)
        return CommitmentVerifyResult(
            valid=valid,
            commitment=commitment,
            expected_commitment=expected,
            error=None if valid else "Commitment mismatch",
        )
