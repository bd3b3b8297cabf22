"""Field hash oracle: the one primitive every component composes.

An oracle maps an ordered sequence of field elements to a single field
element. The algebraic permutation behind it (Poseidon, MiMC, ...) is an
external concern; this module fixes the interface, ships hashlib-backed
reference oracles for tests and local use, and provides
:class:`LazyOracle`, a single-initialisation handle for oracles that are
expensive to build.

Example:
    >>> from zktoolkit.oracle import LazyOracle, create_oracle
    >>> from zktoolkit.config.schema import ToolkitConfig
    >>>
    >>> lazy = LazyOracle(lambda: create_oracle(ToolkitConfig()))
    >>> oracle = await lazy.get()
    >>> oracle.hash([1, 2])  # doctest: +SKIP
"""

from __future__ import annotations

import asyncio
import functools
import hashlib
import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Any

from zktoolkit.config.schema import BN254_SCALAR_PRIME
from zktoolkit.exceptions import OracleUnavailableError

if TYPE_CHECKING:
    from zktoolkit.config.schema import ToolkitConfig

logger = logging.getLogger(__name__)


class FieldHashOracle(ABC):
    """Collision-resistant hash from field elements to a field element.

    Attributes:
        name: Human-readable algorithm name reported in results.
        modulus: Prime defining the field; outputs lie in ``[0, modulus)``.
        max_inputs: Largest sequence length accepted by :meth:`hash`.
    """

    name: str
    modulus: int
    max_inputs: int

    @abstractmethod
    def hash(self, inputs: Sequence[int]) -> int:
        """Hash an ordered sequence of field elements.

        Args:
            inputs: Between 1 and ``max_inputs`` integers. Values outside
                ``[0, modulus)`` are reduced.

        Returns:
            A field element in ``[0, modulus)``.

        Raises:
            ValueError: If the sequence length is unsupported.
        """

    @property
    def element_bytes(self) -> int:
        """Byte width needed to hold any element of the field."""
        return (self.modulus.bit_length() + 7) // 8


_BACKENDS: dict[str, Callable[[], Any]] = {
    "sha256": hashlib.sha256,
    "blake2b": functools.partial(hashlib.blake2b, digest_size=32),
}


class HashlibFieldOracle(FieldHashOracle):
    """Reference oracle built from a hashlib digest reduced into the field.

    Each call absorbs a domain tag and the input count, then every input
    reduced modulo the prime and written as a fixed-width big-endian
    integer. The digest is read big-endian and reduced. This is not a
    circuit-friendly hash; it stands in for one wherever the composition
    logic, not constraint count, is what matters.
    """

    def __init__(
        self,
        backend: str = "sha256",
        modulus: int = BN254_SCALAR_PRIME,
        domain: str = "zktoolkit",
        max_inputs: int = 16,
    ):
        if backend not in _BACKENDS:
            raise ValueError(f"Unknown oracle backend: {backend}")
        self._digest = _BACKENDS[backend]
        self._domain = domain.encode("utf-8")
        self.name = f"{backend}-field"
        self.modulus = modulus
        self.max_inputs = max_inputs

    def hash(self, inputs: Sequence[int]) -> int:
        count = len(inputs)
        if count < 1 or count > self.max_inputs:
            msg = f"Oracle accepts 1-{self.max_inputs} inputs, got {count}"
            raise ValueError(msg)

        width = self.element_bytes
        h = self._digest()
        h.update(len(self._domain).to_bytes(2, "big"))
        h.update(self._domain)
        h.update(count.to_bytes(2, "big"))
        for element in inputs:
            h.update((element % self.modulus).to_bytes(width, "big"))
        return int.from_bytes(h.digest(), "big") % self.modulus


def create_oracle(config: ToolkitConfig) -> FieldHashOracle:
    """Create a field hash oracle based on configuration.

    Args:
        config: Toolkit configuration; reads ``config.oracle``.

    Returns:
        An oracle for the configured backend.

    Raises:
        ValueError: If the backend is not recognised.
    """
    oracle_cfg = config.oracle
    if oracle_cfg.backend in _BACKENDS:
        return HashlibFieldOracle(
            backend=oracle_cfg.backend,
            modulus=oracle_cfg.modulus,
            domain=oracle_cfg.domain,
            max_inputs=oracle_cfg.max_inputs,
        )
    raise ValueError(f"Unknown oracle backend: {oracle_cfg.backend}")


OracleFactory = Callable[[], FieldHashOracle | Awaitable[FieldHashOracle]]


class LazyOracle:
    """Memoised handle that builds its oracle at most once.

    The factory may be a plain callable or a coroutine function. The first
    call to :meth:`get` starts one build task; every concurrent caller
    awaits that same task, so they all receive the one instance it
    produces, or the one :class:`OracleUnavailableError` it raises.

    A failure is not cached: once the failed build has been delivered to
    its waiters, the next :meth:`get` starts a fresh attempt. Cancelling a
    caller only stops that caller waiting; the build carries on for the
    others, and if nobody is left it is abandoned without rollback.
    """

    def __init__(self, factory: OracleFactory):
        self._factory = factory
        self._instance: FieldHashOracle | None = None
        self._pending: asyncio.Future[FieldHashOracle] | None = None
        self.initializations = 0

    @classmethod
    def from_config(cls, config: ToolkitConfig) -> LazyOracle:
        """Build a handle over :func:`create_oracle` for *config*."""
        return cls(lambda: create_oracle(config))

    @classmethod
    def ready(cls, oracle: FieldHashOracle) -> LazyOracle:
        """Wrap an oracle that is already constructed."""
        handle = cls(lambda: oracle)
        handle._instance = oracle
        return handle

    @property
    def initialized(self) -> bool:
        """Whether the oracle has been built."""
        return self._instance is not None

    async def _build(self) -> FieldHashOracle:
        try:
            result = self._factory()
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            logger.error("Field hash oracle initialisation failed: %s", exc)
            raise OracleUnavailableError(f"Field hash oracle unavailable: {exc}") from exc
        finally:
            self._pending = None

        self._instance = result
        self.initializations += 1
        logger.info("Initialised field hash oracle %s", result.name)
        return result

    async def get(self) -> FieldHashOracle:
        """Return the oracle, building it on first use.

        Raises:
            OracleUnavailableError: If the factory fails.
        """
        if self._instance is not None:
            return self._instance

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._build())
        return await asyncio.shield(self._pending)

    async def is_available(self) -> bool:
        """Probe whether the oracle can be initialised, without raising."""
        try:
            await self.get()
        except OracleUnavailableError:
            return False
        return True
