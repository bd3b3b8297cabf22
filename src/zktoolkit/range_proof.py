"""Range proofs by bit decomposition.

The prover shifts the value into ``[0, max - min]``, decomposes it into
bits and commits to each bit as ``H(bit, salt, i)``, binding the position
``i`` so bits cannot be reordered. The value itself is committed as
``H(value, salt)``. A verifier checks that every bit is binary, that the
bits rebuild a value inside the range, and that every commitment,
including the aggregate one, matches.

This is a bit-commitment scheme with the bits and salt in the clear, not a
succinct zero-knowledge range proof.

Bit extraction uses Python integers, so ranges of any width and negative
bounds are handled exactly.
"""

import logging
import secrets
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict

from zktoolkit.config.schema import RangeConfig
from zktoolkit.field import FieldCodec
from zktoolkit.oracle import FieldHashOracle

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class RangeProof(BaseModel):
    """A bit-decomposition proof that a committed value lies in ``[min, max]``.

    Attributes:
        value_commitment: Canonical hex of ``H(value, salt)``.
        min: Inclusive lower bound.
        max: Inclusive upper bound.
        bits: Little-endian bits of ``value - min``.
        bit_commitments: ``H(bits[i], salt, i)`` for each position.
        salt: Hex salt shared by every commitment in the proof.
        valid: False when the value was outside the range and no proof was built.
    """

    model_config = ConfigDict(frozen=True)

    value_commitment: str
    min: int
    max: int
    bits: tuple[int, ...]
    bit_commitments: tuple[str, ...]
    salt: str
    valid: bool


class RangeChecks(BaseModel):
    """Per-check outcome of range proof verification."""

    model_config = ConfigDict(frozen=True)

    bits_are_binary: bool = False
    value_in_range: bool = False
    commitments_match: bool = False


class RangeVerifyResult(BaseModel):
    """Outcome of verifying a :class:`RangeProof`.

    ``valid`` is the conjunction of all checks. Checks run in order and a
    failure leaves the later ones False; ``error`` names the first failure.
    """

    model_config = ConfigDict(frozen=True)

    valid: bool
    min: int
    max: int
    checks: RangeChecks
    error: str | None = None


def bit_width(range_size: int) -> int:
    """Number of bits needed to represent every value in ``[0, range_size]``."""
    return range_size.bit_length() or 1


def reconstruct(bits: tuple[int, ...] | list[int], minimum: int = 0) -> int:
    """Rebuild ``sum(bits[i] * 2**i) + minimum``."""
    return sum(bit << i for i, bit in enumerate(bits)) + minimum


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class RangeProofEngine:
    """Prove and verify that values lie within inclusive bounds."""

    def __init__(
        self,
        oracle: FieldHashOracle,
        codec: FieldCodec | None = None,
        config: RangeConfig | None = None,
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
    ):
        self._oracle = oracle
        self._codec = codec or FieldCodec()
        self._config = config or RangeConfig()
        self._random_bytes = random_bytes

    @property
    def upper_bound(self) -> int:
        """Ceiling used by :meth:`prove_greater_than`."""
        return self._config.upper_bound

    def _bit_commitment(self, bit: int, salt: int, position: int) -> str:
        return self._codec.to_hex(self._oracle.hash([bit, salt, position]))

    def _value_commitment(self, value: int, salt: int) -> str:
        return self._codec.to_hex(self._oracle.hash([value, salt]))

    def prove(self, value: int, min_value: int, max_value: int) -> RangeProof:
        """Prove that *value* lies in ``[min_value, max_value]``.

        An out-of-range value is a legitimate outcome, not an error: the
        returned proof has ``valid=False`` and empty bit arrays.
        """
        if value < min_value or value > max_value:
            logger.debug("Value outside [%d, %d]; no range proof built", min_value, max_value)
            return RangeProof(
                value_commitment="0x0",
                min=min_value,
                max=max_value,
                bits=(),
                bit_commitments=(),
                salt="0x0",
                valid=False,
            )

        width = bit_width(max_value - min_value)
        normalized = value - min_value

        salt = "0x" + self._random_bytes(self._config.salt_bytes).hex()
        salt_field = int(salt, 16)

        bits = tuple((normalized >> i) & 1 for i in range(width))
        bit_commitments = tuple(
            self._bit_commitment(bit, salt_field, i) for i, bit in enumerate(bits)
        )

        logger.debug("Generated %d-bit range proof for [%d, %d]", width, min_value, max_value)

        return RangeProof(
            value_commitment=self._value_commitment(value, salt_field),
            min=min_value,
            max=max_value,
            bits=bits,
            bit_commitments=bit_commitments,
            salt=salt,
            valid=True,
        )

    def verify(self, proof: RangeProof) -> RangeVerifyResult:
        """Verify *proof*; never raises."""

        def result(checks: RangeChecks, error: str | None = None) -> RangeVerifyResult:
            valid = checks.bits_are_binary and checks.value_in_range and checks.commitments_match
            if error:
                logger.debug("Range proof rejected: %s", error)
            return RangeVerifyResult(
                valid=valid,
                min=proof.min,
                max=proof.max,
                checks=checks,
                error=error,
            )

        if not proof.valid or not proof.bits:
            return result(RangeChecks(), "Proof was not constructed")

        # 1. Bits are binary
        if not all(bit in (0, 1) for bit in proof.bits):
            return result(RangeChecks(), "Non-binary bit in decomposition")

        # 2. Reconstructed value lies in range
        value = reconstruct(proof.bits, proof.min)
        if not proof.min <= value <= proof.max:
            return result(
                RangeChecks(bits_are_binary=True),
                f"Reconstructed value outside [{proof.min}, {proof.max}]",
            )

        # 3. Bit commitments and value commitment match
        in_range = RangeChecks(bits_are_binary=True, value_in_range=True)
        if len(proof.bit_commitments) != len(proof.bits):
            return result(in_range, "Bit commitment count does not match bit count")

        try:
            salt_field = self._codec.parse_hex(proof.salt)
        except ValueError as exc:
            return result(in_range, f"Invalid salt: {exc}")

        for i, (bit, committed) in enumerate(zip(proof.bits, proof.bit_commitments, strict=True)):
            if not self._codec.hex_equal(self._bit_commitment(bit, salt_field, i), committed):
                return result(in_range, f"Bit commitment {i} mismatch")

        expected = self._value_commitment(value, salt_field)
        if not self._codec.hex_equal(expected, proof.value_commitment):
            return result(in_range, "Value commitment mismatch")

        return result(RangeChecks(bits_are_binary=True, value_in_range=True, commitments_match=True))

    def prove_greater_than(
        self, value: int, threshold: int, upper_bound: int | None = None
    ) -> RangeProof:
        """Prove ``value > threshold`` as a range proof over ``[threshold + 1, upper_bound]``.

        *upper_bound* defaults to the configured ceiling (``2**32`` unless
        overridden). Values above the ceiling are not clipped; they produce
        an invalid proof.
        """
        ceiling = self.upper_bound if upper_bound is None else upper_bound
        return self.prove(value, threshold + 1, ceiling)

    def prove_less_than(self, value: int, threshold: int) -> RangeProof:
        """Prove ``value < threshold`` as a range proof over ``[0, threshold - 1]``."""
        return self.prove(value, 0, threshold - 1)
