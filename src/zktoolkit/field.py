"""Canonical encoding between caller values and field elements.

Every component converts its inputs through :class:`FieldCodec` before
handing them to the field hash oracle, and renders oracle outputs back to
canonical hex: ``0x`` followed by lowercase hex digits, zero-padded to the
element byte width.

Plain strings are encoded as big-endian UTF-8 bytes truncated to
``truncation_bytes`` (31 by default) so that the integer always fits in a
single element of a 254-bit field. The truncation is silent: two strings
sharing their first 31 bytes encode to the same element.

Example:
    >>> codec = FieldCodec()
    >>> codec.encode("abc")
    6382179
    >>> codec.to_hex(255)[-4:]
    '00ff'
"""

import logging
import math
import string

from zktoolkit.config.schema import FieldConfig

logger = logging.getLogger(__name__)

FieldInput = str | int | bytes


def strip_hex_prefix(text: str) -> str:
    """Return *text* without a leading ``0x``/``0X``."""
    return text[2:] if text[:2].lower() == "0x" else text


def is_hex_string(text: str) -> bool:
    """Check whether *text* is a ``0x``-prefixed hex literal."""
    if text[:2].lower() != "0x" or len(text) == 2:
        return False
    return all(c in string.hexdigits for c in text[2:])


class FieldCodec:
    """Converts strings, integers and byte buffers into field elements.

    The codec never reduces modulo the field prime; that is left to the
    oracle, which reduces every input it receives.

    Attributes:
        element_bytes: Byte width of a rendered element.
        truncation_bytes: Maximum number of UTF-8 bytes kept from a plain string.
    """

    def __init__(self, element_bytes: int = 32, truncation_bytes: int = 31):
        self.element_bytes = element_bytes
        self.truncation_bytes = truncation_bytes

    @classmethod
    def from_config(cls, config: FieldConfig) -> "FieldCodec":
        """Build a codec from a :class:`FieldConfig`."""
        return cls(
            element_bytes=config.element_bytes,
            truncation_bytes=config.string_truncation_bytes,
        )

    @property
    def hex_width(self) -> int:
        """Number of hex digits in a rendered element."""
        return self.element_bytes * 2

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode_string(self, text: str) -> int:
        """Accumulate the first ``truncation_bytes`` UTF-8 bytes of *text* base-256."""
        data = text.encode("utf-8")
        if len(data) > self.truncation_bytes:
            logger.debug(
                "Truncating %d-byte string to %d bytes for field encoding",
                len(data),
                self.truncation_bytes,
            )
        result = 0
        for byte in data[: self.truncation_bytes]:
            result = result * 256 + byte
        return result

    def encode(self, value: FieldInput) -> int:
        """Encode *value* as a field element.

        ``0x`` strings parse as hex (unreduced), other strings go through
        :meth:`encode_string`, integers pass through and byte buffers are
        read big-endian. A string that starts with ``0x`` but is not valid
        hex is treated as a plain string.
        """
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, (bytes, bytearray)):
            return int.from_bytes(value, "big")
        if is_hex_string(value):
            return int(value[2:], 16)
        return self.encode_string(value)

    def encode_value(self, value: FieldInput) -> int:
        """Encode a committed value, reading decimal strings as numbers.

        ``"100"`` and ``100`` encode to the same element; ``"12.7"`` floors
        to 12. Anything that is not a finite number, including digit
        strings with ``_`` separators, falls back to :meth:`encode`.
        """
        if isinstance(value, str) and not is_hex_string(value):
            stripped = value.strip()
            if "_" in stripped:
                return self.encode(value)
            try:
                return int(stripped)
            except ValueError:
                pass
            try:
                number = float(stripped)
            except ValueError:
                return self.encode(value)
            if math.isfinite(number):
                return math.floor(number)
        return self.encode(value)

    # ------------------------------------------------------------------
    # Hex rendering
    # ------------------------------------------------------------------

    def to_hex(self, element: int) -> str:
        """Render *element* as canonical ``0x``-prefixed, zero-padded lowercase hex."""
        return "0x" + format(element, "x").zfill(self.hex_width)

    def parse_hex(self, text: str) -> int:
        """Parse a hex string (prefix optional) into an integer.

        Raises:
            ValueError: If *text* is not valid hex.
        """
        digits = strip_hex_prefix(text.strip())
        if not digits or not all(c in string.hexdigits for c in digits):
            msg = f"Invalid hex string: {text!r}"
            raise ValueError(msg)
        return int(digits, 16)

    def normalize_hex(self, text: str) -> str:
        """Return the canonical rendering of a ``0x`` literal, or *text* lowercased.

        Only prefixed strings are read as hex, so ``"10"`` and ``"0x10"``
        stay distinct.
        """
        stripped = text.strip()
        if is_hex_string(stripped):
            return self.to_hex(int(stripped[2:], 16))
        return stripped.lower()

    def hex_equal(self, a: str, b: str) -> bool:
        """Compare two strings as :meth:`normalize_hex` renders them.

        ``0x`` literals compare as integers, ignoring case and padding;
        anything else compares case-insensitively as text.
        """
        return self.normalize_hex(a) == self.normalize_hex(b)

    def pad_secret(self, secret: str) -> str:
        """Derive a salt from a passphrase.

        The UTF-8 bytes of *secret* are hex-encoded, right-padded with ``0``
        and truncated to the element width.
        """
        digits = secret.encode("utf-8").hex()
        return "0x" + digits.ljust(self.hex_width, "0")[: self.hex_width]
