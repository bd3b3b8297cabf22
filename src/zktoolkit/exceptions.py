"""Exception hierarchy for zktoolkit.

Verification paths never raise for a proof that simply does not check out;
they return a result with ``valid=False``. The exceptions below are reserved
for malformed calls and for an oracle that cannot be initialised.
"""


class ZKToolkitError(Exception):
    """Base class for all zktoolkit errors."""


class EmptyInputError(ZKToolkitError, ValueError):
    """A structure was requested over an empty input sequence."""


class IndexOutOfBoundsError(ZKToolkitError, IndexError):
    """A leaf index lies outside the tree."""

    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(f"Index {index} out of bounds (0-{size - 1})")


class OracleUnavailableError(ZKToolkitError):
    """The field hash oracle could not be initialised."""


class SignatureUnavailableError(OracleUnavailableError):
    """The signature backend is missing or unsupported."""
