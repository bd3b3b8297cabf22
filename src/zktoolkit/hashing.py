"""Hash front-end: strings and messages in, canonical hex out."""

import logging
from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from zktoolkit.field import FieldCodec
from zktoolkit.oracle import FieldHashOracle

logger = logging.getLogger(__name__)


class HashResult(BaseModel):
    """Digest of one or more string inputs.

    Attributes:
        hash: Canonical hex of the resulting field element.
        algorithm: Name of the oracle that produced it.
        input: The input exactly as supplied.
    """

    model_config = ConfigDict(frozen=True)

    hash: str
    algorithm: str
    input: str | list[str]


class FieldHasher:
    """Hash strings and arbitrary-length messages through a field oracle."""

    def __init__(self, oracle: FieldHashOracle, codec: FieldCodec | None = None):
        self._oracle = oracle
        self._codec = codec or FieldCodec()

    @property
    def algorithm(self) -> str:
        return self._oracle.name

    def hash_elements(self, elements: Sequence[int]) -> str:
        """Hash raw field elements and return canonical hex."""
        return self._codec.to_hex(self._oracle.hash(list(elements)))

    def hash(self, data: str | list[str]) -> HashResult:
        """Hash a string, or a list of strings as one multi-input call.

        Each string is encoded with :meth:`FieldCodec.encode`, so ``0x``
        literals are read as hex and plain strings are truncated.
        """
        items = data if isinstance(data, list) else [data]
        digest = self.hash_elements([self._codec.encode(item) for item in items])
        return HashResult(hash=digest, algorithm=self.algorithm, input=data)

    def hash_message(self, message: str) -> int:
        """Hash a message of any length to a single field element.

        The UTF-8 bytes are split into chunks of the codec's truncation
        width. The first ``max_inputs`` chunks are hashed together; the rest
        are folded in ``max_inputs - 1`` at a time behind the running
        digest. An empty message hashes the single element 0.
        """
        data = message.encode("utf-8")
        step = self._codec.truncation_bytes
        chunks = [int.from_bytes(data[i : i + step], "big") for i in range(0, len(data), step)]
        if not chunks:
            chunks = [0]

        width = self._oracle.max_inputs
        digest = self._oracle.hash(chunks[:width])
        for start in range(width, len(chunks), width - 1):
            digest = self._oracle.hash([digest, *chunks[start : start + width - 1]])

        logger.debug("Hashed %d-byte message in %d chunks", len(data), len(chunks))
        return digest
