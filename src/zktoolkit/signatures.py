"""Message signatures over field-hashed messages.

Messages of any length are first reduced to one field element with
:meth:`FieldHasher.hash_message`; the canonical big-endian bytes of that
element are what the signature oracle signs. The reference oracle is
Ed25519 from the ``cryptography`` library.

Example:
    >>> signer = MessageSigner(hasher)
    >>> keypair = signer.generate_keypair()
    >>> sig = signer.sign("hello", keypair.private_key)
    >>> signer.verify("hello", sig, keypair.public_key).valid
    True
"""

import logging
import secrets
from abc import ABC, abstractmethod
from collections.abc import Callable

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from pydantic import BaseModel, ConfigDict

from zktoolkit.exceptions import SignatureUnavailableError
from zktoolkit.field import FieldCodec, strip_hex_prefix
from zktoolkit.hashing import FieldHasher

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Signature oracle
# ---------------------------------------------------------------------------


class SignatureOracle(ABC):
    """Keypair signature primitive over raw bytes."""

    name: str
    private_key_bytes: int

    @abstractmethod
    def available(self) -> bool:
        """Whether the backend can be used in this environment."""

    @abstractmethod
    def derive_public_key(self, private_key: bytes) -> bytes:
        """Return the encoded public key for *private_key*."""

    @abstractmethod
    def sign(self, private_key: bytes, message: bytes) -> bytes:
        """Sign *message* and return the encoded signature."""

    @abstractmethod
    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        """Check *signature*; malformed keys raise ``ValueError``."""


class Ed25519SignatureOracle(SignatureOracle):
    """Ed25519 signatures via ``cryptography``."""

    name = "Ed25519"
    private_key_bytes = 32

    def __init__(self) -> None:
        self._available: bool | None = None

    def available(self) -> bool:
        if self._available is None:
            try:
                ed25519.Ed25519PrivateKey.generate()
                self._available = True
            except UnsupportedAlgorithm:
                self._available = False
        return self._available

    def derive_public_key(self, private_key: bytes) -> bytes:
        key = ed25519.Ed25519PrivateKey.from_private_bytes(private_key)
        return key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)

    def sign(self, private_key: bytes, message: bytes) -> bytes:
        return ed25519.Ed25519PrivateKey.from_private_bytes(private_key).sign(message)

    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        key = ed25519.Ed25519PublicKey.from_public_bytes(public_key)
        try:
            key.verify(signature, message)
        except InvalidSignature:
            return False
        return True


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class Keypair(BaseModel):
    """Hex-encoded signing keypair."""

    model_config = ConfigDict(frozen=True)

    private_key: str
    public_key: str


class Signature(BaseModel):
    """A signature over a hashed message.

    Attributes:
        r: First half of the encoded signature (the nonce point).
        s: Second half of the encoded signature (the scalar).
        message: The signed message.
        message_hash: Canonical hex of the field element that was signed.
        public_key: Hex public key of the signer.
    """

    model_config = ConfigDict(frozen=True)

    r: str
    s: str
    message: str
    message_hash: str
    public_key: str


class SignVerifyResult(BaseModel):
    """Outcome of verifying a :class:`Signature`."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    message: str
    public_key: str
    error: str | None = None


# ---------------------------------------------------------------------------
# Signer
# ---------------------------------------------------------------------------


class MessageSigner:
    """Sign and verify messages hashed through the field oracle."""

    def __init__(
        self,
        hasher: FieldHasher,
        oracle: SignatureOracle | None = None,
        codec: FieldCodec | None = None,
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
    ):
        self._hasher = hasher
        self._oracle = oracle or Ed25519SignatureOracle()
        self._codec = codec or FieldCodec()
        self._random_bytes = random_bytes

    def is_available(self) -> bool:
        """Whether signing is supported; never raises."""
        return self._oracle.available()

    def _require(self) -> SignatureOracle:
        if not self._oracle.available():
            raise SignatureUnavailableError(
                f"{self._oracle.name} signatures are not supported by this environment"
            )
        return self._oracle

    def _message_element(self, message: str) -> int:
        return self._hasher.hash_message(message)

    def _element_bytes(self, element: int) -> bytes:
        return element.to_bytes(self._codec.element_bytes, "big")

    def generate_keypair(self) -> Keypair:
        """Generate a new random keypair.

        Raises:
            SignatureUnavailableError: If the backend is unsupported.
        """
        oracle = self._require()
        private_key = self._random_bytes(oracle.private_key_bytes)
        return Keypair(
            private_key="0x" + private_key.hex(),
            public_key="0x" + oracle.derive_public_key(private_key).hex(),
        )

    def derive_public_key(self, private_key: str) -> str:
        """Return the hex public key for a hex private key.

        Raises:
            SignatureUnavailableError: If the backend is unsupported.
            ValueError: If *private_key* is not a valid key encoding.
        """
        oracle = self._require()
        key_bytes = bytes.fromhex(strip_hex_prefix(private_key))
        return "0x" + oracle.derive_public_key(key_bytes).hex()

    def sign(self, message: str, private_key: str) -> Signature:
        """Sign *message* with a hex private key.

        Raises:
            SignatureUnavailableError: If the backend is unsupported.
            ValueError: If *private_key* is not a valid key encoding.
        """
        oracle = self._require()
        key_bytes = bytes.fromhex(strip_hex_prefix(private_key))

        element = self._message_element(message)
        raw = oracle.sign(key_bytes, self._element_bytes(element))
        half = len(raw) // 2

        logger.debug("Signed %d-character message with %s", len(message), oracle.name)

        return Signature(
            r="0x" + raw[:half].hex(),
            s="0x" + raw[half:].hex(),
            message=message,
            message_hash=self._codec.to_hex(element),
            public_key="0x" + oracle.derive_public_key(key_bytes).hex(),
        )

    def verify(self, message: str, signature: Signature, public_key: str) -> SignVerifyResult:
        """Verify *signature* over *message* for *public_key*.

        Fails closed: a message-hash mismatch, a malformed key or signature,
        or a bad signature all give ``valid=False``.

        Raises:
            SignatureUnavailableError: If the backend is unsupported.
        """
        oracle = self._require()

        def rejected(error: str) -> SignVerifyResult:
            logger.debug("Signature rejected: %s", error)
            return SignVerifyResult(valid=False, message=message, public_key=public_key, error=error)

        expected_hash = self._codec.to_hex(self._message_element(message))
        if not self._codec.hex_equal(expected_hash, signature.message_hash):
            return rejected("Message hash mismatch")

        try:
            key_bytes = bytes.fromhex(strip_hex_prefix(public_key))
            raw = bytes.fromhex(strip_hex_prefix(signature.r) + strip_hex_prefix(signature.s))
            element = self._codec.parse_hex(signature.message_hash)
            valid = oracle.verify(key_bytes, self._element_bytes(element), raw)
        except (ValueError, OverflowError) as exc:
            return rejected(f"Malformed signature or key: {exc}")

        if not valid:
            return rejected("Signature does not verify")

        return SignVerifyResult(valid=True, message=message, public_key=public_key)
