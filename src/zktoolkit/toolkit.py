"""Facade wiring one field hash oracle into every component.

Example:
    >>> from zktoolkit.toolkit import ZKToolkit
    >>>
    >>> zk = await ZKToolkit.create()
    >>> tree = zk.merkle.create(["alice", "bob", "charlie", "dave"])
    >>> zk.merkle.verify(tree.root, "charlie", zk.merkle.proof(tree, 2)).valid
    True
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from pathlib import Path
from typing import Any

from zktoolkit import __version__
from zktoolkit.commitment import CommitmentScheme
from zktoolkit.config.loader import load_config
from zktoolkit.config.schema import ToolkitConfig
from zktoolkit.field import FieldCodec
from zktoolkit.hashing import FieldHasher
from zktoolkit.merkle import MerkleTreeEngine
from zktoolkit.nullifier import NullifierRegistry
from zktoolkit.oracle import FieldHashOracle, LazyOracle
from zktoolkit.range_proof import RangeProofEngine
from zktoolkit.signatures import MessageSigner, SignatureOracle

logger = logging.getLogger(__name__)

CATEGORIES = ["hash", "commit", "merkle", "range", "sign", "nullifier"]


def get_info() -> dict[str, Any]:
    """Describe the toolkit: version, categories and description."""
    return {
        "version": __version__,
        "categories": list(CATEGORIES),
        "description": "Zero-Knowledge Cryptography Primitives Toolkit",
    }


class ZKToolkit:
    """All components sharing one oracle and one codec.

    Components never call each other; the facade only holds them. Build it
    with :meth:`create`, which awaits the oracle once.
    """

    def __init__(
        self,
        oracle: FieldHashOracle,
        config: ToolkitConfig | None = None,
        signature_oracle: SignatureOracle | None = None,
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
    ):
        self.config = config or ToolkitConfig()
        self.oracle = oracle
        self.codec = FieldCodec.from_config(self.config.field)

        self.hasher = FieldHasher(oracle, self.codec)
        self.commitments = CommitmentScheme(
            oracle, self.codec, self.config.commitment, random_bytes=random_bytes
        )
        self.merkle = MerkleTreeEngine(oracle, self.codec)
        self.ranges = RangeProofEngine(
            oracle, self.codec, self.config.range, random_bytes=random_bytes
        )
        self.nullifiers = NullifierRegistry(
            oracle, self.codec, self.config.nullifier, random_bytes=random_bytes
        )
        self.signer = MessageSigner(
            self.hasher, signature_oracle, self.codec, random_bytes=random_bytes
        )

    @classmethod
    async def create(
        cls,
        config: ToolkitConfig | None = None,
        oracle: LazyOracle | None = None,
        config_path: Path | str | None = None,
        signature_oracle: SignatureOracle | None = None,
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
    ) -> ZKToolkit:
        """Await the oracle and assemble the toolkit.

        Args:
            config: Toolkit configuration. When omitted it is read from
                *config_path* if given, and defaults are used otherwise.
            oracle: Lazy oracle handle. When omitted one is built from
                ``config.oracle``. Sharing a handle between toolkits shares
                its single initialisation.
            config_path: YAML file to load the configuration from.
            signature_oracle: Signature backend; Ed25519 when omitted.
            random_bytes: Randomness source for salts and secrets.

        Raises:
            ConfigError: If *config_path* holds an invalid configuration.
            OracleUnavailableError: If the oracle cannot be initialised.
        """
        if config is None:
            config = load_config(config_path) if config_path is not None else ToolkitConfig()
        handle = oracle or LazyOracle.from_config(config)
        instance = await handle.get()
        logger.debug("Assembled toolkit over oracle %s", instance.name)
        return cls(instance, config, signature_oracle, random_bytes)
