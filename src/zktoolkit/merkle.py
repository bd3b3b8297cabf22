"""Merkle trees over a field hash, with inclusion proofs.

Leaves are padded with the sentinel string ``"0"`` up to a power of two
(and to at least two leaves), each leaf is hashed on its own to form level
0, and adjacent pairs are hashed upward until a single root remains. Every
level is kept so proofs are read straight out of the tree.

Example:
    >>> engine = MerkleTreeEngine(oracle)
    >>> tree = engine.create(["alice", "bob", "charlie", "dave"])
    >>> proof = engine.proof(tree, 2)
    >>> engine.verify(tree.root, "charlie", proof).valid
    True
"""

import logging
from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from zktoolkit.exceptions import EmptyInputError, IndexOutOfBoundsError
from zktoolkit.field import FieldCodec
from zktoolkit.oracle import FieldHashOracle

logger = logging.getLogger(__name__)

PADDING_LEAF = "0"


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class MerkleTree(BaseModel):
    """An immutable Merkle tree.

    Attributes:
        root: Canonical hex of the root node.
        leaves: The leaf values after padding, in order.
        levels: Node hashes per level; ``levels[0]`` holds the leaf hashes
            and ``levels[-1]`` holds only the root.
        depth: Number of hashing levels above the leaves.
    """

    model_config = ConfigDict(frozen=True)

    root: str
    leaves: tuple[str, ...]
    levels: tuple[tuple[str, ...], ...]
    depth: int


class MerkleProof(BaseModel):
    """Inclusion path for one leaf.

    ``path_indices[i] == 1`` means the node on the leaf's side at level
    ``i`` is the right child, so its sibling ``path_elements[i]`` is on
    the left.
    """

    model_config = ConfigDict(frozen=True)

    leaf: str
    index: int
    path_elements: tuple[str, ...]
    path_indices: tuple[int, ...]
    root: str


class MerkleVerifyResult(BaseModel):
    """Outcome of checking an inclusion proof against a root."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    computed_root: str | None = None
    expected_root: str
    leaf: str
    error: str | None = None


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def _pad_leaves(leaves: Sequence[str]) -> list[str]:
    padded = list(leaves)
    while len(padded) & (len(padded) - 1):
        padded.append(PADDING_LEAF)
    if len(padded) == 1:
        padded.append(PADDING_LEAF)
    return padded


class MerkleTreeEngine:
    """Build Merkle trees and produce and check inclusion proofs."""

    def __init__(self, oracle: FieldHashOracle, codec: FieldCodec | None = None):
        self._oracle = oracle
        self._codec = codec or FieldCodec()

    def _hash_leaf(self, leaf: str) -> int:
        return self._oracle.hash([self._codec.encode(leaf)])

    def create(self, leaves: Sequence[str]) -> MerkleTree:
        """Build a tree over *leaves*.

        Raises:
            EmptyInputError: If *leaves* is empty.
        """
        if not leaves:
            raise EmptyInputError("Cannot create Merkle tree with no leaves")

        padded = _pad_leaves([str(leaf) for leaf in leaves])
        current = [self._hash_leaf(leaf) for leaf in padded]
        levels = [current]

        while len(current) > 1:
            current = [
                self._oracle.hash([current[i], current[i + 1]]) for i in range(0, len(current), 2)
            ]
            levels.append(current)

        to_hex = self._codec.to_hex
        hex_levels = tuple(tuple(to_hex(node) for node in level) for level in levels)
        root = hex_levels[-1][0]

        logger.debug(
            "Built Merkle tree with %d leaves (%d padded), root %s",
            len(leaves),
            len(padded) - len(leaves),
            root[:16],
        )

        return MerkleTree(
            root=root,
            leaves=tuple(padded),
            levels=hex_levels,
            depth=len(levels) - 1,
        )

    def proof(self, tree: MerkleTree, index: int) -> MerkleProof:
        """Produce the inclusion path for the leaf at *index*.

        Raises:
            IndexOutOfBoundsError: If *index* is outside ``[0, len(tree.leaves))``.
        """
        if index < 0 or index >= len(tree.leaves):
            raise IndexOutOfBoundsError(index, len(tree.leaves))

        path_elements: list[str] = []
        path_indices: list[int] = []
        current = index

        for level in tree.levels[:-1]:
            path_elements.append(level[current ^ 1])
            path_indices.append(current % 2)
            current //= 2

        return MerkleProof(
            leaf=tree.leaves[index],
            index=index,
            path_elements=tuple(path_elements),
            path_indices=tuple(path_indices),
            root=tree.root,
        )

    def verify(self, root: str, leaf: str, proof: MerkleProof) -> MerkleVerifyResult:
        """Recompute the root from *leaf* along *proof* and compare it to *root*.

        Malformed proofs (mismatched lengths, indices other than 0/1,
        non-hex path elements) fail verification instead of raising.
        """
        elements = proof.path_elements
        indices = proof.path_indices

        if len(elements) != len(indices):
            return MerkleVerifyResult(
                valid=False,
                expected_root=root,
                leaf=leaf,
                error=(
                    f"Path length mismatch: {len(elements)} elements, " f"{len(indices)} indices"
                ),
            )

        try:
            current = self._hash_leaf(leaf)
            for sibling_hex, side in zip(elements, indices, strict=True):
                if side not in (0, 1):
                    return MerkleVerifyResult(
                        valid=False,
                        expected_root=root,
                        leaf=leaf,
                        error=f"Invalid path index {side}",
                    )
                sibling = self._codec.parse_hex(sibling_hex)
                left, right = (current, sibling) if side == 0 else (sibling, current)
                current = self._oracle.hash([left, right])
        except ValueError as exc:
            return MerkleVerifyResult(
                valid=False,
                expected_root=root,
                leaf=leaf,
                error=f"Malformed proof: {exc}",
            )

        computed = self._codec.to_hex(current)
        valid = self._codec.hex_equal(computed, root)
        if not valid:
            logger.debug("Merkle proof for %r computed root %s", leaf, computed[:16])

        return MerkleVerifyResult(
            valid=valid,
            computed_root=computed,
            expected_root=root,
            leaf=leaf,
            error=None if valid else "Computed root does not match",
        )
