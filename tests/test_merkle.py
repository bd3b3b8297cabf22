"""Tests for the Merkle tree engine."""

import pytest

from zktoolkit.exceptions import EmptyInputError, IndexOutOfBoundsError
from zktoolkit.merkle import PADDING_LEAF, MerkleProof, MerkleTree, MerkleTreeEngine

NAMES = ["alice", "bob", "charlie", "dave"]


@pytest.fixture
def engine(oracle, codec):
    return MerkleTreeEngine(oracle, codec)


@pytest.fixture
def tree(engine):
    return engine.create(NAMES)


def _flip_digit(hex_str: str, position: int) -> str:
    """Replace one hex digit with a different digit value."""
    chars = list(hex_str)
    chars[position] = "1" if chars[position] != "1" else "2"
    return "".join(chars)


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


class TestCreate:
    def test_shape(self, tree):
        assert isinstance(tree, MerkleTree)
        assert tree.depth == 2
        assert tree.leaves == tuple(NAMES)
        assert [len(level) for level in tree.levels] == [4, 2, 1]
        assert tree.levels[-1][0] == tree.root

    def test_root_is_pairwise_hash(self, engine, oracle, codec):
        tree = engine.create(["a", "b"])
        left = oracle.hash([codec.encode("a")])
        right = oracle.hash([codec.encode("b")])
        assert tree.root == codec.to_hex(oracle.hash([left, right]))

    def test_level_zero_holds_leaf_hashes(self, tree, oracle, codec):
        assert tree.levels[0][2] == codec.to_hex(oracle.hash([codec.encode("charlie")]))

    def test_pads_to_power_of_two(self, engine):
        tree = engine.create(["a", "b", "c"])
        assert tree.leaves == ("a", "b", "c", PADDING_LEAF)
        assert tree.depth == 2

        tree = engine.create(["a", "b", "c", "d", "e"])
        assert len(tree.leaves) == 8
        assert tree.depth == 3

    def test_single_leaf_is_doubled(self, engine):
        tree = engine.create(["only"])
        assert tree.leaves == ("only", PADDING_LEAF)
        assert tree.depth == 1

    def test_empty_raises(self, engine):
        with pytest.raises(EmptyInputError):
            engine.create([])

    def test_empty_error_is_value_error(self, engine):
        with pytest.raises(ValueError):
            engine.create([])

    def test_deterministic(self, engine):
        assert engine.create(NAMES).root == engine.create(NAMES).root

    def test_order_matters(self, engine):
        assert engine.create(NAMES).root != engine.create(list(reversed(NAMES))).root


# ---------------------------------------------------------------------------
# proof
# ---------------------------------------------------------------------------


class TestProof:
    def test_path_for_index_two(self, engine, tree):
        proof = engine.proof(tree, 2)
        assert isinstance(proof, MerkleProof)
        assert proof.leaf == "charlie"
        assert proof.index == 2
        assert proof.path_indices == (0, 1)
        assert proof.path_elements == (tree.levels[0][3], tree.levels[1][0])
        assert proof.root == tree.root

    def test_path_length_equals_depth(self, engine):
        tree = engine.create([str(i) for i in range(9)])
        proof = engine.proof(tree, 8)
        assert len(proof.path_elements) == len(proof.path_indices) == tree.depth == 4

    @pytest.mark.parametrize("index", [4, 100, -1])
    def test_out_of_bounds(self, engine, tree, index):
        with pytest.raises(IndexOutOfBoundsError) as exc_info:
            engine.proof(tree, index)
        assert exc_info.value.index == index
        assert exc_info.value.size == 4

    def test_out_of_bounds_is_index_error(self, engine, tree):
        with pytest.raises(IndexError, match="out of bounds"):
            engine.proof(tree, 4)

    def test_padding_leaf_is_provable(self, engine):
        tree = engine.create(["a", "b", "c"])
        proof = engine.proof(tree, 3)
        assert engine.verify(tree.root, PADDING_LEAF, proof).valid is True


# ---------------------------------------------------------------------------
# verify
# ---------------------------------------------------------------------------


class TestVerify:
    def test_charlie_scenario(self, engine, tree):
        proof = engine.proof(tree, 2)
        result = engine.verify(tree.root, "charlie", proof)
        assert result.valid is True
        assert result.computed_root == tree.root
        assert result.expected_root == tree.root
        assert result.error is None

    def test_wrong_leaf_proof(self, engine, tree):
        proof = engine.proof(tree, 0)
        assert engine.verify(tree.root, "charlie", proof).valid is False

    def test_every_leaf_round_trips(self, engine):
        leaves = [f"member-{i}" for i in range(11)]
        tree = engine.create(leaves)
        for i, leaf in enumerate(tree.leaves):
            assert engine.verify(tree.root, leaf, engine.proof(tree, i)).valid is True

    def test_tampered_leaf(self, engine, tree):
        proof = engine.proof(tree, 2)
        assert engine.verify(tree.root, "charliE", proof).valid is False

    def test_tampered_path_element(self, engine, tree):
        proof = engine.proof(tree, 2)
        for level in range(len(proof.path_elements)):
            for position in (2, 30, 65):
                elements = list(proof.path_elements)
                elements[level] = _flip_digit(elements[level], position)
                tampered = proof.model_copy(update={"path_elements": tuple(elements)})
                assert engine.verify(tree.root, "charlie", tampered).valid is False

    def test_flipped_path_index(self, engine, tree):
        proof = engine.proof(tree, 2)
        tampered = proof.model_copy(update={"path_indices": (1, 1)})
        assert engine.verify(tree.root, "charlie", tampered).valid is False

    def test_root_compare_is_case_insensitive(self, engine, tree):
        proof = engine.proof(tree, 1)
        assert engine.verify(tree.root.upper(), "bob", proof).valid is True

    def test_wrong_root(self, engine, tree):
        other = engine.create(["x", "y"])
        proof = engine.proof(tree, 1)
        result = engine.verify(other.root, "bob", proof)
        assert result.valid is False
        assert result.error == "Computed root does not match"

    def test_length_mismatch_fails_closed(self, engine, tree):
        proof = engine.proof(tree, 2)
        bad = MerkleProof(
            leaf=proof.leaf,
            index=proof.index,
            path_elements=proof.path_elements,
            path_indices=proof.path_indices[:1],
            root=proof.root,
        )
        result = engine.verify(tree.root, "charlie", bad)
        assert result.valid is False
        assert "mismatch" in result.error

    def test_invalid_path_index_fails_closed(self, engine, tree):
        proof = engine.proof(tree, 2)
        bad = proof.model_copy(update={"path_indices": (0, 2)})
        result = engine.verify(tree.root, "charlie", bad)
        assert result.valid is False
        assert "Invalid path index" in result.error

    def test_non_hex_element_fails_closed(self, engine, tree):
        proof = engine.proof(tree, 2)
        bad = proof.model_copy(update={"path_elements": ("0xnothex", proof.path_elements[1])})
        result = engine.verify(tree.root, "charlie", bad)
        assert result.valid is False
        assert result.error.startswith("Malformed proof")

    def test_garbage_root_fails_closed(self, engine, tree):
        proof = engine.proof(tree, 2)
        assert engine.verify("not-a-root", "charlie", proof).valid is False
