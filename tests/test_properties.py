"""Property-based tests for the proof components."""

import string

from hypothesis import given, settings
from hypothesis import strategies as st

from zktoolkit.commitment import CommitmentScheme
from zktoolkit.field import FieldCodec
from zktoolkit.merkle import MerkleTreeEngine
from zktoolkit.nullifier import NullifierRegistry
from zktoolkit.oracle import HashlibFieldOracle
from zktoolkit.range_proof import RangeProofEngine, reconstruct

ORACLE = HashlibFieldOracle()
CODEC = FieldCodec()
MERKLE = MerkleTreeEngine(ORACLE, CODEC)
COMMITMENTS = CommitmentScheme(ORACLE, CODEC)
RANGES = RangeProofEngine(ORACLE, CODEC)
NULLIFIERS = NullifierRegistry(ORACLE, CODEC)

leaf_text = st.text(alphabet=string.ascii_letters + string.digits, min_size=1, max_size=20)
scope_text = st.text(alphabet=string.ascii_letters, min_size=1, max_size=31)


@settings(max_examples=30, deadline=None)
@given(leaves=st.lists(leaf_text, min_size=1, max_size=12), data=st.data())
def test_every_leaf_is_provable(leaves, data):
    tree = MERKLE.create(leaves)
    index = data.draw(st.integers(min_value=0, max_value=len(tree.leaves) - 1))
    proof = MERKLE.proof(tree, index)
    assert len(proof.path_elements) == tree.depth
    assert MERKLE.verify(tree.root, tree.leaves[index], proof).valid


@settings(max_examples=50, deadline=None)
@given(value=st.integers(min_value=0, max_value=2**200), secret=st.text(max_size=40))
def test_commitment_opens_with_its_secret(value, secret):
    c = COMMITMENTS.create(value, secret)
    assert COMMITMENTS.reveal(c.commitment, value, secret).valid
    assert not COMMITMENTS.reveal(c.commitment, value + 1, secret).valid


@settings(max_examples=50, deadline=None)
@given(value=st.integers(min_value=0, max_value=2**200))
def test_random_salt_commitment_verifies(value):
    c = COMMITMENTS.create(value)
    assert COMMITMENTS.verify(c.commitment, value, c.salt).valid
    assert not COMMITMENTS.verify(c.commitment, value + 1, c.salt).valid


@settings(max_examples=50, deadline=None)
@given(secret=leaf_text, first=scope_text, second=scope_text)
def test_scopes_separate_nullifiers(secret, first, second):
    a = NULLIFIERS.create(secret, first).nullifier
    b = NULLIFIERS.create(secret, second).nullifier
    assert (a == b) == (first == second)


@settings(max_examples=50, deadline=None)
@given(
    minimum=st.integers(min_value=-(2**40), max_value=2**40),
    span=st.integers(min_value=0, max_value=2**40),
    data=st.data(),
)
def test_range_proofs_verify_in_range(minimum, span, data):
    maximum = minimum + span
    value = data.draw(st.integers(min_value=minimum, max_value=maximum))
    proof = RANGES.prove(value, minimum, maximum)
    assert proof.valid
    assert reconstruct(proof.bits, minimum) == value
    assert RANGES.verify(proof).valid


@settings(max_examples=30, deadline=None)
@given(value=st.integers(min_value=-1000, max_value=1000))
def test_out_of_range_values_are_rejected(value):
    proof = RANGES.prove(value, 0, 100)
    assert proof.valid == (0 <= value <= 100)
