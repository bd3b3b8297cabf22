"""Tests for the salted commitment scheme."""

import logging

import pytest
from pydantic import ValidationError

from zktoolkit.commitment import Commitment, CommitmentScheme
from zktoolkit.config.schema import CommitmentConfig

SECRET = "my_random_secret_phrase"


@pytest.fixture
def scheme(oracle, codec):
    return CommitmentScheme(oracle, codec)


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


def test_create_returns_commitment(scheme):
    """create returns the commitment, salt and stringified value."""
    c = scheme.create(100, SECRET)
    assert isinstance(c, Commitment)
    assert c.commitment.startswith("0x") and len(c.commitment) == 66
    assert c.value == "100"
    assert c.algorithm == "sha256-field"


def test_create_matches_hash_of_value_and_salt(scheme, oracle, codec):
    """The commitment is H(value, salt)."""
    c = scheme.create(100, SECRET)
    expected = oracle.hash([100, codec.parse_hex(c.salt)])
    assert c.commitment == codec.to_hex(expected)


def test_create_with_secret_is_deterministic(scheme, codec):
    """The same secret derives the same salt and commitment."""
    a = scheme.create(100, SECRET)
    b = scheme.create(100, SECRET)
    assert a.commitment == b.commitment
    assert a.salt == codec.pad_secret(SECRET)


def test_create_without_secret_uses_random_salt(scheme):
    """Random salts make repeated commitments differ."""
    a = scheme.create(100)
    b = scheme.create(100)
    assert a.salt != b.salt
    assert a.commitment != b.commitment
    assert len(a.salt) == 66


def test_create_uses_randomness_source(oracle, codec, random_bytes):
    """The injected randomness source supplies the salt."""
    scheme = CommitmentScheme(oracle, codec, random_bytes=random_bytes)
    assert scheme.create(1).salt == "0x" + "ab" * 32


def test_numeric_string_commits_like_integer(scheme):
    """'100' and 100 are the same committed value."""
    assert scheme.create("100", SECRET).commitment == scheme.create(100, SECRET).commitment


def test_bytes_value_display(scheme):
    """Byte values are displayed as hex."""
    assert scheme.create(b"\x01\x02", SECRET).value == "0x0102"


def test_weak_secret_is_flagged(scheme, caplog):
    """Short secrets are flagged and logged."""
    with caplog.at_level(logging.WARNING, logger="zktoolkit.commitment"):
        c = scheme.create(1, "short")
    assert c.weak_secret is True
    assert "weakened" in caplog.text


def test_strong_secret_not_flagged(scheme):
    assert scheme.create(1, SECRET).weak_secret is False
    assert scheme.create(1).weak_secret is False


def test_min_secret_bytes_configurable(oracle, codec):
    scheme = CommitmentScheme(oracle, codec, CommitmentConfig(min_secret_bytes=0))
    assert scheme.create(1, "").weak_secret is False


def test_commitment_is_immutable(scheme):
    c = scheme.create(1, SECRET)
    with pytest.raises(ValidationError):
        c.commitment = "0x00"


# ---------------------------------------------------------------------------
# reveal
# ---------------------------------------------------------------------------


def test_reveal_valid(scheme):
    c = scheme.create(100, SECRET)
    result = scheme.reveal(c.commitment, 100, SECRET)
    assert result.valid is True
    assert result.revealed_value == "100"
    assert result.salt == c.salt


def test_reveal_wrong_value(scheme):
    c = scheme.create(100, SECRET)
    assert scheme.reveal(c.commitment, 101, SECRET).valid is False


def test_reveal_wrong_secret(scheme):
    c = scheme.create(100, SECRET)
    assert scheme.reveal(c.commitment, 100, SECRET + "!").valid is False


def test_reveal_underscored_digits_as_text(scheme):
    c = scheme.create("1_000", SECRET)
    assert scheme.reveal(c.commitment, "1_000", SECRET).valid is True
    assert scheme.reveal(c.commitment, 1000, SECRET).valid is False


def test_reveal_is_case_insensitive(scheme):
    c = scheme.create("bid", SECRET)
    assert scheme.reveal(c.commitment.upper(), "bid", SECRET).valid is True


def test_reveal_garbage_commitment(scheme):
    """A non-hex commitment simply fails to open."""
    assert scheme.reveal("not-a-commitment", 100, SECRET).valid is False


# ---------------------------------------------------------------------------
# verify
# ---------------------------------------------------------------------------


def test_verify_with_raw_salt(scheme):
    c = scheme.create(42)
    result = scheme.verify(c.commitment, 42, c.salt)
    assert result.valid is True
    assert result.expected_commitment == c.commitment
    assert result.error is None


def test_verify_wrong_value(scheme):
    c = scheme.create(42)
    result = scheme.verify(c.commitment, 43, c.salt)
    assert result.valid is False
    assert result.error == "Commitment mismatch"


def test_verify_unpadded_salt(scheme):
    """A salt without zero padding denotes the same element."""
    padded = "0x" + "0" * 62 + "07"
    commitment = scheme.verify("0x0", 42, padded).expected_commitment
    assert scheme.verify(commitment, 42, "0x7").valid is True


def test_verify_invalid_salt(scheme):
    c = scheme.create(42)
    result = scheme.verify(c.commitment, 42, "0xzz")
    assert result.valid is False
    assert result.expected_commitment is None
    assert result.error.startswith("Invalid salt")
