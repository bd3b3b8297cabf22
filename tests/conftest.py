"""Pytest configuration and shared fixtures."""

import pytest

from zktoolkit.config.schema import ToolkitConfig
from zktoolkit.field import FieldCodec
from zktoolkit.oracle import HashlibFieldOracle


def fixed_bytes(n: int) -> bytes:
    """Deterministic stand-in for the randomness source."""
    return bytes([0xAB]) * n


@pytest.fixture
def default_config() -> ToolkitConfig:
    """Provide a default configuration for tests."""
    return ToolkitConfig()


@pytest.fixture
def oracle() -> HashlibFieldOracle:
    """Provide the reference sha256 field oracle."""
    return HashlibFieldOracle()


@pytest.fixture
def codec() -> FieldCodec:
    """Provide a codec with default widths."""
    return FieldCodec()


@pytest.fixture
def random_bytes():
    """Provide a deterministic randomness source."""
    return fixed_bytes
