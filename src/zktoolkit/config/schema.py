"""Pydantic models for zktoolkit.yaml configuration."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

# Scalar field of BN254, the field circom's Poseidon operates over
BN254_SCALAR_PRIME = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)


class FieldConfig(BaseModel):
    """Field element encoding configuration."""

    element_bytes: int = Field(
        default=32,
        description="Byte width of a field element; hex output is zero-padded to this width",
        ge=1,
    )
    string_truncation_bytes: int = Field(
        default=31,
        description=(
            "Plain strings are truncated to this many UTF-8 bytes before encoding. "
            "Longer strings sharing a prefix collide."
        ),
        ge=1,
    )

    @model_validator(mode="after")
    def _truncation_fits_element(self) -> "FieldConfig":
        if self.string_truncation_bytes >= self.element_bytes:
            msg = (
                f"string_truncation_bytes ({self.string_truncation_bytes}) must be smaller "
                f"than element_bytes ({self.element_bytes})"
            )
            raise ValueError(msg)
        return self


class OracleConfig(BaseModel):
    """Field hash oracle configuration."""

    backend: Literal["sha256", "blake2b"] = Field(
        default="sha256",
        description="Reference hash backend used to build the field hash oracle",
    )
    modulus: int = Field(
        default=BN254_SCALAR_PRIME,
        description="Prime modulus of the field; inputs and outputs are reduced by it",
        gt=2,
    )
    domain: str = Field(
        default="zktoolkit",
        description="Domain-separation tag mixed into every oracle call",
    )
    max_inputs: int = Field(
        default=16,
        description="Largest number of field elements accepted by one hash call",
        ge=3,
    )


class CommitmentConfig(BaseModel):
    """Commitment scheme configuration."""

    salt_bytes: int = Field(default=32, description="Random salt length in bytes", ge=16)
    min_secret_bytes: int = Field(
        default=16,
        description="Caller secrets shorter than this are flagged as weak",
        ge=0,
    )


class RangeConfig(BaseModel):
    """Range proof configuration."""

    upper_bound: int = Field(
        default=2**32,
        description=(
            "Ceiling used by prove_greater_than. Values above it produce an invalid "
            "proof rather than being clipped."
        ),
        ge=1,
    )
    salt_bytes: int = Field(default=32, description="Random salt length in bytes", ge=16)


class NullifierConfig(BaseModel):
    """Nullifier registry configuration."""

    secret_bytes: int = Field(default=32, description="Length of generated secrets", ge=16)


class ToolkitConfig(BaseModel):
    """Root configuration schema for zktoolkit."""

    field: FieldConfig = Field(default_factory=FieldConfig)
    oracle: OracleConfig = Field(default_factory=OracleConfig)
    commitment: CommitmentConfig = Field(default_factory=CommitmentConfig)
    range: RangeConfig = Field(default_factory=RangeConfig)
    nullifier: NullifierConfig = Field(default_factory=NullifierConfig)
