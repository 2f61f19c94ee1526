"""
Pydantic parameter models for the class belief map.

These models validate the YAML configuration (config/class_belief_map_base.yaml)
before any map component is built from it.
"""

from __future__ import annotations

from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from class_belief_map.common import constants


class CodecParams(BaseModel):
    """Voxel word format parameters (K and V)."""
    model_config = ConfigDict(extra="forbid")

    top_n_counts: int = Field(default=constants.SERIALIZE_TOP_N_COUNTS, ge=1, le=255)
    counter_size_bits: int = constants.COUNTER_SIZE_BITS

    @field_validator("counter_size_bits")
    @classmethod
    def _check_counter_bits(cls, value: int) -> int:
        if value not in constants.SUPPORTED_COUNTER_SIZE_BITS:
            raise ValueError(
                f"counter_size_bits must be one of {constants.SUPPORTED_COUNTER_SIZE_BITS}, got {value}"
            )
        return value


class SubmapParams(BaseModel):
    """Geometry and voxel type of newly created submaps."""
    model_config = ConfigDict(extra="forbid")

    voxel_size: float = Field(default=constants.VOXEL_SIZE_DEFAULT, gt=0.0)
    voxels_per_side: int = Field(default=constants.VOXELS_PER_SIDE_DEFAULT, gt=0)
    voxel_type: Literal["class", "class_uncertainty"] = constants.VOXEL_TYPE_CLASS


class IntegratorParams(BaseModel):
    """Selects and configures the belief integrator."""
    model_config = ConfigDict(extra="forbid")

    type: str = "class_count"
    options: Dict[str, Any] = Field(default_factory=dict)


class MapParams(BaseModel):
    """Complete class belief map configuration."""
    model_config = ConfigDict(extra="forbid")

    codec: CodecParams = Field(default_factory=CodecParams)
    submaps: SubmapParams = Field(default_factory=SubmapParams)
    integrator: IntegratorParams = Field(default_factory=IntegratorParams)
