"""Submap: independently identified region owning a class layer."""

from __future__ import annotations

from class_belief_map.common import constants
from class_belief_map.map.layer import ClassLayer


class Submap:
    """A submap owns one class layer and keeps its id for its whole lifetime."""

    def __init__(
        self,
        submap_id: int,
        voxel_size: float = constants.VOXEL_SIZE_DEFAULT,
        voxels_per_side: int = constants.VOXELS_PER_SIDE_DEFAULT,
        voxel_type: str = constants.VOXEL_TYPE_CLASS,
    ):
        self._id = int(submap_id)
        self._layer = ClassLayer(voxel_size, voxels_per_side, voxel_type)

    @property
    def id(self) -> int:
        """Return the unique identifier of the submap."""
        return self._id

    @property
    def layer(self) -> ClassLayer:
        """Return the class layer owned by this submap."""
        return self._layer

    @property
    def voxel_size(self) -> float:
        return self._layer.voxel_size

    @property
    def voxels_per_side(self) -> int:
        return self._layer.voxels_per_side

    @property
    def voxel_type(self) -> str:
        return self._layer.voxel_type

    def __repr__(self) -> str:
        return (
            f"Submap(id={self._id}, voxel_size={self.voxel_size}, "
            f"voxels_per_side={self.voxels_per_side}, voxel_type='{self.voxel_type}', "
            f"blocks={self._layer.num_allocated_blocks})"
        )
