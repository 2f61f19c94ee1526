"""
VoxelBlock: fixed-size cube of voxels.

A block holds voxels_per_side**3 voxels in linear storage order
x + n * (y + n * z). Serialization visits voxels in this order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

import numpy as np

from class_belief_map.common import constants
from class_belief_map.serialization.voxel_ops import get_voxel_ops
from class_belief_map.voxels.class_voxel import ClassVoxel

BlockIndex = Tuple[int, int, int]


@dataclass
class VoxelBlock:
    """
    Single block of a class layer.

    Attributes:
        block_index: Integer block coordinates in the layer
        voxels_per_side: Voxels along one block edge
        voxel_size: Voxel edge length (meters)
        voxel_type: Voxel type tag of all voxels in the block
        voxels: (voxels_per_side**3,) voxels in storage order
    """
    block_index: BlockIndex
    voxels_per_side: int
    voxel_size: float
    voxel_type: str = constants.VOXEL_TYPE_CLASS
    voxels: Optional[List[ClassVoxel]] = field(default=None)

    def __post_init__(self):
        self.block_index = tuple(int(i) for i in self.block_index)
        if self.voxels_per_side <= 0:
            raise ValueError(f"voxels_per_side must be positive, got {self.voxels_per_side}")
        ops = get_voxel_ops(self.voxel_type)
        if self.voxels is None:
            self.voxels = [ops.new_voxel() for _ in range(self.num_voxels)]
        elif len(self.voxels) != self.num_voxels:
            raise ValueError(
                f"VoxelBlock: expected {self.num_voxels} voxels, got {len(self.voxels)}"
            )

    @property
    def num_voxels(self) -> int:
        return self.voxels_per_side ** 3

    @property
    def block_size(self) -> float:
        return self.voxel_size * self.voxels_per_side

    @property
    def origin(self) -> np.ndarray:
        """Position of the block corner with the smallest coordinates."""
        return np.asarray(self.block_index, dtype=np.float64) * self.block_size

    def linear_index(self, x: int, y: int, z: int) -> int:
        n = self.voxels_per_side
        if not (0 <= x < n and 0 <= y < n and 0 <= z < n):
            raise IndexError(f"local voxel index ({x}, {y}, {z}) outside block of side {n}")
        return x + n * (y + n * z)

    def get_voxel(self, x: int, y: int, z: int) -> ClassVoxel:
        return self.voxels[self.linear_index(x, y, z)]

    def __iter__(self) -> Iterator[ClassVoxel]:
        return iter(self.voxels)

    def num_initialized(self) -> int:
        return sum(1 for voxel in self.voxels if voxel.is_initialized())
