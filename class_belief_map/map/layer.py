"""
ClassLayer: sparse grid of voxel blocks.

Blocks are allocated on demand and keyed by integer block coordinates.
Positions are expressed in the owning submap's frame.
"""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Tuple

import numpy as np

from class_belief_map.common import constants
from class_belief_map.map.voxel_block import BlockIndex, VoxelBlock
from class_belief_map.serialization.voxel_ops import get_voxel_ops
from class_belief_map.voxels.class_voxel import ClassVoxel


class ClassLayer:
    """Sparse voxel grid holding class beliefs."""

    def __init__(
        self,
        voxel_size: float = constants.VOXEL_SIZE_DEFAULT,
        voxels_per_side: int = constants.VOXELS_PER_SIDE_DEFAULT,
        voxel_type: str = constants.VOXEL_TYPE_CLASS,
    ):
        if voxel_size <= 0:
            raise ValueError(f"voxel_size must be positive, got {voxel_size}")
        if voxels_per_side <= 0:
            raise ValueError(f"voxels_per_side must be positive, got {voxels_per_side}")
        get_voxel_ops(voxel_type)  # reject unknown types early

        self.voxel_size = float(voxel_size)
        self.voxels_per_side = int(voxels_per_side)
        self.voxel_type = voxel_type
        self.blocks: Dict[BlockIndex, VoxelBlock] = {}

    @property
    def block_size(self) -> float:
        return self.voxel_size * self.voxels_per_side

    @property
    def num_allocated_blocks(self) -> int:
        return len(self.blocks)

    def has_same_geometry(self, other: "ClassLayer") -> bool:
        return (
            self.voxel_size == other.voxel_size
            and self.voxels_per_side == other.voxels_per_side
            and self.voxel_type == other.voxel_type
        )

    # -------------------------------------------------------------------------
    # Blocks
    # -------------------------------------------------------------------------

    def get_block(self, block_index: BlockIndex) -> Optional[VoxelBlock]:
        return self.blocks.get(tuple(int(i) for i in block_index))

    def allocate_block(self, block_index: BlockIndex) -> VoxelBlock:
        """Return the block at block_index, creating an empty one if needed."""
        key = tuple(int(i) for i in block_index)
        block = self.blocks.get(key)
        if block is None:
            block = VoxelBlock(
                block_index=key,
                voxels_per_side=self.voxels_per_side,
                voxel_size=self.voxel_size,
                voxel_type=self.voxel_type,
            )
            self.blocks[key] = block
        return block

    def remove_block(self, block_index: BlockIndex) -> bool:
        return self.blocks.pop(tuple(int(i) for i in block_index), None) is not None

    # -------------------------------------------------------------------------
    # Voxel addressing
    # -------------------------------------------------------------------------

    def voxel_addresses(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        (N,3) positions -> block indices (N,3) int64 and linear voxel
        indices (N,) int64 inside those blocks.
        """
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        n = self.voxels_per_side
        global_idx = np.floor(points / self.voxel_size).astype(np.int64)
        block_idx = np.floor_divide(global_idx, n)
        local = global_idx - block_idx * n
        linear = local[:, 0] + n * (local[:, 1] + n * local[:, 2])
        return block_idx, linear

    def get_voxel_by_point(self, point: np.ndarray, allocate: bool = False) -> Optional[ClassVoxel]:
        block_idx, linear = self.voxel_addresses(np.asarray(point).reshape(1, 3))
        key = tuple(int(i) for i in block_idx[0])
        block = self.allocate_block(key) if allocate else self.get_block(key)
        if block is None:
            return None
        return block.voxels[int(linear[0])]

    # -------------------------------------------------------------------------
    # Iteration / statistics
    # -------------------------------------------------------------------------

    def iter_voxels(self) -> Iterator[ClassVoxel]:
        for block in self.blocks.values():
            yield from block.voxels

    def num_initialized_voxels(self) -> int:
        return sum(block.num_initialized() for block in self.blocks.values())

    def class_histogram(self) -> Dict[int, int]:
        """Number of initialized voxels assigned to each class index."""
        histogram: Dict[int, int] = {}
        for voxel in self.iter_voxels():
            if voxel.is_initialized() and voxel.current_index != constants.UNASSIGNED_CLASS_INDEX:
                histogram[voxel.current_index] = histogram.get(voxel.current_index, 0) + 1
        return histogram
