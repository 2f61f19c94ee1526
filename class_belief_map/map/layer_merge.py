"""
Belief fusion at block, layer and submap granularity.

Applies the per-voxel merge to every overlapping voxel pair. Uninitialized
source voxels carry no observation and are skipped, so they cannot dilute
the target's uncertainty average.
"""

from __future__ import annotations

import logging

from class_belief_map.map.layer import ClassLayer
from class_belief_map.map.submap import Submap
from class_belief_map.map.voxel_block import VoxelBlock
from class_belief_map.serialization.voxel_ops import get_voxel_ops

logger = logging.getLogger(__name__)


def merge_block_into(block_a: VoxelBlock, block_b: VoxelBlock) -> int:
    """
    Merge every initialized voxel of block_a into block_b.

    Returns:
        Number of voxels whose assignment was taken from block_a
    """
    if block_a.voxel_type != block_b.voxel_type or block_a.num_voxels != block_b.num_voxels:
        raise ValueError(
            f"merge_block_into: incompatible blocks ({block_a.voxel_type}, {block_a.num_voxels}) "
            f"vs ({block_b.voxel_type}, {block_b.num_voxels})"
        )
    merge_into = get_voxel_ops(block_b.voxel_type).merge_into
    n_taken = 0
    for voxel_a, voxel_b in zip(block_a.voxels, block_b.voxels):
        if not voxel_a.is_initialized():
            continue
        n_taken += int(merge_into(voxel_a, voxel_b))
    return n_taken


def merge_layer_into(layer_a: ClassLayer, layer_b: ClassLayer) -> int:
    """
    Merge layer_a into layer_b; blocks missing in layer_b are allocated.

    Both layers must share voxel size, block size and voxel type (i.e. be
    expressed in the same aligned frame).
    """
    if not layer_a.has_same_geometry(layer_b):
        raise ValueError("merge_layer_into: layers differ in voxel size, block size or voxel type")
    n_taken = 0
    for block_index, block_a in layer_a.blocks.items():
        block_b = layer_b.allocate_block(block_index)
        n_taken += merge_block_into(block_a, block_b)
    return n_taken


def merge_submap_into(submap_a: Submap, submap_b: Submap) -> int:
    """Merge the class layer of submap_a into submap_b."""
    n_taken = merge_layer_into(submap_a.layer, submap_b.layer)
    logger.info(
        "Merged submap %d into submap %d (%d voxels reassigned)",
        submap_a.id,
        submap_b.id,
        n_taken,
    )
    return n_taken
