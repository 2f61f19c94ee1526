"""
Voxel belief merging.

Fuses the belief of voxel A into voxel B when two observations of the same
location are combined (e.g. aligned submaps). B keeps its identity fields
unless A is ground truth, or A is more confident and B is not ground truth.
Ground truth propagates and is never removed.
"""

from __future__ import annotations

from class_belief_map.voxels.class_voxel import (
    ClassUncertaintyVoxel,
    ClassVoxel,
    class_voxel_belonging_probability,
)


def merge_class_voxel_into(voxel_a: ClassVoxel, voxel_b: ClassVoxel) -> bool:
    """
    Merge voxel_a into voxel_b in place.

    Returns:
        True if voxel_b took over voxel_a's assignment
    """
    # Keep most probable assignment
    take_a = voxel_a.is_gt or (
        class_voxel_belonging_probability(voxel_a) > class_voxel_belonging_probability(voxel_b)
        and not voxel_b.is_gt
    )
    if take_a:
        voxel_b.current_index = voxel_a.current_index
        voxel_b.foreign_count = voxel_a.foreign_count
        voxel_b.belongs_count = voxel_a.belongs_count
        voxel_b.counts = voxel_a.counts.copy()
    if voxel_a.is_gt:
        voxel_b.is_gt = True
    return take_a


def merge_class_uncertainty_voxel_into(
    voxel_a: ClassUncertaintyVoxel,
    voxel_b: ClassUncertaintyVoxel,
) -> bool:
    """Merge uncertainty voxels; non-ground-truth results average uncertainty."""
    take_a = merge_class_voxel_into(voxel_a, voxel_b)
    if not voxel_b.is_gt:
        voxel_b.uncertainty_value = (voxel_b.uncertainty_value + voxel_a.uncertainty_value) / 2
    return take_a
