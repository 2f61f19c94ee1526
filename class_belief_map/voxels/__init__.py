"""
Voxel belief types for the class belief map.

ClassVoxel and ClassUncertaintyVoxel are the two voxel kinds; the word codec
and the merge operators are selected per kind via serialization.voxel_ops.
"""

from class_belief_map.voxels.class_voxel import (
    COUNTER_DTYPE,
    COUNTER_MAX,
    ClassVoxel,
    ClassUncertaintyVoxel,
    class_voxel_belonging_probability,
    class_voxel_entropy,
    class_voxel_update,
    set_ground_truth,
)

__all__ = [
    "COUNTER_DTYPE",
    "COUNTER_MAX",
    "ClassVoxel",
    "ClassUncertaintyVoxel",
    "class_voxel_belonging_probability",
    "class_voxel_entropy",
    "class_voxel_update",
    "set_ground_truth",
]
