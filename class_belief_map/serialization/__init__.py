"""
Word codec and merge operators for class voxels.

- topk: top-N histogram selection
- word_packing: narrow entries <-> 32-bit words
- voxel_codec: per-voxel encode/decode (class and uncertainty voxels)
- merge: per-voxel belief fusion
- voxel_ops: per-voxel-type dispatch
- block_codec: block/layer streams with consistency checks
"""

from class_belief_map.serialization.topk import select_top_n
from class_belief_map.serialization.word_packing import (
    pack_entries,
    unpack_entries,
    words_for_entries,
)
from class_belief_map.serialization.voxel_codec import (
    DEFAULT_CODEC,
    append_class_voxel,
    append_class_uncertainty_voxel,
    read_class_voxel,
    read_class_uncertainty_voxel,
)
from class_belief_map.serialization.merge import (
    merge_class_voxel_into,
    merge_class_uncertainty_voxel_into,
)
from class_belief_map.serialization.voxel_ops import (
    VoxelOps,
    CLASS_VOXEL_OPS,
    CLASS_UNCERTAINTY_VOXEL_OPS,
    get_voxel_ops,
    encode_voxel,
    decode_voxel,
    merge_voxel_into,
)
from class_belief_map.serialization.block_codec import (
    serialize_block,
    deserialize_block,
    serialize_layer,
    deserialize_layer,
)

__all__ = [
    "select_top_n",
    "pack_entries",
    "unpack_entries",
    "words_for_entries",
    "DEFAULT_CODEC",
    "append_class_voxel",
    "append_class_uncertainty_voxel",
    "read_class_voxel",
    "read_class_uncertainty_voxel",
    "merge_class_voxel_into",
    "merge_class_uncertainty_voxel_into",
    "VoxelOps",
    "CLASS_VOXEL_OPS",
    "CLASS_UNCERTAINTY_VOXEL_OPS",
    "get_voxel_ops",
    "encode_voxel",
    "decode_voxel",
    "merge_voxel_into",
    "serialize_block",
    "deserialize_block",
    "serialize_layer",
    "deserialize_layer",
]
