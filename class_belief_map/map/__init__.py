"""
Map containers for class beliefs.

VoxelBlock / ClassLayer hold voxels, Submap owns one layer under a stable
id, SubmapCollection owns all submaps. layer_merge fuses aligned layers and
collection_io persists whole collections.
"""

from class_belief_map.map.voxel_block import BlockIndex, VoxelBlock
from class_belief_map.map.layer import ClassLayer
from class_belief_map.map.submap import Submap
from class_belief_map.map.submap_collection import SubmapCollection
from class_belief_map.map.layer_merge import (
    merge_block_into,
    merge_layer_into,
    merge_submap_into,
)
from class_belief_map.map.collection_io import (
    load_submap_collection,
    save_submap_collection,
)

__all__ = [
    "BlockIndex",
    "VoxelBlock",
    "ClassLayer",
    "Submap",
    "SubmapCollection",
    "merge_block_into",
    "merge_layer_into",
    "merge_submap_into",
    "load_submap_collection",
    "save_submap_collection",
]
