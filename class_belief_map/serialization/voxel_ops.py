"""
Per-voxel-type operations.

Each voxel kind registers one VoxelOps object bundling its constructor,
word encoder/decoder and merge operator. Blocks, layers and collections
look the object up by voxel type tag instead of branching on the type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Type, Union

import numpy as np

from class_belief_map.common import constants
from class_belief_map.config import CodecConfig
from class_belief_map.serialization.merge import (
    merge_class_uncertainty_voxel_into,
    merge_class_voxel_into,
)
from class_belief_map.serialization.voxel_codec import (
    DEFAULT_CODEC,
    WordStream,
    append_class_uncertainty_voxel,
    append_class_voxel,
    read_class_uncertainty_voxel,
    read_class_voxel,
)
from class_belief_map.voxels.class_voxel import ClassUncertaintyVoxel, ClassVoxel


@dataclass(frozen=True)
class VoxelOps:
    """Capability bundle for one voxel kind."""
    voxel_type: str
    voxel_class: Type[ClassVoxel]
    append: Callable[[ClassVoxel, List[int], CodecConfig], bool]
    read: Callable[..., Tuple[ClassVoxel, bool, int]]
    merge_into: Callable[[ClassVoxel, ClassVoxel], bool]

    def new_voxel(self) -> ClassVoxel:
        return self.voxel_class()

    def encode(self, voxel: ClassVoxel, codec: CodecConfig = DEFAULT_CODEC) -> np.ndarray:
        data: List[int] = []
        self.append(voxel, data, codec)
        return np.asarray(data, dtype=np.uint32)

    def decode(
        self,
        data: WordStream,
        cursor: int = 0,
        codec: CodecConfig = DEFAULT_CODEC,
        voxel: Optional[ClassVoxel] = None,
    ) -> Tuple[ClassVoxel, bool, int]:
        return self.read(data, cursor, codec, voxel)


CLASS_VOXEL_OPS = VoxelOps(
    voxel_type=constants.VOXEL_TYPE_CLASS,
    voxel_class=ClassVoxel,
    append=append_class_voxel,
    read=read_class_voxel,
    merge_into=merge_class_voxel_into,
)

CLASS_UNCERTAINTY_VOXEL_OPS = VoxelOps(
    voxel_type=constants.VOXEL_TYPE_CLASS_UNCERTAINTY,
    voxel_class=ClassUncertaintyVoxel,
    append=append_class_uncertainty_voxel,
    read=read_class_uncertainty_voxel,
    merge_into=merge_class_uncertainty_voxel_into,
)

_VOXEL_OPS: Dict[str, VoxelOps] = {
    CLASS_VOXEL_OPS.voxel_type: CLASS_VOXEL_OPS,
    CLASS_UNCERTAINTY_VOXEL_OPS.voxel_type: CLASS_UNCERTAINTY_VOXEL_OPS,
}


def get_voxel_ops(voxel_or_type: Union[str, ClassVoxel]) -> VoxelOps:
    """
    Look up the operations for a voxel type tag or a voxel instance.

    Raises:
        ValueError: If the voxel type is unknown
    """
    voxel_type = voxel_or_type if isinstance(voxel_or_type, str) else voxel_or_type.voxel_type
    ops = _VOXEL_OPS.get(voxel_type)
    if ops is None:
        raise ValueError(f"Unknown voxel type '{voxel_type}', expected one of {sorted(_VOXEL_OPS)}")
    return ops


def encode_voxel(voxel: ClassVoxel, codec: CodecConfig = DEFAULT_CODEC) -> np.ndarray:
    """Encode a single voxel into a uint32 word array."""
    return get_voxel_ops(voxel).encode(voxel, codec)


def decode_voxel(
    data: WordStream,
    cursor: int = 0,
    voxel_type: str = constants.VOXEL_TYPE_CLASS,
    codec: CodecConfig = DEFAULT_CODEC,
) -> Tuple[ClassVoxel, bool, int]:
    """
    Decode one voxel at data[cursor].

    Returns:
        (voxel, initialized, next_cursor)
    """
    return get_voxel_ops(voxel_type).decode(data, cursor, codec)


def merge_voxel_into(voxel_a: ClassVoxel, voxel_b: ClassVoxel) -> bool:
    """
    Merge voxel_a into voxel_b (same voxel kind required).

    Raises:
        TypeError: If the two voxels are of different kinds
    """
    if voxel_a.voxel_type != voxel_b.voxel_type:
        raise TypeError(
            f"Cannot merge '{voxel_a.voxel_type}' voxel into '{voxel_b.voxel_type}' voxel"
        )
    return get_voxel_ops(voxel_b).merge_into(voxel_a, voxel_b)
