"""
Block and layer serialization.

A block serializes as the concatenation of its voxel encodings in slot
order, with no delimiters. Deserialization replays the decoder slot by slot
and checks both directions: every slot must be filled and every word must
be consumed.

A layer serializes as a mapping block index -> block word array, plus an
OpReport describing how much of the histograms was dropped.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

import numpy as np

from class_belief_map.common.errors import StreamConsistencyError
from class_belief_map.common.op_report import OpReport
from class_belief_map.config import CodecConfig
from class_belief_map.serialization.voxel_codec import DEFAULT_CODEC, WordStream
from class_belief_map.serialization.voxel_ops import get_voxel_ops

logger = logging.getLogger(__name__)

BlockIndex = Tuple[int, int, int]


def serialize_block(block, codec: CodecConfig = DEFAULT_CODEC) -> np.ndarray:
    """
    Serialize all voxels of a block into one uint32 word array.

    Args:
        block: VoxelBlock (voxels in storage order, voxel_type tag)
        codec: Word format

    Returns:
        (W,) uint32 word array
    """
    ops = get_voxel_ops(block.voxel_type)
    data: List[int] = []
    for voxel in block.voxels:
        ops.append(voxel, data, codec)
    return np.asarray(data, dtype=np.uint32)


def _read_block_voxels(
    voxel_type: str,
    num_voxels: int,
    data: WordStream,
    codec: CodecConfig,
) -> Tuple[List, int]:
    """Decode num_voxels voxels into a new list; (voxels, n_initialized)."""
    ops = get_voxel_ops(voxel_type)
    num_data_packets = len(data)
    voxels = []
    data_idx = 0
    n_initialized = 0
    while len(voxels) < num_voxels and data_idx < num_data_packets:
        voxel, initialized, data_idx = ops.read(data, data_idx, codec, ops.new_voxel())
        voxels.append(voxel)
        n_initialized += int(initialized)

    if len(voxels) != num_voxels:
        raise StreamConsistencyError(
            f"block stream exhausted after {len(voxels)} of {num_voxels} voxels"
        )
    if data_idx != num_data_packets:
        raise StreamConsistencyError(
            f"block stream has {num_data_packets - data_idx} unread words after {num_voxels} voxels"
        )
    return voxels, n_initialized


def deserialize_block(block, data: WordStream, codec: CodecConfig = DEFAULT_CODEC) -> int:
    """
    Fill the voxels of a block from its word array.

    The block is only modified once the whole stream has been decoded.

    Returns:
        Number of initialized voxels

    Raises:
        StreamConsistencyError: If the stream ends before all slots are
            filled or words remain after the last slot
    """
    voxels, n_initialized = _read_block_voxels(block.voxel_type, block.num_voxels, data, codec)
    block.voxels = voxels
    return n_initialized


def _count_truncated(block, codec: CodecConfig) -> Tuple[int, int]:
    n_truncated = 0
    n_saturated = 0
    for voxel in block.voxels:
        if voxel.num_classes == 0:
            continue
        if int(np.count_nonzero(voxel.counts)) > codec.top_n:
            n_truncated += 1
        if int(np.max(voxel.counts)) > codec.counter_max:
            n_saturated += 1
    return n_truncated, n_saturated


def serialize_layer(
    layer,
    codec: CodecConfig = DEFAULT_CODEC,
) -> Tuple[Dict[BlockIndex, np.ndarray], OpReport]:
    """
    Serialize every allocated block of a layer.

    Returns:
        (block_words, report): block index -> uint32 word array, and an
        OpReport flagging top-K truncation / count saturation
    """
    block_words: Dict[BlockIndex, np.ndarray] = {}
    n_truncated = 0
    n_saturated = 0
    n_words = 0
    for block_index, block in layer.blocks.items():
        words = serialize_block(block, codec)
        block_words[block_index] = words
        n_words += int(words.shape[0])
        truncated, saturated = _count_truncated(block, codec)
        n_truncated += truncated
        n_saturated += saturated

    triggers = []
    if n_truncated:
        triggers.append("TopKTruncation")
    if n_saturated:
        triggers.append("CountSaturation")
    report = OpReport(
        name="LayerSerialize",
        exact=not triggers,
        approximation_triggers=triggers,
        voxel_type=layer.voxel_type,
        metrics={
            "n_blocks": len(block_words),
            "n_words": n_words,
            "n_truncated_voxels": n_truncated,
            "n_saturated_voxels": n_saturated,
            "top_n": codec.top_n,
            "counter_bits": codec.counter_bits,
        },
        notes="Histogram entries outside the top-K are not serialized.",
    )
    report.validate()
    if n_truncated:
        logger.warning(
            "Layer serialization dropped histogram entries of %d voxels (top_n=%d)",
            n_truncated,
            codec.top_n,
        )
    logger.debug("LayerSerialize: %s", report.to_json())
    return block_words, report


def deserialize_layer(
    layer,
    block_words: Dict[BlockIndex, WordStream],
    codec: CodecConfig = DEFAULT_CODEC,
) -> int:
    """
    Allocate and fill blocks of a layer from serialized block words.

    All blocks are decoded before the first one is written to the layer, so
    a corrupt stream leaves the layer untouched.

    Returns:
        Number of initialized voxels across all blocks
    """
    num_voxels = layer.voxels_per_side ** 3
    decoded = []
    n_initialized = 0
    for block_index, words in block_words.items():
        try:
            voxels, n_block = _read_block_voxels(layer.voxel_type, num_voxels, words, codec)
        except StreamConsistencyError as exc:
            raise StreamConsistencyError(f"block {tuple(block_index)}: {exc}") from exc
        decoded.append((block_index, voxels))
        n_initialized += n_block

    for block_index, voxels in decoded:
        layer.allocate_block(block_index).voxels = voxels
    logger.debug("Deserialized %d blocks, %d initialized voxels", len(block_words), n_initialized)
    return n_initialized
