"""
Saving and loading submap collections.

Collections are stored as numpy .npz archives:
  format                   (2,) int64 [top_n, counter_bits]
  submap_ids               (S,) int64, storage order
  submap_<id>__geometry    (2,) float64 [voxel_size, voxels_per_side]
  submap_<id>__voxel_type  0-d str
  submap_<id>__blocks      (B, 3) int64 block indices
  submap_<id>__offsets     (B + 1,) int64 word offsets into words
  submap_<id>__words       (W,) uint32 concatenated block streams

The block streams themselves are headerless; the archive records the word
format so a reader with a different CodecConfig is rejected up front.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from class_belief_map.common.errors import DuplicateSubmapError
from class_belief_map.config import CodecConfig
from class_belief_map.map.submap import Submap
from class_belief_map.map.submap_collection import SubmapCollection
from class_belief_map.serialization.block_codec import deserialize_layer, serialize_layer
from class_belief_map.serialization.voxel_codec import DEFAULT_CODEC

logger = logging.getLogger(__name__)


def _key(submap_id: int, name: str) -> str:
    return f"submap_{submap_id}__{name}"


def save_submap_collection(
    collection: SubmapCollection,
    path: str | Path,
    codec: CodecConfig = DEFAULT_CODEC,
) -> Path:
    """
    Write all submaps of a collection to an .npz archive.

    Returns:
        Path of the written archive
    """
    path = Path(path)
    arrays: Dict[str, np.ndarray] = {
        "format": np.array([codec.top_n, codec.counter_bits], dtype=np.int64),
        "submap_ids": np.array(collection.submap_ids, dtype=np.int64),
    }
    for submap in collection:
        block_words, report = serialize_layer(submap.layer, codec)
        block_indices = list(block_words.keys())
        streams = [block_words[index] for index in block_indices]
        offsets = np.zeros((len(streams) + 1,), dtype=np.int64)
        if streams:
            offsets[1:] = np.cumsum([s.shape[0] for s in streams])
        arrays[_key(submap.id, "geometry")] = np.array(
            [submap.voxel_size, submap.voxels_per_side], dtype=np.float64
        )
        arrays[_key(submap.id, "voxel_type")] = np.array(submap.voxel_type)
        arrays[_key(submap.id, "blocks")] = np.array(block_indices, dtype=np.int64).reshape(-1, 3)
        arrays[_key(submap.id, "offsets")] = offsets
        arrays[_key(submap.id, "words")] = (
            np.concatenate(streams).astype(np.uint32) if streams else np.zeros((0,), dtype=np.uint32)
        )
        if not report.exact:
            logger.info("Submap %d saved lossy: %s", submap.id, report.approximation_triggers)

    with open(path, "wb") as f:
        np.savez_compressed(f, **arrays)
    logger.info("Saved %d submaps to %s", len(collection), path)
    return path


def load_submap_collection(
    path: str | Path,
    codec: CodecConfig = DEFAULT_CODEC,
    collection: Optional[SubmapCollection] = None,
) -> SubmapCollection:
    """
    Load submaps from an .npz archive into a (new or given) collection.

    Every submap is decoded before any is adopted, so a failed load leaves
    the given collection unchanged.

    Raises:
        ValueError: If the archive was written with a different word format
        StreamConsistencyError: If a block stream is corrupt
        DuplicateSubmapError: If a loaded id is already in the collection
    """
    path = Path(path)
    if collection is None:
        collection = SubmapCollection()

    loaded: List[Submap] = []
    with np.load(path, allow_pickle=False) as archive:
        top_n, counter_bits = (int(v) for v in archive["format"])
        if (top_n, counter_bits) != (codec.top_n, codec.counter_bits):
            raise ValueError(
                f"{path}: written with top_n={top_n}, counter_bits={counter_bits}; "
                f"reader uses top_n={codec.top_n}, counter_bits={codec.counter_bits}"
            )
        submap_ids = [int(i) for i in archive["submap_ids"]]
        clashes = sorted(i for i in set(submap_ids) if collection.submap_id_exists(i))
        if clashes or len(set(submap_ids)) != len(submap_ids):
            raise DuplicateSubmapError(
                f"{path}: submap ids {clashes or submap_ids} are duplicated or already in the collection"
            )
        for submap_id in submap_ids:
            voxel_size, voxels_per_side = archive[_key(submap_id, "geometry")]
            submap = Submap(
                submap_id,
                voxel_size=float(voxel_size),
                voxels_per_side=int(voxels_per_side),
                voxel_type=str(archive[_key(submap_id, "voxel_type")].item()),
            )
            blocks = archive[_key(submap_id, "blocks")]
            offsets = archive[_key(submap_id, "offsets")]
            words = archive[_key(submap_id, "words")]
            block_words = {
                tuple(int(i) for i in blocks[b]): words[offsets[b]:offsets[b + 1]]
                for b in range(blocks.shape[0])
            }
            deserialize_layer(submap.layer, block_words, codec)
            loaded.append(submap)

    for submap in loaded:
        collection.add_submap(submap)
    logger.info("Loaded %d submaps from %s", len(loaded), path)
    return collection
