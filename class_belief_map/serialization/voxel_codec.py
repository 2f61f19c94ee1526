"""
Voxel word codec.

Encodes one ClassVoxel / ClassUncertaintyVoxel into 32-bit words and reads
it back. Layout (see common/constants.py for the quick reference):

    [ '#ClassesForThisVoxel',
      'foreignCount | belongsCount',
      'currentIndex | isGt',
      'TopIndex1 | TopIndex2 | TopIndex3 | ...',
      'TopCount1 | TopCount2 | ...',
      ('uncertainty', uncertainty voxels only) ]

Only the top-K histogram entries are written. Voxels without a histogram
stop after the three header words; uncertainty voxels append their
uncertainty word only when the class part reports the voxel initialized.
Voxel boundaries are implicit, so the reader must run the same sequence of
decode calls with the same CodecConfig as the writer.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from class_belief_map.common import constants
from class_belief_map.common.errors import EncodingOverflowError, StreamConsistencyError
from class_belief_map.config import CodecConfig
from class_belief_map.serialization.topk import select_top_n
from class_belief_map.serialization.word_packing import pack_entries, unpack_entries
from class_belief_map.voxels.class_voxel import COUNTER_DTYPE, ClassUncertaintyVoxel, ClassVoxel

DEFAULT_CODEC = CodecConfig()

WordStream = Union[Sequence[int], np.ndarray]


# =============================================================================
# Field Helpers
# =============================================================================


def _clamp_u16(value: int) -> int:
    return min(max(int(value), 0), constants.AGGREGATE_COUNTER_MAX)


def _encode_index_field(current_index: int) -> int:
    # Signed 16-bit field: -1 (unassigned) is stored as 0xFFFF.
    if not -(1 << 15) <= int(current_index) < (1 << 15):
        raise EncodingOverflowError(f"current_index {current_index} does not fit 16 bits")
    return int(current_index) & constants.LOW_HALF_MASK


def _decode_index_field(field: int) -> int:
    return field - (1 << 16) if field >= (1 << 15) else field


def _float_to_word(value: float) -> int:
    return int(np.array([value], dtype=np.float32).view(np.uint32)[0])


def _word_to_float(word: int) -> float:
    return float(np.array([word], dtype=np.uint32).view(np.float32)[0])


def _read_word(data: WordStream, data_idx: int) -> int:
    if data_idx >= len(data):
        raise StreamConsistencyError(
            f"word stream truncated: needed word {data_idx}, stream has {len(data)}"
        )
    return int(data[data_idx])


def select_serialized_entries(voxel: ClassVoxel, codec: CodecConfig) -> Tuple[np.ndarray, np.ndarray]:
    """
    Top-K (index, count) pairs as written to the stream.

    Fewer than K classes are padded by repeating the last selected pair, so
    every voxel with a histogram uses the same number of words and the
    padding rewrites an already-decoded entry with the same value.
    """
    indices, values = select_top_n(voxel.counts, codec.top_n)
    if indices.shape[0] < codec.top_n:
        pad = codec.top_n - indices.shape[0]
        indices = np.concatenate([indices, np.full((pad,), indices[-1], dtype=np.int64)])
        values = np.concatenate([values, np.full((pad,), values[-1], dtype=np.int64)])
    if np.any(indices > constants.MAX_SERIALIZED_CLASS_INDEX):
        raise EncodingOverflowError(
            f"class index {int(np.max(indices))} does not fit {constants.INDEX_BITS} bits"
        )
    return indices, np.minimum(values, codec.counter_max)


# =============================================================================
# Encode
# =============================================================================


def append_class_voxel(
    voxel: ClassVoxel,
    data: List[int],
    codec: CodecConfig = DEFAULT_CODEC,
) -> bool:
    """
    Append the words of a class voxel to data.

    Returns:
        True if the voxel is initialized

    Raises:
        EncodingOverflowError: If the histogram has more than
            MAX_CLASSES_PER_VOXEL classes or a kept index exceeds one byte
    """
    class_count = voxel.num_classes
    if class_count > constants.MAX_CLASSES_PER_VOXEL:
        raise EncodingOverflowError(
            f"voxel has {class_count} classes, limit is {constants.MAX_CLASSES_PER_VOXEL}"
        )
    data.append(class_count)
    data.append(
        _clamp_u16(voxel.belongs_count) | (_clamp_u16(voxel.foreign_count) << constants.AGGREGATE_COUNTER_BITS)
    )
    data.append(
        (1 if voxel.is_gt else 0)
        | (_encode_index_field(voxel.current_index) << constants.AGGREGATE_COUNTER_BITS)
    )

    if class_count == 0:
        return voxel.belongs_count != 0 or voxel.foreign_count != 0

    indices, values = select_serialized_entries(voxel, codec)
    data.extend(pack_entries(indices, constants.INDEX_BITS))
    data.extend(pack_entries(values, codec.counter_bits))
    return True


def append_class_uncertainty_voxel(
    voxel: ClassUncertaintyVoxel,
    data: List[int],
    codec: CodecConfig = DEFAULT_CODEC,
) -> bool:
    """Append an uncertainty voxel; the uncertainty word only if initialized."""
    initialized = append_class_voxel(voxel, data, codec)
    if initialized:
        data.append(_float_to_word(voxel.uncertainty_value))
    return initialized


# =============================================================================
# Decode
# =============================================================================


def read_class_voxel(
    data: WordStream,
    data_idx: int,
    codec: CodecConfig = DEFAULT_CODEC,
    voxel: Optional[ClassVoxel] = None,
) -> Tuple[ClassVoxel, bool, int]:
    """
    Read one class voxel starting at data[data_idx].

    Args:
        data: Word stream
        data_idx: Read cursor
        codec: Word format used by the writer
        voxel: Optional voxel to fill in place (a new ClassVoxel otherwise)

    Returns:
        (voxel, initialized, next_data_idx)

    Raises:
        StreamConsistencyError: If the stream ends inside the voxel or a
            decoded class index lies outside the histogram
    """
    if voxel is None:
        voxel = ClassVoxel()
    num_classes = _read_word(data, data_idx)
    counters = _read_word(data, data_idx + 1)
    index_gt = _read_word(data, data_idx + 2)
    data_idx += constants.VOXEL_HEADER_WORDS

    voxel.belongs_count = counters & constants.LOW_HALF_MASK
    voxel.foreign_count = (counters & constants.HIGH_HALF_MASK) >> constants.AGGREGATE_COUNTER_BITS
    voxel.is_gt = bool(index_gt & constants.LOW_HALF_MASK)
    voxel.current_index = _decode_index_field(
        (index_gt & constants.HIGH_HALF_MASK) >> constants.AGGREGATE_COUNTER_BITS
    )

    if num_classes == 0:
        voxel.counts = np.zeros((0,), dtype=COUNTER_DTYPE)
        voxel.current_index = constants.UNASSIGNED_CLASS_INDEX
        return voxel, voxel.belongs_count != 0 or voxel.foreign_count != 0, data_idx

    if num_classes > constants.MAX_CLASSES_PER_VOXEL:
        raise StreamConsistencyError(
            f"voxel at word {data_idx - constants.VOXEL_HEADER_WORDS} claims {num_classes} classes"
        )

    indices, n_words = unpack_entries(data, data_idx, codec.top_n, constants.INDEX_BITS)
    data_idx += n_words
    values, n_words = unpack_entries(data, data_idx, codec.top_n, codec.counter_bits)
    data_idx += n_words

    if np.any(indices >= num_classes):
        raise StreamConsistencyError(
            f"decoded class index {int(np.max(indices))} outside histogram of {num_classes}"
        )
    counts = np.zeros((num_classes,), dtype=COUNTER_DTYPE)
    for index, value in zip(indices, values):
        counts[index] = value
    voxel.counts = counts
    return voxel, True, data_idx


def read_class_uncertainty_voxel(
    data: WordStream,
    data_idx: int,
    codec: CodecConfig = DEFAULT_CODEC,
    voxel: Optional[ClassUncertaintyVoxel] = None,
) -> Tuple[ClassUncertaintyVoxel, bool, int]:
    """Read one uncertainty voxel; mirrors append_class_uncertainty_voxel."""
    if voxel is None:
        voxel = ClassUncertaintyVoxel()
    voxel, initialized, data_idx = read_class_voxel(data, data_idx, codec, voxel)
    if initialized:
        voxel.uncertainty_value = _word_to_float(_read_word(data, data_idx))
        data_idx += constants.UNCERTAINTY_WORDS
    else:
        voxel.uncertainty_value = 0.0
    return voxel, initialized, data_idx
