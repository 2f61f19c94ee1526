"""
Packing of narrow unsigned entries into 32-bit words.

Entry i of a run goes to word i // per_word at bit offset
(i % per_word) * bits_per_entry, so the first entry of each word occupies
its least-significant slot. A partially filled last word is flushed with
its unused high slots zero.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from class_belief_map.common import constants
from class_belief_map.common.errors import StreamConsistencyError


def entries_per_word(bits_per_entry: int) -> int:
    if bits_per_entry <= 0 or constants.WORD_BITS % bits_per_entry != 0:
        raise ValueError(
            f"bits_per_entry must divide {constants.WORD_BITS}, got {bits_per_entry}"
        )
    return constants.WORD_BITS // bits_per_entry


def words_for_entries(n_entries: int, bits_per_entry: int) -> int:
    """Number of words a run of n_entries occupies."""
    per_word = entries_per_word(bits_per_entry)
    return (n_entries + per_word - 1) // per_word


def pack_entries(entries: Sequence[int] | np.ndarray, bits_per_entry: int) -> List[int]:
    """
    Pack entries into words.

    Raises:
        ValueError: If an entry does not fit bits_per_entry
    """
    per_word = entries_per_word(bits_per_entry)
    limit = 1 << bits_per_entry
    words: List[int] = []
    word = 0
    for i, entry in enumerate(entries):
        entry = int(entry)
        if entry < 0 or entry >= limit:
            raise ValueError(f"pack_entries: entry {entry} does not fit {bits_per_entry} bits")
        slot = i % per_word
        word |= entry << (slot * bits_per_entry)
        if slot == per_word - 1:
            words.append(word)
            word = 0
    if len(entries) % per_word != 0:
        words.append(word)
    return words


def unpack_entries(
    data: Sequence[int] | np.ndarray,
    offset: int,
    n_entries: int,
    bits_per_entry: int,
) -> Tuple[np.ndarray, int]:
    """
    Read n_entries packed entries starting at data[offset].

    Returns:
        (entries, n_words): (n_entries,) int64 values and words consumed

    Raises:
        StreamConsistencyError: If the stream ends before the last word
    """
    per_word = entries_per_word(bits_per_entry)
    n_words = words_for_entries(n_entries, bits_per_entry)
    if offset + n_words > len(data):
        raise StreamConsistencyError(
            f"unpack_entries: need {n_words} words at {offset}, stream has {len(data)}"
        )
    mask = (1 << bits_per_entry) - 1
    entries = np.empty((n_entries,), dtype=np.int64)
    for i in range(n_entries):
        word = int(data[offset + i // per_word])
        entries[i] = (word >> ((i % per_word) * bits_per_entry)) & mask
    return entries, n_words
