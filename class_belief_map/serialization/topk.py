"""
Top-N selection over a class histogram.

Only the N most observed classes of a voxel survive serialization. Selection
runs a bounded heap over (count, class_index) pairs, so equal counts are
resolved toward the higher class index.
"""

from __future__ import annotations

import heapq
from typing import Sequence, Tuple

import numpy as np


def select_top_n(counts: Sequence[int] | np.ndarray, n: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Select the n highest counts of a histogram.

    Args:
        counts: (C,) histogram, position = class index
        n: Number of entries to keep

    Returns:
        (indices, values): (min(n, C),) int64 arrays ordered by descending
        count; indices are positions in counts, values the matching counts
    """
    if n < 0:
        raise ValueError(f"select_top_n: n must be >= 0, got {n}")
    counts = np.asarray(counts).reshape(-1)
    pairs = ((int(c), i) for i, c in enumerate(counts))
    top = heapq.nlargest(min(n, counts.shape[0]), pairs)
    indices = np.array([i for _, i in top], dtype=np.int64)
    values = np.array([c for c, _ in top], dtype=np.int64)
    return indices, values
