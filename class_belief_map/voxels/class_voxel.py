"""
ClassVoxel: per-voxel categorical belief.

Each voxel carries:
- counts: dense histogram of class observations, indexed by class id
- belongs_count / foreign_count: how often observations agreed / disagreed
  with the assignment held at the time of the observation
- current_index: assigned class (UNASSIGNED_CLASS_INDEX when unknown)
- is_gt: assignment was supplied by ground truth (sticky, never cleared)

ClassUncertaintyVoxel adds a scalar uncertainty_value.

A voxel is uninitialized when its histogram is empty and both aggregate
counters are zero. Voxels restored from older maps may carry counters
without a histogram; those count as initialized.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from scipy.stats import entropy as _scipy_entropy

from class_belief_map.common import constants

# Histogram storage type; saturates at COUNTER_MAX
COUNTER_DTYPE = np.uint16
COUNTER_MAX = int(np.iinfo(COUNTER_DTYPE).max)


def _empty_counts() -> np.ndarray:
    return np.zeros((0,), dtype=COUNTER_DTYPE)


# =============================================================================
# Voxel Data Structures
# =============================================================================


@dataclass(eq=False)
class ClassVoxel:
    """
    Categorical belief of one voxel.

    Attributes:
        counts: (C,) observation count per class index
        belongs_count: Observations matching the assignment (16 bit)
        foreign_count: Observations contradicting the assignment (16 bit)
        current_index: Assigned class index, -1 when unassigned
        is_gt: True if the assignment came from ground truth
    """
    counts: np.ndarray = field(default_factory=_empty_counts)
    belongs_count: int = 0
    foreign_count: int = 0
    current_index: int = constants.UNASSIGNED_CLASS_INDEX
    is_gt: bool = False

    voxel_type = constants.VOXEL_TYPE_CLASS

    def __post_init__(self):
        self.counts = np.asarray(self.counts, dtype=COUNTER_DTYPE).reshape(-1)

    @property
    def num_classes(self) -> int:
        return int(self.counts.shape[0])

    def is_initialized(self) -> bool:
        return self.num_classes > 0 or self.belongs_count != 0 or self.foreign_count != 0

    def count_of(self, class_index: int) -> int:
        """Observation count of a class; classes outside the histogram count 0."""
        if 0 <= class_index < self.num_classes:
            return int(self.counts[class_index])
        return 0

    def copy(self) -> "ClassVoxel":
        return ClassVoxel(
            counts=self.counts.copy(),
            belongs_count=self.belongs_count,
            foreign_count=self.foreign_count,
            current_index=self.current_index,
            is_gt=self.is_gt,
        )

    def _fields_equal(self, other: "ClassVoxel") -> bool:
        return (
            np.array_equal(self.counts, other.counts)
            and self.belongs_count == other.belongs_count
            and self.foreign_count == other.foreign_count
            and self.current_index == other.current_index
            and bool(self.is_gt) == bool(other.is_gt)
        )

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._fields_equal(other)


@dataclass(eq=False)
class ClassUncertaintyVoxel(ClassVoxel):
    """ClassVoxel with an explicit uncertainty estimate."""
    uncertainty_value: float = 0.0

    voxel_type = constants.VOXEL_TYPE_CLASS_UNCERTAINTY

    def copy(self) -> "ClassUncertaintyVoxel":
        return ClassUncertaintyVoxel(
            counts=self.counts.copy(),
            belongs_count=self.belongs_count,
            foreign_count=self.foreign_count,
            current_index=self.current_index,
            is_gt=self.is_gt,
            uncertainty_value=self.uncertainty_value,
        )

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._fields_equal(other) and np.float32(self.uncertainty_value) == np.float32(
            other.uncertainty_value
        )


# =============================================================================
# Belief Statistics
# =============================================================================


def class_voxel_belonging_probability(voxel: ClassVoxel) -> float:
    """
    Probability that the voxel belongs to its assigned class.

    belongs / (belongs + foreign), 0 when neither was observed.
    """
    total = int(voxel.belongs_count) + int(voxel.foreign_count)
    if total == 0:
        return constants.EMPTY_BELONGING_PROBABILITY
    return float(voxel.belongs_count) / float(total)


def class_voxel_entropy(voxel: ClassVoxel, normalized: bool = True) -> float:
    """
    Shannon entropy of the class histogram (nats).

    With normalized=True the entropy is divided by log(C) so that a uniform
    histogram gives 1.0. Empty or single-class histograms have entropy 0.
    """
    counts = voxel.counts.astype(np.float64)
    total = float(np.sum(counts))
    if total <= 0.0:
        return 0.0
    h = float(_scipy_entropy(counts))
    if not normalized:
        return h
    n_classes = voxel.num_classes
    if n_classes < 2:
        return 0.0
    return h / float(np.log(n_classes))


# =============================================================================
# Belief Updates
# =============================================================================


def _saturating_add(value: int, limit: int) -> int:
    return min(int(value) + 1, limit)


def _check_class_index(class_index: int) -> None:
    if class_index < 0:
        raise ValueError(f"class_index must be non-negative, got {class_index}")
    if class_index >= constants.MAX_CLASSES_PER_VOXEL:
        raise ValueError(
            f"class_index {class_index} exceeds {constants.MAX_CLASSES_PER_VOXEL - 1}"
        )


def _count_observation(voxel: ClassVoxel, class_index: int, counter_max: int) -> None:
    # Grow the histogram to hold class_index, then saturating increment.
    if class_index >= voxel.num_classes:
        grown = np.zeros((class_index + 1,), dtype=COUNTER_DTYPE)
        grown[: voxel.num_classes] = voxel.counts
        voxel.counts = grown
    voxel.counts[class_index] = _saturating_add(voxel.counts[class_index], min(counter_max, COUNTER_MAX))


def class_voxel_update(
    voxel: ClassVoxel,
    class_index: int,
    counter_max: int = COUNTER_MAX,
) -> bool:
    """
    Add one observation of class_index to the voxel.

    The histogram grows to hold class_index. belongs/foreign are counted
    against the assignment held before this observation; afterwards the
    assignment moves to the most observed class (ties keep the current one).
    Ground-truth voxels are not changed by inferred observations.

    Returns:
        True if the voxel was modified
    """
    _check_class_index(class_index)
    if voxel.is_gt:
        return False

    _count_observation(voxel, class_index, counter_max)

    if voxel.current_index == constants.UNASSIGNED_CLASS_INDEX:
        voxel.current_index = int(class_index)

    if class_index == voxel.current_index:
        voxel.belongs_count = _saturating_add(voxel.belongs_count, constants.AGGREGATE_COUNTER_MAX)
    else:
        voxel.foreign_count = _saturating_add(voxel.foreign_count, constants.AGGREGATE_COUNTER_MAX)

    best = int(np.argmax(voxel.counts))
    if int(voxel.counts[best]) > voxel.count_of(voxel.current_index):
        voxel.current_index = best
    return True


def set_ground_truth(
    voxel: ClassVoxel,
    class_index: int,
    counter_max: int = COUNTER_MAX,
) -> None:
    """
    Assign an oracle class; the voxel becomes ground truth for good.

    The label is also counted in the histogram, so the assignment survives
    serialization (voxels without a histogram decode as unassigned).
    """
    _check_class_index(class_index)
    _count_observation(voxel, class_index, counter_max)
    voxel.current_index = int(class_index)
    voxel.is_gt = True
    voxel.belongs_count = _saturating_add(voxel.belongs_count, constants.AGGREGATE_COUNTER_MAX)
    if isinstance(voxel, ClassUncertaintyVoxel):
        voxel.uncertainty_value = 0.0
