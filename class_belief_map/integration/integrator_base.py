"""
Integrator interface.

An integrator consumes one frame of labelled points and writes class
observations into the voxels of a submap. Variants differ only in how an
observation changes a voxel.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from class_belief_map.map.submap import Submap


@dataclass
class InputData:
    """
    One frame of labelled points.

    Attributes:
        points: (N, 3) positions in the submap frame (meters)
        class_ids: (N,) class index per point; negative means unlabelled
        timestamp: Frame time (seconds)
    """
    points: np.ndarray
    class_ids: np.ndarray
    timestamp: float = 0.0

    def __post_init__(self):
        self.points = np.asarray(self.points, dtype=np.float64).reshape(-1, 3)
        self.class_ids = np.asarray(self.class_ids, dtype=np.int64).reshape(-1)
        if self.points.shape[0] != self.class_ids.shape[0]:
            raise ValueError(
                f"InputData: {self.points.shape[0]} points but {self.class_ids.shape[0]} class ids"
            )

    @property
    def n_points(self) -> int:
        return int(self.points.shape[0])


class IntegratorBase(ABC):
    """Base class of all belief integrators."""

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self.options: Dict[str, Any] = dict(options or {})

    @abstractmethod
    def process_input(self, submap: Submap, input_data: InputData) -> int:
        """
        Integrate one frame into the submap.

        Returns:
            Number of distinct voxels modified
        """
