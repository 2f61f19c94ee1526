"""
Class belief integrators.

- ClassCountIntegrator: counts inferred class observations per voxel;
  uncertainty voxels get the normalized histogram entropy as uncertainty.
- GroundTruthIntegrator: writes oracle labels and marks voxels as ground truth.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, Optional, Tuple

import numpy as np

from class_belief_map.integration.integrator_base import InputData, IntegratorBase
from class_belief_map.map.submap import Submap
from class_belief_map.voxels.class_voxel import (
    COUNTER_MAX,
    ClassUncertaintyVoxel,
    ClassVoxel,
    class_voxel_entropy,
    class_voxel_update,
    set_ground_truth,
)

logger = logging.getLogger(__name__)


def _labelled_voxels(submap: Submap, input_data: InputData) -> Iterator[Tuple[ClassVoxel, int]]:
    """Yield (voxel, class_id) for every labelled point, allocating blocks."""
    labelled = input_data.class_ids >= 0
    points = input_data.points[labelled]
    class_ids = input_data.class_ids[labelled]
    if points.shape[0] == 0:
        return
    layer = submap.layer
    block_indices, linear = layer.voxel_addresses(points)
    for block_index, voxel_index, class_id in zip(block_indices, linear, class_ids):
        block = layer.allocate_block(tuple(int(i) for i in block_index))
        yield block.voxels[int(voxel_index)], int(class_id)


class ClassCountIntegrator(IntegratorBase):
    """Histogram counting of inferred labels."""

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        super().__init__(options)
        self.track_uncertainty = bool(self.options.get("track_uncertainty", True))
        self.counter_max = int(self.options.get("counter_max", COUNTER_MAX))
        if not 0 < self.counter_max <= COUNTER_MAX:
            raise ValueError(f"counter_max must be in (0, {COUNTER_MAX}], got {self.counter_max}")

    def process_input(self, submap: Submap, input_data: InputData) -> int:
        touched: Dict[int, ClassVoxel] = {}
        for voxel, class_id in _labelled_voxels(submap, input_data):
            if class_voxel_update(voxel, class_id, self.counter_max):
                touched[id(voxel)] = voxel

        if self.track_uncertainty:
            for voxel in touched.values():
                if isinstance(voxel, ClassUncertaintyVoxel):
                    voxel.uncertainty_value = class_voxel_entropy(voxel, normalized=True)

        logger.debug(
            "ClassCountIntegrator: %d points -> %d voxels in submap %d",
            input_data.n_points,
            len(touched),
            submap.id,
        )
        return len(touched)


class GroundTruthIntegrator(IntegratorBase):
    """Oracle labels; affected voxels become sticky ground truth."""

    def process_input(self, submap: Submap, input_data: InputData) -> int:
        touched = set()
        for voxel, class_id in _labelled_voxels(submap, input_data):
            set_ground_truth(voxel, class_id)
            touched.add(id(voxel))
        logger.debug(
            "GroundTruthIntegrator: %d points -> %d voxels in submap %d",
            input_data.n_points,
            len(touched),
            submap.id,
        )
        return len(touched)
