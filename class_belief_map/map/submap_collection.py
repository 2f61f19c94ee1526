"""
SubmapCollection: owner of all submaps of a map.

Submaps are stored in a list (storage order, not creation order) and found
through an id -> list position index. Removal erases the list entry and
shifts the recorded position of every later submap down by one, so the
index stays exact at O(n) cost per removal.

Ownership:
- create_submap builds the submap inside the collection.
- add_submap adopts a caller-built submap; the caller hands it over and
  must not keep using it independently of the collection.
- References returned by create_submap/get_submap are only valid until that
  submap is removed or the collection is cleared. Do not hold them across
  such calls.

The collection is not synchronized; callers serialize mutating access.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Tuple

from class_belief_map.common import constants
from class_belief_map.common.errors import DuplicateSubmapError, SubmapNotFoundError
from class_belief_map.map.submap import Submap

logger = logging.getLogger(__name__)


class SubmapCollection:
    """Collection of uniquely identified submaps with O(1) id lookup."""

    def __init__(self, id_start: int = constants.SUBMAP_ID_START):
        self._submaps: List[Submap] = []
        self._id_to_index: Dict[int, int] = {}
        self._next_id = int(id_start)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add_submap(self, submap: Submap) -> Submap:
        """
        Take ownership of an externally built submap.

        Raises:
            DuplicateSubmapError: If a live submap already has this id
        """
        submap_id = submap.id
        if submap_id in self._id_to_index:
            raise DuplicateSubmapError(f"Submap id {submap_id} already exists in the collection")
        self._id_to_index[submap_id] = len(self._submaps)
        self._submaps.append(submap)
        # Later create_submap calls must not hand out an adopted id.
        self._next_id = max(self._next_id, submap_id + 1)
        logger.debug("Adopted submap %d (%d submaps)", submap_id, len(self._submaps))
        return submap

    def create_submap(
        self,
        voxel_size: float,
        voxels_per_side: int,
        voxel_type: str = constants.VOXEL_TYPE_CLASS,
    ) -> Submap:
        """Create a submap with a fresh id and return a reference to it."""
        while self._next_id in self._id_to_index:
            self._next_id += 1
        submap = Submap(self._next_id, voxel_size, voxels_per_side, voxel_type)
        self._next_id += 1
        self._id_to_index[submap.id] = len(self._submaps)
        self._submaps.append(submap)
        logger.info(
            "Created submap %d (voxel_size=%.4f, voxels_per_side=%d, type=%s)",
            submap.id,
            voxel_size,
            voxels_per_side,
            voxel_type,
        )
        return submap

    def remove_submap(self, submap_id: int) -> bool:
        """
        Remove a submap and compact the storage.

        Returns:
            False if no submap has this id
        """
        previous_index = self._id_to_index.pop(submap_id, None)
        if previous_index is None:
            return False
        del self._submaps[previous_index]
        # Correct the index table
        for other_id, index in self._id_to_index.items():
            if index > previous_index:
                self._id_to_index[other_id] = index - 1
        logger.info("Removed submap %d (%d submaps left)", submap_id, len(self._submaps))
        return True

    def clear(self) -> None:
        """Drop all submaps and the id index."""
        n_submaps = len(self._submaps)
        self._submaps.clear()
        self._id_to_index.clear()
        logger.info("Cleared submap collection (%d submaps dropped)", n_submaps)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def submap_id_exists(self, submap_id: int) -> bool:
        return submap_id in self._id_to_index

    def get_submap(self, submap_id: int) -> Submap:
        """
        Return the submap with this id.

        Raises:
            SubmapNotFoundError: If no submap has this id
        """
        index = self._id_to_index.get(submap_id)
        if index is None:
            raise SubmapNotFoundError(submap_id)
        return self._submaps[index]

    def index_of(self, submap_id: int) -> int:
        """Storage position of a submap."""
        index = self._id_to_index.get(submap_id)
        if index is None:
            raise SubmapNotFoundError(submap_id)
        return index

    @property
    def submap_ids(self) -> List[int]:
        """Ids in storage order."""
        return [submap.id for submap in self._submaps]

    @property
    def submaps(self) -> Tuple[Submap, ...]:
        return tuple(self._submaps)

    @property
    def next_id(self) -> int:
        return self._next_id

    def index_is_consistent(self) -> bool:
        """True if the id index maps exactly onto the stored submaps."""
        if len(self._id_to_index) != len(self._submaps):
            return False
        return all(
            0 <= index < len(self._submaps) and self._submaps[index].id == submap_id
            for submap_id, index in self._id_to_index.items()
        )

    def __len__(self) -> int:
        return len(self._submaps)

    def __iter__(self) -> Iterator[Submap]:
        return iter(self._submaps)

    def __contains__(self, submap_id: object) -> bool:
        return submap_id in self._id_to_index
