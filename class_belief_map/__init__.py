"""
Class belief maps.

Per-voxel categorical beliefs inside submaps, a compact top-K word codec for
persisting them, and belief fusion for aligned submaps.
"""

__version__ = "0.0.1"
