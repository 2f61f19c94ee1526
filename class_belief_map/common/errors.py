"""
Exception types for the class belief map.

Encode/decode/collection failures are raised instead of aborting, so the map
engine decides whether a corrupt stream is fatal for the whole session.
"""


class ClassMapError(Exception):
    """Base class for all class belief map errors."""


class EncodingOverflowError(ClassMapError, ValueError):
    """Voxel histogram does not fit the fixed word format."""


class StreamConsistencyError(ClassMapError, ValueError):
    """Word stream is truncated, overrun, or references invalid classes."""


class SubmapNotFoundError(ClassMapError, KeyError):
    """Requested submap id is not part of the collection."""


class DuplicateSubmapError(ClassMapError, ValueError):
    """Adopted submap reuses the id of a live submap."""
