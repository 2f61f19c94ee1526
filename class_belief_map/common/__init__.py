"""
Common package for the class belief map.

Shared constants, error types, parameter models and reports used by the
voxel codec, the merge operators and the submap containers.
"""

from class_belief_map.common.op_report import OpReport
from class_belief_map.common import constants
from class_belief_map.common import errors

__all__ = [
    "OpReport",
    "constants",
    "errors",
]
