"""Belief integration: input frames -> voxel class observations."""

from class_belief_map.integration.integrator_base import InputData, IntegratorBase
from class_belief_map.integration.class_integrators import (
    ClassCountIntegrator,
    GroundTruthIntegrator,
)
from class_belief_map.integration.component_factory import ComponentFactory

__all__ = [
    "InputData",
    "IntegratorBase",
    "ClassCountIntegrator",
    "GroundTruthIntegrator",
    "ComponentFactory",
]
