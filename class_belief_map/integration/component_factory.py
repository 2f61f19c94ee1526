"""
Component factory.

Builds the configured integrator variant from validated parameters. The map
engine only depends on IntegratorBase; which variant runs is configuration.
"""

from __future__ import annotations

from typing import Any, Dict, Type, Union

from class_belief_map.common.param_models import IntegratorParams
from class_belief_map.integration.class_integrators import (
    ClassCountIntegrator,
    GroundTruthIntegrator,
)
from class_belief_map.integration.integrator_base import IntegratorBase


class ComponentFactory:
    """Creates map components by configured type name."""

    _INTEGRATORS: Dict[str, Type[IntegratorBase]] = {
        "class_count": ClassCountIntegrator,
        "ground_truth": GroundTruthIntegrator,
    }

    @classmethod
    def create_integrator(cls, params: Union[IntegratorParams, Dict[str, Any]]) -> IntegratorBase:
        """
        Create the integrator named by params.type.

        Raises:
            ValueError: If the integrator type is unknown
            ValidationError: If a params dict is invalid
        """
        if not isinstance(params, IntegratorParams):
            params = IntegratorParams(**params)
        integrator_class = cls._INTEGRATORS.get(params.type)
        if integrator_class is None:
            raise ValueError(
                f"Unknown integrator type '{params.type}', expected one of {sorted(cls._INTEGRATORS)}"
            )
        return integrator_class(params.options)

    @classmethod
    def register_integrator(cls, name: str, integrator_class: Type[IntegratorBase]) -> None:
        if not issubclass(integrator_class, IntegratorBase):
            raise TypeError(f"{integrator_class!r} is not an IntegratorBase")
        cls._INTEGRATORS[name] = integrator_class

    @classmethod
    def integrator_types(cls) -> list[str]:
        return sorted(cls._INTEGRATORS)
