"""
Operator Report for lossy map operations.

Every operator that may lose information (top-K truncation of voxel
histograms, saturation of counters) emits an OpReport that:
1. Declares whether the operation was exact
2. Lists all approximation triggers (truncation, saturation, ...)
3. Carries metrics describing how much information was dropped

Reports are plain data; callers log them or collect them for audits.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class OpReport:
    """
    Audit report for a map operation.

    Attributes:
        name: Operator name (e.g., "LayerSerialize")
        exact: True if no information was lost
        approximation_triggers: List of what caused information loss
        voxel_type: Voxel type tag the operation ran on
        metrics: Additional metrics for debugging
        notes: Human-readable explanation
        timestamp: When the report was generated
    """
    name: str
    exact: bool
    approximation_triggers: list[str] = field(default_factory=list)
    voxel_type: str = ""
    metrics: dict = field(default_factory=dict)
    notes: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def validate(self) -> None:
        """
        Validate the report is self-consistent.

        Raises ValueError if validation fails.
        """
        # Exact operations cannot have approximation triggers
        if self.exact and self.approximation_triggers:
            raise ValueError("Exact op cannot declare approximation triggers.")

        # Inexact operations must say why
        if not self.exact and not self.approximation_triggers:
            raise ValueError("Inexact op must declare at least one approximation trigger.")

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "exact": self.exact,
            "approximation_triggers": list(self.approximation_triggers),
            "voxel_type": self.voxel_type,
            "metrics": dict(self.metrics),
            "notes": self.notes,
            "timestamp": self.timestamp,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)
