"""Value types passed between reconciliation stages.

Every instance is created fresh for one reconciliation call and never
mutated afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from pbropt.reconcile.variants import ReactorType

__all__ = [
    'Dataset',
    'LabPoint',
    'LabSeries',
    'RunWindow',
    'SensorSample',
    'BiomassSource',
    'CanonicalHourRecord',
]


@dataclass(frozen=True)
class Dataset:
    """Sensor table and lab table already joined by the caller.

    Both tables are 2-D grids: row 0 holds column headers, row 1 units,
    rows 2+ data.
    """
    data: Sequence[Sequence[Any]]
    metadata: Sequence[Sequence[Any]]
    reactor_type: ReactorType

    def __post_init__(self):
        # Accept "zhaw" as well as ReactorType.ZHAW
        object.__setattr__(self, "reactor_type", ReactorType(self.reactor_type))


@dataclass(frozen=True)
class LabPoint:
    timestamp: pd.Timestamp
    biomass: float


@dataclass(frozen=True)
class LabSeries:
    """Biomass points sorted ascending, plus nutrient doses keyed by hour index."""
    points: List[LabPoint]
    nutrients: Dict[int, float] = field(default_factory=dict)
    dropped_rows: int = 0


@dataclass(frozen=True)
class RunWindow:
    """Lower bound of the active cultivation run."""
    start: pd.Timestamp


@dataclass(frozen=True)
class SensorSample:
    timestamp: pd.Timestamp
    irradiance: float
    temperature: float
    flow: Optional[float] = None


class BiomassSource(str, Enum):
    """Which fallback tier produced an hour's biomass value."""
    EXACT = "exact"
    SPLINE = "spline"
    BOUNDARY = "boundary"
    CARRY = "carry"

    @property
    def authoritative(self) -> bool:
        """Exact and spline values may legitimately decrease biomass."""
        return self in (BiomassSource.EXACT, BiomassSource.SPLINE)


@dataclass(frozen=True)
class CanonicalHourRecord:
    hour: pd.Timestamp
    biomass: float
    irradiance: float
    temperature: float
    nutrient_dose: float
    source: BiomassSource
