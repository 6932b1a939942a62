"""Packaging of the canonical series into the optimiser request body.

The optimiser expects::

    {
        "series":  [{"hour": "YYYY-MM-DD HH:mm:ss", "X": .., "I": .., "T": .., "N": ..}, ...],
        "config":  {...},
        "bounds":  {...},
        "horizon": {...},
        "impact":  {...},
    }

``hour`` is local wall clock without a zone marker. Everything except
``series`` is caller-supplied and passed through untouched.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pbropt.reconcile.models import CanonicalHourRecord
from pbropt.reconcile.timestamps import format_hour_key

__all__ = ['OptimiserPayload', 'assemble_payload']


@dataclass(frozen=True)
class OptimiserPayload:
    series: List[CanonicalHourRecord]
    config: Dict[str, Any] = field(default_factory=dict)
    bounds: Dict[str, Any] = field(default_factory=dict)
    horizon: Dict[str, Any] = field(default_factory=dict)
    impact_weights: Dict[str, Any] = field(default_factory=dict)
    timezone: str = "UTC"

    def series_dicts(self) -> List[Dict[str, Any]]:
        return [
            {
                "hour": format_hour_key(r.hour, self.timezone),
                "X": r.biomass,
                "I": r.irradiance,
                "T": r.temperature,
                "N": r.nutrient_dose,
            }
            for r in self.series
        ]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serialisable request body."""
        return {
            "series": self.series_dicts(),
            "config": copy.deepcopy(self.config),
            "bounds": copy.deepcopy(self.bounds),
            "horizon": copy.deepcopy(self.horizon),
            "impact": copy.deepcopy(self.impact_weights),
        }


def assemble_payload(records: Sequence[CanonicalHourRecord],
                     config: Optional[Mapping[str, Any]] = None,
                     bounds: Optional[Mapping[str, Any]] = None,
                     horizon: Optional[Mapping[str, Any]] = None,
                     impact_weights: Optional[Mapping[str, Any]] = None,
                     timezone: str = "UTC") -> OptimiserPayload:
    """Wrap records and pass-through settings into an OptimiserPayload.

    Mappings are deep-copied so later changes by the caller do not leak
    into an assembled payload.
    """
    return OptimiserPayload(
        series=list(records),
        config=copy.deepcopy(dict(config or {})),
        bounds=copy.deepcopy(dict(bounds or {})),
        horizon=copy.deepcopy(dict(horizon or {})),
        impact_weights=copy.deepcopy(dict(impact_weights or {})),
        timezone=timezone,
    )
