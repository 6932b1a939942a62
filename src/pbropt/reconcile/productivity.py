"""Productivity figures of a reconciled cultivation run.

Areal productivity (g/m²/day) scales the biomass concentration gain by the
reactor volume and divides by the productive area; volumetric productivity
(g/L/day) is the concentration gain per day.
"""

from dataclasses import dataclass
from typing import Sequence

from pbropt.reconcile.models import CanonicalHourRecord
from pbropt.reconcile.variants import geometry_for

__all__ = ['ProductivitySummary', 'summarize_productivity']

SECONDS_PER_DAY = 86_400.0


@dataclass(frozen=True)
class ProductivitySummary:
    duration_days: float
    first_biomass: float
    last_biomass: float
    areal_productivity: float
    volumetric_productivity: float


def summarize_productivity(records: Sequence[CanonicalHourRecord],
                           reactor_type) -> ProductivitySummary:
    """Productivity between the first and last canonical hour.

    With fewer than two records, or zero elapsed time, both productivities
    are 0.
    """
    if not records:
        return ProductivitySummary(0.0, 0.0, 0.0, 0.0, 0.0)

    first, last = records[0], records[-1]
    days = (last.hour - first.hour).total_seconds() / SECONDS_PER_DAY
    gain = last.biomass - first.biomass

    if days <= 0:
        return ProductivitySummary(days, first.biomass, last.biomass, 0.0, 0.0)

    geometry = geometry_for(reactor_type)
    areal = gain * geometry.volume_l / (geometry.productive_area_m2 * days)
    return ProductivitySummary(
        duration_days=days,
        first_biomass=first.biomass,
        last_biomass=last.biomass,
        areal_productivity=areal,
        volumetric_productivity=gain / days,
    )
