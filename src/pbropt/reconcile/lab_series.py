"""Lab table extraction: biomass points and hourly nutrient doses.

The lab sheet is sparse and hand-entered. A row contributes a biomass point
only when both its timestamp and its biomass cell parse; a row contributes a
nutrient dose only when the active variant has a nutrient column, the column
is present in this sheet, and the cell is a finite number.
"""

import logging
from typing import Any, Dict, List, Sequence

from pbropt.contracts.failure import InsufficientLabData
from pbropt.reconcile.models import LabPoint, LabSeries
from pbropt.reconcile.table_utils import cell, data_rows, header_of, to_finite_float
from pbropt.reconcile.timestamps import epoch_ms, nearest_hour_index, try_normalize_timestamp
from pbropt.reconcile.variants import column_index, columns_for, find_column

__all__ = ['LabSeriesBuilder', 'build_lab_series']

logger = logging.getLogger(__name__)


class LabSeriesBuilder:
    """Builds the sorted biomass series and nutrient map for one variant."""

    def __init__(self, reactor_type, timezone: str):
        self.reactor_type = reactor_type
        self.columns = columns_for(reactor_type)
        self.timezone = timezone

    def build(self, table: Sequence[Sequence[Any]]) -> LabSeries:
        """Extract LabPoints and nutrient doses from the lab table.

        Parameters
        ----------
        table : sequence of rows
            Lab table with header row, units row, then data rows.

        Returns
        -------
        LabSeries
            ``points`` sorted ascending with distinct instants,
            ``nutrients`` mapping hour index to the summed dose of that hour.

        Raises
        ------
        MissingRequiredColumn
            If the lab timestamp or the variant's biomass column is absent.
        InsufficientLabData
            If no row yields a valid biomass point.
        """
        header = header_of(table)
        time_idx = column_index(header, self.columns.lab_timestamp, "lab", self.reactor_type)
        biomass_idx = column_index(header, self.columns.biomass, "lab", self.reactor_type)
        nutrient_idx = find_column(header, self.columns.nutrient)

        if nutrient_idx is None:
            logger.info("No nutrient column '%s' in lab table, doses default to 0",
                        self.columns.nutrient)

        points: List[LabPoint] = []
        nutrients: Dict[int, float] = {}
        dropped = 0

        for row_num, row in enumerate(data_rows(table), start=2):
            ts = try_normalize_timestamp(cell(row, time_idx), self.timezone,
                                         context=f"lab row {row_num}")
            if ts is None:
                dropped += 1
                continue

            biomass = to_finite_float(cell(row, biomass_idx))
            if biomass is not None:
                points.append(LabPoint(timestamp=ts, biomass=biomass))
            else:
                logger.debug("Lab row %d has no biomass value", row_num)

            dose = to_finite_float(cell(row, nutrient_idx))
            if dose is not None:
                hour = nearest_hour_index(epoch_ms(ts), self.timezone)
                nutrients[hour] = nutrients.get(hour, 0.0) + dose

        if not points:
            raise InsufficientLabData(
                f"No valid '{self.columns.biomass}' measurement in lab table "
                f"({len(data_rows(table))} data rows)"
            )

        points = _sorted_unique(points)
        logger.info("Lab series: %d biomass points, %d nutrient hours, %d rows dropped",
                    len(points), len(nutrients), dropped)

        return LabSeries(points=points, nutrients=nutrients, dropped_rows=dropped)


def _sorted_unique(points: List[LabPoint]) -> List[LabPoint]:
    """Stable sort by time; the first point wins for a repeated instant."""
    ordered = sorted(points, key=lambda p: p.timestamp)
    unique = [ordered[0]]
    for point in ordered[1:]:
        if point.timestamp == unique[-1].timestamp:
            logger.warning("Duplicate lab timestamp %s, keeping first value %s",
                           point.timestamp, unique[-1].biomass)
            continue
        unique.append(point)
    return unique


def build_lab_series(table, reactor_type, timezone: str) -> LabSeries:
    """Functional shortcut for LabSeriesBuilder(reactor_type, timezone).build(table)."""
    return LabSeriesBuilder(reactor_type, timezone).build(table)
