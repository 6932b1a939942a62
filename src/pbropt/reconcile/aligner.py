"""Hourly alignment of sensor rows with reconciled biomass and nutrient doses.

Only sensor rows stamped exactly on a local whole hour are kept; they form
the grid of the canonical series. Each hour's biomass is resolved by the
first applicable tier:

1. EXACT     hour present in the pre-bucketed lab/spline map
2. SPLINE    spline defined at the hour and plausible
3. BOUNDARY  hour at/after the last run point: that point's value
4. CARRY     previous hour's value

Biomass does not shrink on its own, so BOUNDARY and CARRY values are
clamped to at least the previous value. EXACT and SPLINE values are
authoritative and may go down.

The carried value is threaded through an explicit fold: ``step`` takes the
state and one sample and returns the next state with the emitted record.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from pbropt.reconcile.biomass import BiomassReconciliation
from pbropt.reconcile.models import BiomassSource, CanonicalHourRecord, SensorSample
from pbropt.reconcile.table_utils import cell, data_rows, header_of, to_finite_float
from pbropt.reconcile.timestamps import hour_index, is_whole_local_hour, try_normalize_timestamp
from pbropt.reconcile.variants import column_index, columns_for, find_column

__all__ = ['AlignerState', 'HourlyAligner', 'resolve_biomass', 'align_hours']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlignerState:
    """Accumulator of the alignment fold."""
    last_biomass: float = 0.0


def resolve_biomass(state: AlignerState, hour: pd.Timestamp,
                    biomass: BiomassReconciliation) -> Tuple[float, BiomassSource]:
    """Biomass for one canonical hour and the tier it came from."""
    exact = biomass.exact_at(hour)
    if exact is not None:
        return exact, BiomassSource.EXACT

    spline_value = biomass.spline_value(hour)
    if spline_value is not None:
        return spline_value, BiomassSource.SPLINE

    last = biomass.last_point
    if last is not None and hour >= last.timestamp:
        value, source = last.biomass, BiomassSource.BOUNDARY
    else:
        value, source = state.last_biomass, BiomassSource.CARRY

    # non-authoritative values never decrease the series
    return max(value, state.last_biomass), source


class HourlyAligner:
    """Buckets sensor rows to whole hours and fills biomass, irradiance, dose."""

    def __init__(self, reactor_type, timezone: str, initial_biomass: float = 0.0):
        self.reactor_type = reactor_type
        self.columns = columns_for(reactor_type)
        self.timezone = timezone
        self.initial_biomass = initial_biomass

    @classmethod
    def from_config(cls, reactor_type, config) -> "HourlyAligner":
        return cls(reactor_type, config.aligner.timezone, config.aligner.initial_biomass)

    # ========================================================================
    # Sensor extraction
    # ========================================================================

    def extract_samples(self, table: Sequence[Sequence[Any]]) -> Tuple[List[SensorSample], int]:
        """Whole-hour sensor samples in ascending order, one per hour.

        Returns
        -------
        samples : list of SensorSample
        dropped : int
            Rows dropped for an unparseable timestamp or non-numeric readings.
            Rows that are simply off the hour grid are not counted.

        Raises
        ------
        MissingRequiredColumn
            If the timestamp, an irradiance, or the temperature column is absent.
        """
        header = header_of(table)
        time_idx = column_index(header, self.columns.timestamp, "sensor", self.reactor_type)
        irr_idx = [column_index(header, name, "sensor", self.reactor_type)
                   for name in self.columns.irradiance]
        temp_idx = column_index(header, self.columns.temperature, "sensor", self.reactor_type)
        flow_idx = find_column(header, self.columns.flow)

        samples: List[SensorSample] = []
        dropped = 0

        for row_num, row in enumerate(data_rows(table), start=2):
            ts = try_normalize_timestamp(cell(row, time_idx), self.timezone,
                                         context=f"sensor row {row_num}")
            if ts is None:
                dropped += 1
                continue
            if not is_whole_local_hour(ts, self.timezone):
                continue

            irradiance = [to_finite_float(cell(row, i)) for i in irr_idx]
            temperature = to_finite_float(cell(row, temp_idx))
            if any(v is None for v in irradiance) or temperature is None:
                logger.warning("Dropping sensor row %d at %s: non-numeric irradiance/temperature",
                               row_num, ts)
                dropped += 1
                continue

            samples.append(SensorSample(
                timestamp=ts,
                irradiance=float(np.mean(irradiance)),
                temperature=temperature,
                flow=to_finite_float(cell(row, flow_idx)),
            ))

        return self._unique_hours(samples), dropped

    def _unique_hours(self, samples: List[SensorSample]) -> List[SensorSample]:
        ordered = sorted(samples, key=lambda s: s.timestamp)
        unique: List[SensorSample] = []
        seen = set()
        for sample in ordered:
            key = hour_index(sample.timestamp, self.timezone)
            if key in seen:
                logger.warning("Duplicate sensor hour %s, keeping first row", sample.timestamp)
                continue
            seen.add(key)
            unique.append(sample)
        return unique

    # ========================================================================
    # Fold
    # ========================================================================

    def step(self, state: AlignerState, sample: SensorSample,
             nutrients: Dict[int, float],
             biomass: BiomassReconciliation) -> Tuple[AlignerState, CanonicalHourRecord]:
        """One fold step: resolve the hour and emit its record."""
        value, source = resolve_biomass(state, sample.timestamp, biomass)
        record = CanonicalHourRecord(
            hour=sample.timestamp,
            biomass=value,
            irradiance=sample.irradiance,
            temperature=sample.temperature,
            nutrient_dose=nutrients.get(hour_index(sample.timestamp, self.timezone), 0.0),
            source=source,
        )
        logger.debug("%s biomass=%.4f (%s)", sample.timestamp, value, source.value)
        return AlignerState(last_biomass=value), record

    def fold(self, samples: List[SensorSample], nutrients: Dict[int, float],
             biomass: BiomassReconciliation,
             state: Optional[AlignerState] = None) -> List[CanonicalHourRecord]:
        state = state or AlignerState(last_biomass=self.initial_biomass)
        records = []
        for sample in samples:
            state, record = self.step(state, sample, nutrients, biomass)
            records.append(record)
        return records

    def align(self, table: Sequence[Sequence[Any]], nutrients: Dict[int, float],
              biomass: BiomassReconciliation) -> List[CanonicalHourRecord]:
        """Canonical hourly records for a sensor table, ascending by hour."""
        samples, dropped = self.extract_samples(table)
        records = self.fold(samples, nutrients, biomass)
        logger.info("Aligned %d canonical hours (%d sensor rows dropped)", len(records), dropped)
        return records


def align_hours(table, reactor_type, nutrients: Dict[int, float],
                biomass: BiomassReconciliation, timezone: str,
                initial_biomass: float = 0.0) -> List[CanonicalHourRecord]:
    return HourlyAligner(reactor_type, timezone, initial_biomass).align(table, nutrients, biomass)
