"""Continuous biomass reconstruction over one cultivation run.

Dry-weight samples are taken by hand a few times a day at best, while the
optimiser needs a value for every hour. A piecewise cubic through the run's
lab points gives the continuous estimate between samples:

- ``pchip`` (default): shape-preserving Hermite cubic, never overshoots
  between samples, so a monotone run stays monotone.
- ``natural``: natural cubic spline, smoother but may overshoot.

Spline values are only trusted when they pass the plausibility guard
(finite, non-negative, at most ``plausibility_factor`` times the largest
observed biomass of the run).

The reconciliation also pre-buckets values into local hours: observed points
are rounded to their nearest hour first, then the spline is sampled at a fixed
fraction of the run span and each sample fills its nearest hour if that hour
is still empty. Iteration is in ascending time, so the earliest writer of an
hour wins. A lab value is therefore stored at its nearest hour, not at its
exact instant: a sample taken at 06:20 answers for 06:00.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy.interpolate import CubicSpline, PchipInterpolator

from pbropt.contracts.failure import SplineConstructionFailure
from pbropt.reconcile.models import LabPoint
from pbropt.reconcile.timestamps import HOUR_MS, epoch_ms, hour_index, nearest_hour_index

__all__ = ['BiomassSpline', 'BiomassReconciliation', 'BiomassReconciler', 'reconcile_biomass']

logger = logging.getLogger(__name__)


class BiomassSpline:
    """Biomass as a function of time, defined on ``[start, end]`` of a run.

    Time is measured in hours from the first point internally; evaluation
    outside the domain returns NaN.
    """

    def __init__(self, points: List[LabPoint], method: str = "pchip"):
        if len(points) < 2:
            raise SplineConstructionFailure(
                f"Spline needs at least 2 points, got {len(points)}"
            )

        self.method = method
        self.origin_ms = epoch_ms(points[0].timestamp)
        self.start = points[0].timestamp
        self.end = points[-1].timestamp

        x = np.array([self._hours(epoch_ms(p.timestamp)) for p in points], dtype=float)
        y = np.array([p.biomass for p in points], dtype=float)

        try:
            if method == "pchip":
                self._interp = PchipInterpolator(x, y, extrapolate=False)
            elif method == "natural":
                self._interp = CubicSpline(x, y, bc_type="natural", extrapolate=False)
            else:
                raise ValueError(f"Unknown spline method: {method}")
        except ValueError as e:
            raise SplineConstructionFailure(f"Cannot fit {method} spline: {e}") from e

    def _hours(self, ms: float) -> float:
        return (ms - self.origin_ms) / HOUR_MS

    def contains(self, ts: pd.Timestamp) -> bool:
        return self.start <= ts <= self.end

    def __call__(self, ts: pd.Timestamp) -> float:
        return self.at_ms(epoch_ms(ts))

    def at_ms(self, ms: float) -> float:
        return float(self._interp(self._hours(ms)))

    def sample_ms(self, ms: np.ndarray) -> np.ndarray:
        """Vectorised evaluation at epoch-millisecond positions."""
        return np.asarray(self._interp((np.asarray(ms, dtype=float) - self.origin_ms) / HOUR_MS),
                          dtype=float)


@dataclass(frozen=True)
class BiomassReconciliation:
    """Artifacts of one biomass reconciliation.

    Attributes
    ----------
    spline : BiomassSpline or None
        None with fewer than 2 points or when fitting failed.
    domain : (pd.Timestamp, pd.Timestamp)
        First and last run point.
    max_observed : float
        Largest biomass measured in the run.
    plausibility_factor : float
        Spline values above ``plausibility_factor * max_observed`` are rejected.
    exact_by_hour : dict
        Local hour index → biomass from observed points and densified spline
        samples.
    last_point : LabPoint
        Most recent run point, used for boundary carry.
    timezone : str
        Zone whose whole hours the ``exact_by_hour`` keys address.
    """
    spline: Optional[BiomassSpline]
    domain: Tuple[pd.Timestamp, pd.Timestamp]
    max_observed: float
    plausibility_factor: float
    exact_by_hour: Dict[int, float] = field(default_factory=dict)
    last_point: Optional[LabPoint] = None
    timezone: str = "UTC"

    def is_plausible(self, value: float) -> bool:
        return (math.isfinite(value) and value >= 0
                and value <= self.plausibility_factor * self.max_observed)

    def exact_at(self, ts: pd.Timestamp) -> Optional[float]:
        return self.exact_by_hour.get(hour_index(ts, self.timezone))

    def spline_value(self, ts: pd.Timestamp) -> Optional[float]:
        """Spline estimate at ``ts``, or None if unavailable or implausible."""
        if self.spline is None or not self.spline.contains(ts):
            return None
        value = self.spline(ts)
        if not self.is_plausible(value):
            logger.debug("Rejected spline value %s at %s (limit %s)",
                         value, ts, self.plausibility_factor * self.max_observed)
            return None
        return value


class BiomassReconciler:
    """Fits the run spline and builds the hour-bucketed exact map."""

    def __init__(self, spline_method: str = "pchip", plausibility_factor: float = 1.1,
                 densify_step: float = 0.05, timezone: str = "UTC"):
        self.spline_method = spline_method
        self.plausibility_factor = plausibility_factor
        self.densify_step = densify_step
        self.timezone = timezone

    @classmethod
    def from_config(cls, config) -> "BiomassReconciler":
        rc = config.reconciler
        return cls(
            spline_method=rc.spline_method,
            plausibility_factor=rc.plausibility_factor,
            densify_step=rc.densify_step,
            timezone=config.aligner.timezone,
        )

    def reconcile(self, points: List[LabPoint]) -> BiomassReconciliation:
        """Build spline and exact map for the run points.

        Parameters
        ----------
        points : list of LabPoint
            Run points, ascending with distinct timestamps (non-empty).
        """
        spline = None
        if len(points) >= 2:
            try:
                spline = BiomassSpline(points, self.spline_method)
            except SplineConstructionFailure as e:
                logger.warning("%s; continuing without spline", e)
        else:
            logger.info("Only %d lab point in run, no spline", len(points))

        exact = self._bucket_observed(points)
        if spline is not None:
            self._bucket_samples(spline, exact)

        logger.debug("Exact biomass map: %d hours", len(exact))

        return BiomassReconciliation(
            spline=spline,
            domain=(points[0].timestamp, points[-1].timestamp),
            max_observed=max(p.biomass for p in points),
            plausibility_factor=self.plausibility_factor,
            exact_by_hour=exact,
            last_point=points[-1],
            timezone=self.timezone,
        )

    def _bucket_observed(self, points: List[LabPoint]) -> Dict[int, float]:
        exact: Dict[int, float] = {}
        for point in points:
            exact.setdefault(nearest_hour_index(epoch_ms(point.timestamp), self.timezone),
                           point.biomass)
        return exact

    def _bucket_samples(self, spline: BiomassSpline, exact: Dict[int, float]) -> None:
        start_ms = epoch_ms(spline.start)
        span = epoch_ms(spline.end) - start_ms
        n_steps = math.ceil(1.0 / self.densify_step - 1e-9)

        positions = [start_ms + span * (k * self.densify_step) for k in range(n_steps)]
        positions = [ms for ms in positions if ms < start_ms + span]
        positions.append(float(start_ms + span))

        values = spline.sample_ms(np.array(positions))
        for ms, value in zip(positions, values):
            if not math.isfinite(value):
                continue
            exact.setdefault(nearest_hour_index(ms, self.timezone), float(value))


def reconcile_biomass(points: List[LabPoint], spline_method: str = "pchip",
                      plausibility_factor: float = 1.1,
                      densify_step: float = 0.05,
                      timezone: str = "UTC") -> BiomassReconciliation:
    return BiomassReconciler(spline_method, plausibility_factor, densify_step,
                             timezone).reconcile(points)
