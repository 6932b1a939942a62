"""Reconciliation pipeline.

Runs a dataset through every reconciliation stage and checks each stage's
contract before handing its output on:

1. Lab series     lab table → sorted biomass points + hourly nutrient doses
2. Run segment    keep the most recent cultivation run
3. Biomass        spline + hour-bucketed exact map
4. Alignment      sensor rows → canonical hourly records
5. Payload        records + caller settings → optimiser request body

The pipeline is synchronous and holds no state between calls; calling it
twice with the same inputs gives identical output.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, TYPE_CHECKING

from pbropt.contracts import (
    assert_canonical_series,
    assert_lab_series,
    assert_segmented_run,
)
from pbropt.reconcile.aligner import HourlyAligner
from pbropt.reconcile.biomass import BiomassReconciler
from pbropt.reconcile.lab_series import LabSeriesBuilder
from pbropt.reconcile.models import CanonicalHourRecord, Dataset, RunWindow
from pbropt.reconcile.payload import OptimiserPayload, assemble_payload
from pbropt.reconcile.productivity import ProductivitySummary, summarize_productivity
from pbropt.reconcile.run_segmenter import RunSegmenter

if TYPE_CHECKING:
    from pbropt.schemas import InternalConfig

__all__ = ['ReconciliationResult', 'ReconciliationPipeline']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciliationResult:
    """Canonical series plus the diagnostics of the run that produced it."""
    records: List[CanonicalHourRecord]
    run_window: Optional[RunWindow]
    lab_points: int
    run_points: int
    has_spline: bool
    dropped_lab_rows: int
    dropped_sensor_rows: int
    productivity: ProductivitySummary


class ReconciliationPipeline:
    """Fuses sensor and lab tables into the canonical hourly series.

    Example usage::

        config = resolve_config(ParamConfig(), user_cfg)
        pipeline = ReconciliationPipeline(config)
        payload = pipeline.build_payload(dataset, config={"solver": "ipopt"})
        body = payload.to_dict()
    """

    def __init__(self, config: "InternalConfig"):
        """Initialize pipeline with validated configuration.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration.
        """
        self.config = config
        self.timezone = config.aligner.timezone
        self.segmenter = RunSegmenter(config.reconciler.run_start_threshold)
        self.reconciler = BiomassReconciler.from_config(config)

    def reconcile(self, dataset: Dataset) -> ReconciliationResult:
        """Run stages 1-4.

        Raises
        ------
        InsufficientLabData
            If the lab table holds no valid biomass measurement.
        MissingRequiredColumn
            If a column of the dataset's reactor variant is missing.
        ContractViolation
            If a stage breaks its invariants (a bug, not bad data).
        """
        reactor_type = dataset.reactor_type
        logger.info("Reconciling %s dataset: %d sensor rows, %d lab rows",
                    reactor_type.value, max(len(dataset.data) - 2, 0),
                    max(len(dataset.metadata) - 2, 0))

        # Step 1: Lab series
        lab = LabSeriesBuilder(reactor_type, self.timezone).build(dataset.metadata)
        assert_lab_series(lab)

        # Step 2: Latest cultivation run
        run_points, window = self.segmenter.segment(lab.points)
        assert_segmented_run(run_points, window, lab.points)

        # Step 3: Biomass spline and exact map
        biomass = self.reconciler.reconcile(run_points)

        # Step 4: Hourly alignment
        aligner = HourlyAligner.from_config(reactor_type, self.config)
        samples, dropped_sensor = aligner.extract_samples(dataset.data)
        records = aligner.fold(samples, lab.nutrients, biomass)
        assert_canonical_series(records)

        logger.info("Canonical series: %d hours (%d sensor rows dropped)",
                    len(records), dropped_sensor)

        return ReconciliationResult(
            records=records,
            run_window=window,
            lab_points=len(lab.points),
            run_points=len(run_points),
            has_spline=biomass.spline is not None,
            dropped_lab_rows=lab.dropped_rows,
            dropped_sensor_rows=dropped_sensor,
            productivity=summarize_productivity(records, reactor_type),
        )

    def build_payload(self, dataset: Dataset,
                      config: Optional[Mapping[str, Any]] = None,
                      bounds: Optional[Mapping[str, Any]] = None,
                      horizon: Optional[Mapping[str, Any]] = None,
                      impact_weights: Optional[Mapping[str, Any]] = None) -> OptimiserPayload:
        """Reconcile and package the series with the caller's solver settings.

        Fatal data errors propagate from here, so no partial payload is ever
        produced.
        """
        result = self.reconcile(dataset)
        return assemble_payload(
            result.records,
            config=config,
            bounds=bounds,
            horizon=horizon,
            impact_weights=impact_weights,
            timezone=self.timezone,
        )
