"""Time-series reconciliation modules.

- timestamps: Parse heterogeneous timestamp cells, hour indexing
- lab_series: Biomass points and nutrient doses from the lab table
- run_segmenter: Latest cultivation run
- biomass: Spline reconstruction and plausibility guard
- aligner: Whole-hour canonical records with tiered biomass fallback
- payload: Optimiser request body
- productivity: Areal and volumetric productivity
"""

from pbropt.reconcile.variants import ReactorType
from pbropt.reconcile.models import Dataset, LabPoint, CanonicalHourRecord, BiomassSource
from pbropt.reconcile.lab_series import LabSeriesBuilder
from pbropt.reconcile.run_segmenter import RunSegmenter
from pbropt.reconcile.biomass import BiomassReconciler
from pbropt.reconcile.aligner import HourlyAligner
from pbropt.reconcile.payload import OptimiserPayload, assemble_payload

__all__ = [
    "ReactorType",
    "Dataset",
    "LabPoint",
    "CanonicalHourRecord",
    "BiomassSource",
    "LabSeriesBuilder",
    "RunSegmenter",
    "BiomassReconciler",
    "HourlyAligner",
    "OptimiserPayload",
    "assemble_payload",
]
