"""Isolate the most recent cultivation run from a lab series.

One lab sheet often covers several growth batches. A batch starts when the
culture is reset to (almost) no biomass, so every point below the run-start
threshold is a candidate boundary; the last candidate at or before the most
recent point is where the current run begins.
"""

import logging
from typing import List, Optional, Tuple

from pbropt.reconcile.models import LabPoint, RunWindow

__all__ = ['RunSegmenter', 'segment_run']

logger = logging.getLogger(__name__)


class RunSegmenter:
    """Threshold-based run boundary detection."""

    def __init__(self, threshold: float = 0.1):
        self.threshold = threshold

    def segment(self, points: List[LabPoint]) -> Tuple[List[LabPoint], Optional[RunWindow]]:
        """Return the points of the latest run and its window.

        If no point is below the threshold the whole series is one run and
        the window is None.
        """
        if not points:
            return [], None

        ordered = sorted(points, key=lambda p: p.timestamp)
        final = ordered[-1]

        candidates = [p for p in ordered
                      if p.biomass < self.threshold and p.timestamp <= final.timestamp]
        if not candidates:
            logger.debug("No point below %s, treating %d points as one run",
                         self.threshold, len(ordered))
            return ordered, None

        start = candidates[-1]
        run = [p for p in ordered if p.timestamp >= start.timestamp]
        logger.info("Run start: %s (biomass=%s), %d of %d points kept",
                    start.timestamp, start.biomass, len(run), len(ordered))
        return run, RunWindow(start=start.timestamp)


def segment_run(points: List[LabPoint], threshold: float = 0.1):
    """Functional shortcut for RunSegmenter(threshold).segment(points)."""
    return RunSegmenter(threshold).segment(points)
