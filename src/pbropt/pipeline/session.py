"""Request session with "latest wins" semantics.

A caller (UI, scheduler) may start a new calculation before the previous one
has answered. Every ``calculate`` call takes a generation number; when its
response arrives it is kept only if no newer call has started in the
meantime. Superseded requests are not cancelled, their answers are dropped.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional

from pbropt.pipeline.client import OptimiserClient
from pbropt.pipeline.processor import ReconciliationPipeline
from pbropt.reconcile.models import Dataset
from pbropt.reconcile.payload import OptimiserPayload

__all__ = ['OptimiserOutcome', 'OptimiserSession']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OptimiserOutcome:
    generation: int
    payload: OptimiserPayload
    response: Any


class OptimiserSession:
    """Couples a pipeline and a client for repeated optimiser calls."""

    def __init__(self, pipeline: ReconciliationPipeline, client: OptimiserClient):
        self.pipeline = pipeline
        self.client = client
        self._lock = threading.Lock()
        self._generation = 0
        self._latest: Optional[OptimiserOutcome] = None

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def begin(self) -> int:
        """Reserve the next generation number."""
        with self._lock:
            self._generation += 1
            return self._generation

    def calculate(self, dataset: Dataset, **pass_through) -> Optional[OptimiserOutcome]:
        """Reconcile, assemble, and submit one request.

        Parameters
        ----------
        dataset : Dataset
            Sensor and lab tables with the reactor variant.
        **pass_through
            ``config``, ``bounds``, ``horizon``, ``impact_weights`` forwarded
            to the payload untouched.

        Returns
        -------
        OptimiserOutcome or None
            The outcome if this call is still the newest when its response
            arrives, otherwise None.

        Raises
        ------
        ReconciliationError
            Fatal data errors, raised before anything is sent.
        NetworkFailure
            If the optimiser cannot be reached.
        """
        generation = self.begin()
        payload = self.pipeline.build_payload(dataset, **pass_through)
        response = self.client.submit(payload)
        return self.publish(generation, payload, response)

    def publish(self, generation: int, payload: OptimiserPayload,
                response: Any) -> Optional[OptimiserOutcome]:
        """Store a response unless a newer generation has started."""
        with self._lock:
            if generation != self._generation:
                logger.info("Discarding optimiser response of generation %d (current %d)",
                            generation, self._generation)
                return None
            self._latest = OptimiserOutcome(generation, payload, response)
            return self._latest

    def latest(self) -> Optional[OptimiserOutcome]:
        """Outcome of the newest generation, or None if it has not answered."""
        with self._lock:
            if self._latest is None or self._latest.generation != self._generation:
                return None
            return self._latest
