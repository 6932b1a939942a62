"""HTTP client for the remote growth optimiser.

The optimiser is an opaque service: it receives the request body built by
the pipeline via POST and answers with a JSON document (schedule, solver
diagnostics) that this package does not interpret.
"""

import json
import logging
import time
from typing import Any, Optional, TYPE_CHECKING, Union

import requests

from pbropt.contracts.failure import NetworkFailure
from pbropt.reconcile.payload import OptimiserPayload

if TYPE_CHECKING:
    from pbropt.schemas import InternalConfig

__all__ = ['OptimiserClient']

logger = logging.getLogger(__name__)


class OptimiserClient:
    """POSTs optimiser payloads with bounded retries.

    Connection errors, timeouts, and 5xx responses are retried up to
    ``max_retries`` times with linear backoff. 4xx responses are not retried.
    Whatever still fails is raised as NetworkFailure with the original
    message.

    Example usage::

        client = OptimiserClient(config)
        response = client.submit(payload)
    """

    def __init__(self, config: "InternalConfig", session=None, sleeper=None):
        """Initialize client.

        Parameters
        ----------
        config : InternalConfig
            Resolved configuration; only ``config.optimiser`` is read.
        session : requests.Session, optional
            HTTP session. If None, a new session is created. Allows
            injection for testing.
        sleeper : callable, optional
            Function to sleep between retries (for testing). If None, uses
            `time.sleep`.
        """
        self.endpoint = config.optimiser.endpoint
        self.timeout = config.optimiser.timeout_sec
        self.max_retries = config.optimiser.max_retries
        self.backoff = config.optimiser.retry_backoff_sec
        self.session = session or requests.Session()
        self._sleep = sleeper or time.sleep

    def submit(self, payload: Union[OptimiserPayload, dict]) -> Any:
        """Send the payload and return the decoded response.

        Returns
        -------
        dict or str
            Parsed JSON body, or the raw text if the body is not JSON.

        Raises
        ------
        NetworkFailure
            On transport errors or a non-2xx status after all retries.
        """
        body = payload.to_dict() if isinstance(payload, OptimiserPayload) else payload
        attempts = self.max_retries + 1
        last_error: Optional[NetworkFailure] = None

        for attempt in range(1, attempts + 1):
            try:
                return self._post_once(body)
            except NetworkFailure as e:
                last_error = e
                if not e.retryable or attempt == attempts:
                    break
                delay = self.backoff * attempt
                logger.warning("Optimiser request failed (attempt %d/%d): %s; retrying in %.1fs",
                               attempt, attempts, e, delay)
                self._sleep(delay)

        logger.error("Optimiser request failed: %s", last_error)
        raise last_error

    def _post_once(self, body: dict) -> Any:
        try:
            resp = self.session.post(
                self.endpoint,
                json=body,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise NetworkFailure(f"Timeout after {self.timeout}s: {e}") from e
        except requests.RequestException as e:
            raise NetworkFailure(str(e)) from e

        if resp.status_code >= 400:
            raise NetworkFailure(
                f"HTTP {resp.status_code} from {self.endpoint}: {resp.text.strip()[:500]}",
                status_code=resp.status_code,
                retryable=resp.status_code >= 500,
            )

        text = resp.text
        logger.info("Optimiser responded HTTP %d (%d bytes)", resp.status_code, len(text))
        try:
            return json.loads(text)
        except ValueError:
            # plain-text answers are passed through as-is
            return text
