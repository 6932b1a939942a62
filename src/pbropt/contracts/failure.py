"""Centralized failure taxonomy for reconciliation.

Two families of exceptions live here:

- ContractViolation: a stage did not produce the invariants it promised.
  This is a bug in pipeline logic and is never caught by the pipeline.
- ReconciliationError: a problem with the *data* (or the optimiser service).
  Each subclass carries an ErrorKind so callers can branch on the kind
  without importing every class.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kinds of data and collaborator errors.

    INVALID_TIMESTAMP: row-local, the row is dropped and processing continues
    INSUFFICIENT_LAB_DATA: pipeline-fatal, no valid biomass point
    MISSING_REQUIRED_COLUMN: pipeline-fatal, a column of the active variant is absent
    SPLINE_CONSTRUCTION_FAILURE: degrades to "no spline"
    NETWORK_FAILURE: raised at the optimiser boundary, surfaced verbatim
    """
    INVALID_TIMESTAMP = "InvalidTimestamp"
    INSUFFICIENT_LAB_DATA = "InsufficientLabData"
    MISSING_REQUIRED_COLUMN = "MissingRequiredColumn"
    SPLINE_CONSTRUCTION_FAILURE = "SplineConstructionFailure"
    NETWORK_FAILURE = "NetworkFailure"


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    Key distinction:
    - ValueError / ValidationError: config error (handled by Pydantic)
    - ReconciliationError: bad or missing input data
    - ContractViolation: pipeline bug (programmer error)
    """
    pass


class ReconciliationError(Exception):
    """Base class for data-level reconciliation errors."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidTimestamp(ReconciliationError):
    """A timestamp cell could not be parsed by any supported profile."""

    kind = ErrorKind.INVALID_TIMESTAMP

    def __init__(self, value, reason: str = "unrecognised format"):
        super().__init__(f"Invalid timestamp {value!r}: {reason}")
        self.value = value


class InsufficientLabData(ReconciliationError):
    """The lab table holds no usable biomass measurement."""

    kind = ErrorKind.INSUFFICIENT_LAB_DATA


class MissingRequiredColumn(ReconciliationError):
    """A column required by the active reactor variant is absent."""

    kind = ErrorKind.MISSING_REQUIRED_COLUMN

    def __init__(self, column: str, table: str, reactor_type: str):
        super().__init__(
            f"Column '{column}' required for reactor type '{reactor_type}' "
            f"is missing from the {table} table"
        )
        self.column = column
        self.table = table
        self.reactor_type = reactor_type


class SplineConstructionFailure(ReconciliationError):
    """The biomass spline could not be fitted through the run points."""

    kind = ErrorKind.SPLINE_CONSTRUCTION_FAILURE


class NetworkFailure(ReconciliationError):
    """The optimiser request failed at the transport or HTTP level."""

    kind = ErrorKind.NETWORK_FAILURE

    def __init__(self, message: str, status_code: Optional[int] = None,
                 retryable: bool = True):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable
