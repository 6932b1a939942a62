"""Pipeline contracts and the error taxonomy.

Contracts enforce semantic guarantees between reconciliation stages and
fail immediately when a stage does not produce its promised invariants.
The ReconciliationError family describes problems with the input data or
the optimiser service instead.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- ReconciliationError reports data problems
"""

from pbropt.contracts.failure import (
    ErrorKind,
    ContractViolation,
    ReconciliationError,
    InvalidTimestamp,
    InsufficientLabData,
    MissingRequiredColumn,
    SplineConstructionFailure,
    NetworkFailure,
)
from pbropt.contracts.base import require
from pbropt.contracts.lab import assert_lab_series
from pbropt.contracts.run import assert_segmented_run
from pbropt.contracts.series import assert_canonical_series

__all__ = [
    "ErrorKind",
    "ContractViolation",
    "ReconciliationError",
    "InvalidTimestamp",
    "InsufficientLabData",
    "MissingRequiredColumn",
    "SplineConstructionFailure",
    "NetworkFailure",
    "require",
    "assert_lab_series",
    "assert_segmented_run",
    "assert_canonical_series",
]
