"""The single enforcement primitive used by every stage contract."""

from pbropt.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Raise ContractViolation with ``message`` unless ``condition`` holds.

    Contracts sit between reconciliation stages. A failure means the
    preceding stage broke its promise, so nothing downstream tries to
    recover from it.

    Examples
    --------
    >>> require(len(run_points) > 0, "Run contract violated: segmented run is empty")
    """
    if not condition:
        raise ContractViolation(message)
