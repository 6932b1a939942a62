"""Run segmentation contract.

Enforces the guarantee that the segmented run is a non-empty tail of the
lab series that starts at the run window (when there is one).
"""

from pbropt.contracts.base import require


def assert_segmented_run(run_points, window, all_points) -> None:
    """Enforce segmentation stage contract.

    Parameters
    ----------
    run_points : list of LabPoint
        Output of RunSegmenter.segment()
    window : RunWindow or None
        Run window returned alongside the points
    all_points : list of LabPoint
        Input series

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        len(run_points) > 0,
        "Run contract violated: segmented run is empty"
    )
    require(
        run_points[-1].timestamp == all_points[-1].timestamp,
        "Run contract violated: run does not end at the most recent lab point"
    )
    if window is not None:
        require(
            run_points[0].timestamp == window.start,
            f"Run contract violated: run starts at {run_points[0].timestamp}, "
            f"window starts at {window.start}"
        )
