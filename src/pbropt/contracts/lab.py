"""Lab series contract.

Enforces the guarantee that after lab extraction the biomass points are
non-empty, strictly ascending in time, and finite.
"""

import math
from pbropt.contracts.base import require


def assert_lab_series(series) -> None:
    """Enforce lab stage contract.

    Called after LabSeriesBuilder.build().

    Parameters
    ----------
    series : LabSeries
        Output from LabSeriesBuilder.build()

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    points = series.points
    require(
        len(points) > 0,
        "Lab contract violated: no biomass points"
    )
    for prev, cur in zip(points, points[1:]):
        require(
            prev.timestamp < cur.timestamp,
            f"Lab contract violated: timestamps not strictly ascending at {cur.timestamp}"
        )
    require(
        all(math.isfinite(p.biomass) for p in points),
        "Lab contract violated: non-finite biomass value"
    )
