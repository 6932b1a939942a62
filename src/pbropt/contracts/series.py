"""Canonical series contract.

Enforces the guarantee that after alignment the canonical hours are
strictly ascending, every value is finite, and biomass only drops where an
authoritative (exact or spline) source reports it.
"""

import math
from pbropt.contracts.base import require


def assert_canonical_series(records) -> None:
    """Enforce alignment stage contract.

    Parameters
    ----------
    records : list of CanonicalHourRecord
        Output from HourlyAligner.align()

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    for rec in records:
        require(
            all(math.isfinite(v) for v in (rec.biomass, rec.irradiance,
                                           rec.temperature, rec.nutrient_dose)),
            f"Series contract violated: non-finite value at {rec.hour}"
        )

    for prev, cur in zip(records, records[1:]):
        require(
            prev.hour < cur.hour,
            f"Series contract violated: hour {cur.hour} not after {prev.hour}"
        )
        if not cur.source.authoritative:
            require(
                cur.biomass >= prev.biomass,
                f"Series contract violated: {cur.source.value} biomass decreased at {cur.hour} "
                f"({prev.biomass} -> {cur.biomass})"
            )
