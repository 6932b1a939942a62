"""Tests for pipeline contracts.

These tests verify that contracts are enforced at stage boundaries.
They test contract violations directly, without defensive logic downstream.
"""

import pandas as pd
import pytest

from pbropt.contracts import (
    ContractViolation,
    ErrorKind,
    ReconciliationError,
    assert_canonical_series,
    assert_lab_series,
    assert_segmented_run,
    require,
)
from pbropt.reconcile.models import (
    BiomassSource,
    CanonicalHourRecord,
    LabPoint,
    LabSeries,
    RunWindow,
)

pytestmark = pytest.mark.unit

T0 = pd.Timestamp("2024-06-01 00:00", tz="UTC")


def _at(hours):
    return T0 + pd.Timedelta(hours=hours)


def _record(hours, biomass, source=BiomassSource.EXACT, irradiance=100.0):
    return CanonicalHourRecord(_at(hours), biomass, irradiance, 20.0, 0.0, source)


class TestRequire:

    def test_passes_silently(self):
        require(True, "never raised")

    def test_raises_contract_violation(self):
        with pytest.raises(ContractViolation, match="broken"):
            require(False, "broken")

    def test_contract_violation_is_not_a_data_error(self):
        assert issubclass(ContractViolation, RuntimeError)
        assert not issubclass(ContractViolation, ReconciliationError)


class TestLabContract:
    """Test lab stage contract."""

    def test_passes_with_sorted_points(self):
        assert_lab_series(LabSeries([LabPoint(_at(0), 0.1), LabPoint(_at(1), 0.2)]))

    def test_fails_when_empty(self):
        with pytest.raises(ContractViolation, match="no biomass points"):
            assert_lab_series(LabSeries([]))

    def test_fails_with_duplicate_instant(self):
        with pytest.raises(ContractViolation, match="not strictly ascending"):
            assert_lab_series(LabSeries([LabPoint(_at(0), 0.1), LabPoint(_at(0), 0.2)]))

    def test_fails_with_nan(self):
        with pytest.raises(ContractViolation, match="non-finite"):
            assert_lab_series(LabSeries([LabPoint(_at(0), float("nan"))]))


class TestRunContract:
    """Test segmentation stage contract."""

    def test_passes_with_tail(self):
        points = [LabPoint(_at(h), v) for h, v in enumerate([1.0, 0.05, 0.5])]
        assert_segmented_run(points[1:], RunWindow(_at(1)), points)

    def test_passes_without_window(self):
        points = [LabPoint(_at(0), 1.0)]
        assert_segmented_run(points, None, points)

    def test_fails_when_empty(self):
        with pytest.raises(ContractViolation, match="empty"):
            assert_segmented_run([], None, [LabPoint(_at(0), 1.0)])

    def test_fails_when_not_ending_at_latest(self):
        points = [LabPoint(_at(0), 0.05), LabPoint(_at(1), 0.5)]
        with pytest.raises(ContractViolation, match="most recent"):
            assert_segmented_run(points[:1], None, points)

    def test_fails_when_window_mismatch(self):
        points = [LabPoint(_at(0), 0.05), LabPoint(_at(1), 0.5)]
        with pytest.raises(ContractViolation, match="window starts"):
            assert_segmented_run(points, RunWindow(_at(1)), points)


class TestSeriesContract:
    """Test alignment stage contract."""

    def test_passes_with_valid_series(self):
        assert_canonical_series([
            _record(0, 0.5),
            _record(1, 0.4, BiomassSource.SPLINE),
            _record(2, 0.4, BiomassSource.CARRY),
            _record(3, 0.6, BiomassSource.BOUNDARY),
        ])

    def test_passes_empty(self):
        assert_canonical_series([])

    def test_fails_with_repeated_hour(self):
        with pytest.raises(ContractViolation, match="not after"):
            assert_canonical_series([_record(1, 0.5), _record(1, 0.6)])

    def test_fails_when_carry_decreases(self):
        with pytest.raises(ContractViolation, match="carry biomass decreased"):
            assert_canonical_series([_record(0, 0.5), _record(1, 0.4, BiomassSource.CARRY)])

    def test_fails_with_non_finite_irradiance(self):
        with pytest.raises(ContractViolation, match="non-finite"):
            assert_canonical_series([_record(0, 0.5, irradiance=float("inf"))])


class TestErrorKinds:

    def test_every_kind_has_a_name(self):
        assert {k.value for k in ErrorKind} == {
            "InvalidTimestamp",
            "InsufficientLabData",
            "MissingRequiredColumn",
            "SplineConstructionFailure",
            "NetworkFailure",
        }
