"""Tests for the biomass spline and the hour-bucketed exact map."""

import math

import numpy as np
import pandas as pd
import pytest

from pbropt.contracts import SplineConstructionFailure
from pbropt.reconcile.biomass import BiomassReconciler, BiomassSpline, reconcile_biomass
from pbropt.reconcile.models import LabPoint
from pbropt.reconcile.timestamps import hour_index

pytestmark = pytest.mark.unit

T0 = pd.Timestamp("2024-06-01 00:00", tz="UTC")


def _at(hours):
    return T0 + pd.Timedelta(hours=hours)


class TestBiomassSpline:

    def test_two_point_midpoint_strictly_between(self):
        points = [LabPoint(_at(0), 0.5), LabPoint(_at(10), 2.5)]
        spline = BiomassSpline(points)
        mid = spline(_at(5))
        assert 0.5 < mid < 2.5

    @pytest.mark.parametrize("method", ["pchip", "natural"])
    def test_passes_through_points(self, method):
        points = [LabPoint(_at(0), 0.2), LabPoint(_at(6), 1.0), LabPoint(_at(12), 1.4)]
        spline = BiomassSpline(points, method)
        for p in points:
            assert spline(p.timestamp) == pytest.approx(p.biomass)

    def test_outside_domain_is_nan(self):
        spline = BiomassSpline([LabPoint(_at(0), 0.5), LabPoint(_at(4), 1.0)])
        assert not spline.contains(_at(5))
        assert math.isnan(spline(_at(5)))
        assert math.isnan(spline(_at(-1)))

    def test_pchip_does_not_overshoot_monotone_data(self):
        points = [LabPoint(_at(0), 0.1), LabPoint(_at(2), 0.2),
                  LabPoint(_at(3), 1.8), LabPoint(_at(10), 2.0)]
        spline = BiomassSpline(points, "pchip")
        values = [spline(_at(h / 4)) for h in range(0, 41)]
        assert all(b >= a - 1e-12 for a, b in zip(values, values[1:]))
        assert max(values) <= 2.0 + 1e-12

    def test_single_point_fails(self):
        with pytest.raises(SplineConstructionFailure):
            BiomassSpline([LabPoint(_at(0), 0.5)])

    def test_unknown_method_fails(self):
        with pytest.raises(SplineConstructionFailure):
            BiomassSpline([LabPoint(_at(0), 0.5), LabPoint(_at(1), 1.0)], "akima")


class TestBiomassReconciler:

    def test_observed_points_seed_exact_map(self):
        points = [LabPoint(_at(0), 0.05), LabPoint(_at(5), 1.0)]
        result = reconcile_biomass(points)
        assert result.exact_by_hour[hour_index(_at(0))] == 0.05
        assert result.exact_by_hour[hour_index(_at(5))] == 1.0

    def test_densified_samples_fill_interior_hours(self):
        points = [LabPoint(_at(0), 0.05), LabPoint(_at(5), 1.0)]
        result = reconcile_biomass(points)
        interior = [result.exact_by_hour[hour_index(_at(h))] for h in range(1, 5)]
        assert all(0.05 < v < 1.0 for v in interior)
        assert interior == sorted(interior)

    def test_observed_value_wins_over_sample_in_same_hour(self):
        """A lab point at 02:40 owns hour 03:00 even if a sample lands there."""
        points = [LabPoint(_at(0), 0.1), LabPoint(_at(2 + 2 / 3), 2.0), LabPoint(_at(8), 2.4)]
        result = reconcile_biomass(points)
        assert result.exact_by_hour[hour_index(_at(3))] == 2.0

    def test_exact_map_follows_local_hours_in_half_hour_zone(self):
        """Lab points at 06:00 and 11:00 India time sit at :30 UTC."""
        points = [LabPoint(_at(0.5), 0.05), LabPoint(_at(5.5), 1.0)]
        result = reconcile_biomass(points, timezone="Asia/Kolkata")

        assert result.exact_at(_at(0.5)) == 0.05
        assert result.exact_at(_at(5.5)) == 1.0
        interior = [result.exact_at(_at(h + 0.5)) for h in range(1, 5)]
        assert all(0.05 < v < 1.0 for v in interior)
        assert interior == sorted(interior)
        assert len(result.exact_by_hour) == 6

    def test_single_point_has_no_spline(self):
        result = reconcile_biomass([LabPoint(_at(3), 0.7)])
        assert result.spline is None
        assert result.exact_by_hour == {hour_index(_at(3)): 0.7}
        assert result.last_point.biomass == 0.7

    def test_spline_failure_degrades(self, monkeypatch, caplog):
        def boom(self, points, method="pchip"):
            raise SplineConstructionFailure("singular system")

        monkeypatch.setattr(BiomassSpline, "__init__", boom)
        points = [LabPoint(_at(0), 0.1), LabPoint(_at(4), 1.0)]

        with caplog.at_level("WARNING"):
            result = reconcile_biomass(points)

        assert result.spline is None
        assert set(result.exact_by_hour.values()) == {0.1, 1.0}
        assert "continuing without spline" in caplog.text

    def test_plausibility_guard(self):
        points = [LabPoint(_at(0), 0.5), LabPoint(_at(4), 2.0)]
        result = BiomassReconciler(plausibility_factor=1.1).reconcile(points)
        assert result.is_plausible(2.2)
        assert not result.is_plausible(2.21)
        assert not result.is_plausible(-0.01)
        assert not result.is_plausible(float("nan"))

    def test_spline_value_outside_domain_is_none(self):
        points = [LabPoint(_at(0), 0.5), LabPoint(_at(4), 2.0)]
        result = reconcile_biomass(points)
        assert result.spline_value(_at(5)) is None
        assert result.spline_value(_at(2)) == pytest.approx(1.25)

    def test_from_config(self, make_config):
        config = make_config(SPLINE_METHOD="Natural", PLAUSIBILITY_FACTOR=1.5, DENSIFY_STEP=0.1)
        reconciler = BiomassReconciler.from_config(config)
        assert reconciler.spline_method == "natural"
        assert reconciler.plausibility_factor == 1.5
        assert reconciler.densify_step == 0.1
        assert reconciler.timezone == "UTC"

    def test_domain_and_max(self):
        points = [LabPoint(_at(0), 0.5), LabPoint(_at(3), 2.5), LabPoint(_at(6), 2.0)]
        result = reconcile_biomass(points)
        assert result.domain == (_at(0), _at(6))
        assert result.max_observed == 2.5
        assert np.isfinite(list(result.exact_by_hour.values())).all()
