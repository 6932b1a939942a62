"""Tests for run productivity figures."""

import pandas as pd
import pytest

from pbropt.reconcile.models import BiomassSource, CanonicalHourRecord
from pbropt.reconcile.productivity import summarize_productivity

pytestmark = pytest.mark.unit


def _record(hours, biomass):
    return CanonicalHourRecord(
        hour=pd.Timestamp("2024-06-01", tz="UTC") + pd.Timedelta(hours=hours),
        biomass=biomass,
        irradiance=0.0,
        temperature=20.0,
        nutrient_dose=0.0,
        source=BiomassSource.EXACT,
    )


class TestProductivity:

    def test_zhaw_one_day(self):
        summary = summarize_productivity([_record(0, 0.5), _record(24, 1.4)], "zhaw")
        assert summary.duration_days == 1.0
        assert summary.volumetric_productivity == pytest.approx(0.9)
        # 0.9 g/L * 200 L / 18 m2
        assert summary.areal_productivity == pytest.approx(10.0)

    def test_agroscope_geometry(self):
        summary = summarize_productivity([_record(0, 0.0), _record(48, 2.84)], "agroscope")
        assert summary.volumetric_productivity == pytest.approx(1.42)
        assert summary.areal_productivity == pytest.approx(2.84 * 235.0 / (2.84 * 2))

    def test_empty(self):
        summary = summarize_productivity([], "zhaw")
        assert summary.duration_days == 0.0
        assert summary.areal_productivity == 0.0

    def test_single_record(self):
        summary = summarize_productivity([_record(0, 1.0)], "zhaw")
        assert summary.first_biomass == summary.last_biomass == 1.0
        assert summary.volumetric_productivity == 0.0
