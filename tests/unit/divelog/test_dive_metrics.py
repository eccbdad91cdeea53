"""Tests for derived per-dive values."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from divelog.dive_metrics import (
    compute_dive_metrics,
    date_time_out,
    gas_used,
    is_altitude_dive,
    is_deep_dive,
    is_training_dive,
    sac_rate,
    surface_interval,
)
from divelog.reference_data import TankConfiguration
from tests.fixtures.fixtures import make_certification, make_dive, make_site

SIDEMOUNT = TankConfiguration(id="tc-sm", name="Sidemount")


class TestGasUsed:
    def test_sidemount_doubles_the_tank_volume(self):
        dive = make_dive(tank_configuration=SIDEMOUNT, tank_volume=11.2, pressure_in=210, pressure_out=65)
        assert gas_used(dive) == pytest.approx(3248.0)

    def test_single_tank_counts_one_cylinder(self):
        dive = make_dive(tank_volume=12.0, pressure_in=200, pressure_out=50)
        assert gas_used(dive) == pytest.approx(1800.0)

    def test_twinset_name_is_case_insensitive(self):
        dive = make_dive(
            tank_configuration=TankConfiguration(id="tc-tw", name="TWINSET"),
            tank_volume=7.0,
            pressure_in=200,
            pressure_out=100,
        )
        assert gas_used(dive) == pytest.approx(1400.0)

    @pytest.mark.parametrize(
        ("pressure_in", "pressure_out"),
        [(200, 200), (None, 50), (200, None), (None, None)],
    )
    def test_no_pressure_drop_means_no_gas_and_no_sac(self, pressure_in, pressure_out):
        dive = make_dive(pressure_in=pressure_in, pressure_out=pressure_out)
        assert gas_used(dive) == 0.0
        assert sac_rate(dive) == 0.0

    def test_unknown_tank_configuration_is_not_computable(self):
        dive = make_dive(tank_configuration=TankConfiguration(id="tc-x", name="Rebreather"))
        assert gas_used(dive) == 0.0


class TestSacRate:
    def test_worked_example(self):
        dive = make_dive(
            tank_configuration=SIDEMOUNT,
            tank_volume=11.2,
            pressure_in=210,
            pressure_out=65,
            avg_depth=12.0,
            bottom_time=timedelta(minutes=45),
        )
        assert sac_rate(dive) == pytest.approx(3248 / 45 / 2.2, abs=0.01)
        assert sac_rate(dive) == pytest.approx(32.81, abs=0.01)

    def test_missing_average_depth_gives_zero(self):
        dive = make_dive(avg_depth=None)
        assert gas_used(dive) > 0
        assert sac_rate(dive) == 0.0

    def test_zero_bottom_time_gives_zero(self):
        dive = make_dive(bottom_time=timedelta(0))
        assert sac_rate(dive) == 0.0


class TestFlags:
    @pytest.mark.parametrize(
        ("altitude", "max_depth", "expected"),
        [
            (300, 0.0, True),
            (150, 50.0, True),
            (150, 44.0, True),
            (150, 30.0, False),
            (0, 100.0, False),
            (90, 50.0, False),
        ],
    )
    def test_is_altitude_dive(self, altitude, max_depth, expected):
        dive = make_dive(dive_site=make_site(altitude=altitude), max_depth=max_depth)
        assert is_altitude_dive(dive) is expected

    def test_is_deep_dive_is_strictly_over_thirty_metres(self):
        assert is_deep_dive(make_dive(max_depth=30.0)) is False
        assert is_deep_dive(make_dive(max_depth=30.1)) is True

    def test_is_training_dive_when_certification_attached(self):
        assert is_training_dive(make_dive()) is False
        assert is_training_dive(make_dive(certification=make_certification())) is True

    def test_compute_dive_metrics_bundles_every_value(self):
        dive = make_dive(max_depth=32.0, certification=make_certification())
        metrics = compute_dive_metrics(dive)
        assert metrics.gas_used == gas_used(dive)
        assert metrics.sac_rate == sac_rate(dive)
        assert metrics.is_deep_dive is True
        assert metrics.is_training_dive is True
        assert metrics.is_altitude_dive is False


class TestTimes:
    def test_date_time_out_adds_bottom_time(self):
        dive = make_dive(date_time_in=datetime(2024, 1, 1, 10, 0, tzinfo=UTC), bottom_time=timedelta(minutes=50))
        assert date_time_out(dive) == datetime(2024, 1, 1, 10, 50, tzinfo=UTC)

    def test_surface_interval_runs_from_previous_exit(self):
        previous = make_dive(
            id="dive-0",
            date_time_in=datetime(2024, 1, 1, 9, 0, tzinfo=UTC),
            bottom_time=timedelta(minutes=45),
        )
        dive = make_dive(date_time_in=datetime(2024, 1, 1, 11, 0, tzinfo=UTC))
        assert surface_interval(previous, dive) == timedelta(minutes=75)

    def test_surface_interval_without_previous_dive(self):
        assert surface_interval(None, make_dive()) is None

    def test_overlapping_dives_have_no_surface_interval(self):
        previous = make_dive(date_time_in=datetime(2024, 1, 1, 9, 0, tzinfo=UTC), bottom_time=timedelta(minutes=90))
        dive = make_dive(date_time_in=datetime(2024, 1, 1, 10, 0, tzinfo=UTC))
        assert surface_interval(previous, dive) is None
