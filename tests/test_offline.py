"""Tests for offline module."""
import pytest

from garageengine.definition import OfflineConfig
from garageengine.offline import estimate_offline_progress


def test_one_hour_estimate():
    progress = estimate_offline_progress(3_600_000, 10)
    assert progress.time_away_ms == 3_600_000
    assert progress.cars_repaired == 120
    assert progress.earnings == 12_000
    assert progress.xp == 1800
    assert not progress.is_empty


def test_elapsed_is_capped():
    progress = estimate_offline_progress(20 * 3_600_000, 1)
    assert progress.time_away_ms == pytest.approx(8 * 3_600_000)
    assert progress.cars_repaired == 96  # 14400 points / 150


def test_below_minimum_is_empty():
    assert estimate_offline_progress(59_999, 100).is_empty
    assert estimate_offline_progress(60_000, 100).cars_repaired > 0


def test_no_workers_is_empty():
    progress = estimate_offline_progress(3_600_000, 0)
    assert progress.is_empty
    assert progress.earnings == 0


def test_multipliers():
    progress = estimate_offline_progress(
        3_600_000, 10, car_value_multiplier=1.5, income_multiplier=2.0, xp_multiplier=1.5
    )
    assert progress.earnings == 36_000
    assert progress.xp == 2700


def test_custom_config():
    cfg = OfflineConfig(efficiency=1.0, average_car_value=10, average_repair_cost=100)
    progress = estimate_offline_progress(100_000, 10, config=cfg)
    assert progress.cars_repaired == 10
    assert progress.earnings == 100
