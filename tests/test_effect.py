"""Tests for effect module."""
import pytest

from garageengine.effect import DerivedStats, Effect, EffectDef, EffectType


def test_click_power_adds_to_base():
    stats = DerivedStats()
    Effect.click_power(5).apply(stats)
    assert stats.base_click_power == 6
    assert stats.click_power == 6


def test_click_multiplier_scales_click_power():
    stats = DerivedStats(base_click_power=10)
    Effect.click_multiplier(0.2).apply(stats)
    assert stats.click_power == pytest.approx(12.0)


def test_car_value_bonus():
    stats = DerivedStats()
    Effect.car_value(0.1).apply(stats)
    Effect.car_value(0.1).apply(stats)
    assert stats.car_value_multiplier == pytest.approx(1.2)


def test_additive_multipliers():
    stats = DerivedStats()
    Effect.income(0.05).apply(stats)
    Effect.auto_repair(0.18).apply(stats)
    Effect.xp(0.1).apply(stats)
    Effect.combo_max(0.2).apply(stats)
    Effect.combo_gain(0.02).apply(stats)
    assert stats.income_multiplier == pytest.approx(1.05)
    assert stats.auto_repair_multiplier == pytest.approx(1.18)
    assert stats.xp_multiplier == pytest.approx(1.1)
    assert stats.combo_max_bonus == pytest.approx(0.2)
    assert stats.combo_gain_bonus == pytest.approx(0.02)


def test_spawn_reduction_compounds_and_respects_floor():
    stats = DerivedStats()
    Effect.spawn_reduction(0.08).apply(stats, spawn_floor=0.4)
    assert stats.queue_spawn_multiplier == pytest.approx(0.92)
    for _ in range(20):
        Effect.spawn_reduction(0.08).apply(stats, spawn_floor=0.4)
    assert stats.queue_spawn_multiplier == pytest.approx(0.4)


def test_every_effect_type_has_a_factory():
    produced = {
        Effect.click_power(1).type,
        Effect.car_value(1).type,
        Effect.income(1).type,
        Effect.click_multiplier(1).type,
        Effect.auto_repair(1).type,
        Effect.combo_max(1).type,
        Effect.combo_gain(1).type,
        Effect.spawn_reduction(0.1).type,
        Effect.xp(1).type,
    }
    assert produced == set(EffectType)


def test_effect_def_is_frozen():
    eff = EffectDef(EffectType.CLICK_POWER, 1)
    with pytest.raises(AttributeError):
        eff.value = 2
