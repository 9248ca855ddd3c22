import math

import pytest

from conftest import ScriptedRNG, make_combatant

from idle_rpg.character.store import InMemoryCharacterStore
from idle_rpg.combat.damage import DamageCalculator
from idle_rpg.core.errors import CombatConfigurationError
from idle_rpg.core.rng import RNG


def make_calc(rng=None):
    return DamageCalculator(InMemoryCharacterStore(), rng or RNG(1337))


def test_base_damage_sums_attribute_level_times_weight():
    hero = make_combatant("Hero", attributes={"str": 10, "dex": 4}, modifiers=[("str", 1.0), ("dex", 0.5)])
    calc = make_calc()
    # 10 * 1.0 + 4 * 0.5
    assert calc.base_damage(hero.job.attack, hero) == pytest.approx(12.0)


def test_zero_variance_rolls_exact_base():
    hero = make_combatant("Hero", attributes={"str": 7}, variance=0.0)
    calc = make_calc()
    assert calc.calculate(hero.job.attack, hero) == pytest.approx(7.0)


def test_variance_factor_spans_both_ends():
    hero = make_combatant("Hero", attributes={"str": 10}, variance=0.2)
    low = make_calc(ScriptedRNG([0.0])).roll(hero.job.attack, hero)
    high = make_calc(ScriptedRNG([1.0])).roll(hero.job.attack, hero)
    assert low.multiplier == pytest.approx(0.8)
    assert low.final == pytest.approx(8.0)
    assert high.multiplier == pytest.approx(1.2)
    assert high.final == pytest.approx(12.0)


@pytest.mark.parametrize("variance", [0.0, 0.1, 0.25, 0.5, 1.0])
def test_damage_range_bounds_rolled_damage(variance):
    hero = make_combatant("Hero", attributes={"str": 13, "dex": 3}, modifiers=[("str", 1.0), ("dex", 0.7)], variance=variance)
    calc = make_calc(RNG(2024))
    base = 13 + 3 * 0.7

    rng_range = calc.damage_range(hero.job.attack, hero)
    assert rng_range.min == math.floor(base * (1 - variance))
    assert rng_range.max == math.ceil(base * (1 + variance))

    for _ in range(200):
        dmg = calc.calculate(hero.job.attack, hero)
        assert rng_range.min <= dmg <= rng_range.max


def test_damage_range_does_not_touch_rng():
    hero = make_combatant("Hero", variance=0.3)
    rng = ScriptedRNG()
    calc = make_calc(rng)
    calc.damage_range(hero.job.attack, hero)
    calc.damage_range(hero.job.attack, hero)
    assert rng.calls == 0


def test_missing_attribute_fails_loudly():
    hero = make_combatant("Hero", attributes={"str": 5}, modifiers=[("int", 1.0)])
    with pytest.raises(CombatConfigurationError):
        make_calc().calculate(hero.job.attack, hero)


def test_invalid_variance_is_rejected():
    with pytest.raises(CombatConfigurationError):
        make_combatant("Hero", variance=1.5)


def test_non_positive_speed_is_rejected():
    with pytest.raises(CombatConfigurationError):
        make_combatant("Hero", speed=0)
