import pytest

from conftest import ScriptedRNG, make_combatant

from idle_rpg.character.store import InMemoryCharacterStore
from idle_rpg.combat.hooks import HookName, HookRegistry
from idle_rpg.combat.mitigation import MitigationChances, MitigationRoller
from idle_rpg.combat.models import AttackBonuses, SecondaryBonus
from idle_rpg.core.rng import RNG


def chances(crit=-1, block=-1, deflect=-1, dodge=-1):
    return {"critical_chance": crit, "block": block, "deflect": deflect, "dodge": dodge}


def setup(attacker_secondary, defender_secondary, rng=None, hooks=None, critical_damage=2.0):
    attacker = make_combatant("Hero", secondary=attacker_secondary, critical_damage=critical_damage, is_player=True)
    defender = make_combatant("Goblin", secondary=defender_secondary)
    hooks = hooks or HookRegistry()
    roller = MitigationRoller(InMemoryCharacterStore(), hooks, rng or RNG(7))
    return roller, attacker, defender, hooks


def test_plain_hit_keeps_damage():
    roller, a, d, _ = setup(chances(), chances())
    out = roller.roll(42.0, None, a.job.attack, a, d)
    assert out.damage == pytest.approx(42.0)
    assert not (out.critical or out.blocked or out.dodged or out.deflected)


def test_critical_multiplies_damage():
    roller, a, d, _ = setup(chances(crit=100), chances(), critical_damage=2.5)
    out = roller.roll(10.0, None, a.job.attack, a, d)
    assert out.critical is True
    assert out.damage == pytest.approx(25.0)


def test_on_critical_hook_replaces_multiplier():
    hooks = HookRegistry()
    hooks.register(HookName.ON_CRITICAL, lambda ctx: ctx.damage + 1)
    roller, a, d, _ = setup(chances(crit=100), chances(), hooks=hooks)
    out = roller.roll(10.0, None, a.job.attack, a, d)
    assert out.damage == pytest.approx(11.0)


def test_forced_block_zeroes_damage_even_on_critical():
    # Crit roll 0 (triggers), block chance 100.
    roller, a, d, _ = setup(chances(crit=50), chances(block=100), rng=ScriptedRNG([0.0, 0.99, 0.99, 0.99]))
    out = roller.roll(100.0, None, a.job.attack, a, d)
    assert out.blocked is True
    assert out.critical is True
    assert out.damage == 0


def test_forced_dodge_zeroes_damage_and_reports_pre_zero_damage():
    seen = []
    hooks = HookRegistry()
    hooks.register(HookName.ON_DODGE, lambda ctx: seen.append(ctx.damage))
    roller, a, d, _ = setup(chances(), chances(dodge=100), hooks=hooks)
    out = roller.roll(37.5, None, a.job.attack, a, d)
    assert out.dodged is True
    assert out.damage == 0
    assert seen == [37.5]


def test_deflect_alone_is_flag_only():
    roller, a, d, _ = setup(chances(), chances(deflect=100))
    out = roller.roll(20.0, None, a.job.attack, a, d)
    assert out.deflected is True
    assert out.damage == pytest.approx(20.0)


def test_deflect_under_block_adds_nothing():
    roller, a, d, _ = setup(chances(), chances(block=100, deflect=100))
    out = roller.roll(20.0, None, a.job.attack, a, d)
    assert out.blocked and out.deflected
    assert out.damage == 0


def test_on_attack_hook_has_final_word_over_block():
    hooks = HookRegistry()
    hooks.register(HookName.ON_ATTACK, lambda ctx: 5.0)
    roller, a, d, _ = setup(chances(), chances(block=100), hooks=hooks)
    out = roller.roll(20.0, None, a.job.attack, a, d)
    assert out.blocked is True
    assert out.damage == pytest.approx(5.0)


def test_on_attack_hook_returning_none_keeps_damage():
    calls = []
    hooks = HookRegistry()
    hooks.register(HookName.ON_ATTACK, lambda ctx: calls.append(ctx.damage))
    roller, a, d, _ = setup(chances(), chances(), hooks=hooks)
    out = roller.roll(20.0, None, a.job.attack, a, d)
    assert calls == [20.0]
    assert out.damage == pytest.approx(20.0)


def test_rolls_are_independent_draws_in_order():
    # crit 0.10 -> 10 <= 15 ; block 0.50 -> 50 > 40 ; deflect 0.20 -> 20 <= 20 ; dodge 0.90 -> 90 > 30
    rng = ScriptedRNG([0.10, 0.50, 0.20, 0.90])
    roller, a, d, _ = setup(chances(crit=15), chances(block=40, deflect=20, dodge=30), rng=rng)
    out = roller.roll(10.0, None, a.job.attack, a, d)
    assert rng.calls == 4
    assert (out.critical, out.blocked, out.deflected, out.dodged) == (True, False, True, False)


def test_bonuses_adjust_matching_chances_and_ignore_unknown_names():
    roller, a, d, _ = setup(chances(crit=5), chances(block=10, deflect=0, dodge=1))
    bonuses = AttackBonuses(
        secondary_attributes=(
            SecondaryBonus("critical_chance", 20),
            SecondaryBonus("block_chance", -10),
            SecondaryBonus("dodge_chance", 4),
            SecondaryBonus("haste", 99),
        )
    )
    c = roller.chances(a, d, bonuses)
    assert c == MitigationChances(critical=25, block=0, deflect=0, dodge=5)


def test_bonus_can_force_a_critical():
    rng = ScriptedRNG([0.30, 0.99, 0.99, 0.99])
    roller, a, d, _ = setup(chances(crit=0), chances(), rng=rng)
    bonuses = AttackBonuses(secondary_attributes=(SecondaryBonus("critical_chance", 50),))
    out = roller.roll(10.0, bonuses, a.job.attack, a, d)
    assert out.critical is True
    assert out.damage == pytest.approx(20.0)


def test_secondary_bonuses_from_equipment_count_towards_chance():
    roller, a, d, _ = setup(chances(), chances(block=60))
    d.secondary_bonuses["block"] = 40
    out = roller.roll(10.0, None, a.job.attack, a, d)
    assert out.blocked is True


class PercentOnly:
    """Random source whose rolls can only come from ``percent``."""

    def __init__(self, rolls):
        self.rolls = list(rolls)

    def random(self):
        raise AssertionError("mitigation must draw through percent()")

    def uniform(self, a, b):
        raise AssertionError("mitigation must draw through percent()")

    def percent(self):
        return self.rolls.pop(0)


def test_rolls_are_drawn_as_percentages():
    rng = PercentOnly([99.0, 40.0, 99.0, 99.0])
    roller, a, d, _ = setup(chances(), chances(block=40), rng=rng)
    out = roller.roll(10.0, None, a.job.attack, a, d)
    assert rng.rolls == []
    assert out.blocked is True
    assert out.damage == 0
