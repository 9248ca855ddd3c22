import sys
from pathlib import Path
from typing import Iterable, List, Optional

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from idle_rpg.adventure import Adventure  # noqa: E402
from idle_rpg.character.store import InMemoryCharacterStore  # noqa: E402
from idle_rpg.combat.models import (  # noqa: E402
    AttackProfile,
    Attribute,
    Combatant,
    DamageModifier,
    Job,
    Reward,
    SecondaryAttributeDefinition,
    StatValue,
)


class ScriptedRNG:
    """Random source replaying fixed draws in [0, 1).

    ``uniform`` consumes one draw, like random.Random.uniform. Once the script
    runs out, ``fallback`` is returned forever.
    """

    def __init__(self, draws: Iterable[float] = (), fallback: float = 0.5) -> None:
        self.draws: List[float] = list(draws)
        self.fallback = fallback
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if self.draws:
            return self.draws.pop(0)
        return self.fallback

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self.random()

    def percent(self) -> float:
        return self.random() * 100

    def choice(self, seq):
        return seq[0]


def make_combatant(
    label: str,
    *,
    health: float = 100,
    attributes: Optional[dict] = None,
    modifiers: Optional[list] = None,
    speed: int = 2,
    variance: float = 0.0,
    critical_damage: float = 2.0,
    secondary: Optional[dict] = None,
    reward_exp: Optional[float] = 80,
    is_player: bool = False,
    bonus: Optional[str] = None,
) -> Combatant:
    attributes = attributes if attributes is not None else {"str": 10}
    modifiers = modifiers if modifiers is not None else [("str", 1.0)]
    return Combatant(
        label=label,
        stats={"health": StatValue(current=health, max=health)},
        job=Job(
            name=f"{label} job",
            attack=AttackProfile(
                speed=speed,
                dmg_modifiers=[DamageModifier(n, w) for n, w in modifiers],
                variance=variance,
                critical_damage=critical_damage,
                bonus=bonus,
            ),
        ),
        reward=Reward(exp=reward_exp) if reward_exp is not None else None,
        attributes={n: Attribute(level=lvl) for n, lvl in attributes.items()},
        secondary_attributes=dict(secondary or {}),
        is_player=is_player,
    )


# Chances low enough that no mitigation roll can trigger.
NO_MITIGATION = {"critical_chance": -1, "block": -1, "deflect": -1, "dodge": -1}

SECONDARY_DEFINITIONS = {
    "block": SecondaryAttributeDefinition(
        "block", (DamageModifier("str", 0.6), DamageModifier("con", 0.3), DamageModifier("lck", 0.1))
    ),
    "deflect": SecondaryAttributeDefinition(
        "deflect", (DamageModifier("dex", 0.5), DamageModifier("str", 0.4), DamageModifier("lck", 0.1))
    ),
    "dodge": SecondaryAttributeDefinition(
        "dodge", (DamageModifier("dex", 0.7), DamageModifier("agi", 0.2), DamageModifier("lck", 0.1))
    ),
}


@pytest.fixture
def player() -> Combatant:
    return make_combatant(
        "Hero",
        health=100,
        attributes={"str": 10, "dex": 4},
        modifiers=[("str", 1.0), ("dex", 0.5)],
        speed=2,
        secondary=NO_MITIGATION,
        reward_exp=None,
        is_player=True,
    )


@pytest.fixture
def enemy() -> Combatant:
    return make_combatant("Goblin", health=30, attributes={"str": 5}, speed=3, secondary=NO_MITIGATION, reward_exp=80)


@pytest.fixture
def store(player: Combatant) -> InMemoryCharacterStore:
    return InMemoryCharacterStore([player], secondary_definitions=SECONDARY_DEFINITIONS)


@pytest.fixture
def adventure(enemy: Combatant) -> Adventure:
    return Adventure("test", [enemy], rng=ScriptedRNG())
