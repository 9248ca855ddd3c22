from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from ..core.rng import RandomSource
from .interfaces import CharacterStore
from .models import AttackProfile, Combatant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DamageBreakdown:
    """Details of a computed damage roll.

    Attributes:
        base: Sum of attribute level x weight over the attack's modifiers.
        multiplier: The variance factor drawn from [1 - variance, 1 + variance].
        final: base * multiplier.
    """

    base: float
    multiplier: float
    final: float


@dataclass(frozen=True)
class DamageRange:
    min: int
    max: int


class DamageCalculator:
    """Compute attack damage from attribute levels and damage-modifier weights.

    The formula is:
      base = sum(level(attr) * weight for attr, weight in attack.dmg_modifiers)
      multiplier ~ Uniform(1 - variance, 1 + variance)
      damage = base * multiplier

    No rounding or floor is applied to rolled damage; the display range is the
    only place where values are rounded outward.
    """

    def __init__(self, store: CharacterStore, rng: RandomSource) -> None:
        self.store = store
        self.rng = rng

    def base_damage(self, attack: AttackProfile, attacker: Combatant) -> float:
        base = 0.0
        for mod in attack.dmg_modifiers:
            base += self.store.get_attribute_level(mod.name, attacker) * mod.modifier
        return base

    def roll(self, attack: AttackProfile, attacker: Combatant) -> DamageBreakdown:
        base = self.base_damage(attack, attacker)
        multiplier = self.rng.uniform(1.0 - attack.variance, 1.0 + attack.variance)
        final = base * multiplier
        logger.debug(
            "%s damage roll: base=%.3f multiplier=%.4f final=%.3f",
            attacker.label,
            base,
            multiplier,
            final,
        )
        return DamageBreakdown(base=base, multiplier=multiplier, final=final)

    def calculate(self, attack: AttackProfile, attacker: Combatant) -> float:
        return self.roll(attack, attacker).final

    def damage_range(self, attack: AttackProfile, attacker: Combatant) -> DamageRange:
        """Return the min/max damage an attack can roll, for display.

        Never draws from the random source.
        """
        base = self.base_damage(attack, attacker)
        return DamageRange(
            min=math.floor(base * (1.0 - attack.variance)),
            max=math.ceil(base * (1.0 + attack.variance)),
        )
