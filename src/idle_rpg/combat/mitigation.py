from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..core.rng import RandomSource
from .hooks import HookContext, HookName, HookRegistry
from .interfaces import CharacterStore
from .models import (
    BLOCK,
    CRITICAL_CHANCE,
    DEFLECT,
    DODGE,
    AttackBonuses,
    AttackOutcome,
    AttackProfile,
    Combatant,
)

logger = logging.getLogger(__name__)

# Attack-bonus names and the chance each one adjusts.
BONUS_TARGETS = {
    "critical_chance": "critical",
    "block_chance": "block",
    "deflect_chance": "deflect",
    "dodge_chance": "dodge",
}


@dataclass
class MitigationChances:
    """Percent chances (0-100, possibly outside after bonuses) for one attack."""

    critical: float = 0.0
    block: float = 0.0
    deflect: float = 0.0
    dodge: float = 0.0

    def apply_bonuses(self, bonuses: Optional[AttackBonuses]) -> None:
        if bonuses is None:
            return
        for sa in bonuses.secondary_attributes:
            target = BONUS_TARGETS.get(sa.name)
            if target is None:
                continue
            setattr(self, target, getattr(self, target) + sa.value)


class MitigationRoller:
    """Roll critical, block, deflect and dodge for one attack and resolve them.

    The four rolls are independent draws in [0, 100); an effect triggers when
    its draw is <= its chance. Resolution order is critical, block, dodge,
    then the ``onAttack`` hook, whose override has the last word.

    Deflect is recorded as a flag only. Under a block it adds nothing on top of
    the block; on its own it does not change damage either.
    """

    def __init__(self, store: CharacterStore, hooks: HookRegistry, rng: RandomSource) -> None:
        self.store = store
        self.hooks = hooks
        self.rng = rng

    def chances(self, attacker: Combatant, defender: Combatant, bonuses: Optional[AttackBonuses] = None) -> MitigationChances:
        chances = MitigationChances(
            critical=self.store.get_secondary_attribute(CRITICAL_CHANCE, attacker),
            block=self.store.get_secondary_attribute(BLOCK, defender),
            deflect=self.store.get_secondary_attribute(DEFLECT, defender),
            dodge=self.store.get_secondary_attribute(DODGE, defender),
        )
        chances.apply_bonuses(bonuses)
        return chances

    def _draw(self) -> float:
        return self.rng.percent()

    def roll(
        self,
        damage: float,
        bonuses: Optional[AttackBonuses],
        attack: AttackProfile,
        attacker: Combatant,
        defender: Combatant,
    ) -> AttackOutcome:
        chances = self.chances(attacker, defender, bonuses)

        crit_roll = self._draw()
        block_roll = self._draw()
        deflect_roll = self._draw()
        dodge_roll = self._draw()

        is_critical = crit_roll <= chances.critical
        is_blocked = block_roll <= chances.block
        is_deflected = deflect_roll <= chances.deflect
        is_dodged = dodge_roll <= chances.dodge
        logger.debug(
            "%s -> %s rolls: crit %.2f/%.2f block %.2f/%.2f deflect %.2f/%.2f dodge %.2f/%.2f",
            attacker.label,
            defender.label,
            crit_roll,
            chances.critical,
            block_roll,
            chances.block,
            deflect_roll,
            chances.deflect,
            dodge_roll,
            chances.dodge,
        )

        final = damage
        if is_critical:
            override = self.hooks.dispatch(HookName.ON_CRITICAL, HookContext(damage=final, attack=attack))
            if override is not None:
                final = override
            else:
                final = final * attack.critical_damage

        if is_blocked:
            final = 0.0

        if is_dodged:
            self.hooks.dispatch(
                HookName.ON_DODGE,
                HookContext(damage=final, attack=attack, attacker=attacker, defender=defender),
            )
            final = 0.0

        override = self.hooks.dispatch(
            HookName.ON_ATTACK,
            HookContext(damage=final, attack=attack, attacker=attacker, defender=defender),
        )
        if override is not None:
            final = override

        return AttackOutcome(
            damage=max(0.0, final),
            critical=is_critical,
            blocked=is_blocked,
            dodged=is_dodged,
            deflected=is_deflected,
        )
