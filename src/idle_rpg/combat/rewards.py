from __future__ import annotations

import logging
from typing import Dict, Optional

from ..core.errors import CombatConfigurationError
from ..settings import RewardSettings
from .hooks import HookContext, HookName, HookRegistry
from .interfaces import CharacterStore
from .models import BLOCK, DEFLECT, DODGE, AttackOutcome, Combatant

logger = logging.getLogger(__name__)


def reward_exp(combatant: Combatant) -> float:
    if combatant.reward is None:
        raise CombatConfigurationError(f"{combatant.label} has no reward descriptor")
    return combatant.reward.exp


class RewardDistributor:
    """Turn attack outcomes and kills into player experience.

    Every method returns the experience it granted, keyed by attribute name
    (or ``"job"``), so callers and tests can inspect a single award.
    """

    def __init__(self, store: CharacterStore, hooks: HookRegistry, settings: Optional[RewardSettings] = None) -> None:
        self.store = store
        self.hooks = hooks
        self.settings = settings or RewardSettings()

    def award_for_attack(self, player: Combatant, defender: Combatant) -> Dict[str, float]:
        """Reward every attribute of the player's attack, whatever the outcome."""
        exp = reward_exp(defender)
        job = self.store.get_job(player)
        awarded: Dict[str, float] = {}
        for mod in job.attack.dmg_modifiers:
            amount = (mod.modifier * exp) / self.settings.attacker_exp_divisor
            self.store.add_attribute_exp(mod.name, amount, player)
            awarded[mod.name] = awarded.get(mod.name, 0.0) + amount
        logger.debug("%s attack exp: %s", player.label, awarded)
        return awarded

    def award_for_being_hit(self, outcome: AttackOutcome, player: Combatant, attacker: Combatant) -> Dict[str, float]:
        """Reward the player for taking, or avoiding, a hit from ``attacker``.

        Deflect takes precedence over block, block over dodge. A plain hit
        rewards the configured hit attributes only.
        """
        if outcome.deflected:
            return self._derive_from_secondary_attribute(DEFLECT, player, attacker)
        if outcome.blocked:
            return self._derive_from_secondary_attribute(BLOCK, player, attacker)
        if outcome.dodged:
            return self._derive_from_secondary_attribute(DODGE, player, attacker)

        exp = reward_exp(attacker)
        awarded: Dict[str, float] = {}
        for attr in self.settings.hit_rewards:
            amount = attr.modifier * exp
            self.store.add_attribute_exp(attr.name, amount, player)
            awarded[attr.name] = awarded.get(attr.name, 0.0) + amount
        return awarded

    def _derive_from_secondary_attribute(self, secondary: str, player: Combatant, attacker: Combatant) -> Dict[str, float]:
        exp = reward_exp(attacker)
        awarded: Dict[str, float] = {}
        for attr in self.store.secondary_attribute_sources(secondary):
            if attr.name == self.settings.excluded_attribute:
                continue
            amount = (attr.modifier * exp) / self.settings.mitigation_exp_divisor
            self.store.add_attribute_exp(attr.name, amount, player)
            awarded[attr.name] = awarded.get(attr.name, 0.0) + amount
        logger.debug("%s %s exp: %s", player.label, secondary, awarded)
        return awarded

    def award_for_kill(self, player: Combatant, enemy: Combatant) -> Dict[str, float]:
        """Run ``onKill`` skills and grant the enemy's full reward to the player's job."""
        exp = reward_exp(enemy)
        self.hooks.dispatch(HookName.ON_KILL, HookContext(attacker=player, defender=enemy, enemy=enemy))
        self.store.add_job_exp(exp, player)
        logger.info("%s gains %s job exp for defeating %s", player.label, exp, enemy.label)
        return {"job": exp}
