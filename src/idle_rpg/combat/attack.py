from __future__ import annotations

import logging

from .damage import DamageCalculator
from .events import (
    CombatEvent,
    EventSink,
    attack_event,
    block_event,
    critical_event,
    deflect_event,
    dodge_event,
)
from .hooks import AttackBonusRegistry, HookContext, HookName, HookRegistry
from .interfaces import CharacterStore
from .mitigation import MitigationRoller
from .models import AttackOutcome, Combatant
from .rewards import RewardDistributor

logger = logging.getLogger(__name__)


def outcome_event(outcome: AttackOutcome, attacker: Combatant, defender: Combatant) -> CombatEvent | None:
    """Pick the one event that describes an outcome.

    Deflect beats block, block beats dodge, dodge beats critical. A plain
    attack is only worth an event when it did damage.
    """
    source, target, damage = attacker.label, defender.label, outcome.damage
    if outcome.deflected:
        return deflect_event(source, target, damage)
    if outcome.blocked:
        return block_event(source, target, damage)
    if outcome.dodged:
        return dodge_event(source, target, damage)
    if outcome.critical:
        return critical_event(source, target, damage)
    if damage > 0:
        return attack_event(source, target, damage)
    return None


class AttackResolver:
    """Resolve one attack from ``attacker`` against ``defender``.

    Rolls damage, asks the attack-bonus strategy for chance adjustments, rolls
    mitigation, publishes the outcome event and hands out experience. Stat
    subtraction is left to the scheduler.
    """

    def __init__(
        self,
        store: CharacterStore,
        damage: DamageCalculator,
        mitigation: MitigationRoller,
        rewards: RewardDistributor,
        hooks: HookRegistry,
        bonuses: AttackBonusRegistry,
        sink: EventSink,
    ) -> None:
        self.store = store
        self.damage = damage
        self.mitigation = mitigation
        self.rewards = rewards
        self.hooks = hooks
        self.bonuses = bonuses
        self.sink = sink

    def resolve(self, attacker: Combatant, defender: Combatant) -> AttackOutcome:
        active = self.store.determine_attack(attacker)
        initial = self.damage.calculate(active.attack, attacker)
        bonuses = self.bonuses.bonuses_for(active, initial, attacker, defender)
        pending = initial + bonuses.flat

        outcome = self.mitigation.roll(pending, bonuses, active.attack, attacker, defender)

        event = outcome_event(outcome, attacker, defender)
        if event is not None:
            self.sink.emit(event)

        if self.store.is_player(attacker):
            self.rewards.award_for_attack(attacker, defender)
        else:
            self.hooks.dispatch(
                HookName.WHEN_HIT,
                HookContext(
                    damage=initial,
                    attack=active.attack,
                    skill=active.skill,
                    attacker=attacker,
                    defender=defender,
                ),
            )
            self.rewards.award_for_being_hit(outcome, defender, attacker)
        return outcome

    def attack(self, attacker: Combatant, defender: Combatant) -> float:
        """Resolve an attack and return only the damage dealt."""
        return self.resolve(attacker, defender).damage
