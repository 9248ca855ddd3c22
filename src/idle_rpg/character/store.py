from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..combat.models import (
    ActiveAttack,
    Attribute,
    Combatant,
    DamageModifier,
    Job,
    SecondaryAttributeDefinition,
    StatValue,
)
from ..core.errors import CombatConfigurationError

logger = logging.getLogger(__name__)


class InMemoryCharacterStore:
    """Character store keeping combatants and their progress in memory.

    Lookups of missing stats, attributes or jobs raise
    CombatConfigurationError instead of falling back to defaults.
    Experience for an attribute the combatant does not have yet creates that
    attribute at level 0.
    """

    def __init__(
        self,
        combatants: Iterable[Combatant] = (),
        secondary_definitions: Optional[Mapping[str, SecondaryAttributeDefinition]] = None,
    ) -> None:
        self._combatants: Dict[str, Combatant] = {}
        self.secondary_definitions: Dict[str, SecondaryAttributeDefinition] = dict(secondary_definitions or {})
        for c in combatants:
            self.add(c)

    def add(self, combatant: Combatant) -> Combatant:
        self._combatants[combatant.label] = combatant
        return combatant

    def get(self, label: str) -> Combatant:
        try:
            return self._combatants[label]
        except KeyError:
            raise KeyError(f"Unknown combatant: {label}") from None

    @property
    def player(self) -> Combatant:
        for c in self._combatants.values():
            if c.is_player:
                return c
        raise CombatConfigurationError("No player combatant registered")

    def combatants(self) -> List[Combatant]:
        return list(self._combatants.values())

    # Stats

    def get_stat(self, name: str, combatant: Combatant) -> StatValue:
        try:
            return combatant.stats[name]
        except KeyError:
            raise CombatConfigurationError(f"{combatant.label} has no '{name}' stat") from None

    def set_stat_current(self, name: str, value: float, combatant: Combatant) -> None:
        self.get_stat(name, combatant).current = value

    def subtract_stat_current(self, name: str, amount: float, combatant: Combatant) -> None:
        stat = self.get_stat(name, combatant)
        stat.current -= amount
        logger.debug("%s %s -%.3f -> %.3f/%s", combatant.label, name, amount, stat.current, stat.max)

    # Attributes

    def get_attribute_level(self, name: str, combatant: Combatant) -> float:
        try:
            return combatant.attributes[name].level
        except KeyError:
            raise CombatConfigurationError(f"{combatant.label} has no '{name}' attribute") from None

    def add_attribute_exp(self, name: str, amount: float, combatant: Combatant) -> None:
        attr = combatant.attributes.setdefault(name, Attribute(level=0.0))
        attr.exp += amount

    def get_secondary_attribute(self, name: str, combatant: Combatant) -> float:
        base = combatant.secondary_attributes.get(name, 0.0)
        return base + combatant.secondary_bonuses.get(name, 0.0)

    def secondary_attribute_sources(self, name: str) -> Sequence[DamageModifier]:
        definition = self.secondary_definitions.get(name)
        return definition.attributes if definition is not None else ()

    # Jobs

    def get_job(self, combatant: Combatant) -> Job:
        if combatant.job is None:
            raise CombatConfigurationError(f"{combatant.label} has no job/attack profile")
        return combatant.job

    def determine_attack(self, combatant: Combatant) -> ActiveAttack:
        job = self.get_job(combatant)
        skill = combatant.skills[0] if combatant.skills else None
        return ActiveAttack(attack=job.attack, skill=skill)

    def add_job_exp(self, amount: float, combatant: Combatant) -> None:
        self.get_job(combatant).exp += amount

    # Player

    def is_player(self, combatant: Combatant) -> bool:
        return combatant.is_player

    def set_action(self, action: str, combatant: Combatant) -> None:
        logger.debug("%s action: %s -> %s", combatant.label, combatant.action, action)
        combatant.action = action
