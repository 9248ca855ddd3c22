from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..adventure import Adventure
from ..character.store import InMemoryCharacterStore
from ..combat.hooks import AttackBonusRegistry, StaticAttackBonus
from ..combat.models import (
    HEALTH,
    SECONDARY_ATTRIBUTES,
    AttackProfile,
    Attribute,
    Combatant,
    DamageModifier,
    Job,
    Reward,
    SecondaryAttributeDefinition,
    Skill,
    StatValue,
)
from ..core.errors import RosterValidationError
from ..core.rng import RNG

logger = logging.getLogger(__name__)

BONUS_NAMES = ("critical_chance", "block_chance", "deflect_chance", "dodge_chance")


class ModifierModel(BaseModel):
    name: str = Field(..., description="Attribute name, e.g. 'str'")
    modifier: float = Field(..., description="Weight of the attribute")


class StatModel(BaseModel):
    max: float = Field(..., ge=0)
    current: Optional[float] = Field(default=None, description="Defaults to max")


class AttackModel(BaseModel):
    speed: int = Field(..., gt=0, description="Ticks between attacks")
    dmg_modifiers: List[ModifierModel] = Field(..., min_length=1)
    variance: float = Field(0.0, ge=0.0, le=1.0)
    critical_damage: float = Field(1.5, ge=0.0)
    bonus: Optional[str] = None


class JobModel(BaseModel):
    name: str
    attack: AttackModel


class SkillModel(BaseModel):
    name: str
    bonus: Optional[str] = None


class RewardModel(BaseModel):
    exp: float = Field(..., ge=0)


class CombatantModel(BaseModel):
    label: str
    stats: Dict[str, StatModel]
    attributes: Dict[str, float] = Field(default_factory=dict, description="Attribute levels")
    secondary_attributes: Dict[str, float] = Field(default_factory=dict)
    secondary_bonuses: Dict[str, float] = Field(default_factory=dict)
    job: JobModel
    skills: List[SkillModel] = Field(default_factory=list)
    reward: Optional[RewardModel] = None

    @field_validator("stats")
    @classmethod
    def require_health(cls, v: Dict[str, StatModel]) -> Dict[str, StatModel]:
        if HEALTH not in v:
            raise ValueError(f"a '{HEALTH}' stat is required")
        return v

    @field_validator("secondary_attributes", "secondary_bonuses")
    @classmethod
    def known_secondary_attributes(cls, v: Dict[str, float]) -> Dict[str, float]:
        unknown = sorted(set(v) - set(SECONDARY_ATTRIBUTES))
        if unknown:
            raise ValueError(f"unknown secondary attributes: {unknown}")
        return v

    @model_validator(mode="after")
    def attack_uses_known_attributes(self) -> "CombatantModel":
        missing = [m.name for m in self.job.attack.dmg_modifiers if m.name not in self.attributes]
        if missing:
            raise ValueError(f"attack uses attributes {missing} that {self.label} does not have")
        return self

    def build(self, is_player: bool = False) -> Combatant:
        a = self.job.attack
        return Combatant(
            label=self.label,
            stats={
                name: StatValue(current=s.max if s.current is None else s.current, max=s.max)
                for name, s in self.stats.items()
            },
            job=Job(
                name=self.job.name,
                attack=AttackProfile(
                    speed=a.speed,
                    dmg_modifiers=[DamageModifier(m.name, m.modifier) for m in a.dmg_modifiers],
                    variance=a.variance,
                    critical_damage=a.critical_damage,
                    bonus=a.bonus,
                ),
            ),
            reward=Reward(exp=self.reward.exp) if self.reward is not None else None,
            attributes={name: Attribute(level=level) for name, level in self.attributes.items()},
            secondary_attributes=dict(self.secondary_attributes),
            secondary_bonuses=dict(self.secondary_bonuses),
            skills=[Skill(name=s.name, bonus=s.bonus) for s in self.skills],
            is_player=is_player,
        )


class EnemyModel(CombatantModel):
    reward: RewardModel


class AdventureModel(BaseModel):
    length: Optional[int] = Field(default=None, gt=0)
    enemies: List[EnemyModel] = Field(..., min_length=1)


class SecondaryAttributeModel(BaseModel):
    attributes: List[ModifierModel] = Field(default_factory=list)


class BonusModel(BaseModel):
    secondary_attributes: Dict[str, float] = Field(default_factory=dict)
    flat: float = 0.0

    @field_validator("secondary_attributes")
    @classmethod
    def known_bonus_names(cls, v: Dict[str, float]) -> Dict[str, float]:
        unknown = sorted(set(v) - set(BONUS_NAMES))
        if unknown:
            raise ValueError(f"unknown bonus names: {unknown}")
        return v


class RosterModel(BaseModel):
    player: CombatantModel
    adventures: Dict[str, AdventureModel] = Field(..., min_length=1)
    secondary_attributes: Dict[str, SecondaryAttributeModel] = Field(default_factory=dict)
    bonuses: Dict[str, BonusModel] = Field(default_factory=dict)

    @model_validator(mode="after")
    def bonus_references_exist(self) -> "RosterModel":
        combatants = [self.player] + [e for adv in self.adventures.values() for e in adv.enemies]
        for c in combatants:
            names = [c.job.attack.bonus] + [s.bonus for s in c.skills]
            for name in names:
                if name is not None and name not in self.bonuses:
                    raise ValueError(f"{c.label} references unknown bonus '{name}'")
        return self


@dataclass
class Roster:
    """Everything needed to run fights, built from a validated roster file."""

    player: Combatant
    adventures: Dict[str, AdventureModel]
    secondary_definitions: Dict[str, SecondaryAttributeDefinition] = field(default_factory=dict)
    bonuses: AttackBonusRegistry = field(default_factory=AttackBonusRegistry)

    def build_store(self) -> InMemoryCharacterStore:
        return InMemoryCharacterStore([self.player], secondary_definitions=self.secondary_definitions)

    def build_adventure(self, name: str, rng: Optional[RNG] = None) -> Adventure:
        try:
            model = self.adventures[name]
        except KeyError:
            raise KeyError(f"Unknown adventure '{name}'. Available: {sorted(self.adventures)}") from None
        enemies = [e.build() for e in model.enemies]
        return Adventure(name, enemies, rng=rng, length=model.length)


def parse_roster(data: dict) -> Roster:
    try:
        model = RosterModel.model_validate(data or {})
    except ValidationError as e:
        raise RosterValidationError("Roster validation failed", e) from e

    bonuses = AttackBonusRegistry()
    for name, b in model.bonuses.items():
        bonuses.register(name, StaticAttackBonus(b.secondary_attributes, flat=b.flat))

    definitions = {
        name: SecondaryAttributeDefinition(
            name=name,
            attributes=tuple(DamageModifier(m.name, m.modifier) for m in d.attributes),
        )
        for name, d in model.secondary_attributes.items()
    }
    return Roster(
        player=model.player.build(is_player=True),
        adventures=dict(model.adventures),
        secondary_definitions=definitions,
        bonuses=bonuses,
    )


def load_roster(path: Union[str, Path]) -> Roster:
    """Load and validate a YAML roster file."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    logger.debug("Loaded roster from %s", path)
    roster = parse_roster(data)
    logger.info("Roster: player=%s adventures=%s", roster.player.label, sorted(roster.adventures))
    return roster
