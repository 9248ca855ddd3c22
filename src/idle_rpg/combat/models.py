from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..core.errors import CombatConfigurationError

logger = logging.getLogger(__name__)

HEALTH = "health"

# Secondary attribute names as stored on a combatant.
CRITICAL_CHANCE = "critical_chance"
BLOCK = "block"
DEFLECT = "deflect"
DODGE = "dodge"

SECONDARY_ATTRIBUTES: Tuple[str, ...] = (CRITICAL_CHANCE, BLOCK, DEFLECT, DODGE)


@dataclass
class StatValue:
    """A pool stat such as health: current value and its maximum."""

    current: float
    max: float

    def __post_init__(self) -> None:
        if self.max < 0:
            raise CombatConfigurationError("stat max must be non-negative")


@dataclass
class Attribute:
    """A primary attribute (str, dex, ...). Level drives damage, exp accumulates."""

    level: float = 1.0
    exp: float = 0.0


@dataclass(frozen=True)
class DamageModifier:
    """Attribute name plus the weight it contributes.

    Used both for attack damage modifiers and for the attributes that feed a
    secondary attribute.
    """

    name: str
    modifier: float


@dataclass
class AttackProfile:
    """How a job attacks.

    Attributes:
        speed: Ticks between two activations of this attack (> 0).
        dmg_modifiers: Ordered attribute weights summed into base damage.
        variance: Symmetric damage spread, 0.1 means x0.9..x1.1.
        critical_damage: Multiplier applied on a critical hit.
        bonus: Optional name of a registered attack-bonus strategy.
    """

    speed: int
    dmg_modifiers: List[DamageModifier] = field(default_factory=list)
    variance: float = 0.0
    critical_damage: float = 1.5
    bonus: Optional[str] = None

    def __post_init__(self) -> None:
        if int(self.speed) <= 0:
            raise CombatConfigurationError(f"attack speed must be positive, got {self.speed}")
        if not (0.0 <= self.variance <= 1.0):
            raise CombatConfigurationError(f"variance must be between 0.0 and 1.0, got {self.variance}")
        self.speed = int(self.speed)

    @property
    def total_weight(self) -> float:
        return sum(m.modifier for m in self.dmg_modifiers)


@dataclass
class Job:
    """A job owns the attack profile and its own experience pool."""

    name: str
    attack: AttackProfile
    exp: float = 0.0


@dataclass(frozen=True)
class Skill:
    name: str
    bonus: Optional[str] = None


@dataclass(frozen=True)
class ActiveAttack:
    """The attack a combatant will use right now and the skill behind it, if any."""

    attack: AttackProfile
    skill: Optional[Skill] = None


@dataclass(frozen=True)
class Reward:
    """Experience granted to the opposing player on defeat or on being hit."""

    exp: float


@dataclass(frozen=True)
class SecondaryAttributeDefinition:
    """Which primary attributes feed a secondary attribute, and by how much."""

    name: str
    attributes: Tuple[DamageModifier, ...] = ()


@dataclass
class Combatant:
    """Player or enemy taking part in combat.

    The player is distinguished by ``is_player`` only. Stats are owned by the
    character store; the combat core reads and mutates them through it.
    """

    label: str
    stats: Dict[str, StatValue] = field(default_factory=dict)
    job: Optional[Job] = None
    reward: Optional[Reward] = None
    attributes: Dict[str, Attribute] = field(default_factory=dict)
    secondary_attributes: Dict[str, float] = field(default_factory=dict)
    secondary_bonuses: Dict[str, float] = field(default_factory=dict)
    skills: List[Skill] = field(default_factory=list)
    is_player: bool = False
    action: Optional[str] = None

    def validate(self, health_stat: str = HEALTH, require_reward: bool = True) -> None:
        """Raise CombatConfigurationError if this combatant cannot fight."""
        if health_stat not in self.stats:
            raise CombatConfigurationError(f"{self.label} has no '{health_stat}' stat")
        if self.job is None or self.job.attack is None:
            raise CombatConfigurationError(f"{self.label} has no job/attack profile")
        if require_reward and self.reward is None:
            raise CombatConfigurationError(f"{self.label} has no reward descriptor")

    def spawn(self) -> "Combatant":
        """Return an independent copy with every stat refilled to its max."""
        clone = copy.deepcopy(self)
        for stat in clone.stats.values():
            stat.current = stat.max
        return clone


@dataclass(frozen=True)
class SecondaryBonus:
    name: str
    value: float


@dataclass(frozen=True)
class AttackBonuses:
    """Result of an attack-bonus strategy.

    ``secondary_attributes`` adjust roll chances by name (``critical_chance``,
    ``block_chance``, ``deflect_chance``, ``dodge_chance``); ``flat`` is added to
    the pending damage before mitigation.
    """

    secondary_attributes: Tuple[SecondaryBonus, ...] = ()
    flat: float = 0.0


NO_BONUSES = AttackBonuses()


@dataclass(frozen=True)
class AttackOutcome:
    damage: float
    critical: bool = False
    blocked: bool = False
    dodged: bool = False
    deflected: bool = False

    @property
    def mitigated(self) -> bool:
        return self.deflected or self.blocked or self.dodged


class CombatState(str, Enum):
    IDLE = "idle"
    IN_COMBAT = "in_combat"
    RESOLVED = "resolved"


class Resolution(str, Enum):
    ENEMY_DEFEATED = "enemy_defeated"
    PLAYER_DEFEATED = "player_defeated"


@dataclass
class CombatSession:
    """The single encounter the scheduler is running.

    At most one enemy is engaged at a time; ``engage`` refuses a second one.
    """

    enemy: Optional[Combatant] = None
    start_tick: int = 0
    combat_tick: int = 0
    state: CombatState = CombatState.IDLE

    @property
    def active(self) -> bool:
        return self.enemy is not None

    def engage(self, enemy: Combatant, tick: int) -> None:
        if self.enemy is not None:
            raise RuntimeError(f"{self.enemy.label} is already engaged")
        self.enemy = enemy
        self.start_tick = tick
        self.combat_tick = 0
        self.state = CombatState.IN_COMBAT

    def advance(self, tick: int) -> int:
        self.combat_tick = tick - self.start_tick
        return self.combat_tick

    def resolve(self) -> None:
        """Release the enemy; the session stays Resolved until the next tick."""
        self.enemy = None
        self.state = CombatState.RESOLVED

    def clear(self) -> None:
        self.enemy = None
        self.combat_tick = 0
        self.state = CombatState.IDLE


@dataclass(frozen=True)
class TickResult:
    """What happened during one scheduler tick."""

    tick: int
    combat_tick: int
    enemy: Optional[str] = None
    player_outcome: Optional[AttackOutcome] = None
    enemy_outcome: Optional[AttackOutcome] = None
    resolution: Optional[Resolution] = None
