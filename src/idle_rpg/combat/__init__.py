"""
Tick-driven combat core.

Contains:
- Damage calculation from attribute weights with symmetric RNG variance.
- Independent critical/block/deflect/dodge rolls with skill hook overrides.
- Attack resolution, experience rewards and the per-tick scheduler.
- Structured combat events and sinks for the presentation layer.
"""

from .attack import AttackResolver
from .damage import DamageCalculator, DamageRange
from .engine import CombatEngine
from .events import CombatEvent, CombatEventType, CombatLog, EventBus, EventBusSink, EventSink
from .hooks import AttackBonusRegistry, HookContext, HookName, HookRegistry, StaticAttackBonus
from .mitigation import MitigationRoller
from .models import AttackOutcome, Combatant, CombatSession, CombatState, Resolution, TickResult
from .rewards import RewardDistributor
from .scheduler import CombatScheduler

__all__ = [
    "AttackBonusRegistry",
    "AttackOutcome",
    "AttackResolver",
    "Combatant",
    "CombatEngine",
    "CombatEvent",
    "CombatEventType",
    "CombatLog",
    "CombatScheduler",
    "CombatSession",
    "CombatState",
    "DamageCalculator",
    "DamageRange",
    "EventBus",
    "EventBusSink",
    "EventSink",
    "HookContext",
    "HookName",
    "HookRegistry",
    "MitigationRoller",
    "Resolution",
    "RewardDistributor",
    "StaticAttackBonus",
    "TickResult",
]
