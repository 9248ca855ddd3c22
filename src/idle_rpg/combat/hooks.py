from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, DefaultDict, Dict, List, Mapping, Optional, Protocol, Union

from .models import (
    ActiveAttack,
    AttackBonuses,
    AttackProfile,
    NO_BONUSES,
    Combatant,
    SecondaryBonus,
    Skill,
)

logger = logging.getLogger(__name__)


class HookName(str, Enum):
    """Points where skills and effects can step into combat."""

    ON_HIT = "onHit"
    ON_KILL = "onKill"
    ON_DODGE = "onDodge"
    ON_ATTACK = "onAttack"
    ON_CRITICAL = "onCritical"
    WHEN_HIT = "whenHit"


@dataclass(frozen=True)
class HookContext:
    """Payload handed to hook handlers and attack-bonus strategies.

    Not every field is set for every hook: ``onKill`` only carries ``enemy``,
    ``onCritical`` carries ``damage`` and ``attack``.
    """

    damage: float = 0.0
    attack: Optional[AttackProfile] = None
    skill: Optional[Skill] = None
    attacker: Optional[Combatant] = None
    defender: Optional[Combatant] = None
    enemy: Optional[Combatant] = None


class SkillHook(Protocol):
    def apply(self, context: HookContext) -> Optional[float]:  # pragma: no cover - Protocol
        ...


class FunctionHook:
    """Adapt a plain callable to the SkillHook interface."""

    def __init__(self, func: Callable[[HookContext], Optional[float]], name: Optional[str] = None) -> None:
        self.func = func
        self.name = name or getattr(func, "__name__", repr(func))

    def apply(self, context: HookContext) -> Optional[float]:
        return self.func(context)

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f"FunctionHook({self.name!r})"


HookLike = Union[SkillHook, Callable[[HookContext], Optional[float]]]


def _as_hook(handler: HookLike) -> SkillHook:
    if hasattr(handler, "apply"):
        return handler  # type: ignore[return-value]
    if callable(handler):
        return FunctionHook(handler)
    raise TypeError(f"{handler!r} is neither a SkillHook nor callable")


class HookRegistry:
    """Named-hook dispatch for skills and effects.

    Handlers run in registration order. When a handler returns a value, that
    value becomes the context damage for the handlers after it and is what
    ``dispatch`` returns. ``None`` means "keep the existing value".
    """

    def __init__(self) -> None:
        self._hooks: DefaultDict[str, List[SkillHook]] = defaultdict(list)

    @staticmethod
    def _key(name: Union[HookName, str]) -> str:
        return name.value if isinstance(name, HookName) else str(name)

    def register(self, name: Union[HookName, str], handler: HookLike) -> SkillHook:
        hook = _as_hook(handler)
        self._hooks[self._key(name)].append(hook)
        logger.debug("Registered %r for hook '%s'", hook, self._key(name))
        return hook

    def unregister(self, name: Union[HookName, str], handler: SkillHook) -> None:
        hooks = self._hooks.get(self._key(name), [])
        if handler in hooks:
            hooks.remove(handler)

    def handlers(self, name: Union[HookName, str]) -> List[SkillHook]:
        return list(self._hooks.get(self._key(name), []))

    def dispatch(self, name: Union[HookName, str], context: HookContext) -> Optional[float]:
        override: Optional[float] = None
        for hook in self.handlers(name):
            result = hook.apply(context)
            if result is not None:
                override = float(result)
                context = replace(context, damage=override)
                logger.debug("Hook '%s' (%r) overrode damage -> %.3f", self._key(name), hook, override)
        return override


class AttackBonus(Protocol):
    def apply(self, context: HookContext) -> AttackBonuses:  # pragma: no cover - Protocol
        ...


class StaticAttackBonus:
    """Attack bonus that always grants the same chance adjustments and flat damage."""

    def __init__(self, secondary_attributes: Optional[Mapping[str, float]] = None, flat: float = 0.0) -> None:
        self.bonuses = AttackBonuses(
            secondary_attributes=tuple(
                SecondaryBonus(name=k, value=float(v)) for k, v in (secondary_attributes or {}).items()
            ),
            flat=float(flat),
        )

    def apply(self, context: HookContext) -> AttackBonuses:
        return self.bonuses


class AttackBonusRegistry:
    """Attack-bonus strategies looked up by name.

    A skill's bonus name wins over the attack profile's. No registered
    strategy means no bonuses.
    """

    def __init__(self, strategies: Optional[Dict[str, AttackBonus]] = None) -> None:
        self._strategies: Dict[str, AttackBonus] = dict(strategies or {})

    def register(self, name: str, strategy: AttackBonus) -> None:
        self._strategies[name] = strategy

    def get(self, name: Optional[str]) -> Optional[AttackBonus]:
        if name is None:
            return None
        return self._strategies.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._strategies

    def resolve(self, active: ActiveAttack) -> Optional[AttackBonus]:
        if active.skill is not None and active.skill.bonus is not None:
            return self.get(active.skill.bonus)
        return self.get(active.attack.bonus)

    def bonuses_for(
        self,
        active: ActiveAttack,
        damage: float,
        attacker: Combatant,
        defender: Combatant,
    ) -> AttackBonuses:
        strategy = self.resolve(active)
        if strategy is None:
            return NO_BONUSES
        context = HookContext(
            damage=damage,
            attack=active.attack,
            skill=active.skill,
            attacker=attacker,
            defender=defender,
        )
        return strategy.apply(context) or NO_BONUSES
