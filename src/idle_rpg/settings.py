from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .core.errors import CombatConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HitReward:
    name: str
    modifier: float


@dataclass
class RewardSettings:
    """Experience formulas.

    attacker_exp_divisor: per-attack reward is weight * enemy exp / divisor.
    mitigation_exp_divisor: deflect/block/dodge reward is weight * exp / divisor.
    excluded_attribute: attribute never rewarded through secondary attributes.
    hit_rewards: attributes rewarded (weight * exp) when a plain hit lands.
    """

    attacker_exp_divisor: float = 8
    mitigation_exp_divisor: float = 2
    excluded_attribute: str = "lck"
    hit_rewards: List[HitReward] = field(default_factory=lambda: [HitReward("str", 0.4)])


@dataclass
class SessionSettings:
    death_action: str = "rest"
    progress_per_kill: int = 1


@dataclass
class CombatSettings:
    health_stat: str = "health"
    log_capacity: int = 50
    rewards: RewardSettings = field(default_factory=RewardSettings)
    session: SessionSettings = field(default_factory=SessionSettings)

    @staticmethod
    def _load_yaml(path: Path) -> dict:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    @classmethod
    def _deep_merge(cls, base: dict, overlay: dict) -> dict:
        merged = dict(base)
        for k, v in (overlay or {}).items():
            if isinstance(v, dict) and isinstance(base.get(k), dict):
                merged[k] = cls._deep_merge(base[k], v)
            else:
                merged[k] = v
        return merged

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CombatSettings":
        rewards = dict(data.get("rewards", {}))
        hit_rewards = rewards.pop("hit_rewards", None)
        try:
            reward_settings = RewardSettings(**rewards)
            if hit_rewards is not None:
                reward_settings.hit_rewards = [
                    HitReward(name=str(r["name"]), modifier=float(r["modifier"])) for r in hit_rewards
                ]
            settings = CombatSettings(
                health_stat=str(data.get("health_stat", "health")),
                log_capacity=int(data.get("log_capacity", 50)),
                rewards=reward_settings,
                session=SessionSettings(**data.get("session", {})),
            )
        except (TypeError, KeyError, ValueError) as exc:
            raise CombatConfigurationError(f"Invalid combat settings: {exc}") from exc
        if settings.rewards.attacker_exp_divisor == 0 or settings.rewards.mitigation_exp_divisor == 0:
            raise CombatConfigurationError("experience divisors must be non-zero")
        if settings.log_capacity <= 0:
            raise CombatConfigurationError("log_capacity must be positive")
        return settings

    @classmethod
    def load(cls, user_path: Optional[Path] = None) -> "CombatSettings":
        """Load settings from the packaged defaults and an optional user override file."""
        try:
            with resources.files("idle_rpg.config").joinpath("combat.yaml").open("r", encoding="utf-8") as f:
                default_data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Default combat settings not found; falling back to dataclass defaults.")
            default_data = dataclasses.asdict(CombatSettings())

        user_data = {}
        if user_path is not None:
            if user_path.exists():
                user_data = cls._load_yaml(user_path)
                logger.info("Loaded user combat settings from %s", user_path)
            else:
                raise CombatConfigurationError(f"Combat settings file not found: {user_path}")

        settings = cls.from_dict(cls._deep_merge(default_data, user_data))
        logger.debug("Combat settings: %s", settings)
        return settings
