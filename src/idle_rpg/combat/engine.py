from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from ..core.errors import CombatConfigurationError
from ..core.rng import RNG, RandomSource
from ..settings import CombatSettings
from .attack import AttackResolver
from .damage import DamageCalculator, DamageRange
from .events import CombatLog, EventSink, FanOutSink
from .hooks import AttackBonusRegistry, HookRegistry
from .interfaces import AdventureSource, CharacterStore
from .mitigation import MitigationRoller
from .models import Combatant, Resolution, TickResult
from .rewards import RewardDistributor
from .scheduler import CombatScheduler

logger = logging.getLogger(__name__)


class CombatEngine:
    """Wire the combat components around one player, store and adventure.

    The engine always keeps a bounded :class:`CombatLog`; an extra sink passed
    by the host receives the same events in the same order.
    """

    def __init__(
        self,
        store: CharacterStore,
        adventure: AdventureSource,
        player: Combatant,
        rng: Optional[RandomSource] = None,
        hooks: Optional[HookRegistry] = None,
        bonuses: Optional[AttackBonusRegistry] = None,
        sink: Optional[EventSink] = None,
        settings: Optional[CombatSettings] = None,
    ) -> None:
        self.settings = settings or CombatSettings()
        player.validate(self.settings.health_stat, require_reward=False)
        if not store.is_player(player):
            raise CombatConfigurationError(f"{player.label} is not flagged as the player")

        self.store = store
        self.adventure = adventure
        self.player = player
        self.rng = rng if rng is not None else RNG()
        self.hooks = hooks or HookRegistry()
        self.bonuses = bonuses or AttackBonusRegistry()
        self.log = CombatLog(capacity=self.settings.log_capacity)
        self.sink: EventSink = self.log if sink is None else FanOutSink(self.log, sink)

        self.damage = DamageCalculator(store, self.rng)
        self.mitigation = MitigationRoller(store, self.hooks, self.rng)
        self.rewards = RewardDistributor(store, self.hooks, self.settings.rewards)
        self.resolver = AttackResolver(
            store,
            self.damage,
            self.mitigation,
            self.rewards,
            self.hooks,
            self.bonuses,
            self.sink,
        )
        self.scheduler = CombatScheduler(
            store,
            adventure,
            self.resolver,
            self.rewards,
            self.sink,
            settings=self.settings.session,
            health_stat=self.settings.health_stat,
        )

    @property
    def session(self):
        return self.scheduler.session

    def tick(self, tick: int) -> TickResult:
        return self.scheduler.tick(tick, self.player)

    @property
    def resting(self) -> bool:
        return self.player.action == self.settings.session.death_action

    def stop_reason(self) -> Optional[str]:
        """Why ``run`` would not tick any further, or None if it would."""
        if self.resting:
            return Resolution.PLAYER_DEFEATED.value
        if self.adventure.completed:
            return "adventure_completed"
        return None

    def run(self, ticks: Iterable[int]) -> List[TickResult]:
        """Tick through ``ticks`` while the player is adventuring.

        Stops early once the player has been sent to rest or the adventure is
        completed; the host decides when to heal the player and start again.
        """
        results: List[TickResult] = []
        for t in ticks:
            reason = self.stop_reason()
            if reason is not None:
                logger.info("Combat stopped before tick %d: %s", t, reason)
                break
            results.append(self.tick(t))
        return results

    def damage_range(self, combatant: Optional[Combatant] = None) -> DamageRange:
        """Display range of the active job's attack; the player's by default."""
        who = combatant or self.player
        return self.damage.damage_range(self.store.get_job(who).attack, who)
