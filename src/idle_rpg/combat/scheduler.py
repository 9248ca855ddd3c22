from __future__ import annotations

import logging
from typing import Optional

from ..settings import SessionSettings
from .attack import AttackResolver
from .events import EventSink, death_event
from .interfaces import AdventureSource, CharacterStore
from .models import HEALTH, AttackOutcome, Combatant, CombatSession, CombatState, Resolution, TickResult
from .rewards import RewardDistributor

logger = logging.getLogger(__name__)


def fires_on(combat_tick: int, speed: int) -> bool:
    """True when an attack with ``speed`` activates on ``combat_tick``."""
    return combat_tick != 0 and combat_tick % speed == 0


class CombatScheduler:
    """Tick-driven state machine for a player-vs-enemy encounter.

    Idle -> InCombat when an enemy is drawn from the adventure, InCombat ->
    Resolved when either side drops to zero health. The session stays Resolved
    until the next tick, which returns it to Idle before engaging a new enemy.
    The player always resolves first on a shared tick, and a dead enemy never
    gets its attack in.

    The host must not call ``tick`` reentrantly.
    """

    def __init__(
        self,
        store: CharacterStore,
        adventure: AdventureSource,
        resolver: AttackResolver,
        rewards: RewardDistributor,
        sink: EventSink,
        settings: Optional[SessionSettings] = None,
        health_stat: str = HEALTH,
    ) -> None:
        self.store = store
        self.adventure = adventure
        self.resolver = resolver
        self.rewards = rewards
        self.sink = sink
        self.settings = settings or SessionSettings()
        self.health_stat = health_stat
        self.session = CombatSession()

    @property
    def state(self) -> CombatState:
        return self.session.state

    @property
    def enemy(self) -> Optional[Combatant]:
        return self.session.enemy

    def _engage(self, tick: int) -> Combatant:
        enemy = self.adventure.next_enemy()
        enemy.validate(self.health_stat)
        self.session.engage(enemy, tick)
        logger.info("%s engaged at tick %d", enemy.label, tick)
        return enemy

    def _health(self, combatant: Combatant) -> float:
        return self.store.get_stat(self.health_stat, combatant).current

    def _speed(self, combatant: Combatant) -> int:
        return self.store.get_job(combatant).attack.speed

    def tick(self, tick: int, player: Combatant) -> TickResult:
        """Advance combat to ``tick`` and resolve whatever attacks fire on it."""
        if self.session.state is CombatState.RESOLVED:
            self.session.clear()

        enemy = self.session.enemy
        if enemy is None:
            enemy = self._engage(tick)

        combat_tick = self.session.advance(tick)
        player_outcome: Optional[AttackOutcome] = None
        enemy_outcome: Optional[AttackOutcome] = None

        if fires_on(combat_tick, self._speed(player)):
            player_outcome = self.resolver.resolve(player, enemy)
            self.store.subtract_stat_current(self.health_stat, player_outcome.damage, enemy)

            if self._health(enemy) <= 0:
                self.enemy_defeated(player, enemy)
                return TickResult(
                    tick=tick,
                    combat_tick=combat_tick,
                    enemy=enemy.label,
                    player_outcome=player_outcome,
                    resolution=Resolution.ENEMY_DEFEATED,
                )

        resolution: Optional[Resolution] = None
        if fires_on(combat_tick, self._speed(enemy)):
            enemy_outcome = self.resolver.resolve(enemy, player)
            self.store.subtract_stat_current(self.health_stat, enemy_outcome.damage, player)

            if self._health(player) <= 0:
                self.sink.emit(death_event(player.label))
                self.player_defeated(player)
                resolution = Resolution.PLAYER_DEFEATED

        return TickResult(
            tick=tick,
            combat_tick=combat_tick,
            enemy=enemy.label,
            player_outcome=player_outcome,
            enemy_outcome=enemy_outcome,
            resolution=resolution,
        )

    def enemy_defeated(self, player: Combatant, enemy: Combatant) -> None:
        self.session.resolve()
        self.rewards.award_for_kill(player, enemy)
        self.sink.emit(death_event(enemy.label))
        self.adventure.add_progress(self.settings.progress_per_kill)
        logger.info("%s defeated %s", player.label, enemy.label)

    def player_defeated(self, player: Combatant) -> None:
        """Send the player to rest and abandon the adventure."""
        self.session.resolve()
        self.store.set_action(self.settings.death_action, player)
        self.adventure.reset()
        logger.info("%s was defeated; adventure reset", player.label)
