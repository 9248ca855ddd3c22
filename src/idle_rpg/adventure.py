from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .combat.models import Combatant
from .core.rng import RNG

logger = logging.getLogger(__name__)


class Adventure:
    """An enemy pool the player fights through, one enemy at a time.

    Enemies are templates: ``next_enemy`` hands out a fresh copy at full
    health so that the pool itself is never damaged.
    """

    def __init__(self, name: str, enemies: Sequence[Combatant], rng: Optional[RNG] = None, length: Optional[int] = None) -> None:
        if not enemies:
            raise ValueError(f"Adventure '{name}' has no enemies")
        self.name = name
        self.enemies: List[Combatant] = list(enemies)
        self.rng = rng if rng is not None else RNG()
        self.length = length
        self.progress = 0

    @property
    def completed(self) -> bool:
        return self.length is not None and self.progress >= self.length

    def next_enemy(self) -> Combatant:
        template = self.rng.choice(self.enemies)
        enemy = template.spawn()
        logger.debug("Adventure '%s' spawned %s", self.name, enemy.label)
        return enemy

    def add_progress(self, steps: int) -> None:
        self.progress += steps
        logger.debug("Adventure '%s' progress: %d", self.name, self.progress)

    def reset(self) -> None:
        logger.info("Adventure '%s' reset at progress %d", self.name, self.progress)
        self.progress = 0
