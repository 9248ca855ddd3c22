from __future__ import annotations

from typing import Protocol, Sequence

from .models import ActiveAttack, Combatant, DamageModifier, Job, StatValue


class CharacterStore(Protocol):
    """Authoritative owner of combatant stats, attributes and experience.

    The combat core never keeps its own copy of health; every read and every
    subtraction goes through this protocol.
    """

    def get_stat(self, name: str, combatant: Combatant) -> StatValue:
        """Return the named pool stat (e.g. "health") of the combatant."""

    def set_stat_current(self, name: str, value: float, combatant: Combatant) -> None:
        """Overwrite the current value of a pool stat."""

    def subtract_stat_current(self, name: str, amount: float, combatant: Combatant) -> None:
        """Subtract ``amount`` from the current value of a pool stat."""

    def get_attribute_level(self, name: str, combatant: Combatant) -> float:
        """Return the level of a primary attribute."""

    def get_job(self, combatant: Combatant) -> Job:
        """Return the combatant's active job and its attack profile."""

    def determine_attack(self, combatant: Combatant) -> ActiveAttack:
        """Return the attack (and skill, if any) the combatant uses right now."""

    def get_secondary_attribute(self, name: str, combatant: Combatant) -> float:
        """Return a secondary attribute percentage including equipment/skill contributions."""

    def secondary_attribute_sources(self, name: str) -> Sequence[DamageModifier]:
        """Return the primary attributes that feed a secondary attribute."""

    def add_attribute_exp(self, name: str, amount: float, combatant: Combatant) -> None:
        """Grant experience to a primary attribute."""

    def add_job_exp(self, amount: float, combatant: Combatant) -> None:
        """Grant experience to the combatant's active job."""

    def is_player(self, combatant: Combatant) -> bool:
        """Return True for the player combatant."""

    def set_action(self, action: str, combatant: Combatant) -> None:
        """Set what the player is currently doing (e.g. "rest")."""


class AdventureSource(Protocol):
    """Supplies enemies and tracks progress through the active adventure."""

    def next_enemy(self) -> Combatant:
        """Return a fresh enemy to engage."""

    def add_progress(self, steps: int) -> None:
        """Advance the adventure by ``steps``."""

    def reset(self) -> None:
        """Return the adventure to its starting state."""

    @property
    def completed(self) -> bool:
        """True once enough progress has been made to finish the adventure."""
