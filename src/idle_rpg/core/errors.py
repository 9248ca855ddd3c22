from __future__ import annotations

from typing import List, Optional

from pydantic import ValidationError


class IdleRpgError(Exception):
    """Base class for errors raised by this package."""


class CombatConfigurationError(IdleRpgError, ValueError):
    """Raised when a combatant or attack profile cannot take part in combat.

    Missing stats, attack profiles or reward descriptors are never replaced by
    defaults since that would silently change game balance.
    """


class RosterValidationError(CombatConfigurationError):
    """Raised when a roster file fails schema validation."""

    def __init__(self, message: str, error: Optional[ValidationError] = None) -> None:
        super().__init__(message)
        self.error = error

    @property
    def errors(self) -> List[dict]:
        return list(self.error.errors()) if self.error is not None else []

    def to_human(self) -> str:
        parts = [str(self)]
        for e in self.errors:
            path = "/".join(str(p) for p in e.get("loc", ())) or "<root>"
            parts.append(f" - at {path}: {e.get('msg')}")
        return "\n".join(parts)
