from .errors import CombatConfigurationError, IdleRpgError, RosterValidationError
from .rng import RNG, RandomSource

__all__ = [
    "CombatConfigurationError",
    "IdleRpgError",
    "RNG",
    "RandomSource",
    "RosterValidationError",
]
