"""
Idle RPG combat package root.

The tick-driven combat core lives in :mod:`idle_rpg.combat`. Character storage,
adventures and roster loading are reference collaborators the core only talks
to through the protocols in :mod:`idle_rpg.combat.interfaces`.
"""

__version__ = "0.1.0"

__all__ = [
    "combat",
    "__version__",
]
