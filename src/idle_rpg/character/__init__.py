from .store import InMemoryCharacterStore

__all__ = ["InMemoryCharacterStore"]
