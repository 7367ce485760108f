"""Game stores."""

from callbridge.repositories.base import GameStore
from callbridge.repositories.memory_store import InMemoryGameStore

__all__ = ["GameStore", "InMemoryGameStore"]
