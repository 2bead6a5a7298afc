"""Battle system package."""

from .battle_engine import BattleEngine
from .loot import LootOutcome, LootResolver
from .random_source import RandomSource, ScriptedRandomSource

__all__ = [
    "BattleEngine",
    "LootResolver",
    "LootOutcome",
    "RandomSource",
    "ScriptedRandomSource",
]
