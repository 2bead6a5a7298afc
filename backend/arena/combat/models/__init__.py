"""Data models for the battle system."""

from .combatant import Combatant, Side, default_opponent, default_player
from .action import ActionKind, ActionReport, TurnTimerEvent
from .match_state import BattleLogEntry, MatchPhase, MatchState

__all__ = [
    "Combatant",
    "Side",
    "default_player",
    "default_opponent",
    "ActionKind",
    "ActionReport",
    "TurnTimerEvent",
    "BattleLogEntry",
    "MatchPhase",
    "MatchState",
]
