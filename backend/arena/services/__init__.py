"""
服务层
"""
from .arena_service import ArenaService, MatchHandle
from .tournament import time_until_next_tournament

__all__ = ["ArenaService", "MatchHandle", "time_until_next_tournament"]
