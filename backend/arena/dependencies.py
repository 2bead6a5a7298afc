"""
FastAPI dependencies.
"""
from functools import lru_cache

from arena.combat.random_source import RandomSource
from arena.config import settings
from arena.oracle.client import SupraOracleClient
from arena.oracle.feed import OracleFeed
from arena.services.arena_service import ArenaService


@lru_cache()
def get_oracle_client() -> SupraOracleClient:
    return SupraOracleClient()


@lru_cache()
def get_oracle_feed() -> OracleFeed:
    return OracleFeed(
        client=get_oracle_client(),
        random_source=RandomSource(settings.random_seed),
        poll_seconds=settings.oracle_poll_seconds,
    )


@lru_cache()
def get_arena_service() -> ArenaService:
    return ArenaService(
        oracle_feed=get_oracle_feed(),
        opponent_delay_seconds=settings.opponent_delay_seconds,
        settlement_delay_seconds=settings.settlement_delay_seconds,
        turn_seconds=settings.turn_seconds,
        random_factory=lambda: RandomSource(settings.random_seed),
    )
