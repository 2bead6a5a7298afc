"""Oracle price feed package."""

from .client import OracleNotConfiguredError, OracleUnavailableError, SupraOracleClient
from .feed import OracleFeed, OraclePair, PAIR_SYMBOLS

__all__ = [
    "OracleFeed",
    "OraclePair",
    "PAIR_SYMBOLS",
    "SupraOracleClient",
    "OracleUnavailableError",
    "OracleNotConfiguredError",
]
