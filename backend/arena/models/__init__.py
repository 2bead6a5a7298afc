"""
API 数据模型
"""
from .arena import (
    ActionRequest,
    ActionResponse,
    JoinBattleRequest,
    MatchCreatedResponse,
    WalletResponse,
)

__all__ = [
    "ActionRequest",
    "ActionResponse",
    "JoinBattleRequest",
    "MatchCreatedResponse",
    "WalletResponse",
]
