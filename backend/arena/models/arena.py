"""
对战 API 请求/响应模型
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from arena.combat.models.action import ActionKind


class MatchCreatedResponse(BaseModel):
    """创建对局响应"""
    match_id: str
    state: Dict[str, Any]


class WalletResponse(BaseModel):
    """钱包状态"""
    connected: bool
    address: Optional[str] = None
    balances: Dict[str, float] = Field(default_factory=dict)


class JoinBattleRequest(BaseModel):
    """加入对局请求"""
    stake: float = 0.1


class ActionRequest(BaseModel):
    """玩家行动请求"""
    kind: ActionKind


class ActionResponse(BaseModel):
    """行动结算响应"""
    report: Dict[str, Any]
    state: Dict[str, Any]
