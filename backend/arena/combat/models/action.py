"""
战斗行动数据模型
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .combatant import Side


class ActionKind(str, Enum):
    """行动类型"""

    ATTACK = "attack"
    DEFEND = "defend"
    SPECIAL = "special"


@dataclass
class ActionReport:
    """
    行动结算结果

    由 submit_action / resolve_opponent_turn / 超时自动防御 返回
    """

    actor: Side
    kind: ActionKind
    damage_dealt: int
    was_critical: bool
    defender_health_after: int
    match_ended: bool = False
    winner: Optional[Side] = None

    # ===== 附加信息 =====
    defense_bonus: int = 0  # 防御行动设置的加值
    eth_multiplier: float = 1.0  # 本次结算使用的 ETH 乘数
    timed_out: bool = False  # 是否为超时自动防御
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "actor": self.actor.value,
            "kind": self.kind.value,
            "damage_dealt": self.damage_dealt,
            "was_critical": self.was_critical,
            "defender_health_after": self.defender_health_after,
            "match_ended": self.match_ended,
            "winner": self.winner.value if self.winner else None,
            "defense_bonus": self.defense_bonus,
            "eth_multiplier": round(self.eth_multiplier, 6),
            "timed_out": self.timed_out,
            "message": self.message,
        }


@dataclass
class TurnTimerEvent:
    """回合计时事件：Ticking(seconds_left) 或 TimedOut"""

    seconds_left: int
    timed_out: bool = False
    report: Optional[ActionReport] = None  # 超时自动防御的结算

    @classmethod
    def ticking(cls, seconds_left: int) -> "TurnTimerEvent":
        return cls(seconds_left=seconds_left)

    @classmethod
    def expired(cls, report: ActionReport) -> "TurnTimerEvent":
        return cls(seconds_left=0, timed_out=True, report=report)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "timed_out" if self.timed_out else "ticking",
            "seconds_left": self.seconds_left,
            "report": self.report.to_dict() if self.report else None,
        }
