"""
对局状态数据模型
"""
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Deque, Dict, List, Optional

from .combatant import Combatant, Side, default_opponent, default_player

BATTLE_LOG_LIMIT = 100
DEFAULT_TURN_SECONDS = 30


class MatchPhase(str, Enum):
    """对局阶段（Idle 既是初始态也是结算后的终态，可循环进入）"""

    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    SETTLING = "settling"


@dataclass
class BattleLogEntry:
    """战斗日志条目"""

    round: int
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round": self.round,
            "time": self.timestamp.strftime("%M:%S"),
            "message": self.message,
        }


@dataclass
class MatchState:
    """
    对局状态

    由 BattleEngine 独占持有；对外只暴露快照
    """

    # ===== 基础信息 =====
    match_id: str
    phase: MatchPhase = MatchPhase.IDLE

    # ===== 回合 =====
    turn: Side = Side.PLAYER  # 仅在 IN_PROGRESS 时有意义
    turn_deadline: int = DEFAULT_TURN_SECONDS
    round: int = 0

    # ===== 战斗单位 =====
    player: Combatant = field(default_factory=default_player)
    opponent: Combatant = field(default_factory=default_opponent)

    # ===== 结算（结束后填充） =====
    winner: Optional[Side] = None
    payout: float = 0.0

    # ===== 战斗日志 =====
    battle_log: Deque[BattleLogEntry] = field(
        default_factory=lambda: deque(maxlen=BATTLE_LOG_LIMIT)
    )

    # ===== 便捷方法 =====

    def combatant(self, side: Side) -> Combatant:
        """根据阵营获取战斗单位"""
        return self.player if side is Side.PLAYER else self.opponent

    def is_player_turn(self) -> bool:
        return self.phase == MatchPhase.IN_PROGRESS and self.turn is Side.PLAYER

    def is_opponent_turn(self) -> bool:
        return self.phase == MatchPhase.IN_PROGRESS and self.turn is Side.OPPONENT

    def add_log(self, message: str) -> BattleLogEntry:
        """添加战斗日志（只保留最近 100 条）"""
        entry = BattleLogEntry(round=self.round, message=message)
        self.battle_log.append(entry)
        return entry

    def clear_log(self) -> None:
        self.battle_log.clear()

    def get_log(self, limit: int = BATTLE_LOG_LIMIT) -> List[BattleLogEntry]:
        entries = list(self.battle_log)
        return entries[-limit:] if limit else entries

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "match_id": self.match_id,
            "phase": self.phase.value,
            "turn": self.turn.value if self.phase == MatchPhase.IN_PROGRESS else None,
            "turn_deadline": self.turn_deadline,
            "round": self.round,
            "player": self.player.to_dict(),
            "opponent": self.opponent.to_dict(),
            "winner": self.winner.value if self.winner else None,
            "payout": self.payout,
            "battle_log": [entry.to_dict() for entry in list(self.battle_log)[-10:]],
        }
