"""
对战系统错误定义

均为可恢复的本地校验失败：抛出给调用方，不会破坏对局状态
"""


class ArenaError(Exception):
    """Base class for recoverable arena errors."""

    error_type = "arena_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error_type": self.error_type, "message": self.message}


class NotConnected(ArenaError):
    """账户未连接"""

    error_type = "not_connected"


class AlreadyInBattle(ArenaError):
    """已在对局中"""

    error_type = "already_in_battle"


class NotPlayerTurn(ArenaError):
    """当前不是玩家回合（或不在对局中）"""

    error_type = "not_player_turn"


class IneligibleAction(ArenaError):
    """行动不满足条件（特殊技能要求生命值低于门槛）"""

    error_type = "ineligible_action"


class InsufficientBalance(ArenaError):
    """余额不足"""

    error_type = "insufficient_balance"


class InvalidStake(ArenaError):
    """押注金额非法"""

    error_type = "invalid_stake"


class MatchNotFound(ArenaError):
    """对局不存在"""

    error_type = "match_not_found"

    def __init__(self, match_id: str) -> None:
        self.match_id = match_id
        super().__init__(f"match not found: {match_id}")
