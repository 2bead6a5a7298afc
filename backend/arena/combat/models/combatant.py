"""
战斗单位数据模型
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class Side(str, Enum):
    """对战双方"""

    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> "Side":
        return Side.OPPONENT if self is Side.PLAYER else Side.PLAYER


@dataclass
class Combatant:
    """
    战斗单位

    不变量：0 <= health <= max_health
    """

    # ===== 基础信息 =====
    name: str

    # ===== 生命值 =====
    health: int
    max_health: int

    # ===== 战斗属性 =====
    attack: int  # 基础伤害系数，可被战利品永久提升
    defense: int

    # ===== 押注 =====
    stake: float = 0.0  # 本场押注，对局期间不变

    # ===== 防御姿态 =====
    pending_defense_bonus: int = 0  # 仅由防御行动设置

    def __post_init__(self):
        if self.max_health <= 0:
            raise ValueError(f"max_health must be positive, got {self.max_health}")
        self.health = max(0, min(self.health, self.max_health))

    # ===== 便捷方法 =====

    @property
    def is_defeated(self) -> bool:
        """生命值归零"""
        return self.health == 0

    def take_damage(self, amount: int) -> int:
        """
        受到伤害

        Args:
            amount: 伤害值

        Returns:
            int: 受伤后的生命值（不会为负）
        """
        self.health = max(0, self.health - amount)
        return self.health

    def restore(self) -> None:
        """回满生命值"""
        self.health = self.max_health

    def reset_for_match(self) -> None:
        """对局开始/结束时复位"""
        self.restore()
        self.pending_defense_bonus = 0

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "name": self.name,
            "health": self.health,
            "max_health": self.max_health,
            "attack": self.attack,
            "defense": self.defense,
            "stake": self.stake,
            "pending_defense_bonus": self.pending_defense_bonus,
        }


def default_player() -> Combatant:
    """玩家默认属性"""
    return Combatant(name="Oracle Warrior", health=100, max_health=100, attack=25, defense=15, stake=0.1)


def default_opponent() -> Combatant:
    """对手默认属性"""
    return Combatant(name="Data Mage", health=100, max_health=100, attack=20, defense=20, stake=0.1)
