"""
对手AI系统

实现对手的决策逻辑
"""
import math

from .models.action import ActionKind
from .models.match_state import MatchState
from .random_source import RandomSource
from .rules import FALLBACK_ACTIONS, OPPONENT_AI


class OpponentAI:
    """
    对手AI

    设计原则：
    - 按优先级求值的简单规则树
    - 给定随机抽样序列时结果确定
    """

    def __init__(self, random_source: RandomSource):
        """
        初始化AI

        Args:
            random_source: 随机源（与引擎共用，抽样顺序即规则顺序）
        """
        self.random_source = random_source

    def decide_action(self, state: MatchState) -> ActionKind:
        """
        为对手决定行动

        Args:
            state: 当前对局状态

        Returns:
            ActionKind: 选择的行动
        """
        # 1. 自身残血时倾向特殊技能
        if self._should_unleash_special(state):
            return ActionKind.SPECIAL

        # 2. 玩家残血时倾向补刀
        if self._should_go_for_kill(state):
            return ActionKind.ATTACK

        # 3. 兜底：攻击/防御/攻击 中均匀抽取
        return self._pick_fallback()

    # ===== 私有方法 =====

    def _should_unleash_special(self, state: MatchState) -> bool:
        if state.opponent.health >= OPPONENT_AI["desperate_health"]:
            return False
        return self.random_source.uniform() < OPPONENT_AI["desperate_special_chance"]

    def _should_go_for_kill(self, state: MatchState) -> bool:
        if state.player.health >= OPPONENT_AI["finisher_health"]:
            return False
        return self.random_source.uniform() < OPPONENT_AI["finisher_attack_chance"]

    def _pick_fallback(self) -> ActionKind:
        index = math.floor(self.random_source.uniform() * len(FALLBACK_ACTIONS))
        return FALLBACK_ACTIONS[index]
