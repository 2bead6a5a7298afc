"""
战斗规则

定义所有战斗相关的常量和规则。双方常量刻意不对称。
"""
from typing import Any, Dict, List

from .models.action import ActionKind
from .models.combatant import Side


# ============================================
# 常量定义
# ============================================

# 特殊技能的生命值门槛（绝对值，仅约束玩家）
SPECIAL_HEALTH_THRESHOLD = 50

# 回合倒计时（秒）
TURN_SECONDS = 30

# 价格源
ETH_PAIR = "eth_usd"
BTC_PAIR = "btc_usd"

# BTC 波动对防御的放大倍数
BTC_DEFENSE_AMPLIFIER = 10


# ============================================
# 双方结算参数
# ============================================

SIDE_RULES: Dict[Side, Dict[str, Any]] = {
    Side.PLAYER: {
        "eth_amplifier": 15,  # eth_multiplier = 1 + delta * 15
        "crit_chance": 0.15,
        "attack_floor": 0.5,
        "attack_crit_multiplier": 1.5,
        "respects_defense_bonus": False,  # 玩家攻击不受对手防御姿态影响
        "defend_factor": 0.2,  # floor(defense * btc_multiplier * 0.2)
        "defend_uses_oracle": True,
        "special_base": 50,
        "special_floor": 0.8,
        "special_scale": 1.8,
        "special_crit_multiplier": 1.3,
    },
    Side.OPPONENT: {
        "eth_amplifier": 12,
        "crit_chance": 0.12,
        "attack_floor": 0.5,
        "attack_crit_multiplier": 1.4,
        "respects_defense_bonus": True,  # 先扣除玩家防御加值（至少 1 点），再算暴击
        "defend_factor": 0.3,  # floor(defense * 0.3)，不受预言机影响
        "defend_uses_oracle": False,
        "special_base": 40,
        "special_floor": 0.7,
        "special_scale": 1.6,
        "special_crit_multiplier": 1.3,
    },
}


# ============================================
# 对手AI
# ============================================

OPPONENT_AI: Dict[str, Any] = {
    "desperate_health": 30,  # 自身低于此值时倾向特殊技能
    "desperate_special_chance": 0.6,
    "finisher_health": 40,  # 玩家低于此值时倾向补刀
    "finisher_attack_chance": 0.4,
}

# 兜底随机池：攻击权重是防御的两倍
FALLBACK_ACTIONS: List[ActionKind] = [ActionKind.ATTACK, ActionKind.DEFEND, ActionKind.ATTACK]


# ============================================
# 战利品
# ============================================

LOOT_COST = 10

LOOT_TABLE: List[Dict[str, Any]] = [
    {
        "reward": "legendary_sword",
        "name": "Legendary Sword",
        "threshold": 0.05,
        "description": "+15 attack permanently",
        "attack_bonus": 15,
    },
    {
        "reward": "rare_crystal",
        "name": "Rare Crystal",
        "threshold": 0.15,
        "description": "+50 SUPRA tokens",
        "currency": 50,
    },
    {
        # 文案是"下一场+10攻击"，但不记录也不生效
        "reward": "power_core",
        "name": "Power Core",
        "threshold": 0.30,
        "description": "+10 attack for next battle",
    },
    {
        "reward": "health_elixir",
        "name": "Health Elixir",
        "threshold": 0.50,
        "description": "Full health restore",
        "full_heal": True,
    },
    {
        "reward": "token_reward",
        "name": "Token Reward",
        "threshold": 1.0,
        "description": "+5 SUPRA",
        "currency": 5,
    },
]


def get_side_rules(side: Side) -> Dict[str, Any]:
    """获取某一方的结算参数"""
    return SIDE_RULES[side]
