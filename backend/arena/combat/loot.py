"""
战利品箱

一次付费随机抽取，独立于对局状态机
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

from .errors import InsufficientBalance, NotConnected
from .models.combatant import Combatant
from .random_source import RandomSource
from .rules import LOOT_COST, LOOT_TABLE

if TYPE_CHECKING:
    from arena.wallet import SimulatedWallet

logger = logging.getLogger(__name__)

INITIAL_NONCE = 12345


@dataclass
class LootOutcome:
    """开箱结果"""

    reward: str
    name: str
    description: str
    roll: float
    cost: int
    currency_delta: int = 0
    attack_delta: int = 0
    healed: bool = False
    balance_after: float = 0.0

    # ===== 随机性凭据（仅展示） =====
    nonce: int = 0
    seed: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reward": self.reward,
            "name": self.name,
            "description": self.description,
            "roll": self.roll,
            "cost": self.cost,
            "currency_delta": self.currency_delta,
            "attack_delta": self.attack_delta,
            "healed": self.healed,
            "balance_after": self.balance_after,
            "nonce": self.nonce,
            "seed": self.seed,
        }


def pick_band(roll: float) -> Dict[str, Any]:
    """按累计阈值选档，先命中者生效"""
    for band in LOOT_TABLE:
        if roll < band["threshold"]:
            return band
    return LOOT_TABLE[-1]


class LootResolver:
    """战利品结算器"""

    def __init__(
        self,
        account: "SimulatedWallet",
        random_source: Optional[RandomSource] = None,
        cost: int = LOOT_COST,
        initial_nonce: int = INITIAL_NONCE,
    ):
        self.account = account
        self.random_source = random_source or RandomSource()
        self.cost = cost
        self.nonce = initial_nonce

    def open(self, player: Combatant) -> LootOutcome:
        """
        开箱

        先发放奖励再扣费；余额不足时整体拒绝，不做部分扣费

        Args:
            player: 玩家战斗单位（传奇武器/治疗直接作用于其上）

        Raises:
            NotConnected: 账户未连接
            InsufficientBalance: SUPRA 余额低于开箱费用
        """
        if not self.account.is_connected():
            raise NotConnected("Connect wallet to open loot boxes")
        if self.account.supra_balance < self.cost:
            raise InsufficientBalance(f"Insufficient SUPRA balance (need {self.cost} SUPRA)")

        self.nonce += 1
        seed = self.random_source.hex_seed()
        roll = self.random_source.uniform()
        band = pick_band(roll)

        outcome = LootOutcome(
            reward=band["reward"],
            name=band["name"],
            description=band["description"],
            roll=roll,
            cost=self.cost,
            nonce=self.nonce,
            seed=seed,
        )

        if band.get("attack_bonus"):
            player.attack += band["attack_bonus"]
            outcome.attack_delta = band["attack_bonus"]
        if band.get("currency"):
            self.account.credit(band["currency"], currency="SUPRA")
            outcome.currency_delta = band["currency"]
        if band.get("full_heal"):
            player.restore()
            outcome.healed = True

        outcome.balance_after = self.account.debit(self.cost, currency="SUPRA")
        logger.info(
            "Loot box opened: reward=%s roll=%.4f nonce=%d", outcome.reward, roll, self.nonce
        )
        return outcome
