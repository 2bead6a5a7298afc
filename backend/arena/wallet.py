"""
模拟钱包（账户提供方）

对战引擎只依赖 is_connected() / credit() / balance；
没有真实签名，连接即返回固定地址与余额
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEMO_ADDRESS = "0x742d35Cc6635C0532925a3b8D0A7C4e7C8d5A9f8"
DEMO_SUPRA_BALANCE = 147.25
DEMO_ETH_BALANCE = 2.34

ETH = "ETH"
SUPRA = "SUPRA"


@dataclass
class SimulatedWallet:
    """模拟钱包"""

    connected: bool = False
    address: Optional[str] = None
    eth_balance: float = 0.0
    supra_balance: float = 0.0

    def connect(
        self,
        address: str = DEMO_ADDRESS,
        eth_balance: float = DEMO_ETH_BALANCE,
        supra_balance: float = DEMO_SUPRA_BALANCE,
    ) -> str:
        """连接钱包，返回地址"""
        self.connected = True
        self.address = address
        self.eth_balance = eth_balance
        self.supra_balance = supra_balance
        logger.info("Wallet connected: %s...", address[:8])
        return address

    def disconnect(self) -> None:
        """断开连接并清空余额"""
        self.connected = False
        self.address = None
        self.eth_balance = 0.0
        self.supra_balance = 0.0
        logger.info("Wallet disconnected")

    def is_connected(self) -> bool:
        return self.connected

    @property
    def balance(self) -> float:
        """结算币种（ETH）余额"""
        return self.eth_balance

    @property
    def balances(self) -> Dict[str, float]:
        return {ETH: self.eth_balance, SUPRA: self.supra_balance}

    def credit(self, amount: float, currency: str = ETH) -> float:
        """
        入账

        Args:
            amount: 金额（非负）
            currency: 币种（ETH / SUPRA）

        Returns:
            float: 入账后余额
        """
        if amount < 0:
            raise ValueError(f"credit amount must be non-negative, got {amount}")
        if currency == ETH:
            self.eth_balance += amount
            return self.eth_balance
        if currency == SUPRA:
            self.supra_balance += amount
            return self.supra_balance
        raise ValueError(f"unknown currency: {currency}")

    def debit(self, amount: float, currency: str = SUPRA) -> float:
        """扣款（调用方负责先校验余额）"""
        if amount < 0:
            raise ValueError(f"debit amount must be non-negative, got {amount}")
        if currency == ETH:
            self.eth_balance -= amount
            return self.eth_balance
        if currency == SUPRA:
            self.supra_balance -= amount
            return self.supra_balance
        raise ValueError(f"unknown currency: {currency}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "connected": self.connected,
            "address": self.address,
            "balances": self.balances,
        }
