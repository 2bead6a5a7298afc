"""
预言机价格源

维护 ETH/BTC 两个交易对的最新快照。优先拉取真实行情，
失败或未配置时静默退回模拟波动；对战引擎只读取快照，
永远感知不到拉取失败。
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from arena.combat.random_source import RandomSource
from arena.combat.rules import BTC_PAIR, ETH_PAIR

from .client import OracleNotConfiguredError, OracleUnavailableError, SupraOracleClient

logger = logging.getLogger(__name__)

# 内部键 -> 上游交易对符号
PAIR_SYMBOLS: Dict[str, str] = {
    ETH_PAIR: "ETH/USD",
    BTC_PAIR: "BTC/USD",
}

# 模拟波动参数：(初始价, 初始涨跌%, 单次波动幅度, 最低价)
SIMULATION: Dict[str, Dict[str, float]] = {
    ETH_PAIR: {"price": 3245.67, "change": 1.2, "swing": 50.0, "floor": 100.0},
    BTC_PAIR: {"price": 96913.07, "change": -0.8, "swing": 1000.0, "floor": 1000.0},
}


@dataclass(frozen=True)
class OraclePair:
    """
    单个交易对快照（不可变，整体替换保证原子更新）

    fractional_delta == percent_change / 100
    """

    price: float
    percent_change: float
    source: str = "simulated"
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def fractional_delta(self) -> float:
        return self.percent_change / 100

    def to_dict(self) -> Dict[str, object]:
        return {
            "price": self.price,
            "percent_change": self.percent_change,
            "fractional_delta": self.fractional_delta,
            "source": self.source,
            "updated_at": self.updated_at.isoformat(),
        }


class OracleFeed:
    """价格源"""

    def __init__(
        self,
        client: Optional[SupraOracleClient] = None,
        random_source: Optional[RandomSource] = None,
        poll_seconds: float = 8.0,
    ):
        self.client = client
        self.random_source = random_source or RandomSource()
        self.poll_seconds = poll_seconds
        self._snapshots: Dict[str, OraclePair] = {
            pair: OraclePair(price=params["price"], percent_change=params["change"])
            for pair, params in SIMULATION.items()
        }

    # ============================================
    # 读取
    # ============================================

    def snapshot(self, pair: str) -> OraclePair:
        """读取最新快照（不触发拉取）"""
        try:
            return self._snapshots[pair]
        except KeyError:
            raise KeyError(f"unknown oracle pair: {pair}") from None

    def snapshots(self) -> Dict[str, OraclePair]:
        return dict(self._snapshots)

    # ============================================
    # 写入
    # ============================================

    def update(self, pair: str, price: float, percent_change: float, source: str = "oracle") -> OraclePair:
        """原子替换某交易对快照"""
        if price <= 0:
            raise ValueError(f"oracle price must be positive, got {price}")
        snapshot = OraclePair(price=price, percent_change=percent_change, source=source)
        self._snapshots[pair] = snapshot
        return snapshot

    def simulate_tick(self) -> None:
        """模拟一次价格波动：涨跌幅按相对上次价格计算"""
        for pair, params in SIMULATION.items():
            previous = self._snapshots[pair].price or params["price"]
            variation = (self.random_source.uniform() - 0.5) * params["swing"]
            price = max(params["floor"], previous + variation)
            delta = (price - previous) / previous
            self.update(pair, price, delta * 100, source="simulated")

    async def refresh(self) -> str:
        """
        刷新一次行情

        Returns:
            str: 本次使用的数据来源（"oracle" / "simulated"）
        """
        if self.client is None or not self.client.configured:
            self.simulate_tick()
            return "simulated"

        try:
            eth_data, btc_data = await asyncio.gather(
                self.client.get_latest(PAIR_SYMBOLS[ETH_PAIR]),
                self.client.get_latest(PAIR_SYMBOLS[BTC_PAIR]),
            )
            parsed = {
                ETH_PAIR: (float(eth_data["price"]), float(eth_data["change_24h"])),
                BTC_PAIR: (float(btc_data["price"]), float(btc_data["change_24h"])),
            }
        except (OracleUnavailableError, OracleNotConfiguredError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Oracle refresh failed, falling back to simulation: %s", exc)
            self.simulate_tick()
            return "simulated"

        for pair, (price, change) in parsed.items():
            self.update(pair, price, change, source="oracle")
        return "oracle"

    async def run_polling(self, stop_event: asyncio.Event) -> None:
        """按固定间隔轮询，直到 stop_event 被设置"""
        while not stop_event.is_set():
            try:
                await self.refresh()
            except Exception as exc:  # 单次异常不终止轮询
                logger.error("Oracle polling tick error: %s", exc)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.poll_seconds)
            except asyncio.TimeoutError:
                continue
