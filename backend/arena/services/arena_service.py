"""
对局服务

按 match_id 管理多场对局：每场一个引擎、一把锁、一个钱包。
对手出手与结算宽限期在后台任务中按配置延迟调度（可为 0）。
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Set

from arena.combat.battle_engine import BattleEngine
from arena.combat.errors import MatchNotFound
from arena.combat.loot import LootOutcome, LootResolver
from arena.combat.models.action import ActionKind, ActionReport, TurnTimerEvent
from arena.combat.models.match_state import MatchState
from arena.combat.random_source import RandomSource
from arena.oracle.feed import OracleFeed
from arena.wallet import SimulatedWallet

logger = logging.getLogger(__name__)


@dataclass
class MatchHandle:
    """单场对局的运行时资源"""

    engine: BattleEngine
    wallet: SimulatedWallet
    loot: LootResolver
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    tasks: Set[asyncio.Task] = field(default_factory=set)

    @property
    def match_id(self) -> str:
        return self.engine.match_id


class ArenaService:
    """对局服务"""

    def __init__(
        self,
        oracle_feed: OracleFeed,
        opponent_delay_seconds: float = 0.0,
        settlement_delay_seconds: float = 0.0,
        turn_seconds: int = 30,
        random_factory: Optional[Callable[[], RandomSource]] = None,
    ):
        self.oracle_feed = oracle_feed
        self.opponent_delay_seconds = opponent_delay_seconds
        self.settlement_delay_seconds = settlement_delay_seconds
        self.turn_seconds = turn_seconds
        self.random_factory = random_factory or RandomSource
        self.matches: Dict[str, MatchHandle] = {}

    # ============================================
    # 对局管理
    # ============================================

    def create_match(self) -> MatchHandle:
        """创建一场新对局（初始为 Idle，钱包未连接）"""
        random_source = self.random_factory()
        wallet = SimulatedWallet()
        engine = BattleEngine(
            account=wallet,
            oracle_feed=self.oracle_feed,
            random_source=random_source,
            turn_seconds=self.turn_seconds,
        )
        handle = MatchHandle(
            engine=engine,
            wallet=wallet,
            loot=LootResolver(account=wallet, random_source=random_source),
        )
        self.matches[handle.match_id] = handle
        logger.info("Match created: %s", handle.match_id)
        return handle

    def get_match(self, match_id: str) -> MatchHandle:
        handle = self.matches.get(match_id)
        if handle is None:
            raise MatchNotFound(match_id)
        return handle

    def get_state(self, match_id: str) -> MatchState:
        return self.get_match(match_id).engine.get_state()

    async def remove_match(self, match_id: str) -> None:
        handle = self.get_match(match_id)
        await self._cancel_tasks(handle)
        self.matches.pop(match_id, None)
        logger.info("Match removed: %s", match_id)

    # ============================================
    # 钱包
    # ============================================

    async def connect_wallet(self, match_id: str) -> SimulatedWallet:
        handle = self.get_match(match_id)
        async with handle.lock:
            if not handle.wallet.is_connected():
                handle.wallet.connect()
        return handle.wallet

    async def disconnect_wallet(self, match_id: str) -> SimulatedWallet:
        """断开钱包；对局进行中则强制复位并取消待执行的调度"""
        handle = self.get_match(match_id)
        await self._cancel_tasks(handle)
        async with handle.lock:
            handle.engine.cancel()
            handle.wallet.disconnect()
        return handle.wallet

    # ============================================
    # 对局操作
    # ============================================

    async def join_battle(self, match_id: str, stake: float) -> MatchState:
        handle = self.get_match(match_id)
        async with handle.lock:
            return handle.engine.join_battle(stake)

    async def submit_action(self, match_id: str, kind: ActionKind) -> ActionReport:
        handle = self.get_match(match_id)
        async with handle.lock:
            report = handle.engine.submit_action(kind)
        self._schedule_followup(handle, report)
        return report

    async def tick_turn_timer(self, match_id: str) -> TurnTimerEvent:
        handle = self.get_match(match_id)
        async with handle.lock:
            event = handle.engine.tick_turn_timer()
        if event.timed_out and event.report is not None:
            self._schedule_followup(handle, event.report)
        return event

    async def open_loot_box(self, match_id: str) -> LootOutcome:
        handle = self.get_match(match_id)
        async with handle.lock:
            return handle.loot.open(handle.engine.player)

    async def clear_log(self, match_id: str) -> None:
        handle = self.get_match(match_id)
        async with handle.lock:
            handle.engine.clear_log()

    async def wait_for_pending(self, match_id: str) -> None:
        """等待该对局所有后台调度完成（测试与无界面运行使用）"""
        handle = self.get_match(match_id)
        while handle.tasks:
            await asyncio.gather(*list(handle.tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        for handle in list(self.matches.values()):
            await self._cancel_tasks(handle)

    # ============================================
    # 调度
    # ============================================

    def _schedule_followup(self, handle: MatchHandle, report: ActionReport) -> None:
        if report.match_ended:
            self._spawn(handle, self._run_settlement(handle))
        elif handle.engine.awaiting_opponent:
            self._spawn(handle, self._run_opponent_turn(handle))

    def _spawn(self, handle: MatchHandle, coro) -> None:
        task = asyncio.create_task(coro)
        handle.tasks.add(task)
        task.add_done_callback(handle.tasks.discard)

    async def _run_opponent_turn(self, handle: MatchHandle) -> None:
        await asyncio.sleep(self.opponent_delay_seconds)
        async with handle.lock:
            if not handle.engine.awaiting_opponent:
                return
            report = handle.engine.resolve_opponent_turn()
        logger.debug("Match %s opponent resolved: %s", handle.match_id, report.message)
        if report.match_ended:
            self._spawn(handle, self._run_settlement(handle))

    async def _run_settlement(self, handle: MatchHandle) -> None:
        await asyncio.sleep(self.settlement_delay_seconds)
        async with handle.lock:
            handle.engine.complete_settlement()

    async def _cancel_tasks(self, handle: MatchHandle) -> None:
        current = asyncio.current_task()
        pending = [task for task in handle.tasks if task is not current]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
