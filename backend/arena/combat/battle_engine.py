"""
对战引擎

核心回合制结算逻辑：
Idle --join_battle--> InProgress(Player) <--> InProgress(Opponent) --> Settling --> Idle
"""
import copy
import logging
import math
import uuid
from typing import TYPE_CHECKING, Optional

from .ai_opponent import OpponentAI
from .errors import (
    AlreadyInBattle,
    IneligibleAction,
    InsufficientBalance,
    InvalidStake,
    NotConnected,
    NotPlayerTurn,
)
from .models.action import ActionKind, ActionReport, TurnTimerEvent
from .models.combatant import Combatant, Side
from .models.match_state import MatchPhase, MatchState
from .random_source import RandomSource
from .rules import (
    BTC_DEFENSE_AMPLIFIER,
    BTC_PAIR,
    ETH_PAIR,
    SPECIAL_HEALTH_THRESHOLD,
    TURN_SECONDS,
    get_side_rules,
)

if TYPE_CHECKING:
    from arena.oracle.feed import OracleFeed
    from arena.wallet import SimulatedWallet

logger = logging.getLogger(__name__)


class BattleEngine:
    """
    对战引擎

    职责：
    - 持有对局状态（每个实例一场对局）
    - 结算玩家与对手的行动
    - 驱动对手AI
    - 判定胜负并结算押注

    引擎本身不做任何等待；出手延迟与结算宽限期由调用方调度。
    调用方需串行化对同一引擎的调用。
    """

    def __init__(
        self,
        account: "SimulatedWallet",
        oracle_feed: "OracleFeed",
        random_source: Optional[RandomSource] = None,
        match_id: Optional[str] = None,
        turn_seconds: int = TURN_SECONDS,
        player: Optional[Combatant] = None,
        opponent: Optional[Combatant] = None,
    ):
        self.account = account
        self.oracle_feed = oracle_feed
        self.random_source = random_source or RandomSource()
        self.turn_seconds = turn_seconds
        self.opponent_ai = OpponentAI(self.random_source)

        self._state = MatchState(
            match_id=match_id or f"match_{uuid.uuid4().hex[:8]}",
            turn_deadline=turn_seconds,
        )
        if player is not None:
            self._state.player = player
        if opponent is not None:
            self._state.opponent = opponent
        self._state.add_log("Battle system initialized - Connect wallet to begin")

    # ============================================
    # 查询
    # ============================================

    @property
    def match_id(self) -> str:
        return self._state.match_id

    @property
    def phase(self) -> MatchPhase:
        return self._state.phase

    @property
    def player(self) -> Combatant:
        """玩家战斗单位（可变引用，供战利品结算使用）"""
        return self._state.player

    @property
    def awaiting_opponent(self) -> bool:
        return self._state.is_opponent_turn()

    def get_state(self) -> MatchState:
        """只读快照"""
        return copy.deepcopy(self._state)

    # ============================================
    # 对局生命周期
    # ============================================

    def join_battle(self, stake: float) -> MatchState:
        """
        加入对局

        Args:
            stake: 双方押注金额（ETH）

        Returns:
            MatchState: 加入后的状态快照

        Raises:
            NotConnected: 账户未连接
            AlreadyInBattle: 当前不在 Idle
            InvalidStake: 押注不是有限正数
            InsufficientBalance: ETH 余额不足以覆盖押注
        """
        state = self._state
        if not self.account.is_connected():
            raise NotConnected("Please connect your wallet first")
        if state.phase != MatchPhase.IDLE:
            raise AlreadyInBattle("Already in battle!")
        if not math.isfinite(stake) or stake <= 0:
            raise InvalidStake(f"stake must be a positive finite number, got {stake}")
        if self.account.balance < stake:
            raise InsufficientBalance(
                f"Insufficient ETH balance. Need {stake} ETH, have {self.account.balance:.3f} ETH"
            )

        state.player.reset_for_match()
        state.opponent.reset_for_match()
        state.player.stake = stake
        state.opponent.stake = stake
        state.phase = MatchPhase.IN_PROGRESS
        state.turn = Side.PLAYER
        state.turn_deadline = self.turn_seconds
        state.round = 1
        state.winner = None
        state.payout = 0.0

        state.add_log("Opponent found! Battle begins!")
        state.add_log(
            f"Stakes locked: {stake} ETH each (Total pool: {stake * 2:.2f} ETH)"
        )
        logger.info("Match %s started with stake %s", state.match_id, stake)
        return self.get_state()

    def complete_settlement(self) -> bool:
        """
        结算宽限期结束：Settling -> Idle

        Returns:
            bool: 是否发生了状态迁移（已被取消的对局返回 False）
        """
        if self._state.phase != MatchPhase.SETTLING:
            return False
        self._reset_to_idle()
        self._state.add_log("Battle reset - Ready for next match!")
        return True

    def cancel(self) -> bool:
        """
        强制复位到 Idle（对局中断开钱包）

        Returns:
            bool: 是否丢弃了进行中的对局
        """
        if self._state.phase == MatchPhase.IDLE:
            return False
        logger.info("Match %s cancelled in phase %s", self.match_id, self._state.phase.value)
        self._reset_to_idle()
        self._state.add_log("Battle cancelled - wallet disconnected")
        return True

    def clear_log(self) -> None:
        self._state.clear_log()
        self._state.add_log("Battle log cleared")

    # ============================================
    # 行动
    # ============================================

    def submit_action(self, kind: ActionKind) -> ActionReport:
        """
        玩家提交行动

        Raises:
            NotPlayerTurn: 不在对局中或不是玩家回合
            IneligibleAction: 生命值不低于门槛时使用特殊技能
        """
        state = self._state
        if not state.is_player_turn():
            raise NotPlayerTurn("It is not the player's turn")
        if kind == ActionKind.SPECIAL and state.player.health >= SPECIAL_HEALTH_THRESHOLD:
            raise IneligibleAction(
                f"Special attack requires health below {SPECIAL_HEALTH_THRESHOLD}!"
            )
        return self._resolve(Side.PLAYER, kind)

    def resolve_opponent_turn(self) -> ActionReport:
        """
        对手回合（由调度方在出手延迟后调用）

        非对手回合调用属于编程错误，直接抛 RuntimeError
        """
        if not self._state.is_opponent_turn():
            raise RuntimeError(
                f"resolve_opponent_turn called out of turn (phase={self._state.phase.value}, "
                f"turn={self._state.turn.value})"
            )
        kind = self.opponent_ai.decide_action(self._state)
        return self._resolve(Side.OPPONENT, kind)

    def tick_turn_timer(self) -> TurnTimerEvent:
        """
        回合倒计时走一秒

        倒计时归零时自动替玩家防御，然后交换回合；
        非玩家回合时不计时
        """
        state = self._state
        if not state.is_player_turn():
            return TurnTimerEvent.ticking(state.turn_deadline)

        state.turn_deadline = max(0, state.turn_deadline - 1)
        if state.turn_deadline > 0:
            return TurnTimerEvent.ticking(state.turn_deadline)

        state.add_log("Turn timeout - auto-defend activated")
        report = self._resolve(Side.PLAYER, ActionKind.DEFEND)
        report.timed_out = True
        return TurnTimerEvent.expired(report)

    # ============================================
    # 结算
    # ============================================

    def eth_multiplier(self, side: Side) -> float:
        """ETH 乘数：1 + delta * 放大倍数（玩家 15，对手 12）"""
        delta = self.oracle_feed.snapshot(ETH_PAIR).fractional_delta
        return 1 + delta * get_side_rules(side)["eth_amplifier"]

    def btc_multiplier(self) -> float:
        """BTC 乘数：1 + |delta| * 10，仅用于玩家防御"""
        delta = self.oracle_feed.snapshot(BTC_PAIR).fractional_delta
        return 1 + abs(delta) * BTC_DEFENSE_AMPLIFIER

    def _resolve(self, side: Side, kind: ActionKind) -> ActionReport:
        """结算一次行动并推进状态机"""
        state = self._state
        rules = get_side_rules(side)
        actor = state.combatant(side)
        defender = state.combatant(side.other)

        eth_multiplier = self.eth_multiplier(side)
        is_critical = self.random_source.uniform() < rules["crit_chance"]

        damage = 0
        defense_bonus = 0

        if kind == ActionKind.ATTACK:
            damage = math.floor(actor.attack * max(rules["attack_floor"], eth_multiplier))
            if rules["respects_defense_bonus"] and defender.pending_defense_bonus:
                damage = max(1, damage - defender.pending_defense_bonus)
                defender.pending_defense_bonus = 0
            if is_critical:
                damage = math.floor(damage * rules["attack_crit_multiplier"])
            defender.take_damage(damage)
            message = f"{actor.name} attacks for {damage} damage!"

        elif kind == ActionKind.DEFEND:
            if rules["defend_uses_oracle"]:
                defense_bonus = math.floor(
                    actor.defense * self.btc_multiplier() * rules["defend_factor"]
                )
            else:
                defense_bonus = math.floor(actor.defense * rules["defend_factor"])
            actor.pending_defense_bonus = defense_bonus
            message = f"{actor.name} defends (+{defense_bonus} defense)"

        elif kind == ActionKind.SPECIAL:
            damage = math.floor(
                rules["special_base"]
                * max(rules["special_floor"], eth_multiplier)
                * rules["special_scale"]
            )
            if is_critical:
                damage = math.floor(damage * rules["special_crit_multiplier"])
            defender.take_damage(damage)
            message = f"{actor.name} unleashes a special strike for {damage} damage!"

        else:
            raise ValueError(f"unknown action kind: {kind}")

        if is_critical and kind != ActionKind.DEFEND:
            message += " CRITICAL HIT!"
        state.add_log(message)

        report = ActionReport(
            actor=side,
            kind=kind,
            damage_dealt=damage,
            was_critical=is_critical,
            defender_health_after=defender.health,
            defense_bonus=defense_bonus,
            eth_multiplier=eth_multiplier,
            message=message,
        )

        if defender.is_defeated:
            self._settle(winner=side)
            report.match_ended = True
            report.winner = side
            return report

        self._switch_turn(side)
        return report

    def _switch_turn(self, actor: Side) -> None:
        state = self._state
        if actor is Side.PLAYER:
            state.turn = Side.OPPONENT
            return
        state.turn = Side.PLAYER
        state.turn_deadline = self.turn_seconds
        state.round += 1

    def _settle(self, winner: Side) -> None:
        """
        进入结算：计算奖池，玩家获胜时入账

        对手获胜时不入账（对手押注的去向不在引擎职责内）
        """
        state = self._state
        state.phase = MatchPhase.SETTLING
        state.winner = winner
        state.payout = state.player.stake + state.opponent.stake

        if winner is Side.PLAYER:
            self.account.credit(state.payout)
            state.add_log(f"VICTORY! You won {state.payout:.2f} ETH!")
        else:
            state.add_log(f"DEFEAT! Opponent won {state.payout:.2f} ETH.")

        logger.info(
            "Match %s settled: winner=%s payout=%s", state.match_id, winner.value, state.payout
        )

    def _reset_to_idle(self) -> None:
        state = self._state
        state.player.reset_for_match()
        state.opponent.reset_for_match()
        state.phase = MatchPhase.IDLE
        state.turn = Side.PLAYER
        state.turn_deadline = self.turn_seconds
