import pytest

from arena.combat.battle_engine import BattleEngine
from arena.combat.errors import (
    AlreadyInBattle,
    IneligibleAction,
    InsufficientBalance,
    InvalidStake,
    NotConnected,
    NotPlayerTurn,
)
from arena.combat.models.action import ActionKind
from arena.combat.models.combatant import Combatant, Side
from arena.combat.models.match_state import MatchPhase
from arena.combat.random_source import RandomSource, ScriptedRandomSource
from arena.oracle.feed import OracleFeed
from arena.wallet import SimulatedWallet

NO_CRIT = 0.5
FALLBACK_ATTACK = 0.0
FALLBACK_DEFEND = 0.34


def _feed(eth_change: float = 0.0, btc_change: float = 0.0) -> OracleFeed:
    feed = OracleFeed()
    feed.update("eth_usd", 3000.0, eth_change)
    feed.update("btc_usd", 90000.0, btc_change)
    return feed


def _engine(values=(), eth_change=0.0, btc_change=0.0, connected=True, **kwargs):
    wallet = SimulatedWallet()
    if connected:
        wallet.connect()
    rng = ScriptedRandomSource(values)
    engine = BattleEngine(
        account=wallet,
        oracle_feed=_feed(eth_change, btc_change),
        random_source=rng,
        match_id="match_test",
        **kwargs,
    )
    return engine, wallet, rng


# ============================================
# 对局生命周期
# ============================================


def test_engine_starts_idle():
    engine, _, _ = _engine()
    state = engine.get_state()
    assert state.phase == MatchPhase.IDLE
    assert state.player.health == 100
    assert state.opponent.health == 100


def test_join_battle_requires_connected_account():
    engine, _, _ = _engine(connected=False)
    with pytest.raises(NotConnected):
        engine.join_battle(0.1)
    assert engine.phase == MatchPhase.IDLE


def test_join_battle_rejects_second_join():
    engine, _, _ = _engine()
    engine.join_battle(0.1)
    with pytest.raises(AlreadyInBattle):
        engine.join_battle(0.1)


def test_join_battle_validates_stake():
    engine, _, _ = _engine()
    with pytest.raises(InvalidStake):
        engine.join_battle(0)
    with pytest.raises(InsufficientBalance):
        engine.join_battle(5.0)
    assert engine.phase == MatchPhase.IDLE

    state = engine.join_battle(2.34)
    assert state.phase == MatchPhase.IN_PROGRESS
    assert state.player.stake == 2.34


@pytest.mark.parametrize("stake", [float("nan"), float("inf"), float("-inf")])
def test_join_battle_rejects_non_finite_stake(stake):
    engine, wallet, _ = _engine()

    with pytest.raises(InvalidStake):
        engine.join_battle(stake)

    state = engine.get_state()
    assert state.phase == MatchPhase.IDLE
    assert state.player.stake == 0.1
    assert state.payout == 0.0
    assert wallet.eth_balance == pytest.approx(2.34)


def test_join_battle_resets_health_and_assigns_stakes():
    engine, _, _ = _engine()
    engine.player.health = 42

    state = engine.join_battle(0.25)

    assert state.phase == MatchPhase.IN_PROGRESS
    assert state.turn == Side.PLAYER
    assert state.turn_deadline == 30
    assert state.player.health == 100
    assert state.opponent.health == 100
    assert state.player.stake == 0.25
    assert state.opponent.stake == 0.25


def test_get_state_returns_detached_snapshot():
    engine, _, _ = _engine()
    engine.join_battle(0.1)

    snapshot = engine.get_state()
    snapshot.player.health = 1
    snapshot.phase = MatchPhase.SETTLING

    assert engine.get_state().player.health == 100
    assert engine.phase == MatchPhase.IN_PROGRESS


# ============================================
# 玩家行动
# ============================================


def test_end_to_end_attack_exchange():
    engine, _, rng = _engine([NO_CRIT, FALLBACK_ATTACK, NO_CRIT])
    engine.join_battle(0.1)

    report = engine.submit_action(ActionKind.ATTACK)
    assert report.damage_dealt == 25
    assert report.was_critical is False
    assert report.defender_health_after == 75
    assert report.match_ended is False
    assert engine.get_state().turn == Side.OPPONENT

    opponent_report = engine.resolve_opponent_turn()
    assert opponent_report.actor == Side.OPPONENT
    assert opponent_report.kind == ActionKind.ATTACK
    assert opponent_report.damage_dealt == 20

    state = engine.get_state()
    assert state.player.health == 80
    assert state.opponent.health == 75
    assert state.turn == Side.PLAYER
    assert state.turn_deadline == 30
    assert state.round == 2
    assert rng.remaining == 0


def test_submit_action_outside_player_turn_fails():
    engine, _, _ = _engine([NO_CRIT])
    with pytest.raises(NotPlayerTurn):
        engine.submit_action(ActionKind.ATTACK)

    engine.join_battle(0.1)
    engine.submit_action(ActionKind.ATTACK)
    with pytest.raises(NotPlayerTurn):
        engine.submit_action(ActionKind.ATTACK)


def test_player_critical_attack_multiplies_by_one_and_a_half():
    engine, _, _ = _engine([0.1])
    engine.join_battle(0.1)

    report = engine.submit_action(ActionKind.ATTACK)

    assert report.was_critical is True
    assert report.damage_dealt == 37


def test_eth_delta_scales_player_attack():
    engine, _, _ = _engine([NO_CRIT], eth_change=2.0)
    engine.join_battle(0.1)

    report = engine.submit_action(ActionKind.ATTACK)

    assert report.eth_multiplier == pytest.approx(1.3)
    assert report.damage_dealt == 32


def test_crashing_eth_is_floored_at_half_damage():
    engine, _, _ = _engine([NO_CRIT], eth_change=-10.0)
    engine.join_battle(0.1)

    report = engine.submit_action(ActionKind.ATTACK)

    assert report.damage_dealt == 12


def test_special_requires_health_below_threshold():
    engine, _, rng = _engine([NO_CRIT])
    engine.join_battle(0.1)
    engine.player.health = 50
    before = engine.get_state()

    with pytest.raises(IneligibleAction):
        engine.submit_action(ActionKind.SPECIAL)

    after = engine.get_state()
    assert after.turn == Side.PLAYER
    assert after.opponent.health == before.opponent.health
    assert after.player.health == 50
    assert rng.consumed == 0


def test_special_damage_when_eligible():
    engine, _, _ = _engine([NO_CRIT])
    engine.join_battle(0.1)
    engine.player.health = 40

    report = engine.submit_action(ActionKind.SPECIAL)

    assert report.damage_dealt == 90
    assert report.defender_health_after == 10


def test_player_defend_uses_btc_multiplier():
    engine, _, _ = _engine([NO_CRIT], btc_change=-5.0)
    engine.join_battle(0.1)

    report = engine.submit_action(ActionKind.DEFEND)

    # 15 * (1 + 0.05 * 10) * 0.2 = 4.5
    assert report.damage_dealt == 0
    assert report.defense_bonus == 4
    assert engine.player.pending_defense_bonus == 4
    assert engine.get_state().turn == Side.OPPONENT


# ============================================
# 防御加值
# ============================================


def test_opponent_attack_consumes_player_defense_bonus():
    engine, _, _ = _engine([NO_CRIT, FALLBACK_ATTACK, NO_CRIT])
    engine.join_battle(0.1)

    defend = engine.submit_action(ActionKind.DEFEND)
    assert defend.defense_bonus == 3

    report = engine.resolve_opponent_turn()

    assert report.damage_dealt == 17
    assert engine.player.health == 83
    assert engine.player.pending_defense_bonus == 0


def test_defense_bonus_leaves_at_least_one_damage():
    tank = Combatant(name="Tank", health=100, max_health=100, attack=25, defense=200)
    engine, _, _ = _engine([NO_CRIT, FALLBACK_ATTACK, NO_CRIT], player=tank)
    engine.join_battle(0.1)

    engine.submit_action(ActionKind.DEFEND)
    assert engine.player.pending_defense_bonus == 40

    report = engine.resolve_opponent_turn()

    assert report.damage_dealt == 1
    assert engine.player.health == 99
    assert engine.player.pending_defense_bonus == 0


def test_defense_bonus_is_subtracted_before_opponent_critical():
    engine, _, _ = _engine([NO_CRIT, FALLBACK_ATTACK, 0.05])
    engine.join_battle(0.1)

    engine.submit_action(ActionKind.DEFEND)
    report = engine.resolve_opponent_turn()

    # (20 - 3) * 1.4 = 23.8
    assert report.was_critical is True
    assert report.damage_dealt == 23
    assert engine.player.health == 77


def test_player_attack_ignores_opponent_defense_bonus():
    engine, _, _ = _engine(
        [NO_CRIT, FALLBACK_ATTACK, NO_CRIT, NO_CRIT, FALLBACK_DEFEND, NO_CRIT, NO_CRIT]
    )
    engine.join_battle(0.1)

    engine.submit_action(ActionKind.ATTACK)
    engine.resolve_opponent_turn()
    engine.submit_action(ActionKind.ATTACK)
    defend = engine.resolve_opponent_turn()
    assert defend.kind == ActionKind.DEFEND
    assert defend.defense_bonus == 6

    report = engine.submit_action(ActionKind.ATTACK)

    assert report.damage_dealt == 25
    assert report.defender_health_after == 25
    assert engine.get_state().opponent.pending_defense_bonus == 6


def test_opponent_special_does_not_consume_defense_bonus():
    fragile = Combatant(name="Data Mage", health=25, max_health=25, attack=20, defense=20)
    engine, _, _ = _engine([NO_CRIT, 0.1, NO_CRIT], opponent=fragile)
    engine.join_battle(0.1)

    engine.submit_action(ActionKind.DEFEND)
    report = engine.resolve_opponent_turn()

    assert report.kind == ActionKind.SPECIAL
    assert report.damage_dealt == 64
    assert engine.player.health == 36
    assert engine.player.pending_defense_bonus == 3


def test_opponent_uses_its_own_eth_amplifier():
    engine, _, _ = _engine([NO_CRIT, FALLBACK_ATTACK, NO_CRIT], eth_change=5.0)
    engine.join_battle(0.1)

    player_report = engine.submit_action(ActionKind.ATTACK)
    opponent_report = engine.resolve_opponent_turn()

    assert player_report.damage_dealt == 43
    assert opponent_report.damage_dealt == 32


def test_resolve_opponent_turn_out_of_turn_is_programming_error():
    engine, _, _ = _engine()
    engine.join_battle(0.1)
    with pytest.raises(RuntimeError):
        engine.resolve_opponent_turn()


# ============================================
# 结算
# ============================================


def test_player_victory_credits_both_stakes():
    engine, wallet, _ = _engine([0.1])
    engine.join_battle(0.1)
    engine.player.health = 40

    report = engine.submit_action(ActionKind.SPECIAL)

    assert report.damage_dealt == 117
    assert report.match_ended is True
    assert report.winner == Side.PLAYER
    state = engine.get_state()
    assert state.phase == MatchPhase.SETTLING
    assert state.opponent.health == 0
    assert state.payout == pytest.approx(0.2)
    assert wallet.eth_balance == pytest.approx(2.34 + 0.2)


def test_opponent_victory_credits_nothing():
    engine, wallet, _ = _engine([NO_CRIT, 0.1, NO_CRIT])
    engine.join_battle(0.1)
    engine.player.health = 10

    engine.submit_action(ActionKind.ATTACK)
    report = engine.resolve_opponent_turn()

    assert report.kind == ActionKind.ATTACK
    assert report.match_ended is True
    assert report.winner == Side.OPPONENT
    assert engine.get_state().phase == MatchPhase.SETTLING
    assert wallet.eth_balance == pytest.approx(2.34)


def test_settling_blocks_actions_until_settlement_completes():
    engine, _, _ = _engine([0.1])
    engine.join_battle(0.1)
    engine.player.health = 40
    engine.submit_action(ActionKind.SPECIAL)

    with pytest.raises(NotPlayerTurn):
        engine.submit_action(ActionKind.ATTACK)
    with pytest.raises(AlreadyInBattle):
        engine.join_battle(0.1)

    assert engine.complete_settlement() is True
    assert engine.complete_settlement() is False

    state = engine.get_state()
    assert state.phase == MatchPhase.IDLE
    assert state.player.health == 100
    assert state.opponent.health == 100
    assert state.player.pending_defense_bonus == 0
    assert state.winner == Side.PLAYER


def test_cancel_discards_match_in_progress():
    engine, _, _ = _engine([NO_CRIT])
    engine.join_battle(0.1)
    engine.submit_action(ActionKind.ATTACK)

    assert engine.cancel() is True

    state = engine.get_state()
    assert state.phase == MatchPhase.IDLE
    assert state.opponent.health == 100
    assert engine.cancel() is False


# ============================================
# 回合计时
# ============================================


def test_turn_timer_counts_down_then_auto_defends():
    engine, _, _ = _engine([NO_CRIT])
    engine.join_battle(0.1)

    for expected in range(29, 0, -1):
        event = engine.tick_turn_timer()
        assert event.timed_out is False
        assert event.seconds_left == expected

    event = engine.tick_turn_timer()

    assert event.timed_out is True
    assert event.report.kind == ActionKind.DEFEND
    assert event.report.timed_out is True
    assert engine.player.pending_defense_bonus == 3
    assert engine.get_state().turn == Side.OPPONENT


def test_turn_timer_does_not_run_outside_player_turn():
    engine, _, _ = _engine([NO_CRIT])
    assert engine.tick_turn_timer().seconds_left == 30

    engine.join_battle(0.1)
    engine.submit_action(ActionKind.ATTACK)
    event = engine.tick_turn_timer()

    assert event.timed_out is False
    assert event.seconds_left == 30


# ============================================
# 不变量
# ============================================


@pytest.mark.parametrize("seed", [1, 7, 42, 2024])
def test_health_bounds_and_turn_alternation_over_full_match(seed):
    wallet = SimulatedWallet()
    wallet.connect()
    engine = BattleEngine(account=wallet, oracle_feed=_feed(1.5, -0.8), random_source=RandomSource(seed))
    engine.join_battle(0.1)

    for _ in range(500):
        state = engine.get_state()
        for combatant in (state.player, state.opponent):
            assert 0 <= combatant.health <= combatant.max_health
        if state.phase != MatchPhase.IN_PROGRESS:
            break

        if state.turn == Side.PLAYER:
            kind = ActionKind.SPECIAL if state.player.health < 50 else ActionKind.ATTACK
            report = engine.submit_action(kind)
            expected_next = Side.OPPONENT
        else:
            report = engine.resolve_opponent_turn()
            expected_next = Side.PLAYER

        if not report.match_ended:
            assert engine.get_state().turn == expected_next

    final = engine.get_state()
    assert final.phase == MatchPhase.SETTLING
    assert final.winner is not None
    assert final.combatant(final.winner.other).health == 0
