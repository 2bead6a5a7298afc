import pytest

from arena.combat.errors import InsufficientBalance, NotConnected
from arena.combat.loot import INITIAL_NONCE, LootResolver, pick_band
from arena.combat.models.combatant import default_player
from arena.combat.random_source import ScriptedRandomSource
from arena.wallet import SimulatedWallet


def _resolver(values, supra_balance=10.0, connected=True):
    wallet = SimulatedWallet()
    if connected:
        wallet.connect(supra_balance=supra_balance)
    rng = ScriptedRandomSource(values)
    return LootResolver(account=wallet, random_source=rng), wallet, rng


@pytest.mark.parametrize(
    "roll, reward",
    [
        (0.0, "legendary_sword"),
        (0.0499, "legendary_sword"),
        (0.05, "rare_crystal"),
        (0.1499, "rare_crystal"),
        (0.15, "power_core"),
        (0.30, "health_elixir"),
        (0.4999, "health_elixir"),
        (0.50, "token_reward"),
        (0.9999, "token_reward"),
    ],
)
def test_pick_band_uses_cumulative_thresholds(roll, reward):
    assert pick_band(roll)["reward"] == reward


def test_rare_crystal_with_exact_cost_balance():
    resolver, wallet, _ = _resolver([0.10])
    outcome = resolver.open(default_player())

    assert outcome.reward == "rare_crystal"
    assert outcome.currency_delta == 50
    assert outcome.balance_after == pytest.approx(50.0)
    assert wallet.supra_balance == pytest.approx(50.0)


def test_token_reward_nets_five_supra_back():
    resolver, wallet, _ = _resolver([0.75])
    outcome = resolver.open(default_player())

    assert outcome.reward == "token_reward"
    assert wallet.supra_balance == pytest.approx(5.0)


def test_legendary_sword_raises_attack():
    player = default_player()
    resolver, wallet, _ = _resolver([0.01])

    outcome = resolver.open(player)

    assert outcome.attack_delta == 15
    assert player.attack == 40
    assert wallet.supra_balance == pytest.approx(0.0)


def test_health_elixir_restores_player():
    player = default_player()
    player.health = 12
    resolver, _, _ = _resolver([0.4])

    outcome = resolver.open(player)

    assert outcome.healed is True
    assert player.health == player.max_health


def test_power_core_only_records_the_outcome():
    player = default_player()
    resolver, wallet, _ = _resolver([0.2])

    outcome = resolver.open(player)

    assert outcome.reward == "power_core"
    assert outcome.attack_delta == 0
    assert outcome.currency_delta == 0
    assert player.attack == 25
    assert wallet.supra_balance == pytest.approx(0.0)


def test_insufficient_balance_rejects_without_side_effects():
    player = default_player()
    resolver, wallet, rng = _resolver([0.01], supra_balance=9.0)

    with pytest.raises(InsufficientBalance):
        resolver.open(player)

    assert wallet.supra_balance == pytest.approx(9.0)
    assert player.attack == 25
    assert rng.consumed == 0
    assert resolver.nonce == INITIAL_NONCE


def test_loot_requires_connected_wallet():
    resolver, _, _ = _resolver([0.5], connected=False)
    with pytest.raises(NotConnected):
        resolver.open(default_player())


def test_nonce_increments_per_opening():
    resolver, _, _ = _resolver([0.6, 0.6], supra_balance=100.0)

    first = resolver.open(default_player())
    second = resolver.open(default_player())

    assert first.nonce == INITIAL_NONCE + 1
    assert second.nonce == INITIAL_NONCE + 2
    assert first.seed.startswith("0x")
