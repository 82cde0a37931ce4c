"""Tests for runtime module."""
import random

import pytest

from deadspot._types import MS_PER_MINUTE, MS_PER_SECOND
from deadspot.config import MiningConfig
from deadspot.errors import (
    CooldownActive,
    InsufficientCurrency,
    InsufficientEnergy,
    InsufficientFunds,
    InvalidInput,
)
from deadspot.runtime import MiningRuntime
from deadspot.state import PlayerState
from deadspot.upgrade import UpgradeKind

T0 = 1_700_000_000_000


def _runtime(state: PlayerState | None = None, seed: int = 0) -> MiningRuntime:
    return MiningRuntime(state=state, rng=random.Random(seed))


def test_initialization():
    rt = _runtime()
    state = rt.get_state()
    assert state.energy == 1000
    assert state.level == 1
    assert rt.prestige_multiplier() == 1.0
    assert rt.effective_click_power() == 1


def test_invalid_config():
    with pytest.raises(ValueError, match="Invalid MiningConfig"):
        MiningRuntime(MiningConfig(upgrade_growth=1.0))


# ── click ────────────────────────────────────────────────────────────


def test_first_click():
    rt = _runtime()
    result = rt.click()
    state = rt.get_state()
    assert state.energy == 999
    assert state.currency == pytest.approx(0.00001)
    assert state.experience == pytest.approx(0.10)
    assert state.production_rate == pytest.approx(0.000001)
    assert state.level == 1
    assert result.levels_gained == 0


def test_click_without_energy_changes_nothing():
    rt = _runtime(PlayerState(energy=0, currency=3.0, experience=7.0))
    before = rt.get_state().copy()
    with pytest.raises(InsufficientEnergy):
        rt.click()
    assert rt.get_state() == before


def test_click_with_upgrades():
    state = PlayerState.initial()
    state.upgrades[UpgradeKind.DOUBLE_CLICK] = 1
    state.upgrades[UpgradeKind.EXTRA_CLICK_POWER] = 2
    state.upgrades[UpgradeKind.EXPERIENCE_MULTIPLIER] = 1
    rt = _runtime(state)
    assert rt.effective_click_power() == 6
    result = rt.click()
    assert result.currency_gained == pytest.approx(0.00006)
    assert result.experience_gained == pytest.approx(0.20)
    assert result.production_gained == pytest.approx(0.000006)


def test_double_click_level_does_not_stack():
    state = PlayerState.initial()
    state.upgrades[UpgradeKind.DOUBLE_CLICK] = 5
    assert _runtime(state).effective_click_power() == 2


def test_click_scaled_by_prestige():
    rt = _runtime(PlayerState(prestige_level=2))
    result = rt.click()
    assert rt.prestige_multiplier() == pytest.approx(1.14)
    assert result.currency_gained == pytest.approx(0.00001 * 1.14)
    assert result.experience_gained == pytest.approx(0.10 * 1.14)


def test_single_level_up():
    rt = _runtime(PlayerState(experience=99.95))
    result = rt.click()
    state = rt.get_state()
    assert result.levels_gained == 1
    assert state.level == 2
    assert state.max_energy == 1000 + 31
    assert state.click_power == pytest.approx(5.0)


def test_multi_level_up_uses_pre_click_level_once():
    rt = _runtime(PlayerState(experience=299.95))
    result = rt.click()
    state = rt.get_state()
    assert result.levels_gained == 3
    assert state.level == 4
    # (30 + 1) per level gained, sized by the level before the click
    assert state.max_energy == 1000 + 3 * 31
    assert state.click_power == pytest.approx(1 + 3 * 4)


def test_level_up_click_power_scaled_by_prestige():
    rt = _runtime(PlayerState(experience=99.95, prestige_level=1))
    rt.click()
    assert rt.get_state().click_power == pytest.approx(1 + 4 * 1.07)


def test_energy_runs_out():
    rt = _runtime(PlayerState(energy=2))
    rt.click()
    rt.click()
    assert rt.get_state().energy == 0
    with pytest.raises(InsufficientEnergy):
        rt.click()


# ── tick ─────────────────────────────────────────────────────────────


def test_tick_zero_is_noop():
    rt = _runtime(PlayerState(energy=10, production_rate=0.5))
    before = rt.get_state().copy()
    for _ in range(5):
        rt.tick(0)
    assert rt.get_state() == before


def test_tick_regenerates_whole_seconds():
    rt = _runtime(PlayerState(energy=10))
    rt.tick(1500)
    assert rt.get_state().energy == 11
    rt.tick(500)
    assert rt.get_state().energy == 12


def test_tick_regen_speed_upgrade():
    state = PlayerState(energy=10)
    state.upgrades[UpgradeKind.ENERGY_REGEN_SPEED] = 2
    rt = _runtime(state)
    rt.tick(4 * MS_PER_SECOND)
    assert rt.get_state().energy == 10 + 4 * 3


def test_tick_energy_capped():
    rt = _runtime(PlayerState(energy=995))
    rt.tick(60 * MS_PER_SECOND)
    assert rt.get_state().energy == 1000


def test_tick_production_uses_fractional_seconds():
    rt = _runtime(PlayerState(production_rate=0.5))
    result = rt.tick(2500)
    assert result.currency_produced == pytest.approx(1.25)
    assert rt.get_state().currency == pytest.approx(1.25)


def test_tick_large_equals_incremental():
    big = _runtime(PlayerState(energy=0, production_rate=0.003))
    small = _runtime(PlayerState(energy=0, production_rate=0.003))
    big.tick(3 * 3600 * MS_PER_SECOND)
    for _ in range(3 * 3600):
        small.tick(MS_PER_SECOND)
    assert big.get_state().energy == small.get_state().energy == 1000
    assert big.get_state().currency == pytest.approx(small.get_state().currency)


def test_tick_uneven_slices_match_single_tick():
    sliced = _runtime(PlayerState(energy=0))
    for ms in (300, 450, 900, 1350, 2000):
        sliced.tick(ms)
    whole = _runtime(PlayerState(energy=0))
    whole.tick(5000)
    assert sliced.get_state().energy == whole.get_state().energy == 5


def test_tick_negative_rejected():
    rt = _runtime()
    with pytest.raises(InvalidInput):
        rt.tick(-1)


def test_advance_to_catches_up():
    rt = _runtime(PlayerState(energy=0, production_rate=1.0))
    assert rt.advance_to(T0).currency_produced == 0
    assert rt.get_state().last_tick_at == T0
    result = rt.advance_to(T0 + 10 * MS_PER_SECOND)
    assert result.currency_produced == pytest.approx(10.0)
    assert rt.get_state().energy == 10
    assert rt.get_state().last_tick_at == T0 + 10 * MS_PER_SECOND


def test_advance_to_ignores_clock_going_backwards():
    rt = _runtime(PlayerState(production_rate=1.0))
    rt.advance_to(T0)
    rt.advance_to(T0 - 5000)
    assert rt.get_state().currency == 0
    assert rt.get_state().last_tick_at == T0


def test_fast_forward_keeps_clock_and_ages_faucet():
    rt = _runtime(PlayerState(energy=0, production_rate=1.0))
    rt.advance_to(T0)
    rt.claim_faucet(T0)
    currency = rt.get_state().currency
    result = rt.fast_forward(30 * MS_PER_MINUTE)
    state = rt.get_state()
    assert result.currency_produced == pytest.approx(state.production_rate * 1800)
    assert state.currency == pytest.approx(currency + result.currency_produced)
    assert state.energy == 1000
    assert state.last_tick_at == T0
    assert state.last_faucet_claim_at == T0 - 30 * MS_PER_MINUTE
    assert rt.faucet_remaining_ms(T0) == 0


# ── faucet ───────────────────────────────────────────────────────────


def test_faucet_claim():
    rt = _runtime(seed=3)
    reward = rt.claim_faucet(T0)
    state = rt.get_state()
    assert 0.001 <= reward < 0.23
    assert state.currency == pytest.approx(reward)
    assert state.production_rate == pytest.approx(reward / 1000)
    assert state.last_faucet_claim_at == T0


def test_faucet_cooldown():
    rt = _runtime()
    rt.claim_faucet(T0)
    before = rt.get_state().copy()
    with pytest.raises(CooldownActive) as exc:
        rt.claim_faucet(T0 + 10 * MS_PER_MINUTE)
    assert exc.value.remaining_minutes == 20
    assert rt.get_state() == before


def test_faucet_remaining_minutes_round_up():
    rt = _runtime()
    rt.claim_faucet(T0)
    with pytest.raises(CooldownActive) as exc:
        rt.claim_faucet(T0 + 30 * MS_PER_MINUTE - 500)
    assert exc.value.remaining_minutes == 1


def test_faucet_ready_after_cooldown():
    rt = _runtime()
    rt.claim_faucet(T0)
    assert rt.faucet_remaining_ms(T0 + 30 * MS_PER_MINUTE) == 0
    rt.claim_faucet(T0 + 30 * MS_PER_MINUTE)
    assert rt.get_state().last_faucet_claim_at == T0 + 30 * MS_PER_MINUTE


# ── upgrades ─────────────────────────────────────────────────────────


def test_buy_upgrade():
    rt = _runtime(PlayerState(currency=150))
    paid = rt.buy_upgrade(UpgradeKind.DOUBLE_CLICK, 100)
    state = rt.get_state()
    assert paid == 100
    assert state.currency == pytest.approx(50)
    assert state.upgrade_level(UpgradeKind.DOUBLE_CLICK) == 1
    assert rt.upgrade_cost(UpgradeKind.DOUBLE_CLICK) == pytest.approx(150)


def test_buy_upgrade_recomputes_cost():
    rt = _runtime(PlayerState(currency=1000))
    rt.buy_upgrade(UpgradeKind.EXTRA_CLICK_POWER)
    rt.buy_upgrade(UpgradeKind.EXTRA_CLICK_POWER)
    assert rt.get_state().currency == pytest.approx(1000 - 50 - 75)


def test_buy_upgrade_stale_quote_rejected():
    rt = _runtime(PlayerState(currency=1000))
    rt.buy_upgrade(UpgradeKind.EXPERIENCE_MULTIPLIER)
    before = rt.get_state().copy()
    with pytest.raises(InvalidInput):
        rt.buy_upgrade(UpgradeKind.EXPERIENCE_MULTIPLIER, 200)
    assert rt.get_state() == before


def test_buy_upgrade_insufficient_funds():
    rt = _runtime(PlayerState(currency=299.99))
    before = rt.get_state().copy()
    with pytest.raises(InsufficientFunds) as exc:
        rt.buy_upgrade(UpgradeKind.ENERGY_REGEN_SPEED)
    assert exc.value.required == 300
    assert rt.get_state() == before


def test_buy_upgrade_unknown_kind():
    rt = _runtime(PlayerState(currency=1000))
    with pytest.raises(InvalidInput):
        rt.buy_upgrade("doubleClick")


def test_upgrade_counters_are_independent():
    rt = _runtime(PlayerState(currency=10_000))
    rt.buy_upgrade(UpgradeKind.DOUBLE_CLICK)
    rt.buy_upgrade(UpgradeKind.DOUBLE_CLICK)
    costs = rt.upgrade_costs()
    assert costs[UpgradeKind.DOUBLE_CLICK] == pytest.approx(225)
    assert costs[UpgradeKind.EXTRA_CLICK_POWER] == 50
    assert costs[UpgradeKind.EXPERIENCE_MULTIPLIER] == 200
    assert costs[UpgradeKind.ENERGY_REGEN_SPEED] == 300


# ── prestige and reset ───────────────────────────────────────────────


def test_prestige_below_threshold():
    rt = _runtime(PlayerState(currency=499_999.99, level=3))
    before = rt.get_state().copy()
    with pytest.raises(InsufficientCurrency):
        rt.attempt_prestige()
    assert rt.get_state() == before


def test_prestige_at_threshold():
    state = PlayerState(
        currency=500_000,
        experience=450.0,
        level=3,
        energy=12,
        max_energy=1100,
        click_power=9,
        production_rate=0.4,
        prestige_level=1,
        prestige_currency=700_000,
        last_faucet_claim_at=T0,
    )
    for kind in UpgradeKind:
        state.upgrades[kind] = 4
    rt = _runtime(state)
    result = rt.attempt_prestige()

    s = rt.get_state()
    assert result.prestige_level == 2
    assert result.archived_currency == 500_000
    assert s.prestige_level == 2
    assert s.prestige_currency == 1_200_000
    assert result.multiplier == pytest.approx(1.14)
    fresh = PlayerState.initial()
    assert s.currency == fresh.currency
    assert s.experience == fresh.experience
    assert s.level == fresh.level
    assert s.energy == fresh.energy
    assert s.max_energy == fresh.max_energy
    assert s.click_power == fresh.click_power
    assert s.production_rate == fresh.production_rate
    assert s.last_faucet_claim_at is None
    assert all(s.upgrade_level(k) == 0 for k in UpgradeKind)
    assert rt.can_prestige() is False


def test_reset_game_clears_prestige():
    rt = _runtime(PlayerState(currency=42, prestige_level=3, prestige_currency=9e6))
    rt.reset_game()
    assert rt.get_state() == PlayerState.initial()
    rt.reset_game()
    assert rt.get_state() == PlayerState.initial()
