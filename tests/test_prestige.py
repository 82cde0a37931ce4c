"""Tests for prestige module."""
import json

import pytest

from deadspot.config import MiningConfig
from deadspot.errors import InsufficientCurrency
from deadspot.prestige import apply_prestige, can_prestige, prestige_multiplier
from deadspot.state import PlayerState


def test_multiplier():
    assert prestige_multiplier(0) == 1.0
    assert prestige_multiplier(1) == pytest.approx(1.07)
    assert prestige_multiplier(10) == pytest.approx(1.7)
    assert prestige_multiplier(2, bonus_per_level=0.5) == 2.0


def test_threshold_is_inclusive():
    config = MiningConfig()
    assert can_prestige(PlayerState(currency=500_000), config)
    assert not can_prestige(PlayerState(currency=499_999.999), config)


def test_rejected_prestige_leaves_snapshot_identical():
    state = PlayerState(currency=1234.5, level=7, prestige_level=2, prestige_currency=10)
    before = json.dumps(state.to_dict(), sort_keys=True)
    with pytest.raises(InsufficientCurrency) as exc:
        apply_prestige(state, MiningConfig())
    assert exc.value.required == 500_000
    assert json.dumps(state.to_dict(), sort_keys=True) == before


def test_prestige_accumulates_across_runs():
    config = MiningConfig(prestige_threshold=100)
    state = PlayerState.initial(config)
    for expected_level, earned in enumerate((150.0, 100.0, 320.0), start=1):
        state.currency = earned
        result = apply_prestige(state, config)
        assert result.prestige_level == expected_level
    assert state.prestige_level == 3
    assert state.prestige_currency == pytest.approx(570.0)
    assert state.currency == 0.0


def test_prestige_keeps_tick_clock():
    state = PlayerState(currency=600_000, last_tick_at=1_700_000_000_000)
    apply_prestige(state, MiningConfig())
    assert state.last_tick_at == 1_700_000_000_000
