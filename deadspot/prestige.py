from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from deadspot.config import MiningConfig
from deadspot.errors import InsufficientCurrency
from deadspot.state import PlayerState


def prestige_multiplier(prestige_level: int, bonus_per_level: float = 0.07) -> float:
    """Permanent gain multiplier granted by *prestige_level*."""
    return 1.0 + prestige_level * bonus_per_level


@dataclass(frozen=True)
class PrestigeResult:
    """Outcome of a successful prestige reset."""

    archived_currency: float
    prestige_level: int
    prestige_currency: float
    multiplier: float


def can_prestige(state: PlayerState, config: MiningConfig) -> bool:
    return state.currency >= config.prestige_threshold


def apply_prestige(state: PlayerState, config: MiningConfig) -> PrestigeResult:
    """Archive currency into the prestige pool and reset transient progress.

    Only ``prestige_level`` and ``prestige_currency`` survive. Raises
    InsufficientCurrency below the threshold, leaving *state* untouched.
    """
    if not can_prestige(state, config):
        raise InsufficientCurrency(config.prestige_threshold, state.currency)

    archived = state.currency
    level = state.prestige_level + 1
    pool = state.prestige_currency + archived
    last_tick_at = state.last_tick_at

    fresh = PlayerState.initial(config)
    fresh.prestige_level = level
    fresh.prestige_currency = pool
    fresh.last_tick_at = last_tick_at
    state.restore(fresh)

    mult = prestige_multiplier(level, config.prestige_bonus_per_level)
    logger.info(
        f"Prestige {level} reached: archived {archived:.6f} DEADSPOT, "
        f"multiplier now x{mult:.2f}"
    )
    return PrestigeResult(
        archived_currency=archived,
        prestige_level=level,
        prestige_currency=pool,
        multiplier=mult,
    )
