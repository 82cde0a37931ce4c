from __future__ import annotations

import math
import random
from dataclasses import dataclass

from loguru import logger

from deadspot._types import MS_PER_MINUTE, MS_PER_SECOND, Millis
from deadspot.config import MiningConfig
from deadspot.cost_scaling import CostScaling
from deadspot.errors import (
    CooldownActive,
    InsufficientEnergy,
    InsufficientFunds,
    InvalidInput,
)
from deadspot.prestige import (
    PrestigeResult,
    apply_prestige,
    can_prestige,
    prestige_multiplier,
)
from deadspot.state import PlayerState
from deadspot.upgrade import UpgradeKind, base_cost


@dataclass(frozen=True)
class ClickResult:
    """Gains from a single click."""

    currency_gained: float
    experience_gained: float
    production_gained: float
    levels_gained: int


@dataclass(frozen=True)
class TickResult:
    """What one tick added."""

    energy_regenerated: float
    currency_produced: float


class MiningRuntime:
    """Authoritative DEADSPOT mining logic processor for one player."""

    def __init__(
        self,
        config: MiningConfig | None = None,
        state: PlayerState | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or MiningConfig()
        errors = self.config.validate()
        if errors:
            raise ValueError(
                "Invalid MiningConfig:\n" + "\n".join(f"  - {e}" for e in errors)
            )
        self.state = state if state is not None else PlayerState.initial(self.config)
        self.rng = rng or random.Random()
        self.cost_scaling = CostScaling.exponential(self.config.upgrade_growth)

    # ── Core loop ────────────────────────────────────────────────────

    def tick(self, elapsed_ms: float) -> TickResult:
        """Advance the game by *elapsed_ms* milliseconds.

        Energy regenerates per whole second (remainders carry over to the next
        tick); passive production accrues over fractional seconds too.
        """
        if elapsed_ms < 0 or not math.isfinite(elapsed_ms):
            raise InvalidInput(f"elapsed_ms must be a finite value >= 0, got {elapsed_ms}")
        if elapsed_ms == 0:
            return TickResult(0.0, 0.0)

        s = self.state
        pending_ms = s.regen_remainder_ms + elapsed_ms
        whole_seconds = math.floor(pending_ms / MS_PER_SECOND)
        regen_per_second = 1 + s.upgrade_level(UpgradeKind.ENERGY_REGEN_SPEED)

        energy_before = s.energy
        if s.energy < s.max_energy:
            s.energy = min(s.energy + whole_seconds * regen_per_second, s.max_energy)
        s.regen_remainder_ms = pending_ms - whole_seconds * MS_PER_SECOND

        produced = s.production_rate * (elapsed_ms / MS_PER_SECOND)
        s.currency += produced
        return TickResult(s.energy - energy_before, produced)

    def advance_to(self, now: Millis) -> TickResult:
        """Catch up on time elapsed since the last advance (e.g. while offline)."""
        s = self.state
        if s.last_tick_at is None:
            s.last_tick_at = now
            return TickResult(0.0, 0.0)
        if now <= s.last_tick_at:
            return TickResult(0.0, 0.0)
        elapsed = now - s.last_tick_at
        result = self.tick(elapsed)
        s.last_tick_at = now
        if elapsed > self.config.tick_interval_ms:
            logger.debug(
                f"Caught up {elapsed / MS_PER_SECOND:.0f}s: "
                f"+{result.currency_produced:.8f} DEADSPOT, "
                f"+{result.energy_regenerated:.0f} energy"
            )
        return result

    def fast_forward(self, elapsed_ms: Millis) -> TickResult:
        """Simulate *elapsed_ms* of play without moving the clock.

        The faucet cooldown ages by the same amount, so the stored claim time
        stays in the past.
        """
        result = self.tick(elapsed_ms)
        s = self.state
        if s.last_faucet_claim_at is not None:
            s.last_faucet_claim_at -= int(elapsed_ms)
        return result

    # ── Player actions ───────────────────────────────────────────────

    def click(self) -> ClickResult:
        """Mine once by hand. Raises InsufficientEnergy with no energy left."""
        s = self.state
        if s.energy <= 0:
            logger.debug("Click rejected: no energy")
            raise InsufficientEnergy()

        cfg = self.config
        power = self.effective_click_power()
        mult = self.prestige_multiplier()

        currency_gain = cfg.click_currency_factor * power * mult
        exp_gain = (
            cfg.click_experience_base
            * (1 + s.upgrade_level(UpgradeKind.EXPERIENCE_MULTIPLIER))
            * mult
        )
        production_gain = cfg.click_production_factor * power * mult

        new_exp = s.experience + exp_gain
        new_level = math.floor(new_exp / (cfg.experience_per_level * s.level)) + s.level
        levels_gained = new_level - s.level

        # One step sized by the pre-click level, scaled by levels gained.
        s.max_energy += levels_gained * (cfg.level_up_energy_base + s.level)
        s.click_power += levels_gained * cfg.level_up_click_power * mult
        s.currency += currency_gain
        s.experience = new_exp
        s.level = new_level
        s.energy = max(0.0, s.energy - 1)
        s.production_rate += production_gain

        if levels_gained:
            logger.debug(f"Level up: {new_level - levels_gained} -> {new_level}")
        return ClickResult(currency_gain, exp_gain, production_gain, levels_gained)

    def claim_faucet(self, now: Millis) -> float:
        """Claim the free faucet reward. Returns the amount granted.

        Raises CooldownActive while the cooldown window is open.
        """
        remaining = self.faucet_remaining_ms(now)
        if remaining > 0:
            minutes = math.ceil(remaining / MS_PER_MINUTE)
            logger.debug(f"Faucet rejected: {minutes} minute(s) left")
            raise CooldownActive(minutes)

        cfg = self.config
        reward = (
            self.rng.random() * (cfg.faucet_max_reward - cfg.faucet_min_reward)
            + cfg.faucet_min_reward
        )
        s = self.state
        s.currency += reward
        s.production_rate += reward / cfg.faucet_rate_divisor
        s.last_faucet_claim_at = now
        logger.info(f"Faucet claimed: {reward:.6f} DEADSPOT")
        return reward

    def buy_upgrade(self, kind: UpgradeKind, cost: float | None = None) -> float:
        """Buy one level of *kind*. Returns the cost paid.

        The price is always recomputed from the current level; a *cost* quoted
        by the caller must match it. Raises InvalidInput or InsufficientFunds.
        """
        if not isinstance(kind, UpgradeKind):
            raise InvalidInput(f"Unknown upgrade kind: {kind!r}")
        price = self.upgrade_cost(kind)
        if cost is not None and not math.isclose(cost, price, rel_tol=1e-9):
            raise InvalidInput(
                f"Quoted cost {cost} does not match current price {price} "
                f"for {kind.value}"
            )

        s = self.state
        if s.currency < price:
            logger.debug(f"Upgrade {kind.value} rejected: need {price}, have {s.currency}")
            raise InsufficientFunds(price, s.currency)

        s.currency -= price
        s.upgrades[kind] = s.upgrade_level(kind) + 1
        logger.debug(f"Upgrade {kind.value} -> level {s.upgrades[kind]} for {price}")
        return price

    def attempt_prestige(self) -> PrestigeResult:
        """Trade all transient progress for a permanent multiplier.

        Raises InsufficientCurrency below the threshold.
        """
        return apply_prestige(self.state, self.config)

    def reset_game(self) -> None:
        """Return to the initial state, prestige included."""
        self.state.restore(PlayerState.initial(self.config))
        logger.debug("Game reset to initial state")

    # ── Queries ──────────────────────────────────────────────────────

    def get_state(self) -> PlayerState:
        """Return live reference to player state."""
        return self.state

    def prestige_multiplier(self) -> float:
        return prestige_multiplier(
            self.state.prestige_level, self.config.prestige_bonus_per_level
        )

    def prestige_bonus_percent(self) -> float:
        return self.state.prestige_level * self.config.prestige_bonus_per_level * 100

    def click_multiplier(self) -> int:
        return 2 if self.state.upgrade_level(UpgradeKind.DOUBLE_CLICK) > 0 else 1

    def effective_click_power(self) -> float:
        s = self.state
        base = s.click_power + s.upgrade_level(UpgradeKind.EXTRA_CLICK_POWER)
        return base * self.click_multiplier()

    def energy_fraction(self) -> float:
        return self.state.energy / self.state.max_energy

    def upgrade_cost(self, kind: UpgradeKind) -> float:
        return self.cost_scaling.compute(
            base_cost(kind), self.state.upgrade_level(kind)
        )

    def upgrade_costs(self) -> dict[UpgradeKind, float]:
        return {kind: self.upgrade_cost(kind) for kind in UpgradeKind}

    def can_prestige(self) -> bool:
        return can_prestige(self.state, self.config)

    def faucet_remaining_ms(self, now: Millis) -> Millis:
        """Milliseconds until the faucet can be claimed again (0 if ready)."""
        last = self.state.last_faucet_claim_at
        if last is None:
            return 0
        return max(0, self.config.faucet_cooldown_ms - (now - last))
