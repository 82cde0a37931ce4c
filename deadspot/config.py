from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from deadspot._types import MS_PER_MINUTE, MS_PER_SECOND, Millis

DATA_DIR_ENV = "DEADSPOT_DATA_DIR"


def get_data_dir() -> Path:
    """Directory holding persisted snapshots."""
    return Path(
        os.getenv(DATA_DIR_ENV, os.path.join(os.path.expanduser("~"), ".deadspot"))
    )


@dataclass
class StakingConfig:
    """Constants for the staking engine."""

    verification_delay_ms: Millis = 2 * MS_PER_SECOND
    withdrawal_min_hours: int = 10
    withdrawal_max_hours: int = 48

    def validate(self) -> list[str]:
        errors: list[str] = []
        if self.verification_delay_ms < 0:
            errors.append(
                f"verification_delay_ms must be >= 0, got {self.verification_delay_ms}"
            )
        if self.withdrawal_min_hours < 0:
            errors.append(
                f"withdrawal_min_hours must be >= 0, got {self.withdrawal_min_hours}"
            )
        if self.withdrawal_max_hours < self.withdrawal_min_hours:
            errors.append(
                "withdrawal_max_hours must be >= withdrawal_min_hours "
                f"({self.withdrawal_max_hours} < {self.withdrawal_min_hours})"
            )
        return errors


@dataclass
class MiningConfig:
    """Tuning constants for the DEADSPOT idle game."""

    tick_interval_ms: Millis = MS_PER_SECOND
    initial_energy: float = 1000.0

    # Clicking
    click_currency_factor: float = 0.00001
    click_experience_base: float = 0.10
    click_production_factor: float = 0.000001

    # Leveling
    experience_per_level: float = 100.0
    level_up_energy_base: float = 30.0
    level_up_click_power: float = 4.0

    # Faucet
    faucet_cooldown_ms: Millis = 30 * MS_PER_MINUTE
    faucet_min_reward: float = 0.001
    faucet_max_reward: float = 0.23
    faucet_rate_divisor: float = 1000.0

    # Upgrades and prestige
    upgrade_growth: float = 1.5
    prestige_threshold: float = 500_000.0
    prestige_bonus_per_level: float = 0.07

    def validate(self) -> list[str]:
        errors: list[str] = []
        if self.tick_interval_ms <= 0:
            errors.append(f"tick_interval_ms must be > 0, got {self.tick_interval_ms}")
        if self.initial_energy <= 0:
            errors.append(f"initial_energy must be > 0, got {self.initial_energy}")
        if self.experience_per_level <= 0:
            errors.append(
                f"experience_per_level must be > 0, got {self.experience_per_level}"
            )
        if self.faucet_cooldown_ms < 0:
            errors.append(
                f"faucet_cooldown_ms must be >= 0, got {self.faucet_cooldown_ms}"
            )
        if not 0 <= self.faucet_min_reward < self.faucet_max_reward:
            errors.append(
                "faucet reward range must satisfy 0 <= min < max, got "
                f"[{self.faucet_min_reward}, {self.faucet_max_reward})"
            )
        if self.faucet_rate_divisor <= 0:
            errors.append(
                f"faucet_rate_divisor must be > 0, got {self.faucet_rate_divisor}"
            )
        if self.upgrade_growth <= 1.0:
            errors.append(f"upgrade_growth must be > 1, got {self.upgrade_growth}")
        if self.prestige_threshold <= 0:
            errors.append(
                f"prestige_threshold must be > 0, got {self.prestige_threshold}"
            )
        return errors
