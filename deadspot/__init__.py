# deadspot - Crypto Staking Simulator & DEADSPOT Idle Mining Engine

from deadspot._types import Millis, MS_PER_SECOND, MS_PER_MINUTE, MS_PER_HOUR, MS_PER_DAY
from deadspot.errors import (
    DeadspotError,
    InvalidInput,
    InsufficientBalance,
    InsufficientEnergy,
    InsufficientFunds,
    InsufficientCurrency,
    CooldownActive,
)
from deadspot.config import StakingConfig, MiningConfig
from deadspot.rates import CryptoInfo, RATE_TABLE, get_crypto
from deadspot.cost_scaling import CostScaling, cost_for
from deadspot.upgrade import UpgradeKind, UpgradeDef, UPGRADES
from deadspot.deposit import Deposit, DepositStatus
from deadspot.verification import VerificationProcess
from deadspot.staking import StakingEngine, StakingSummary, WithdrawalTicket
from deadspot.state import PlayerState
from deadspot.prestige import PrestigeResult, prestige_multiplier
from deadspot.runtime import MiningRuntime, ClickResult, TickResult
from deadspot.persistence import SnapshotStore
from deadspot.session import SessionManager, PlayerSession

__all__ = [
    # Types
    "Millis",
    "MS_PER_SECOND",
    "MS_PER_MINUTE",
    "MS_PER_HOUR",
    "MS_PER_DAY",
    # Errors
    "DeadspotError",
    "InvalidInput",
    "InsufficientBalance",
    "InsufficientEnergy",
    "InsufficientFunds",
    "InsufficientCurrency",
    "CooldownActive",
    # Config
    "StakingConfig",
    "MiningConfig",
    "CryptoInfo",
    "RATE_TABLE",
    "get_crypto",
    # Cost
    "CostScaling",
    "cost_for",
    "UpgradeKind",
    "UpgradeDef",
    "UPGRADES",
    # Staking
    "Deposit",
    "DepositStatus",
    "VerificationProcess",
    "StakingEngine",
    "StakingSummary",
    "WithdrawalTicket",
    # Mining
    "PlayerState",
    "PrestigeResult",
    "prestige_multiplier",
    "MiningRuntime",
    "ClickResult",
    "TickResult",
    # Persistence and sessions
    "SnapshotStore",
    "SessionManager",
    "PlayerSession",
]
