from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Any

from loguru import logger

from deadspot._types import MS_PER_DAY, MS_PER_HOUR, Millis, clamp
from deadspot.config import StakingConfig
from deadspot.deposit import Deposit, DepositStatus
from deadspot.errors import InsufficientBalance, InvalidInput
from deadspot.rates import RATE_TABLE, CryptoInfo, get_crypto
from deadspot.verification import VerificationProcess


def accrued_yield(deposit: Deposit, now: Millis, verified: bool) -> float:
    """Linear yield of *deposit* at *now*, capped at its term.

    The quoted percentage is spread evenly over the term, so a deposit pays
    exactly ``annual_rate_percent`` of its principal once the term completes.
    """
    if not verified:
        return 0.0
    days = clamp((now - deposit.created_at) / MS_PER_DAY, 0.0, deposit.term_days)
    daily_rate = deposit.annual_rate_percent / 100 / deposit.term_days
    return deposit.principal * daily_rate * days


@dataclass(frozen=True)
class WithdrawalTicket:
    """Informational withdrawal receipt. No balance is deducted."""

    crypto_kind: str
    amount: float
    destination_address: str
    requested_at: Millis
    settlement_delay_hours: int

    @property
    def settles_at(self) -> Millis:
        return self.requested_at + self.settlement_delay_hours * MS_PER_HOUR


@dataclass(frozen=True)
class StakingSummary:
    """Aggregate staking figures at a point in time."""

    total_balance: float
    total_earnings: float
    active_deposits: int
    pending_deposits: int


class StakingEngine:
    """Owns the deposit collection and derives balances from elapsed time."""

    def __init__(
        self,
        config: StakingConfig | None = None,
        deposits: list[Deposit] | None = None,
        rate_table: dict[str, CryptoInfo] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or StakingConfig()
        errors = self.config.validate()
        if errors:
            raise ValueError(
                "Invalid StakingConfig:\n" + "\n".join(f"  - {e}" for e in errors)
            )
        self.rate_table = RATE_TABLE if rate_table is None else rate_table
        self.deposits: list[Deposit] = list(deposits) if deposits else []
        self.verification = VerificationProcess(self.config.verification_delay_ms)
        self.rng = rng or random.Random()

    # ── Deposits ─────────────────────────────────────────────────────

    def submit_deposit(
        self,
        crypto_kind: str,
        principal: float,
        term_days: int,
        external_tx_ref: str,
        now: Millis,
    ) -> Deposit:
        """Record a new pending deposit. Raises InvalidInput."""
        info = get_crypto(crypto_kind, self.rate_table)
        principal = _positive_amount(principal, "principal")
        term_days = _positive_int(term_days, "term_days")
        if not isinstance(external_tx_ref, str) or not external_tx_ref.strip():
            raise InvalidInput("external_tx_ref must be a non-empty string")

        deposit = Deposit(
            id=self._next_id(now),
            crypto_kind=info.id,
            principal=principal,
            annual_rate_percent=info.annual_rate_percent,
            term_days=term_days,
            external_tx_ref=external_tx_ref.strip(),
            created_at=now,
            verified=False,
        )
        self.deposits.append(deposit)
        logger.debug(
            f"Deposit {deposit.id} submitted: {principal} {info.display_name} "
            f"for {term_days}d at {info.annual_rate_percent}%"
        )
        return deposit

    def refresh_verification(self, now: Millis) -> list[Deposit]:
        """Persist pending -> verified transitions that are due at *now*."""
        return self.verification.refresh(self.deposits, now)

    def age_deposits(self, elapsed_ms: Millis, now: Millis) -> list[Deposit]:
        """Shift every deposit *elapsed_ms* into the past, then refresh at *now*.

        Simulates waiting without moving the clock, so stored timestamps never
        run ahead of real time.
        """
        if elapsed_ms < 0:
            raise InvalidInput(f"elapsed_ms must be >= 0, got {elapsed_ms}")
        for dep in self.deposits:
            dep.created_at -= elapsed_ms
        return self.refresh_verification(now)

    def get_deposit(self, deposit_id: str) -> Deposit | None:
        for dep in self.deposits:
            if dep.id == deposit_id:
                return dep
        return None

    def status(self, deposit: Deposit, now: Millis) -> DepositStatus:
        return deposit.status_at(now, self.verification.delay_ms)

    # ── Accrual ──────────────────────────────────────────────────────

    def accrued_yield(self, deposit: Deposit, now: Millis) -> float:
        """Earnings-only component for *deposit*."""
        return accrued_yield(deposit, now, self.verification.is_verified(deposit, now))

    def accrued_value(self, deposit: Deposit, now: Millis) -> float:
        """Principal plus yield for verified deposits, zero while pending."""
        if not self.verification.is_verified(deposit, now):
            return 0.0
        return deposit.principal + accrued_yield(deposit, now, True)

    def total_balance(self, now: Millis) -> float:
        return sum(self.accrued_value(d, now) for d in self.deposits)

    def total_earnings(self, now: Millis) -> float:
        return sum(self.accrued_yield(d, now) for d in self.deposits)

    def active_deposit_count(self, now: Millis) -> int:
        return sum(1 for d in self.deposits if self.verification.is_verified(d, now))

    def summary(self, now: Millis) -> StakingSummary:
        active = self.active_deposit_count(now)
        return StakingSummary(
            total_balance=self.total_balance(now),
            total_earnings=self.total_earnings(now),
            active_deposits=active,
            pending_deposits=len(self.deposits) - active,
        )

    # ── Withdrawals ──────────────────────────────────────────────────

    def request_withdrawal(
        self,
        crypto_kind: str,
        amount: float,
        destination_address: str,
        now: Millis,
    ) -> WithdrawalTicket:
        """Validate a withdrawal against the current balance and issue a ticket.

        Raises InvalidInput or InsufficientBalance. Deposits are not modified.
        """
        info = get_crypto(crypto_kind, self.rate_table)
        amount = _positive_amount(amount, "amount")
        if not isinstance(destination_address, str) or not destination_address.strip():
            raise InvalidInput("destination_address must be a non-empty string")

        available = self.total_balance(now)
        if amount > available:
            logger.debug(f"Withdrawal of {amount} rejected, balance {available}")
            raise InsufficientBalance(amount, available)

        hours = self.rng.randint(
            self.config.withdrawal_min_hours, self.config.withdrawal_max_hours
        )
        ticket = WithdrawalTicket(
            crypto_kind=info.id,
            amount=amount,
            destination_address=destination_address.strip(),
            requested_at=now,
            settlement_delay_hours=hours,
        )
        logger.info(
            f"Withdrawal of {amount} {info.display_name} queued, estimated {hours}h"
        )
        return ticket

    # ── Snapshots ────────────────────────────────────────────────────

    def snapshot(self) -> list[dict[str, Any]]:
        return [d.to_dict() for d in self.deposits]

    @staticmethod
    def parse_snapshot(data: Any) -> list[Deposit]:
        """Decode a persisted deposit list. Raises InvalidInput if malformed."""
        if data is None:
            return []
        if not isinstance(data, list):
            raise InvalidInput(
                f"Deposit snapshot must be a list, got {type(data).__name__}"
            )
        deposits: list[Deposit] = []
        for entry in data:
            if not isinstance(entry, dict):
                raise InvalidInput("Deposit snapshot entries must be objects")
            deposits.append(Deposit.from_dict(entry))
        return deposits

    # ── Private helpers ──────────────────────────────────────────────

    def _next_id(self, now: Millis) -> str:
        taken = {d.id for d in self.deposits}
        candidate = str(now)
        suffix = 1
        while candidate in taken:
            candidate = f"{now}-{suffix}"
            suffix += 1
        return candidate


def _positive_amount(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(f"{name} must be a number, got {value!r}")
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise InvalidInput(f"{name} must be a positive number, got {value!r}")
    return value


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidInput(f"{name} must be a whole number, got {value!r}")
    value = int(value)
    if value <= 0:
        raise InvalidInput(f"{name} must be positive, got {value}")
    return value
