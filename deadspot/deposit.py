from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from deadspot._types import Millis
from deadspot.errors import InvalidInput


class DepositStatus(Enum):
    PENDING = "pending"
    VERIFIED = "verified"


@dataclass
class Deposit:
    """A simulated stake declared by the user."""

    id: str
    crypto_kind: str
    principal: float
    annual_rate_percent: float
    term_days: int
    external_tx_ref: str
    created_at: Millis
    verified: bool = False

    def is_verified_at(self, now: Millis, verification_delay_ms: Millis) -> bool:
        """Verified if flagged, or if the verification delay has elapsed."""
        return self.verified or now - self.created_at >= verification_delay_ms

    def status_at(self, now: Millis, verification_delay_ms: Millis) -> DepositStatus:
        if self.is_verified_at(now, verification_delay_ms):
            return DepositStatus.VERIFIED
        return DepositStatus.PENDING

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "crypto": self.crypto_kind,
            "amount": self.principal,
            "percentage": self.annual_rate_percent,
            "duration": self.term_days,
            "transactionId": self.external_tx_ref,
            "timestamp": self.created_at,
            "verified": self.verified,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Deposit:
        """Rebuild a deposit from a snapshot entry. Raises InvalidInput."""
        try:
            deposit = cls(
                id=str(data["id"]),
                crypto_kind=str(data["crypto"]),
                principal=_finite(data, "amount"),
                annual_rate_percent=_finite(data, "percentage"),
                term_days=int(data["duration"]),
                external_tx_ref=str(data.get("transactionId", "")),
                created_at=int(_finite(data, "timestamp")),
                verified=bool(data.get("verified", False)),
            )
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise InvalidInput(f"Malformed deposit snapshot: {e}") from e
        if deposit.principal <= 0 or deposit.term_days <= 0:
            raise InvalidInput(
                f"Deposit {deposit.id!r} has non-positive amount or duration"
            )
        return deposit


def _finite(data: dict[str, Any], key: str) -> float:
    value = float(data[key])
    if not math.isfinite(value):
        raise ValueError(f"{key} must be finite, got {value!r}")
    return value
