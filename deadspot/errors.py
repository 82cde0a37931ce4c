from __future__ import annotations


class DeadspotError(Exception):
    """Base class for rejected engine operations.

    Every subclass is local and non-fatal: the operation that raised it left
    the engine state untouched.
    """

    kind: str = "DeadspotError"

    @property
    def reason(self) -> str:
        return str(self)


class InvalidInput(DeadspotError, ValueError):
    """A required field is missing or malformed."""

    kind = "InvalidInput"


class InsufficientBalance(DeadspotError):
    """Withdrawal amount exceeds the computed staking balance."""

    kind = "InsufficientBalance"

    def __init__(self, requested: float, available: float) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            f"Requested {requested:.6f} but only {available:.6f} is available"
        )


class InsufficientEnergy(DeadspotError):
    """Click attempted with no energy left."""

    kind = "InsufficientEnergy"

    def __init__(self) -> None:
        super().__init__("Not enough energy, wait for it to regenerate")


class InsufficientFunds(DeadspotError):
    """Upgrade purchase costs more than the current balance."""

    kind = "InsufficientFunds"

    def __init__(self, required: float, available: float) -> None:
        self.required = required
        self.available = available
        super().__init__(f"Need {required:.6f} DEADSPOT, have {available:.6f}")


class InsufficientCurrency(DeadspotError):
    """Prestige attempted below the currency threshold."""

    kind = "InsufficientCurrency"

    def __init__(self, required: float, available: float) -> None:
        self.required = required
        self.available = available
        super().__init__(
            f"Prestige requires {required:,.0f} DEADSPOT, have {available:.6f}"
        )


class CooldownActive(DeadspotError):
    """Faucet claimed before its cooldown expired."""

    kind = "CooldownActive"

    def __init__(self, remaining_minutes: int) -> None:
        self.remaining_minutes = remaining_minutes
        super().__init__(f"Faucet on cooldown, wait {remaining_minutes} more minute(s)")
