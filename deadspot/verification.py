from __future__ import annotations

from typing import Iterable

from loguru import logger

from deadspot._types import Millis
from deadspot.deposit import Deposit


class VerificationProcess:
    """Moves deposits from pending to verified once the fixed delay has passed.

    Status is derived from the stored creation timestamp, so a restart between
    submission and verification loses nothing: the next ``refresh`` picks the
    deposit up.
    """

    def __init__(self, delay_ms: Millis) -> None:
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")
        self.delay_ms = delay_ms

    def due_at(self, deposit: Deposit) -> Millis:
        """Timestamp at which *deposit* verifies."""
        return deposit.created_at + self.delay_ms

    def is_verified(self, deposit: Deposit, now: Millis) -> bool:
        return deposit.is_verified_at(now, self.delay_ms)

    def refresh(self, deposits: Iterable[Deposit], now: Millis) -> list[Deposit]:
        """Flag every due deposit as verified. Returns the newly verified ones."""
        newly: list[Deposit] = []
        for dep in deposits:
            if dep.verified:
                continue
            if now - dep.created_at >= self.delay_ms:
                dep.verified = True
                newly.append(dep)
                logger.debug(f"Deposit {dep.id} verified ({dep.principal} {dep.crypto_kind})")
        return newly
