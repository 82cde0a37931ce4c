from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from typing import Any

from deadspot._types import Millis
from deadspot.config import MiningConfig
from deadspot.errors import InvalidInput
from deadspot.upgrade import UpgradeKind


def _fresh_upgrades() -> dict[UpgradeKind, int]:
    return {kind: 0 for kind in UpgradeKind}


@dataclass
class PlayerState:
    """Mutable record of one player's DEADSPOT mining progress."""

    currency: float = 0.0
    experience: float = 0.0
    level: int = 1
    energy: float = 1000.0
    max_energy: float = 1000.0
    click_power: float = 1.0
    production_rate: float = 0.0
    prestige_level: int = 0
    prestige_currency: float = 0.0
    last_faucet_claim_at: Millis | None = None
    upgrades: dict[UpgradeKind, int] = field(default_factory=_fresh_upgrades)

    # Sub-second time not yet converted into energy.
    regen_remainder_ms: float = 0.0
    last_tick_at: Millis | None = None

    @classmethod
    def initial(cls, config: MiningConfig | None = None) -> PlayerState:
        config = config or MiningConfig()
        return cls(energy=config.initial_energy, max_energy=config.initial_energy)

    def copy(self) -> PlayerState:
        return replace(self, upgrades=dict(self.upgrades))

    def restore(self, other: PlayerState) -> None:
        """Overwrite every field in place with a copy of *other*."""
        source = other.copy()
        for f in fields(self):
            setattr(self, f.name, getattr(source, f.name))

    def upgrade_level(self, kind: UpgradeKind) -> int:
        return self.upgrades.get(kind, 0)

    # ── Snapshots ────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "deadspotCoins": self.currency,
            "experience": self.experience,
            "level": self.level,
            "energy": self.energy,
            "maxEnergy": self.max_energy,
            "clickPower": self.click_power,
            "miningRate": self.production_rate,
            "prestige": self.prestige_level,
            "prestigeCoins": self.prestige_currency,
            "lastFaucetClaim": self.last_faucet_claim_at or 0,
            "regenRemainderMs": self.regen_remainder_ms,
            "lastTickAt": self.last_tick_at,
        }
        for kind in UpgradeKind:
            data[kind.value] = self.upgrade_level(kind)
        return data

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], config: MiningConfig | None = None
    ) -> PlayerState:
        """Rebuild state from a snapshot, defaulting any missing field.

        Raises InvalidInput when a present field has the wrong type or breaks
        an invariant.
        """
        if not isinstance(data, dict):
            raise InvalidInput(
                f"Player snapshot must be an object, got {type(data).__name__}"
            )
        base = cls.initial(config)
        try:
            last_claim = data.get("lastFaucetClaim")
            last_tick = data.get("lastTickAt")
            state = cls(
                currency=_num(data, "deadspotCoins", base.currency),
                experience=_num(data, "experience", base.experience),
                level=int(_num(data, "level", base.level)),
                energy=_num(data, "energy", base.energy),
                max_energy=_num(data, "maxEnergy", base.max_energy),
                click_power=_num(data, "clickPower", base.click_power),
                production_rate=_num(data, "miningRate", base.production_rate),
                prestige_level=int(_num(data, "prestige", base.prestige_level)),
                prestige_currency=_num(data, "prestigeCoins", base.prestige_currency),
                last_faucet_claim_at=int(last_claim) if last_claim else None,
                upgrades={
                    kind: int(_num(data, kind.value, 0)) for kind in UpgradeKind
                },
                regen_remainder_ms=_num(data, "regenRemainderMs", 0.0),
                last_tick_at=int(last_tick) if last_tick is not None else None,
            )
        except (TypeError, ValueError) as e:
            raise InvalidInput(f"Malformed player snapshot: {e}") from e

        errors = state.validate()
        if errors:
            raise InvalidInput(
                "Malformed player snapshot:\n" + "\n".join(f"  - {e}" for e in errors)
            )
        return state

    def validate(self) -> list[str]:
        """Check state invariants. Returns list of error messages."""
        errors: list[str] = []
        if self.level < 1:
            errors.append(f"level must be >= 1, got {self.level}")
        if self.max_energy <= 0:
            errors.append(f"maxEnergy must be > 0, got {self.max_energy}")
        if not 0 <= self.energy <= self.max_energy:
            errors.append(
                f"energy must be within [0, {self.max_energy}], got {self.energy}"
            )
        for name, value in (
            ("deadspotCoins", self.currency),
            ("experience", self.experience),
            ("clickPower", self.click_power),
            ("miningRate", self.production_rate),
            ("prestige", self.prestige_level),
            ("prestigeCoins", self.prestige_currency),
            ("regenRemainderMs", self.regen_remainder_ms),
        ):
            if value < 0:
                errors.append(f"{name} must be >= 0, got {value}")
        for kind, lvl in self.upgrades.items():
            if lvl < 0:
                errors.append(f"{kind.value} must be >= 0, got {lvl}")
        return errors


def _num(data: dict[str, Any], key: str, default: float) -> float:
    value = data.get(key)
    if value is None:
        return float(default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"{key} must be finite, got {value!r}")
    return float(value)
