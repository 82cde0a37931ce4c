from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class UpgradeKind(Enum):
    """The four purchasable upgrades. Values are the persisted snapshot keys."""

    DOUBLE_CLICK = "doubleClick"
    EXTRA_CLICK_POWER = "extraClickPower"
    EXPERIENCE_MULTIPLIER = "experienceMultiplier"
    ENERGY_REGEN_SPEED = "energyRegenSpeed"

    @classmethod
    def parse(cls, name: str) -> UpgradeKind:
        """Accept either the snapshot key or the enum name, case-insensitively."""
        needle = name.strip().lower().replace("-", "_")
        for kind in cls:
            if needle in (kind.value.lower(), kind.name.lower()):
                return kind
        raise ValueError(
            f"Unknown upgrade kind: {name!r}. Expected one of "
            f"{[k.value for k in cls]}"
        )


@dataclass(frozen=True)
class UpgradeDef:
    """Static definition of an upgrade."""

    kind: UpgradeKind
    display_name: str
    description: str
    base_cost: float


UPGRADES: dict[UpgradeKind, UpgradeDef] = {
    UpgradeKind.DOUBLE_CLICK: UpgradeDef(
        UpgradeKind.DOUBLE_CLICK,
        "Double Click",
        "Doubles click power once owned",
        100.0,
    ),
    UpgradeKind.EXTRA_CLICK_POWER: UpgradeDef(
        UpgradeKind.EXTRA_CLICK_POWER,
        "Extra Click Power",
        "Adds +1 to base click power per level",
        50.0,
    ),
    UpgradeKind.EXPERIENCE_MULTIPLIER: UpgradeDef(
        UpgradeKind.EXPERIENCE_MULTIPLIER,
        "Experience Multiplier",
        "Adds +100% experience per click per level",
        200.0,
    ),
    UpgradeKind.ENERGY_REGEN_SPEED: UpgradeDef(
        UpgradeKind.ENERGY_REGEN_SPEED,
        "Energy Regen",
        "Adds +1 energy regenerated per second per level",
        300.0,
    ),
}


def base_cost(kind: UpgradeKind) -> float:
    return UPGRADES[kind].base_cost
