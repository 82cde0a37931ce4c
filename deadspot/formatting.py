from __future__ import annotations

import math

from deadspot._types import MS_PER_MINUTE, Millis
from deadspot.rates import RATE_TABLE
from deadspot.runtime import MiningRuntime
from deadspot.staking import StakingEngine
from deadspot.upgrade import UPGRADES


def format_mining_status(runtime: MiningRuntime, now: Millis) -> str:
    """Format the DEADSPOT miner for console output."""
    s = runtime.get_state()
    lines: list[str] = []

    lines.append("=" * 20 + " DEADSPOT Miner " + "=" * 20)
    lines.append(f"DEADSPOT: {s.currency:.8f}")
    lines.append(f"Mining:   {s.production_rate:.8f}/s")
    lines.append(f"Level:    {s.level} (EXP {s.experience:.2f})")
    lines.append(
        f"Energy:   {s.energy:.0f}/{s.max_energy:.0f} "
        f"({runtime.energy_fraction() * 100:.0f}%)"
    )
    lines.append(f"Power:    +{runtime.effective_click_power():.2f} per click")
    lines.append(
        f"Prestige: {s.prestige_level} (+{runtime.prestige_bonus_percent():.1f}% bonus, "
        f"{s.prestige_currency:.6f} archived)"
    )
    lines.append("")

    remaining = runtime.faucet_remaining_ms(now)
    if remaining:
        lines.append(f"FAUCET: ready in {math.ceil(remaining / MS_PER_MINUTE)} min")
    else:
        lines.append("FAUCET: ready")
    lines.append("")

    lines.append("UPGRADES:")
    for kind, cost in runtime.upgrade_costs().items():
        udef = UPGRADES[kind]
        lines.append(
            f"  {udef.display_name:.<26s} lvl {s.upgrade_level(kind):<3d} "
            f"next {cost:.2f}"
        )

    if runtime.can_prestige():
        lines.append("")
        lines.append("PRESTIGE AVAILABLE")

    return "\n".join(lines)


def format_staking_status(engine: StakingEngine, now: Millis) -> str:
    """Format deposits and balances for console output."""
    summary = engine.summary(now)
    lines: list[str] = []

    lines.append("=" * 20 + " Crypto Staking " + "=" * 20)
    lines.append(f"Total balance:  {summary.total_balance:.6f}")
    lines.append(f"Total earnings: {summary.total_earnings:.6f}")
    lines.append(f"Active deposits: {summary.active_deposits}")
    if summary.pending_deposits:
        lines.append(f"Pending:         {summary.pending_deposits}")
    lines.append("")

    if engine.deposits:
        lines.append("DEPOSITS:")
        for dep in engine.deposits:
            info = engine.rate_table.get(dep.crypto_kind)
            name = info.display_name if info else dep.crypto_kind
            status = engine.status(dep, now).value
            lines.append(
                f"  {dep.id:<16s} {name:<16s} {dep.principal:>14.6f} "
                f"{dep.term_days:>4d}d  {status:<8s} "
                f"+{engine.accrued_yield(dep, now):.6f}"
            )
    else:
        lines.append("No deposits yet.")

    return "\n".join(lines)


def format_rate_table() -> str:
    lines = ["RATES:"]
    for info in RATE_TABLE.values():
        lines.append(
            f"  {info.id:<10s} {info.display_name:<18s} {info.annual_rate_percent:>4.1f}%  "
            f"{info.deposit_address}"
        )
    return "\n".join(lines)
