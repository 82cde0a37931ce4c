"""MCP server exposing the staking and mining engines for interactive play."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from mcp.server.fastmcp import FastMCP

from deadspot._types import MS_PER_SECOND, Millis, now_ms
from deadspot.errors import DeadspotError
from deadspot.rates import RATE_TABLE
from deadspot.session import PlayerSession
from deadspot.upgrade import UPGRADES, UpgradeKind

# Maximum seconds per wait() call (24 hours)
_MAX_WAIT = 86400
# Maximum clicks per click() call
_MAX_CLICKS = 1000


@dataclass
class _SessionHolder:
    """Holds the active player session and the clock driving it."""

    session: PlayerSession
    clock: Callable[[], Millis] = now_ms

    def now(self) -> Millis:
        return self.clock()


def _failure(e: DeadspotError) -> dict[str, Any]:
    result: dict[str, Any] = {"success": False, "error": e.kind, "reason": e.reason}
    remaining = getattr(e, "remaining_minutes", None)
    if remaining is not None:
        result["remaining_minutes"] = remaining
    return result


def _sync(holder: _SessionHolder) -> None:
    """Bring both engines up to the holder's clock."""
    now = holder.now()
    holder.session.mining.advance_to(now)
    holder.session.staking.refresh_verification(now)


# ── Tool logic functions (testable without MCP protocol) ────────────


def _tool_get_rates(holder: _SessionHolder) -> dict[str, Any]:
    return {
        "rates": [
            {
                "id": info.id,
                "display_name": info.display_name,
                "deposit_address": info.deposit_address,
                "annual_rate_percent": info.annual_rate_percent,
            }
            for info in RATE_TABLE.values()
        ]
    }


def _tool_get_staking_status(holder: _SessionHolder) -> dict[str, Any]:
    _sync(holder)
    now = holder.now()
    engine = holder.session.staking
    summary = engine.summary(now)
    return {
        "total_balance": round(summary.total_balance, 6),
        "total_earnings": round(summary.total_earnings, 6),
        "active_deposits": summary.active_deposits,
        "pending_deposits": summary.pending_deposits,
        "deposits": [
            {
                "id": d.id,
                "crypto": d.crypto_kind,
                "amount": d.principal,
                "term_days": d.term_days,
                "status": engine.status(d, now).value,
                "earned": round(engine.accrued_yield(d, now), 6),
            }
            for d in engine.deposits
        ],
    }


def _tool_submit_deposit(
    holder: _SessionHolder, crypto: str, amount: float, days: int, tx_id: str
) -> dict[str, Any]:
    _sync(holder)
    engine = holder.session.staking
    try:
        dep = engine.submit_deposit(crypto, amount, days, tx_id, holder.now())
    except DeadspotError as e:
        return _failure(e)
    return {
        "success": True,
        "deposit_id": dep.id,
        "status": "pending",
        "deposit_address": engine.rate_table[dep.crypto_kind].deposit_address,
        "verifies_at": engine.verification.due_at(dep),
    }


def _tool_request_withdrawal(
    holder: _SessionHolder, crypto: str, amount: float, address: str
) -> dict[str, Any]:
    _sync(holder)
    try:
        ticket = holder.session.staking.request_withdrawal(
            crypto, amount, address, holder.now()
        )
    except DeadspotError as e:
        return _failure(e)
    return {
        "success": True,
        "crypto": ticket.crypto_kind,
        "amount": ticket.amount,
        "destination": ticket.destination_address,
        "estimated_hours": ticket.settlement_delay_hours,
        "settles_at": ticket.settles_at,
    }


def _tool_get_mining_state(holder: _SessionHolder) -> dict[str, Any]:
    _sync(holder)
    runtime = holder.session.mining
    s = runtime.get_state()
    return {
        "currency": round(s.currency, 8),
        "production_rate": round(s.production_rate, 8),
        "experience": round(s.experience, 2),
        "level": s.level,
        "energy": s.energy,
        "max_energy": s.max_energy,
        "click_power": round(runtime.effective_click_power(), 2),
        "prestige_level": s.prestige_level,
        "prestige_currency": round(s.prestige_currency, 6),
        "prestige_bonus_percent": round(runtime.prestige_bonus_percent(), 1),
        "can_prestige": runtime.can_prestige(),
        "faucet_remaining_ms": runtime.faucet_remaining_ms(holder.now()),
        "upgrades": {
            kind.value: {
                "display_name": UPGRADES[kind].display_name,
                "level": s.upgrade_level(kind),
                "next_cost": round(runtime.upgrade_cost(kind), 6),
            }
            for kind in UpgradeKind
        },
    }


def _tool_click(holder: _SessionHolder, count: int = 1) -> dict[str, Any]:
    if count < 1:
        return {"error": "Count must be at least 1"}
    if count > _MAX_CLICKS:
        return {"error": f"Count cannot exceed {_MAX_CLICKS}"}

    _sync(holder)
    runtime = holder.session.mining
    total = 0.0
    levels = 0
    clicks = 0
    for _ in range(count):
        try:
            result = runtime.click()
        except DeadspotError:
            break
        total += result.currency_gained
        levels += result.levels_gained
        clicks += 1
    s = runtime.get_state()
    return {
        "clicks": clicks,
        "total_earned": round(total, 8),
        "levels_gained": levels,
        "new_balance": round(s.currency, 8),
        "energy": s.energy,
        "out_of_energy": clicks < count,
    }


def _tool_wait(holder: _SessionHolder, seconds: float) -> dict[str, Any]:
    if seconds <= 0:
        return {"error": "Seconds must be positive"}
    if seconds > _MAX_WAIT:
        return {"error": f"Cannot wait more than {_MAX_WAIT} seconds (24h) per call"}

    _sync(holder)
    elapsed = int(seconds * MS_PER_SECOND)
    runtime = holder.session.mining
    ticked = runtime.fast_forward(elapsed)
    verified = holder.session.staking.age_deposits(elapsed, holder.now())

    s = runtime.get_state()
    result: dict[str, Any] = {
        "waited": seconds,
        "currency": round(s.currency, 8),
        "produced": round(ticked.currency_produced, 8),
        "energy": s.energy,
    }
    if verified:
        result["deposits_verified"] = [d.id for d in verified]
    return result


def _tool_claim_faucet(holder: _SessionHolder) -> dict[str, Any]:
    _sync(holder)
    try:
        reward = holder.session.mining.claim_faucet(holder.now())
    except DeadspotError as e:
        return _failure(e)
    return {"success": True, "reward": round(reward, 6)}


def _tool_buy_upgrade(holder: _SessionHolder, kind: str) -> dict[str, Any]:
    try:
        upgrade = UpgradeKind.parse(kind)
    except ValueError as e:
        return {"error": str(e)}

    _sync(holder)
    runtime = holder.session.mining
    try:
        paid = runtime.buy_upgrade(upgrade)
    except DeadspotError as e:
        return _failure(e)
    return {
        "success": True,
        "kind": upgrade.value,
        "new_level": runtime.get_state().upgrade_level(upgrade),
        "cost_paid": round(paid, 6),
        "next_cost": round(runtime.upgrade_cost(upgrade), 6),
    }


def _tool_prestige(holder: _SessionHolder) -> dict[str, Any]:
    _sync(holder)
    try:
        result = holder.session.mining.attempt_prestige()
    except DeadspotError as e:
        return _failure(e)
    return {
        "success": True,
        "prestige_level": result.prestige_level,
        "archived": round(result.archived_currency, 6),
        "multiplier": round(result.multiplier, 2),
    }


def _tool_new_game(holder: _SessionHolder) -> dict[str, Any]:
    holder.session.reset_mining()
    holder.session.mining.advance_to(holder.now())
    return {"success": True, "message": "Game reset to initial state"}


# ── Server factory ──────────────────────────────────────────────────


def create_server(session: PlayerSession) -> FastMCP:
    """Create an MCP server driving *session*'s engines."""
    holder = _SessionHolder(session=session)

    mcp = FastMCP(name=f"DEADSPOT: {session.player_id}")

    def _run(tool: Callable[..., dict[str, Any]], *args: Any) -> dict[str, Any]:
        with session.lock:
            result = tool(holder, *args)
            session.save()
        return result

    @mcp.tool()
    def get_rates() -> dict[str, Any]:
        """List stakeable cryptos with deposit addresses and rates."""
        return _tool_get_rates(holder)

    @mcp.tool()
    def get_staking_status() -> dict[str, Any]:
        """Get total balance, earnings and every deposit's status."""
        return _run(_tool_get_staking_status)

    @mcp.tool()
    def submit_deposit(crypto: str, amount: float, days: int, tx_id: str) -> dict[str, Any]:
        """Declare a simulated deposit. It verifies after a short delay."""
        return _run(_tool_submit_deposit, crypto, amount, days, tx_id)

    @mcp.tool()
    def request_withdrawal(crypto: str, amount: float, address: str) -> dict[str, Any]:
        """Request a withdrawal ticket against the current staking balance."""
        return _run(_tool_request_withdrawal, crypto, amount, address)

    @mcp.tool()
    def get_mining_state() -> dict[str, Any]:
        """Get DEADSPOT miner state: balance, energy, level, upgrades, prestige."""
        return _run(_tool_get_mining_state)

    @mcp.tool()
    def click(count: int = 1) -> dict[str, Any]:
        """Mine by hand N times (max 1000). Stops early when energy runs out."""
        return _run(_tool_click, count)

    @mcp.tool()
    def wait(seconds: float) -> dict[str, Any]:
        """Advance game time by the given seconds (max 86400)."""
        return _run(_tool_wait, seconds)

    @mcp.tool()
    def claim_faucet() -> dict[str, Any]:
        """Claim the free faucet reward (30 minute cooldown)."""
        return _run(_tool_claim_faucet)

    @mcp.tool()
    def buy_upgrade(kind: str) -> dict[str, Any]:
        """Buy one level of doubleClick, extraClickPower, experienceMultiplier or energyRegenSpeed."""
        return _run(_tool_buy_upgrade, kind)

    @mcp.tool()
    def prestige() -> dict[str, Any]:
        """Prestige reset: archive DEADSPOT for a permanent +7% multiplier."""
        return _run(_tool_prestige)

    @mcp.tool()
    def new_game() -> dict[str, Any]:
        """Reset the game to initial state, prestige included."""
        return _run(_tool_new_game)

    return mcp
