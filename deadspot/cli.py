from __future__ import annotations

import argparse
import sys

from loguru import logger

from deadspot._types import MS_PER_SECOND, now_ms
from deadspot.config import get_data_dir
from deadspot.errors import DeadspotError, InvalidInput
from deadspot.formatting import (
    format_mining_status,
    format_rate_table,
    format_staking_status,
)
from deadspot.session import PlayerSession, SessionManager
from deadspot.upgrade import UpgradeKind

_MAX_CLICKS = 1000


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deadspot",
        description="DEADSPOT: crypto staking and idle mining simulator",
    )
    parser.add_argument(
        "--data-dir", default=None, help="Snapshot directory (default: $DEADSPOT_DATA_DIR)"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for stderr output",
    )
    parser.add_argument(
        "--player", default="default", help="Player id (one snapshot folder per player)"
    )
    sub = parser.add_subparsers(dest="command")

    # staking
    staking = sub.add_parser("staking", help="Simulated crypto staking")
    st_sub = staking.add_subparsers(dest="action")
    st_sub.add_parser("rates", help="List stakeable cryptos and rates")
    st_sub.add_parser("status", help="Show balances and deposit history")
    dep = st_sub.add_parser("deposit", help="Declare a new deposit")
    dep.add_argument("crypto", help="Crypto kind, e.g. solana")
    dep.add_argument("amount", type=float, help="Amount staked")
    dep.add_argument("days", type=int, help="Term in days")
    dep.add_argument("tx_id", help="Transaction ID of the transfer")
    wd = st_sub.add_parser("withdraw", help="Request a withdrawal")
    wd.add_argument("crypto", help="Crypto kind")
    wd.add_argument("amount", type=float, help="Amount to withdraw")
    wd.add_argument("address", help="Destination wallet address")

    # mining
    mining = sub.add_parser("mining", help="DEADSPOT idle mining game")
    mn_sub = mining.add_subparsers(dest="action")
    mn_sub.add_parser("status", help="Show miner state")
    click = mn_sub.add_parser("click", help="Mine by hand")
    click.add_argument("-n", "--count", type=int, default=1, help="Number of clicks")
    mn_sub.add_parser("faucet", help="Claim the faucet")
    up = mn_sub.add_parser("upgrade", help="Buy an upgrade")
    up.add_argument(
        "kind", choices=[k.value for k in UpgradeKind], help="Upgrade to buy"
    )
    up.add_argument("--cost", type=float, default=None, help="Expected price")
    mn_sub.add_parser("prestige", help="Prestige reset (needs 500,000 DEADSPOT)")
    mn_sub.add_parser("reset", help="Erase all progress, prestige included")
    tick = mn_sub.add_parser("tick", help="Advance game time manually")
    tick.add_argument("seconds", type=float, help="Seconds to advance")

    return parser


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command is None or args.action is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "staking" and args.action == "rates":
        print(format_rate_table())
        return

    now = now_ms()
    try:
        manager = SessionManager(root=args.data_dir or get_data_dir())
        session = manager.get(args.player)
        with session.lock:
            try:
                if args.command == "staking":
                    _run_staking(args, session, now)
                elif args.command == "mining":
                    _run_mining(args, session, now)
            finally:
                session.save()
    except DeadspotError as e:
        print(f"Error: {e.reason}")
        sys.exit(1)


def _run_staking(args, session: PlayerSession, now: int) -> None:
    engine = session.staking
    for dep in engine.refresh_verification(now):
        print(f"Deposit {dep.id} verified.")

    if args.action == "deposit":
        dep = engine.submit_deposit(args.crypto, args.amount, args.days, args.tx_id, now)
        info = engine.rate_table[dep.crypto_kind]
        print(f"Deposit {dep.id} submitted, pending verification.")
        print(f"Send {dep.principal} {info.display_name} to {info.deposit_address}")
    elif args.action == "withdraw":
        ticket = engine.request_withdrawal(args.crypto, args.amount, args.address, now)
        print(
            f"Withdrawal of {ticket.amount} {ticket.crypto_kind} to "
            f"{ticket.destination_address} queued. "
            f"Estimated delay: {ticket.settlement_delay_hours}h"
        )
    elif args.action == "status":
        print(format_staking_status(engine, now))


def _run_mining(args, session: PlayerSession, now: int) -> None:
    runtime = session.mining
    runtime.advance_to(now)

    if args.action == "click":
        if not 1 <= args.count <= _MAX_CLICKS:
            raise InvalidInput(f"count must be between 1 and {_MAX_CLICKS}")
        total = 0.0
        clicks = 0
        for _ in range(args.count):
            total += runtime.click().currency_gained
            clicks += 1
        print(f"{clicks} click(s): +{total:.8f} DEADSPOT")
    elif args.action == "faucet":
        reward = runtime.claim_faucet(now)
        print(f"Faucet claimed: +{reward:.6f} DEADSPOT")
    elif args.action == "upgrade":
        kind = UpgradeKind(args.kind)
        paid = runtime.buy_upgrade(kind, args.cost)
        print(
            f"Bought {kind.value} level {runtime.state.upgrade_level(kind)} "
            f"for {paid:.6f}"
        )
    elif args.action == "prestige":
        result = runtime.attempt_prestige()
        print(
            f"Prestige {result.prestige_level} reached, "
            f"multiplier x{result.multiplier:.2f}"
        )
    elif args.action == "reset":
        session.reset_mining()
        runtime.advance_to(now)
        print("Game reset. All progress erased.")
    elif args.action == "tick":
        result = runtime.tick(args.seconds * MS_PER_SECOND)
        print(
            f"+{result.currency_produced:.8f} DEADSPOT, "
            f"+{result.energy_regenerated:.0f} energy"
        )
    elif args.action == "status":
        print(format_mining_status(runtime, now))


if __name__ == "__main__":
    main()
