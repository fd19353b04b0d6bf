# adwarn - command line entry point
"""Command line runner for the aerodrome warning monitor.

Usage:
    python -m adwarn.runner poll [ICAO ...]
    python -m adwarn.runner watch
    python -m adwarn.runner sweep [ICAO ...]
    python -m adwarn.runner history --limit 50
    python -m adwarn.runner status SBMQ
    python -m adwarn.runner favorites add SBMQ "Macapa"

JSON goes to stdout, logs to stderr.
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from adwarn.alerts.classifier import extract_icaos_from_warning_text
from adwarn.alerts.errors import SourceFetchError, StoreError
from adwarn.alerts.setup import build_alerting, build_rate_limiter, build_redemet_client
from adwarn.alerts.repository import AlertRepository
from adwarn.alerts.validity import ValiditySweeper, is_in_force
from adwarn.config import settings
from adwarn.db.database import async_session
from adwarn.favorites.repository import FavoriteRepository
from adwarn.monitor.cycle import run_poll_cycle
from adwarn.monitor.scheduler import PollScheduler

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def _print(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


async def _resolve_icaos(session, icaos: list[str]) -> list[str]:
    if icaos:
        return [i.upper() for i in icaos]
    favorites = await FavoriteRepository(session).list_enabled_icaos()
    return favorites or settings.monitored_icao_list


async def cmd_poll(args: argparse.Namespace) -> int:
    client = build_redemet_client(build_rate_limiter())
    async with async_session() as session:
        icaos = await _resolve_icaos(session, args.icaos)
        if not icaos:
            logger.error("No ICAO given and no favorites/MONITORED_ICAOS configured")
            return 2
        alerting = build_alerting(session, client)
        report = await run_poll_cycle(icaos, alerting.reconciler, alerting.sweeper)
    _print(report.to_dict())
    return 0 if report.sweep.ok and not report.failed_icaos else 1


async def cmd_watch(args: argparse.Namespace) -> int:
    client = build_redemet_client(build_rate_limiter())
    scheduler = PollScheduler(
        session_factory=async_session,
        source=client,
        interval_seconds=args.interval or settings.check_interval_seconds,
        fallback_icaos=settings.monitored_icao_list,
    )
    scheduler.start()
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown()
    return 0


async def cmd_sweep(args: argparse.Namespace) -> int:
    icaos = [i.upper() for i in args.icaos] or None
    async with async_session() as session:
        sweeper = ValiditySweeper(AlertRepository(session))
        result = await sweeper.expire_out_of_window_active_alerts(icaos=icaos)
    _print({"ok": result.ok, "expired": result.expired, "error": result.error})
    return 0 if result.ok else 1


def _history_row(record, now: datetime) -> dict[str, Any]:
    return {
        "id": str(record.id),
        "icao": record.icao,
        "alert_type": record.alert_type,
        "content": record.content,
        "affected_icaos": extract_icaos_from_warning_text(record.content),
        "status": record.status,
        "severity": record.severity,
        "valid_from": record.valid_from,
        "valid_until": record.valid_until,
        "in_force": is_in_force(record, now),
        "created_at": record.created_at,
    }


async def cmd_history(args: argparse.Namespace) -> int:
    now = datetime.now(timezone.utc)
    async with async_session() as session:
        repo = AlertRepository(session)
        sweep = await ValiditySweeper(repo).expire_out_of_window_active_alerts(now=now)
        if not sweep.ok:
            logger.warning("Sweep before history listing failed: %s", sweep.error)
        records = await repo.query_recent(limit=args.limit)
    _print([_history_row(r, now) for r in records])
    return 0


async def cmd_status(args: argparse.Namespace) -> int:
    client = build_redemet_client(build_rate_limiter())
    status = await client.fetch_aerodrome_status(args.icao)
    rule = status.flight_rule
    _print(
        {
            "icao": status.icao,
            "flag": status.flag,
            "flight_rule": rule.value if rule else None,
            "report": status.report_text,
        }
    )
    return 0


async def cmd_favorites(args: argparse.Namespace) -> int:
    async with async_session() as session:
        repo = FavoriteRepository(session)
        if args.action == "add":
            favorite = await repo.add(args.icao, args.name or args.icao)
            _print({"icao": favorite.icao, "name": favorite.name})
        elif args.action == "remove":
            _print({"removed": await repo.remove(args.icao)})
        else:
            _print(
                [
                    {"icao": f.icao, "name": f.name, "enabled": f.enabled}
                    for f in await repo.list_all()
                ]
            )
    return 0


COMMANDS = {
    "poll": cmd_poll,
    "watch": cmd_watch,
    "sweep": cmd_sweep,
    "history": cmd_history,
    "status": cmd_status,
    "favorites": cmd_favorites,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="REDEMET aerodrome warning monitor")
    sub = parser.add_subparsers(dest="command", required=True)

    poll = sub.add_parser("poll", help="Run one poll cycle")
    poll.add_argument("icaos", nargs="*", help="ICAO codes (default: favorites)")

    watch = sub.add_parser("watch", help="Poll on a fixed interval")
    watch.add_argument("--interval", type=int, default=None, help="Seconds between cycles")

    sweep = sub.add_parser("sweep", help="Expire warnings outside their validity window")
    sweep.add_argument("icaos", nargs="*")

    history = sub.add_parser("history", help="List recent warnings")
    history.add_argument("--limit", type=int, default=200)

    status = sub.add_parser("status", help="Show the flight rule of an aerodrome")
    status.add_argument("icao")

    favorites = sub.add_parser("favorites", help="Manage monitored aerodromes")
    favorites.add_argument("action", choices=["list", "add", "remove"])
    favorites.add_argument("icao", nargs="?")
    favorites.add_argument("name", nargs="?")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the runner."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "favorites" and args.action != "list" and not args.icao:
        parser.error("favorites add/remove require an ICAO code")

    try:
        return asyncio.run(COMMANDS[args.command](args))
    except (SourceFetchError, StoreError, ValueError) as e:
        logger.error("%s failed: %s", args.command, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
