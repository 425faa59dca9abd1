"""
Command-line runner: build a LeagueService from settings, run one query,
print the structured result as JSON.

    python -m app.run_report check
    python -m app.run_report discover
    python -m app.run_report rosters --season 2025
    python -m app.run_report matchups --week 7
    python -m app.run_report waivers --category RB --limit 5
    python -m app.run_report league-info 1180090000000000000
    python -m app.run_report league-roster 1180090000000000000 --roster-id 0
    python -m app.run_report user some_username
    python -m app.run_report search "jefferson"
    python -m app.run_report cache status|refresh|clear
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from datetime import datetime
from enum import Enum

from config.settings import ConfigurationError, settings
from collectors.league_aggregator import ReferenceDataUnavailable
from collectors.league_service import ConnectionCheck, LeagueService
from venues.sleeper.errors import SleeperAPIError


def to_jsonable(obj):
    """Dataclasses -> dicts (raw payloads dropped), enums -> values, datetimes -> ISO."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: to_jsonable(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
            if f.name != "raw"
        }
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, frozenset, set)):
        return [to_jsonable(v) for v in obj]
    return obj


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="run_report", description="Sleeper multi-league reports")
    p.add_argument("--user-id", default=None, help="defaults to SLEEPER_USER_ID")
    p.add_argument("--season", default=None, help="defaults to NFL_SEASON")

    sub = p.add_subparsers(dest="command", required=True)
    sub.add_parser("check")
    sub.add_parser("discover")
    sub.add_parser("rosters")

    m = sub.add_parser("matchups")
    m.add_argument("--week", type=int, required=True)

    w = sub.add_parser("waivers")
    w.add_argument("--category", default=None)
    w.add_argument("--limit", type=int, default=5)

    li = sub.add_parser("league-info")
    li.add_argument("league_id")

    lr = sub.add_parser("league-roster")
    lr.add_argument("league_id")
    lr.add_argument("--roster-id", type=int, default=None, help="0 shows every roster")

    u = sub.add_parser("user")
    u.add_argument("username")

    s = sub.add_parser("search")
    s.add_argument("term")
    s.add_argument("--limit", type=int, default=10)

    c = sub.add_parser("cache")
    c.add_argument("action", choices=["status", "refresh", "clear"])
    return p


async def run(args: argparse.Namespace):
    async with LeagueService.from_settings(settings) as svc:
        if args.command == "check":
            return await svc.check_connection(args.user_id, args.season)
        if args.command == "discover":
            return await svc.discover_partitions(args.user_id, args.season)
        if args.command == "rosters":
            return await svc.aggregate_membership(args.user_id, args.season)
        if args.command == "matchups":
            return await svc.matchup_priorities(args.week, args.user_id, args.season)
        if args.command == "waivers":
            return await svc.waiver_targets(args.category, args.limit, args.user_id, args.season)
        if args.command == "league-info":
            return await svc.league_info(args.league_id)
        if args.command == "league-roster":
            return await svc.league_roster(args.league_id, args.roster_id, args.user_id)
        if args.command == "user":
            return await svc.lookup_user(args.username)
        if args.command == "search":
            return await svc.search_players(args.term, args.limit)

        if args.action == "refresh":
            svc.cache_refresh()
        elif args.action == "clear":
            svc.cache_clear()
        return svc.cache_status()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )

    try:
        result = asyncio.run(run(args))
    except (ConfigurationError, ValueError, LookupError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 2
    except (SleeperAPIError, ReferenceDataUnavailable) as exc:
        print(f"[ERROR] {type(exc).__name__}: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(to_jsonable(result), indent=2))
    if isinstance(result, ConnectionCheck) and not result.ok:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
