"""
One-shot job runner.

    espn-scrape --stats-2025 [--start-week 1 --end-week 18]
    espn-scrape --sync-schedule [--season 2025 --season-type 2]
    espn-scrape --sync-players
    espn-scrape --headshots-only [--force-refresh]
    espn-scrape --serve

With no mode flag the headshot sync runs.
"""
import argparse
import asyncio
import logging
import re
import sys
from typing import Any, Dict, List, Optional, Tuple

from espn_scrape.database import init_db
from espn_scrape.dependencies import ServiceContainer
from espn_scrape.logging_config import configure_logging
from espn_scrape.utils import last_week_of

logger = logging.getLogger(__name__)

STATS_FLAG = re.compile(r"^--stats-(\d{4})$")


def normalize_argv(argv: List[str]) -> List[str]:
    """Rewrite ``--stats-2025`` as ``--stats 2025``."""
    result = []
    for arg in argv:
        match = STATS_FLAG.match(arg)
        if match:
            result.extend(["--stats", match.group(1)])
        else:
            result.append(arg)
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="espn-scrape",
        description="Run one ESPN NFL ingestion job (default: headshot sync)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--stats", type=int, metavar="SEASON",
                      help="Ingest weekly player stats for SEASON (also accepted as --stats-SEASON)")
    mode.add_argument("--sync-players", action="store_true", help="Link ESPN ids to existing players")
    mode.add_argument("--sync-schedule", action="store_true", help="Sync the game schedule and betting lines")
    mode.add_argument("--headshots-only", action="store_true", help="Sync player headshots")
    mode.add_argument("--serve", action="store_true", help="Run the API server with the scheduler")

    parser.add_argument("--season", type=int, help="Season year (defaults to the current NFL season)")
    parser.add_argument("--start-week", type=int)
    parser.add_argument("--end-week", type=int)
    parser.add_argument("--season-type", type=int, choices=[1, 2, 3], help="1 preseason, 2 regular, 3 postseason")
    parser.add_argument("--force-refresh", action="store_true", help="Ignore headshot freshness")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", default=None)
    return parser


def job_request(args: argparse.Namespace) -> Tuple[str, Dict[str, Any]]:
    """Map parsed arguments to a job kind and its parameters."""
    if args.stats is not None:
        kind = "stats"
        params = {
            "season": args.stats,
            "start_week": args.start_week or 1,
            "end_week": args.end_week or last_week_of(args.season_type),
            "season_type": args.season_type or 2,
        }
    elif args.sync_schedule:
        kind = "schedule"
        params = {
            "season": args.season,
            "start_week": args.start_week,
            "end_week": args.end_week,
            "season_type": args.season_type,
        }
    elif args.sync_players:
        kind = "players"
        params = {"season": args.season}
    else:
        kind = "headshots"
        params = {"season": args.season, "force_refresh": args.force_refresh}
    return kind, {k: v for k, v in params.items() if v is not None}


async def run_job(kind: str, params: Dict[str, Any], container: Optional[ServiceContainer] = None):
    await init_db()
    container = container or ServiceContainer()
    try:
        return await container.job(kind).run(**params)
    finally:
        await container.close()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(normalize_argv(sys.argv[1:] if argv is None else argv))
    configure_logging(level=args.log_level)

    if args.serve:
        import uvicorn

        uvicorn.run("espn_scrape.main:app", host=args.host, port=args.port)
        return 0

    kind, params = job_request(args)
    logger.info(f"Running {kind} job")
    try:
        summary = asyncio.run(run_job(kind, params))
    except Exception as e:
        logger.error(f"{kind} job failed: {e}")
        return 1
    logger.info(f"{kind} job result: {summary}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
