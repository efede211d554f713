#!/usr/bin/env python3
"""
NFL Bozo Bets - Command Line Entry Point.

Usage:
    bozo-bets serve                      # Start the API (and scheduler)
    bozo-bets init-db                    # Create database tables
    bozo-bets create-admin --email ...   # Create or promote an admin
    bozo-bets process --type daily       # Settle bets for a week
    bozo-bets load-schedule              # Store the bundled 2025 game schedule
    bozo-bets leaderboard                # Print the bozo leaderboard
"""

import argparse
import logging
import sys
from datetime import datetime
from typing import Optional

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def _session_factory(settings):
    from bozo_bets.database.models import init_db
    from bozo_bets.database.session import create_session_factory

    engine = init_db(settings.database_url)
    return create_session_factory(engine)


def cmd_serve(args: argparse.Namespace, settings) -> int:
    import uvicorn

    if args.no_scheduler:
        settings.scheduler.enabled = False

    logger.info(f"Starting API on {args.host}:{args.port}")
    uvicorn.run(
        "api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="debug" if settings.debug else "info",
    )
    return 0


def cmd_init_db(args: argparse.Namespace, settings) -> int:
    from bozo_bets.database.models import init_db

    init_db(settings.database_url)
    logger.info(f"Database initialized at {settings.database_url}")
    return 0


def cmd_create_admin(args: argparse.Namespace, settings) -> int:
    from bozo_bets.auth import AuthManager
    from bozo_bets.database.session import session_scope
    from bozo_bets.errors import ValidationError

    auth = AuthManager(settings.auth)
    try:
        with session_scope(_session_factory(settings)) as db:
            user = auth.ensure_admin_user(db, args.email, args.name, args.password)
            logger.info(f"Admin ready: {user.name} <{user.email}>")
    except ValidationError as e:
        logger.error(f"{e.message}: {'; '.join(e.details or [])}")
        return 1
    return 0


def cmd_process(args: argparse.Namespace, settings) -> int:
    from bozo_bets.database.session import session_scope
    from bozo_bets.processing import (
        get_current_processing_week,
        process_daily_bet_results,
        process_tuesday_bozo_annotation,
        run_automated_processing,
    )

    with session_scope(_session_factory(settings)) as db:
        if args.type == "auto":
            outcome = run_automated_processing(db)
            logger.info(f"Automated processing: {outcome['type']}")
            return 0

        week, season = args.week, args.season
        if week is None or season is None:
            current_week, current_season = get_current_processing_week(datetime.now())
            week = week or current_week
            season = season or current_season

        if args.type == "daily":
            result = process_daily_bet_results(db, week, season)
            logger.info(
                f"Week {week}, {season}: {result.processed_bets} settled "
                f"({result.hits} hits, {result.bozos} bozos, {result.pushes} pushes)"
            )
            for error in result.errors:
                logger.warning(error)
        else:
            result = process_tuesday_bozo_annotation(db, week, season)
            biggest = result["biggest_bozo"]
            if biggest:
                logger.info(f"Biggest bozo for week {week}: {biggest['user_name']} ({biggest['odds']})")
            else:
                logger.info(f"No biggest bozo for week {week}")
    return 0


def cmd_load_schedule(args: argparse.Namespace, settings) -> int:
    from bozo_bets.database.session import session_scope
    from bozo_bets.schedule.games import load_bundled_schedule

    with session_scope(_session_factory(settings)) as db:
        added = load_bundled_schedule(db)
    logger.info(f"Stored {added} scheduled games")
    return 0


def cmd_leaderboard(args: argparse.Namespace, settings) -> int:
    from rich.console import Console
    from rich.table import Table

    from bozo_bets.database.session import session_scope
    from bozo_bets.tracking.bozo_stats import get_bozo_leaderboard

    with session_scope(_session_factory(settings)) as db:
        entries = get_bozo_leaderboard(db, limit=args.limit)

    table = Table(title="Bozo Leaderboard", header_style="bold magenta")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Player", style="white", no_wrap=True)
    table.add_column("Team", style="cyan")
    table.add_column("Bozos", justify="right", style="red")
    table.add_column("Hits", justify="right", style="green")
    table.add_column("Bozo %", justify="right")

    for rank, entry in enumerate(entries, start=1):
        table.add_row(
            str(rank),
            entry["user_name"],
            entry["team_name"] or "-",
            str(entry["total_bozos"]),
            str(entry["total_hits"]),
            f"{entry['bozo_rate']:.1f}%",
        )

    Console().print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bozo-bets",
        description="NFL Bozo Bets - weekly prop bet tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    bozo-bets serve --port 8000
    bozo-bets create-admin --email admin@example.com --name Admin --password 'S3cret!pw'
    bozo-bets process --type tuesday --week 5 --season 2025
    bozo-bets leaderboard --limit 20
        """,
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    serve.add_argument("--no-scheduler", action="store_true", help="Disable background jobs")
    serve.set_defaults(handler=cmd_serve)

    init = subparsers.add_parser("init-db", help="Create database tables")
    init.set_defaults(handler=cmd_init_db)

    admin = subparsers.add_parser("create-admin", help="Create or promote an admin user")
    admin.add_argument("--email", required=True)
    admin.add_argument("--name", default="Admin")
    admin.add_argument("--password", required=True)
    admin.set_defaults(handler=cmd_create_admin)

    process = subparsers.add_parser("process", help="Run bet processing")
    process.add_argument("--type", choices=["daily", "tuesday", "auto"], default="auto")
    process.add_argument("--week", type=int, default=None)
    process.add_argument("--season", type=int, default=None)
    process.set_defaults(handler=cmd_process)

    schedule = subparsers.add_parser("load-schedule", help="Store the bundled NFL game schedule")
    schedule.set_defaults(handler=cmd_load_schedule)

    board = subparsers.add_parser("leaderboard", help="Show the bozo leaderboard")
    board.add_argument("--limit", type=int, default=10)
    board.set_defaults(handler=cmd_leaderboard)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for CLI."""
    from bozo_bets.config.settings import get_settings
    from bozo_bets.log_config import setup_logging

    args = build_parser().parse_args(argv)

    settings = get_settings()
    if args.debug:
        settings.debug = True
        settings.log_level = "DEBUG"
        logging.getLogger().setLevel(logging.DEBUG)
    setup_logging(settings)

    sys.exit(args.handler(args, settings))


if __name__ == "__main__":
    main()
