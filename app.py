#!/usr/bin/env python3
"""
Dare Score - Command Line Entry Point.

============================================================
USAGE
============================================================
python app.py init-db
python app.py add-candidate <candidate_id> [--name NAME]
python app.py connect <candidate_id> <platform> <username>
python app.py submit-linkedin <candidate_id> <entry.json>
python app.py score <candidate_id> [--refresh]
python app.py history <candidate_id> [--limit N]
python app.py report <candidate_id>
python app.py notifications <candidate_id> [--limit N] [--unread]
python app.py sweep

Configuration comes from the environment (.env supported),
see core.settings.

============================================================
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError

from core.exceptions import CandidateNotFoundError, DareScoreException
from core.logging_config import setup_logging
from core.settings import Settings, get_settings
from notifications import (
    FanOutNotificationSink,
    LoggingNotificationSink,
    RepositoryNotificationSink,
    ScoreUpdateService,
    TelegramNotificationSink,
)
from platform_connectors import (
    CachePolicy,
    ConnectorRegistry,
    LinkedInManualEntry,
    build_default_registry,
)
from platform_metrics.types import Platform
from scoring_engine import ProfileAggregator, ScoringEngine, build_score_report
from storage import Database, DatabaseConfig, SqlAlchemyPersistence


logger = logging.getLogger("app")


# ============================================================
# WIRING
# ============================================================


@dataclass
class Services:
    database: Database
    persistence: SqlAlchemyPersistence
    registry: ConnectorRegistry
    engine: ScoringEngine
    updates: ScoreUpdateService
    notification_limit: int = 100

    async def close(self) -> None:
        await self.registry.close()
        await self.database.dispose()


def build_services(settings: Settings) -> Services:
    """Wire storage, connectors, engine and notifications together."""
    database = Database(DatabaseConfig.from_settings(settings))
    persistence = SqlAlchemyPersistence(database.session_factory)
    registry = build_default_registry(settings, manual_store=persistence)

    aggregator = ProfileAggregator(
        persistence,
        registry=registry,
        cache_policy=CachePolicy.from_settings(settings),
    )
    engine = ScoringEngine(persistence, aggregator)

    sink = FanOutNotificationSink([
        LoggingNotificationSink(),
        RepositoryNotificationSink(database.session_factory),
    ])
    if settings.telegram_bot_token and settings.telegram_chat_id:
        sink.add_sink(TelegramNotificationSink(settings.telegram_bot_token, settings.telegram_chat_id))

    updates = ScoreUpdateService(
        engine,
        persistence,
        sink=sink,
        stale_after=timedelta(hours=settings.stale_score_hours),
    )
    return Services(
        database,
        persistence,
        registry,
        engine,
        updates,
        notification_limit=settings.notification_history_limit,
    )


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dare-score",
        description="Dare Score candidate scoring",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Logging level (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        choices=["json", "text"],
        default=None,
        help="Logging format (default: LOG_FORMAT or text)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Create database tables")

    add_candidate = commands.add_parser("add-candidate", help="Register a candidate")
    add_candidate.add_argument("candidate_id")
    add_candidate.add_argument("--name", default=None)

    connect = commands.add_parser("connect", help="Connect a platform account")
    connect.add_argument("candidate_id")
    connect.add_argument("platform", choices=[p.value for p in Platform if p != Platform.LINKEDIN])
    connect.add_argument("username")

    linkedin = commands.add_parser("submit-linkedin", help="Submit LinkedIn profile data (JSON file)")
    linkedin.add_argument("candidate_id")
    linkedin.add_argument("entry_file", type=Path)

    score = commands.add_parser("score", help="Calculate and store a candidate's score")
    score.add_argument("candidate_id")
    score.add_argument("--refresh", action="store_true", help="Re-fetch every platform first")

    history = commands.add_parser("history", help="Show score history, most recent first")
    history.add_argument("candidate_id")
    history.add_argument("--limit", type=int, default=10)

    report = commands.add_parser("report", help="Explain the current score per platform family")
    report.add_argument("candidate_id")

    notifications = commands.add_parser("notifications", help="List delivered notifications, newest first")
    notifications.add_argument("candidate_id")
    notifications.add_argument("--limit", type=int, default=None, help="Default: NOTIFICATION_HISTORY_LIMIT")
    notifications.add_argument("--unread", action="store_true")

    commands.add_parser("sweep", help="Refresh every candidate whose score is stale")

    return parser


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


# ============================================================
# COMMANDS
# ============================================================


async def run_command(args: argparse.Namespace, services: Services) -> int:
    command = args.command

    if command == "init-db":
        await services.database.create_all()
        return 0

    if command == "add-candidate":
        profile = await services.persistence.create_candidate(args.candidate_id, args.name)
        _print_json({"candidate_id": profile.candidate_id, "display_name": profile.display_name})
        return 0

    if command == "connect":
        platform = Platform(args.platform)
        await services.persistence.connect_platform(args.candidate_id, platform, args.username)
        result = await services.updates.on_platform_connected(args.candidate_id, platform, args.username)
        _print_json(result.to_dict())
        return 0

    if command == "submit-linkedin":
        try:
            entry = LinkedInManualEntry.model_validate_json(args.entry_file.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            print(f"Error: invalid LinkedIn entry: {e}", file=sys.stderr)
            return 1
        username = await services.persistence.submit_linkedin_entry(args.candidate_id, entry)
        result = await services.updates.on_platform_connected(args.candidate_id, Platform.LINKEDIN, username)
        _print_json(result.to_dict())
        return 0

    if command == "score":
        if args.refresh:
            result = await services.updates.refresh_and_notify(args.candidate_id)
        else:
            result = await services.engine.calculate_and_store_score(args.candidate_id)
            await services.updates.publish_result(args.candidate_id, result)
        _print_json(result.to_dict())
        return 0

    if command == "history":
        if args.limit < 1:
            print("Error: --limit must be at least 1", file=sys.stderr)
            return 1
        scores = await services.engine.get_score_history(args.candidate_id, limit=args.limit)
        _print_json([s.to_dict() for s in scores])
        return 0

    if command == "report":
        current = await services.engine.get_current_score(args.candidate_id)
        if current is None:
            print(f"Error: candidate {args.candidate_id} has no score yet", file=sys.stderr)
            return 1
        _print_json(build_score_report(current, services.engine.config).to_dict())
        return 0

    if command == "notifications":
        limit = args.limit if args.limit is not None else services.notification_limit
        rows = await services.persistence.list_notifications(
            args.candidate_id, limit=limit, unread_only=args.unread
        )
        _print_json(rows)
        return 0

    if command == "sweep":
        summary = await services.updates.run_sweep()
        _print_json(summary.to_dict())
        return 0 if not summary.failed else 1

    print(f"Error: unknown command {command}", file=sys.stderr)
    return 1


async def async_main(args: argparse.Namespace, settings: Settings) -> int:
    services = build_services(settings)
    try:
        return await run_command(args, services)
    except CandidateNotFoundError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2
    except DareScoreException as e:
        logger.error(f"Command {args.command} failed: {e}", exc_info=True)
        return 1
    finally:
        await services.close()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(
        level=args.log_level or settings.log_level,
        log_format=args.log_format or settings.log_format,
    )

    try:
        return asyncio.run(async_main(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
