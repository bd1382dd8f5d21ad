"""
Command-line interface for the slate recommender.

Usage:
    # Create tables in the configured database
    slate-recommender init-db

    # Build and persist a slate, print it as JSON
    slate-recommender recommend u-123 --k 5 --device mobile --tz Europe/Rome

    # With environment variable
    export DATABASE_URL="sqlite:///slates.db"
    slate-recommender recommend u-123
"""

import argparse
import json
import sys
from typing import List, Optional

import structlog

from slate_recommender.config import settings
from slate_recommender.context import normalize_context
from slate_recommender.errors import StoreError
from slate_recommender.logging_config import setup_logging
from slate_recommender.models.recommendation import Device, TimeOfDay
from slate_recommender.pipeline import SlatePipeline
from slate_recommender.scoring.weights import load_weights
from slate_recommender.store.database import SlateStore


logger = structlog.get_logger(__name__)


# ============================================================================
# COMMANDS
# ============================================================================

def cmd_init_db(args: argparse.Namespace, store: SlateStore) -> int:
    store.create_all_tables()
    print(json.dumps({"status": "ok", "database": store.engine.url.database}))
    return 0


def cmd_recommend(args: argparse.Namespace, store: SlateStore) -> int:
    weights = load_weights(args.weights or settings.weights_file)
    pipeline = SlatePipeline.from_settings(store, weights, settings)

    context = normalize_context(
        device=Device(args.device) if args.device else None,
        local_time_of_day=TimeOfDay(args.time_of_day) if args.time_of_day else None,
        allow_same_domain=args.allow_same_domain,
        tz=args.tz,
    )
    k = min(args.k if args.k is not None else settings.default_k, settings.max_k)

    try:
        result = pipeline.build_slate(args.user_id, k, context)
    except StoreError as e:
        logger.error("cli_recommend_failed", user_id=args.user_id, error=str(e))
        print(f"Error: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result.model_dump(by_alias=True), indent=2, ensure_ascii=False))
    return 0


# ============================================================================
# MAIN
# ============================================================================

def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slate-recommender",
        description="Build diversity-constrained recommendation slates",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help=f"Database URL (default: DATABASE_URL or {settings.database_url})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_db = subparsers.add_parser("init-db", help="Create database tables")
    init_db.set_defaults(func=cmd_init_db)

    recommend = subparsers.add_parser("recommend", help="Build and persist a slate")
    recommend.add_argument("user_id", help="User identifier")
    recommend.add_argument("--k", type=positive_int, default=None, help="Slate size")
    recommend.add_argument("--device", choices=[d.value for d in Device])
    recommend.add_argument("--time-of-day", choices=[t.value for t in TimeOfDay])
    recommend.add_argument("--tz", help="IANA time zone used when --time-of-day is absent")
    recommend.add_argument(
        "--allow-same-domain",
        action="store_true",
        default=None,
        help="Allow several items from the same domain in the strict pass",
    )
    recommend.add_argument("--weights", help="Weight table JSON (default: WEIGHTS_FILE)")
    recommend.set_defaults(func=cmd_recommend)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    setup_logging(stream=sys.stderr)
    args = build_parser().parse_args(argv)

    store = SlateStore.from_url(
        args.database_url or settings.database_url,
        pool_size=settings.database_pool_size,
        echo=settings.database_echo_sql,
    )
    try:
        return args.func(args, store)
    finally:
        store.dispose()


if __name__ == "__main__":
    sys.exit(main())
