"""Command-line entrypoint for fetching feed submission results."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import (
    Settings,
    ensure_required_mws_credentials,
    ensure_runtime_directories,
    load_settings,
)
from .db import get_session, init_db
from .feed_result import FeedResultFetcher
from .history import get_result_record, list_results, record_result
from .mws_api import MWSClient


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _build_client(settings: Settings, mock_files: Optional[List[str]]) -> MWSClient:
    return MWSClient(
        merchant_id=settings.mws_merchant_id,
        access_key_id=settings.mws_access_key_id,
        secret_key=settings.mws_secret_key,
        service_url=settings.mws_service_url,
        auth_token=settings.mws_auth_token,
        mock_mode=bool(mock_files),
        mock_files=mock_files,
        mock_dir=settings.mws_mock_dir,
    )


def cmd_init() -> int:
    settings = load_settings()
    _configure_logging(settings.feeds_log_level)

    ensure_runtime_directories(settings)
    init_db(settings.feeds_db_url)

    print("Initialized feeds service")
    print(f"DB: {settings.feeds_db_url}")
    print(f"Output: {settings.feeds_output_dir}")
    return 0


def cmd_result(args: argparse.Namespace) -> int:
    settings = load_settings()
    _configure_logging(settings.feeds_log_level)
    if not args.mock:
        ensure_required_mws_credentials(settings)
    ensure_runtime_directories(settings)
    init_db(settings.feeds_db_url)

    fetcher = FeedResultFetcher(
        client=_build_client(settings, args.mock),
        throttle=settings.feed_result_throttle,
    )
    outcome = fetcher.set_feed_id(args.id)
    if not outcome:
        raise RuntimeError(outcome.detail)

    outcome = fetcher.fetch_result()
    if not outcome:
        raise RuntimeError(f"Failed to fetch result for feed {args.id}: {outcome.detail}")

    saved_path: Optional[Path] = None
    if args.save:
        saved_path = Path(args.save)
        outcome = fetcher.save_feed(saved_path)
        if not outcome:
            raise RuntimeError(f"Failed to save feed to {saved_path}: {outcome.detail}")

    summary = fetcher.get_result()
    with get_session(settings.feeds_db_url) as db:
        record_result(db, fetcher, saved_path=saved_path)

    payload = {
        "feed_submission_id": fetcher.feed_id,
        "code": summary.code.value if summary else None,
        "messages": summary.messages if summary else [],
        "saved_path": str(saved_path) if saved_path else None,
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def cmd_history_list(limit: int) -> int:
    settings = load_settings()
    _configure_logging(settings.feeds_log_level)
    ensure_runtime_directories(settings)
    init_db(settings.feeds_db_url)

    with get_session(settings.feeds_db_url) as db:
        records = list_results(db, limit=limit)

        if not records:
            print("No feed results recorded")
            return 0

        for record in records:
            print(
                f"id={record.id} created_at={record.created_at} feed={record.feed_submission_id} "
                f"code={record.code or '-'} size={record.raw_size} mock={record.mock}"
            )
    return 0


def cmd_history_show(record_id: int) -> int:
    settings = load_settings()
    _configure_logging(settings.feeds_log_level)
    ensure_runtime_directories(settings)
    init_db(settings.feeds_db_url)

    with get_session(settings.feeds_db_url) as db:
        record = get_result_record(db, record_id)
        if not record:
            raise RuntimeError(f"Result not found: {record_id}")

        payload = {
            "id": record.id,
            "feed_submission_id": record.feed_submission_id,
            "code": record.code,
            "messages": json.loads(record.messages),
            "raw_size": record.raw_size,
            "saved_path": record.saved_path,
            "mock": record.mock,
            "created_at": str(record.created_at),
        }
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mws-feeds", description="Feed submission result fetcher")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Initialize schema and runtime directories")

    result = sub.add_parser("result", help="Fetch the processing report of a feed submission")
    result.add_argument("--id", required=True, help="Feed submission ID")
    result.add_argument("--save", required=False, help="Write the raw report to this path")
    result.add_argument(
        "--mock",
        nargs="+",
        required=False,
        help="Replay these response files instead of calling the API",
    )

    history = sub.add_parser("history", help="Fetched result history")
    history_sub = history.add_subparsers(dest="history_command", required=True)
    list_parser = history_sub.add_parser("list", help="List recent results")
    list_parser.add_argument("--limit", type=int, default=20, help="Max rows to return")
    show_parser = history_sub.add_parser("show", help="Show result details")
    show_parser.add_argument("--id", type=int, required=True, help="History record ID")

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "init":
            return cmd_init()

        if args.command == "result":
            return cmd_result(args)

        if args.command == "history" and args.history_command == "list":
            return cmd_history_list(args.limit)

        if args.command == "history" and args.history_command == "show":
            return cmd_history_show(args.id)

        parser.print_help()
        return 1
    except Exception as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
