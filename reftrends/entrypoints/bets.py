"""Bet ledger entrypoint: record, settle and review card-market bets."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from typing import List, Optional

from dotenv import load_dotenv

from reftrends.bets import DEFAULT_MARKET, MARKET_OPTIONS, RESULTS, BetTracker
from reftrends.config import load_settings
from reftrends.shared.errors import RefTrendsError
from reftrends.shared.logging import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reftrends-bets", description="RefTrends bet tracker")
    parser.add_argument("--file", default=None, help="ledger path (default from settings)")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="record a new pending bet")
    add.add_argument("match")
    add.add_argument("--odds", type=float, required=True)
    add.add_argument("--stake", type=float, required=True)
    add.add_argument("--market", default=DEFAULT_MARKET, choices=MARKET_OPTIONS)
    add.add_argument("--notes", default=None)

    settle = sub.add_parser("settle", help="set the result of a bet")
    settle.add_argument("bet_id")
    settle.add_argument("result", choices=RESULTS)

    delete = sub.add_parser("delete", help="remove a bet")
    delete.add_argument("bet_id")

    listing = sub.add_parser("list", help="show bets, newest first")
    listing.add_argument("--result", choices=RESULTS, default=None)
    listing.add_argument("--days", type=int, choices=(7, 30, 90), default=None)

    sub.add_parser("stats", help="win rate, profit, ROI and streaks")

    export = sub.add_parser("export", help="write the ledger as JSON")
    export.add_argument("output", nargs="?", default="-")

    imp = sub.add_parser("import", help="replace the ledger from a JSON export")
    imp.add_argument("input")
    return parser


def run(tracker: BetTracker, args: argparse.Namespace) -> object:
    """Apply one command to a loaded tracker and return what to print."""
    if args.command == "add":
        bet = tracker.add_bet(args.match, args.odds, args.stake, market=args.market, notes=args.notes)
        tracker.save()
        return asdict(bet)
    if args.command == "settle":
        bet = tracker.settle(args.bet_id, args.result)
        tracker.save()
        return asdict(bet)
    if args.command == "delete":
        tracker.delete_bet(args.bet_id)
        tracker.save()
        return {"deleted": args.bet_id}
    if args.command == "list":
        return [asdict(b) for b in tracker.filter(result=args.result, days=args.days)]
    if args.command == "stats":
        return asdict(tracker.stats())
    if args.command == "export":
        if args.output == "-":
            return json.loads(tracker.export_json())
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(tracker.export_json())
        return {"exported": len(tracker.bets), "path": args.output}
    if args.command == "import":
        with open(args.input, "r", encoding="utf-8") as f:
            imported = tracker.import_json(f.read())
        tracker.save()
        return {"imported": imported}
    raise ValueError(f"unknown command {args.command}")


def main(argv: Optional[List[str]] = None) -> None:
    if os.environ.get("REFTRENDS_TEST_MODE") != "true":
        load_dotenv()
    args = build_parser().parse_args(argv)
    settings = load_settings()
    setup_logging(settings.logging)
    tracker = BetTracker(args.file or settings.bets.ledger_path())
    try:
        tracker.load()
        print(json.dumps(run(tracker, args), indent=2))
    except RefTrendsError as exc:
        logger.error({"bets_failed": {"command": args.command, "error": str(exc)}})
        sys.exit(1)


if __name__ == "__main__":
    main()
