"""Command line entry point: ``python -m signal_notifier``."""

import argparse
import json
import signal
import sys
import threading
from pathlib import Path
from typing import Optional

from .app import SignalNotifierApp
from .config.loader import load_config
from .errors import StoreError, ValidationError
from .logging.config import configure_logging
from .utils.time import format_timestamp


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="signal-notifier",
        description="Daily technical-signal email notifications"
    )
    parser.add_argument("--config", type=Path, help="YAML settings file")
    parser.add_argument("--log-level", help="Override logging level")

    commands = parser.add_subparsers(dest="command", required=True)

    subscribe = commands.add_parser("subscribe", help="Subscribe an email to a ticker")
    subscribe.add_argument("email")
    subscribe.add_argument("ticker")
    subscribe.add_argument("--strategy", help="Free-text trading strategy")

    unsubscribe = commands.add_parser("unsubscribe", help="Remove a subscription")
    unsubscribe.add_argument("email")
    unsubscribe.add_argument("ticker")

    commands.add_parser("list", help="List subscriptions")
    commands.add_parser("run-once", help="Run the signal pipeline now")
    commands.add_parser("serve", help="Start the daily scheduler and block")
    commands.add_parser("check-config", help="Validate configuration and exit")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {"logging": {"level": args.log_level.upper()}} if args.log_level else None
    try:
        config = load_config(args.config, overrides)
    except ValidationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 2

    configure_logging(
        level=config.logging.level,
        format_json=config.logging.format_json,
        include_caller=config.logging.include_caller
    )

    if args.command == "check-config":
        print("Configuration OK")
        return 0

    app = SignalNotifierApp(config)

    if args.command == "subscribe":
        response = app.subscriptions.subscribe(args.email, args.ticker, args.strategy)
        print(json.dumps(response.to_dict(), ensure_ascii=False))
        return 0 if response.success else 1

    if args.command == "unsubscribe":
        response = app.subscriptions.unsubscribe(args.email, args.ticker)
        print(json.dumps(response.to_dict(), ensure_ascii=False))
        return 0 if response.success else 1

    if args.command == "list":
        for subscription in app.store.list_active():
            print(json.dumps({
                "id": subscription.id,
                "email": subscription.email,
                "ticker": subscription.ticker,
                "trading_strategy": subscription.trading_strategy,
                "last_notified_signal": (
                    subscription.last_notified_signal.value if subscription.last_notified_signal else None
                ),
                "last_run_at": format_timestamp(subscription.last_run_at),
                "last_sent_on": subscription.last_sent_on.isoformat() if subscription.last_sent_on else None,
            }, ensure_ascii=False))
        return 0

    if args.command == "run-once":
        try:
            summary = app.runner.run_once()
        except StoreError as e:
            print(f"Run aborted: {e}", file=sys.stderr)
            return 1
        if summary is None:
            print("A run is already in progress", file=sys.stderr)
            return 1
        print(json.dumps(summary.to_dict()))
        return 0 if summary.failed == 0 else 1

    return _serve(app)


def _serve(app: SignalNotifierApp) -> int:
    stop_event = threading.Event()

    def _handle_signal(signum, frame):
        stop_event.set()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    app.start()
    try:
        stop_event.wait()
    finally:
        app.stop(wait=True, cancel_in_flight=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
