# ABOUTME: CLI entry point for the weather subscription service.
# ABOUTME: Provides subcommands: serve, notify, status.

import argparse
import asyncio
import sys

import structlog

from weather_notify.config import configure_logging, get_settings


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the web API (and the hourly scheduler, if enabled) with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "weather_notify.web.app:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def cmd_notify(_args: argparse.Namespace) -> int:
    """Run one tick of the weather update job now."""
    from weather_notify.db.session import close_db
    from weather_notify.scheduler import run_weather_updates

    log = structlog.get_logger()
    log.info("cmd_notify_start")

    async def run():
        try:
            return await run_weather_updates()
        finally:
            await close_db()

    try:
        result = asyncio.run(run())
    except Exception:
        log.exception("cmd_notify_failed")
        return 1

    print(
        f"Subscriptions: {result.total}  sent: {result.sent}  "
        f"skipped: {result.skipped}  failed: {result.failed}"
    )
    log.info("cmd_notify_complete", sent=result.sent, failed=result.failed)
    return 0


def cmd_status(_args: argparse.Namespace) -> int:
    """Show subscription counts."""
    from weather_notify.db.repository import SubscriptionRepository
    from weather_notify.db.session import close_db, get_session

    async def counts() -> tuple[int, int]:
        try:
            async with get_session() as session:
                repo = SubscriptionRepository(session)
                return await repo.count_all(), await repo.count_confirmed()
        finally:
            await close_db()

    total, confirmed = asyncio.run(counts())

    print("\n=== Weather Notify Status ===\n")
    print(f"Subscriptions: {total}")
    print(f"  Confirmed: {confirmed}")
    print(f"  Pending confirmation: {total - confirmed}")
    print()

    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="weather_notify",
        description="Weather Notify - weather update emails for subscribed cities",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP API and the hourly update scheduler",
    )
    serve_parser.add_argument("--host", type=str, help="Bind address (default from settings)")
    serve_parser.add_argument("--port", type=int, help="Bind port (default from settings)")

    # notify command
    subparsers.add_parser(
        "notify",
        help="Send due weather updates once and exit",
    )

    # status command
    subparsers.add_parser(
        "status",
        help="Show subscription counts",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    configure_logging()

    parser = create_parser()
    args = parser.parse_args(argv)

    commands = {
        "serve": cmd_serve,
        "notify": cmd_notify,
        "status": cmd_status,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
