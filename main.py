#!/usr/bin/env python3
"""AI obituaries discovery: find, vet and draft "AI is dead" claims.

This CLI runs the discovery pipeline once, reports which upstream
capabilities are configured, or serves the HTTP trigger used by the
daily scheduler.

Commands:
    run         Execute one discovery run and print the run report (JSON)
    status      Show configuration and capability status
    serve       Start the HTTP trigger (POST/GET /api/discover)

Examples:
    python main.py run                        # Last 24 hours, configured store
    python main.py run --window-hours 72      # Wider window
    python main.py run --store sqlite         # Write drafts to a local file
    python main.py status
    python main.py serve --port 3000

Environment:
    EXA_API_KEY, ANTHROPIC_API_KEY, SANITY_*: upstream capabilities
    See config.py for all configuration options
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from config import Config
from observability.logging import setup_logging


def _apply_overrides(args: argparse.Namespace, config: Config) -> None:
    """Override config with CLI arguments."""
    if getattr(args, "window_hours", None):
        config.discovery_window_hours = args.window_hours
    if getattr(args, "store", None):
        config.store_backend = args.store
    if getattr(args, "db_path", None):
        config.db_path = Path(args.db_path)


def cmd_run(args: argparse.Namespace, config: Config) -> int:
    """Execute one discovery run; the report (or failure) goes to stdout as JSON."""
    from pipeline import DiscoveryPipeline, PipelineError

    logger = logging.getLogger(__name__)

    async def run() -> dict:
        pipeline = DiscoveryPipeline(config)
        try:
            result = await pipeline.run_once()
        finally:
            await pipeline.close()
        return result.to_dict()

    try:
        report = asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Stopped by user (Ctrl+C)")
        return 130  # Standard exit code for SIGINT
    except PipelineError as e:
        print(json.dumps({"error": "Discovery pipeline failed", "details": str(e)}, indent=2))
        return 1

    print(json.dumps(report, indent=2))
    return 0


def cmd_status(args: argparse.Namespace, config: Config) -> int:
    """Print configuration, capability flags and local store totals.

    Never contacts an upstream service.
    """
    status = {
        "config": {
            "classifier_model": config.classifier_model,
            "store_backend": config.store_backend,
            "discovery_window_hours": config.discovery_window_hours,
            "search_results": config.search_results,
            "max_workers": config.max_workers,
            "max_retries": config.max_retries,
            "enable_logfire": config.enable_logfire,
        },
        "configured": {
            "search": config.search_configured,
            "classification": config.classification_configured,
            "persistence": config.persistence_configured,
            "cron": bool(config.cron_secret),
        },
    }

    if config.store_backend == "sqlite" and config.db_path.exists():
        from database import SQLiteStore

        with SQLiteStore(config.db_path) as store:
            status["database"] = {"path": str(config.db_path), **store.stats()}

    print(json.dumps(status, indent=2))
    return 0


def cmd_serve(args: argparse.Namespace, config: Config) -> int:
    from server import serve

    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port

    serve(config)
    return 0


def _add_store_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--store",
        choices=["sanity", "sqlite"],
        help="Content store backend (default: STORE_BACKEND)",
    )
    parser.add_argument(
        "--db-path",
        help="SQLite file for the sqlite backend (default: DB_PATH)",
    )


def main() -> int:
    parser = argparse.ArgumentParser(
        description="AI obituaries discovery pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run command
    run_parser = subparsers.add_parser("run", help="Run one discovery pass")
    run_parser.add_argument(
        "--window-hours",
        type=int,
        help="Search content published in the last N hours (default: DISCOVERY_WINDOW_HOURS)",
    )
    _add_store_arguments(run_parser)

    # status command
    status_parser = subparsers.add_parser("status", help="Show configuration and capability status")
    _add_store_arguments(status_parser)

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Serve the HTTP trigger")
    serve_parser.add_argument("--host", help="Bind address (default: HOST)")
    serve_parser.add_argument("--port", type=int, help="Bind port (default: PORT)")
    _add_store_arguments(serve_parser)

    args = parser.parse_args()

    # Load configuration
    try:
        config = Config.load()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    _apply_overrides(args, config)

    # Setup logging
    setup_logging(config, verbose=args.verbose)

    # Validate configuration for commands that need it
    if args.command in ("run", "serve"):
        error = config.validate()
        if error:
            print(f"Configuration error: {error}", file=sys.stderr)
            return 1

    # Route to command handler
    commands = {
        "run": cmd_run,
        "status": cmd_status,
        "serve": cmd_serve,
    }

    if args.command in commands:
        try:
            return commands[args.command](args, config)
        except Exception as e:
            logging.getLogger(__name__).error("Command failed | cmd=%s error=%s", args.command, e, exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
