"""
Orchestrator - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line entry point for the trace exporter.

- Provides argparse-based CLI
- Loads configuration from the environment
- Wires the pipeline components
- Installs shutdown signal handlers

============================================================
USAGE
============================================================
python -m orchestrator
python -m orchestrator --once
python app.py --log-level DEBUG --log-format json

============================================================
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
from typing import List, Optional

from core.constants import SYSTEM_NAME, SYSTEM_VERSION
from core.exceptions import ConfigError
from metric_pipeline import (
    EntityNameCache,
    MetricAggregator,
    NameResolver,
    PollScheduler,
    Publisher,
    ResilientHttpClient,
)
from orchestrator.config import ExporterConfig, format_duration
from trace_sources import SessionSummarySource


logger = logging.getLogger("orchestrator")

# Exit status when configuration is missing or invalid
CONFIG_ERROR_EXIT_CODE = 1


# ============================================================
# LOGGING SETUP
# ============================================================

class JsonFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(level: str = "INFO", log_format: str = "text") -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name
        log_format: "json" for one JSON object per line, else text
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog=SYSTEM_NAME,
        description="Export distributed-tracing summaries as metrics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Settings are read from the environment (and a .env file):
  NEW_RELIC_ACCOUNT, ENTITY_GUID, NEW_RELIC_LICENSE_KEY, NEW_RELIC_USER_KEY
  POLL_INTERVAL (default 5m), NEW_RELIC_SESSION_COOKIE

Examples:
  %(prog)s                       # Poll forever
  %(prog)s --once                # Run a single cycle and exit
        """,
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle and exit (no loop)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: LOG_LEVEL or INFO)",
    )

    parser.add_argument(
        "--log-format",
        type=str,
        choices=["text", "json"],
        default=None,
        help="Logging format (default: LOG_FORMAT or text)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {SYSTEM_VERSION}",
    )

    return parser


# ============================================================
# WIRING
# ============================================================

def build_scheduler(
    config: ExporterConfig,
    client: ResilientHttpClient,
) -> PollScheduler:
    """Wire the pipeline components for one account/entity pair."""
    name_cache = EntityNameCache()
    return PollScheduler(
        entity_guid=config.entity_guid,
        interval_seconds=config.poll_interval_seconds,
        source=SessionSummarySource(
            client,
            session_cookie=config.session_cookie,
            endpoint=config.summary_endpoint,
        ),
        aggregator=MetricAggregator(name_cache),
        resolver=NameResolver(
            client,
            name_cache,
            user_key=config.user_key,
            endpoint=config.graphql_endpoint,
        ),
        publisher=Publisher(
            client,
            license_key=config.license_key,
            endpoint=config.metric_endpoint,
        ),
    )


# ============================================================
# SIGNAL HANDLING
# ============================================================

def install_signal_handlers(task: "asyncio.Task[None]") -> None:
    """Stop the poll task immediately on SIGINT/SIGTERM."""
    def _shutdown(sig: signal.Signals) -> None:
        logger.info(f"Process {sig.name} - Shutting down")
        task.cancel()

    if sys.platform == "win32":
        # Windows event loops do not support add_signal_handler
        signal.signal(signal.SIGINT, lambda signum, frame: _shutdown(signal.Signals(signum)))
        return

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _shutdown, sig)


# ============================================================
# MAIN ENTRY POINT
# ============================================================

async def async_main(config: ExporterConfig, once: bool = False) -> int:
    """
    Run the exporter until cancelled.

    Returns:
        Exit code
    """
    async with ResilientHttpClient() as client:
        scheduler = build_scheduler(config, client)
        task = asyncio.create_task(
            scheduler.run_forever(max_cycles=1 if once else None)
        )
        install_signal_handlers(task)
        try:
            await task
        except asyncio.CancelledError:
            # Signal-driven stop; the in-flight cycle is abandoned
            return 0
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = ExporterConfig.from_env()
        config.raise_if_invalid()
    except ConfigError as e:
        setup_logging(args.log_level or "INFO", args.log_format or "text")
        logger.error(e.message)
        return CONFIG_ERROR_EXIT_CODE

    setup_logging(args.log_level or config.log_level, args.log_format or config.log_format)

    logger.info(f"Using account {config.account_id}, entity guid {config.entity_guid}")
    logger.info(f"Poll interval is {format_duration(config.poll_interval_seconds)}")
    if not config.session_cookie:
        logger.warning(
            "NEW_RELIC_SESSION_COOKIE is not set; trace-summary requests will be unauthenticated"
        )
    logger.debug(f"Configuration: {config.to_dict()}")

    return asyncio.run(async_main(config, once=args.once))
