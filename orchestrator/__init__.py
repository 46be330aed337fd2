"""
Orchestrator Package - Process bootstrap for the trace exporter.

============================================================
PACKAGE OVERVIEW
============================================================
Startup, configuration and shutdown wiring around the poll scheduler.
It holds no pipeline logic of its own.

    +-----------------------------------------------------+
    |                     Orchestrator                    |
    |-----------------------------------------------------|
    |  ExporterConfig |  Settings from env / .env         |
    |  CLI            |  argparse entry point, logging    |
    |  Signals        |  SIGINT/SIGTERM -> immediate stop |
    +-----------------------------------------------------+

============================================================
"""

from orchestrator.cli import (
    build_scheduler,
    create_parser,
    main,
    setup_logging,
)
from orchestrator.config import ExporterConfig, format_duration, parse_duration


__all__ = [
    # Config
    "ExporterConfig",
    "parse_duration",
    "format_duration",
    # CLI
    "main",
    "create_parser",
    "setup_logging",
    "build_scheduler",
]
