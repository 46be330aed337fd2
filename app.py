#!/usr/bin/env python3
"""
Trace Exporter - Main Application Entry Point.

============================================================
SINGLE ENTRYPOINT
============================================================
Polls distributed-tracing summaries for one entity and republishes
them as metrics.

- Compatible with PM2 / systemd process management
- Stops immediately on SIGINT / SIGTERM

============================================================
USAGE
============================================================
Direct execution:
    python app.py

Single cycle:
    python app.py --once

Environment-based configuration:
    POLL_INTERVAL=1m LOG_FORMAT=json python app.py

============================================================
"""

import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.absolute()
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from orchestrator.cli import main


if __name__ == "__main__":
    sys.exit(main())
