"""
Core Module - Constants.

============================================================
RESPONSIBILITY
============================================================
Defines exporter-wide constants.

- Vendor endpoints
- Retry discipline
- Metric naming
- Query templates

============================================================
"""

# ============================================================
# SYSTEM IDENTIFICATION
# ============================================================

SYSTEM_NAME = "trace-exporter"
SYSTEM_VERSION = "1.0.0"

# ============================================================
# ENDPOINTS
# ============================================================

TRACE_SUMMARY_ENDPOINT = (
    "https://distributed-tracing.service.newrelic.com"
    "/api/v2/analytics/relatedTraceEntitySummaries"
)
GRAPHQL_ENDPOINT = "https://api.newrelic.com/graphql"
METRIC_ENDPOINT = "https://metric-api.newrelic.com/metric/v1"

# ============================================================
# POLLING
# ============================================================

DEFAULT_POLL_INTERVAL = "5m"

# Trace summaries are requested over a fixed trailing window
SUMMARY_WINDOW_MS = 3_600_000

# ============================================================
# RETRY DISCIPLINE
# ============================================================

MAX_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 0.5
SUCCESS_STATUSES = frozenset({200, 202})

# aiohttp's own default total timeout
DEFAULT_TIMEOUT_SECONDS = 300.0

# ============================================================
# METRICS
# ============================================================

METRIC_NAME = "exclusiveDuration"
METRIC_TYPE = "gauge"

# ============================================================
# IDENTITY LOOKUP
# ============================================================

GRAPHQL_QUERY_TEMPLATE = "{{actor {{entities(guids: [{guids}]) {{name guid type}}}}}}"
