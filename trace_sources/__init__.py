"""
Trace Sources Package - Trace-summary acquisition layer.

Provides the per-cycle fetch of distributed-tracing summaries for one entity.

Quick Start:
    from metric_pipeline import ResilientHttpClient
    from trace_sources import CycleContext, SessionSummarySource

    async def fetch_once(entity_guid, cookie, now_ms):
        async with ResilientHttpClient() as client:
            source = SessionSummarySource(client, session_cookie=cookie)
            context = CycleContext.for_cycle(entity_guid, now_ms)
            for summary in await source.fetch(context):
                print(summary.entity_guid, summary.average_exclusive_duration_ms)

Adding New Sources:
    1. Create class extending BaseSummarySource
    2. Implement: name, fetch()
    3. Pass it to PollScheduler
"""

from trace_sources.base import BaseSummarySource
from trace_sources.models import CycleContext, EntitySummaries, RawSummary
from trace_sources.providers import SessionSummarySource


__all__ = [
    # Base
    "BaseSummarySource",

    # Models
    "RawSummary",
    "EntitySummaries",
    "CycleContext",

    # Providers
    "SessionSummarySource",
]
