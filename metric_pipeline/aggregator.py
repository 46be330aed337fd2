"""
Metric Pipeline - Metric Aggregator.

============================================================
RESPONSIBILITY
============================================================
Turns one cycle's raw trace summaries into metric samples.

- One sample per distinct entity guid, first record wins
- Display name from the name cache, else the guid itself
- Collects guids that still need a name lookup
- No network access

============================================================
"""

import logging
from typing import Iterable

from metric_pipeline.name_cache import EntityNameCache
from metric_pipeline.types import AggregationResult, MetricSample
from trace_sources.models import RawSummary


logger = logging.getLogger(__name__)


def aggregate(
    raw_summaries: Iterable[RawSummary],
    cycle_timestamp: int,
    name_cache: EntityNameCache,
) -> AggregationResult:
    """
    Build the cycle's metric samples.

    Later records for an already-seen guid are ignored; values are not
    averaged. Depth is truncated toward zero, not rounded.

    Args:
        raw_summaries: Summaries in response order
        cycle_timestamp: Cycle time in ms, shared by every sample
        name_cache: Cache consulted for display names

    Returns:
        AggregationResult with samples keyed by guid and the ordered,
        duplicate-free list of guids missing from the cache
    """
    result = AggregationResult()

    for summary in raw_summaries:
        guid = summary.entity_guid
        if guid in result.samples:
            continue

        name = name_cache.lookup(guid)
        if name is None:
            name = guid
            result.unresolved.append(guid)

        result.samples[guid] = MetricSample(
            entity_guid=guid,
            display_name=name,
            depth=int(summary.depth),
            value=summary.average_exclusive_duration_ms,
            timestamp=cycle_timestamp,
        )

    return result


class MetricAggregator:
    """Aggregator bound to the process name cache."""

    def __init__(self, name_cache: EntityNameCache) -> None:
        self._name_cache = name_cache

    def aggregate(
        self,
        raw_summaries: Iterable[RawSummary],
        cycle_timestamp: int,
    ) -> AggregationResult:
        result = aggregate(raw_summaries, cycle_timestamp, self._name_cache)
        logger.debug(
            f"Aggregated {len(result.samples)} samples, "
            f"{len(result.unresolved)} names to resolve"
        )
        return result
