"""
Metric Pipeline Package.

This package turns trace summaries into published metrics.
No persistence - every cycle stands alone except for the name cache.

Components:
- http_client: Bounded-retry HTTP client
- name_cache: Process-lifetime guid -> name map
- name_resolver: Batched GraphQL name lookup
- aggregator: Summaries -> deduplicated metric samples
- publisher: Metric API submission

Main service:
- scheduler: Drives the cycle on a fixed cadence
"""

from metric_pipeline.aggregator import MetricAggregator, aggregate
from metric_pipeline.http_client import ResilientHttpClient
from metric_pipeline.name_cache import EntityNameCache
from metric_pipeline.name_resolver import NameResolver, build_entity_query, parse_entities
from metric_pipeline.publisher import Publisher
from metric_pipeline.scheduler import PollScheduler, compute_wait
from metric_pipeline.types import (
    AggregationResult,
    CycleResult,
    HttpOutcome,
    HttpResult,
    MetricSample,
    PublishResult,
    ResolutionResult,
    SchedulerState,
    build_metric_payload,
)


__all__ = [
    # Service
    "PollScheduler",
    "compute_wait",
    # Components
    "ResilientHttpClient",
    "EntityNameCache",
    "NameResolver",
    "MetricAggregator",
    "Publisher",
    # Functions
    "aggregate",
    "build_entity_query",
    "parse_entities",
    "build_metric_payload",
    # Types
    "HttpOutcome",
    "HttpResult",
    "MetricSample",
    "AggregationResult",
    "ResolutionResult",
    "PublishResult",
    "CycleResult",
    "SchedulerState",
]
