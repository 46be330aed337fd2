"""
Metric Pipeline - Type Definitions.

============================================================
PURPOSE
============================================================
Shared types for the collection-and-publish pipeline.

- HTTP attempt results
- Metric samples and payload envelope
- Per-stage results (aggregation, resolution, publish)
- Per-cycle result for logging

============================================================
DESIGN PRINCIPLES
============================================================
- Every failure path is a typed value, not just a log line
- No business logic
- Serializable for logging

============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from core.constants import METRIC_NAME, METRIC_TYPE
from core.exceptions import ExporterError, PipelineError, TransportError


# =============================================================
# ENUMS
# =============================================================

class HttpOutcome(str, Enum):
    """Outcome of a retried HTTP request."""
    SUCCESS = "success"
    EXHAUSTED_WITH_RESPONSE = "exhausted_with_response"
    EXHAUSTED_NO_RESPONSE = "exhausted_no_response"


class SchedulerState(str, Enum):
    """Poll scheduler states."""
    RUNNING = "running"
    IDLE = "idle"


# =============================================================
# HTTP RESULT
# =============================================================

@dataclass(frozen=True)
class HttpResult:
    """Result of ResilientHttpClient.execute()."""
    outcome: HttpOutcome
    url: str
    attempts: int
    status: Optional[int] = None
    body: Optional[bytes] = None
    error: Optional[PipelineError] = None

    @property
    def ok(self) -> bool:
        """True when a 200/202 response was received."""
        return self.outcome == HttpOutcome.SUCCESS

    @property
    def has_response(self) -> bool:
        """True when the last attempt produced a response object."""
        return self.outcome != HttpOutcome.EXHAUSTED_NO_RESPONSE

    def read(self) -> bytes:
        """
        Get the response body.

        Returns the body of the final response, even when its status was
        not a success status.

        Raises:
            TransportError: When no response was obtained at all
        """
        if self.body is None:
            raise self.error or TransportError(
                "No response received", url=self.url, attempts=self.attempts,
            )
        return self.body

    def raise_for_status(self) -> bytes:
        """
        Get the response body only if the request succeeded.

        Raises:
            HTTPStatusError: When retries ended on a bad status
            TransportError: When no response was obtained at all
        """
        if not self.ok:
            if self.error is not None:
                raise self.error
            raise TransportError("Request failed", url=self.url, attempts=self.attempts)
        return self.body or b""


# =============================================================
# METRIC TYPES
# =============================================================

@dataclass
class MetricSample:
    """
    One gauge sample per entity per cycle.

    The display name starts as the entity guid when it is not cached and is
    backfilled once the name resolves.
    """
    entity_guid: str
    display_name: str
    depth: int
    value: float
    timestamp: int
    name: str = METRIC_NAME
    type: str = METRIC_TYPE

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in the metric API wire format."""
        return {
            "name": self.name,
            "type": self.type,
            "value": self.value,
            "timestamp": self.timestamp,
            "attributes": {
                "name": self.display_name,
                "depth": self.depth,
                "entity.guid": self.entity_guid,
            },
        }


def build_metric_payload(samples: List[MetricSample]) -> List[Dict[str, Any]]:
    """Wrap samples in the single-element envelope the metric API expects."""
    return [{"metrics": [sample.to_dict() for sample in samples]}]


# =============================================================
# STAGE RESULT TYPES
# =============================================================

@dataclass
class AggregationResult:
    """Output of the metric aggregator."""
    samples: Dict[str, MetricSample] = field(default_factory=dict)
    unresolved: List[str] = field(default_factory=list)

    @property
    def sample_list(self) -> List[MetricSample]:
        return list(self.samples.values())


@dataclass
class ResolutionResult:
    """Output of the name resolver."""
    requested: List[str] = field(default_factory=list)
    resolved: Dict[str, str] = field(default_factory=dict)
    error: Optional[PipelineError] = None

    @property
    def skipped(self) -> bool:
        """True when nothing needed resolving and no request was made."""
        return not self.requested

    @property
    def unresolved(self) -> List[str]:
        return [guid for guid in self.requested if guid not in self.resolved]


@dataclass
class PublishResult:
    """Output of the publisher."""
    sample_count: int = 0
    skipped: bool = False
    http: Optional[HttpResult] = None
    error: Optional[PipelineError] = None

    @property
    def ok(self) -> bool:
        return self.skipped or (self.http is not None and self.http.ok)


# =============================================================
# CYCLE RESULT
# =============================================================

@dataclass
class CycleResult:
    """Result of one fetch, aggregate, resolve, publish cycle."""
    cycle_id: UUID = field(default_factory=uuid4)
    cycle_timestamp: int = 0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_seconds: float = 0.0

    summaries_fetched: int = 0
    samples_built: int = 0
    names_requested: int = 0
    names_resolved: int = 0
    samples_published: int = 0
    publish_skipped: bool = False

    errors: List[ExporterError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def add_error(self, error: ExporterError) -> None:
        self.errors.append(error)

    def mark_complete(self, completed_at: datetime, duration_seconds: float) -> None:
        self.completed_at = completed_at
        self.duration_seconds = duration_seconds

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "cycle_id": str(self.cycle_id),
            "cycle_timestamp": self.cycle_timestamp,
            "duration_seconds": round(self.duration_seconds, 3),
            "summaries_fetched": self.summaries_fetched,
            "samples_built": self.samples_built,
            "names_requested": self.names_requested,
            "names_resolved": self.names_resolved,
            "samples_published": self.samples_published,
            "publish_skipped": self.publish_skipped,
            "error_count": len(self.errors),
            "errors": [e.to_dict() for e in self.errors[:5]],
        }
