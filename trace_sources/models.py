"""
Trace Source Models - Raw trace summary structures.

Provides typed parsing of the trace-summary response and the per-cycle
request window.
"""

from dataclasses import dataclass
from typing import Any, Optional

from core.constants import SUMMARY_WINDOW_MS
from core.exceptions import ParseError


@dataclass(frozen=True)
class RawSummary:
    """
    One traced call-path edge observed in the summary window.

    Immutable; produced once per cycle and discarded after aggregation.
    """
    direction: str
    depth: float
    call_path: str
    entity_guid: str
    count: int = 0
    error_count: int = 0
    average_duration_ms: float = 0.0
    average_exclusive_duration_ms: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RawSummary":
        """
        Create from a `byEntity` element.

        Raises:
            ParseError: If the element is not an object or a field has the
                wrong type
        """
        if not isinstance(data, dict):
            raise ParseError(f"Expected summary object, got {type(data).__name__}")
        try:
            return cls(
                direction=str(data.get("direction") or ""),
                depth=float(data.get("depth") or 0.0),
                call_path=str(data.get("entityCallPath") or ""),
                entity_guid=str(data.get("entityGuid") or ""),
                count=int(data.get("count") or 0),
                error_count=int(data.get("errorCount") or 0),
                average_duration_ms=float(data.get("averageDurationMs") or 0.0),
                average_exclusive_duration_ms=float(
                    data.get("averageExclusiveDurationMs") or 0.0
                ),
            )
        except (TypeError, ValueError) as e:
            raise ParseError(f"Invalid summary field: {e}", cause=e)


@dataclass(frozen=True)
class EntitySummaries:
    """Trace-summary response document: {data: {byEntity: [...]}}."""
    by_entity: tuple[RawSummary, ...] = ()

    @classmethod
    def from_dict(cls, document: Any) -> "EntitySummaries":
        """
        Parse a decoded JSON document.

        A missing `data` or `byEntity` key means no summaries.

        Raises:
            ParseError: If the document shape is wrong
        """
        if not isinstance(document, dict):
            raise ParseError(
                f"Expected JSON object, got {type(document).__name__}"
            )
        data = document.get("data") or {}
        if not isinstance(data, dict):
            raise ParseError("Field 'data' is not an object")
        by_entity = data.get("byEntity") or []
        if not isinstance(by_entity, list):
            raise ParseError("Field 'data.byEntity' is not a list")
        return cls(by_entity=tuple(RawSummary.from_dict(item) for item in by_entity))

    def __len__(self) -> int:
        return len(self.by_entity)


@dataclass(frozen=True)
class CycleContext:
    """Window of one poll cycle: [current - duration, current]."""
    entity_guid: str
    current_time_ms: int
    start_time_ms: int
    duration_ms: int

    @classmethod
    def for_cycle(
        cls,
        entity_guid: str,
        current_time_ms: int,
        window_ms: Optional[int] = None,
    ) -> "CycleContext":
        """Build the non-overlapping trailing window ending at current_time_ms."""
        window_ms = SUMMARY_WINDOW_MS if window_ms is None else window_ms
        return cls(
            entity_guid=entity_guid,
            current_time_ms=current_time_ms,
            start_time_ms=current_time_ms - window_ms,
            duration_ms=window_ms,
        )

    def to_payload(self) -> dict[str, Any]:
        """Request body for the trace-summary endpoint. Cycle time is not sent."""
        return {
            "entityGuid": self.entity_guid,
            "startTimeMs": self.start_time_ms,
            "durationMs": self.duration_ms,
        }
