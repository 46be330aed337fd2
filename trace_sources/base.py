"""
Base Summary Source - Abstract interface for trace-summary providers.

A summary source executes one authenticated request per cycle against the
trace-summary endpoint and returns parsed RawSummary records. How the session
is authenticated is up to the implementation.
"""

import logging
from abc import ABC, abstractmethod

from trace_sources.models import CycleContext, RawSummary


logger = logging.getLogger(__name__)


class BaseSummarySource(ABC):
    """
    Abstract base class for all summary sources.

    Each source must:
    1. Implement name - identifier used in logs
    2. Implement fetch() - one request per cycle, parsed to RawSummary

    fetch() raises TransportError, HTTPStatusError or ParseError; the poll
    scheduler logs them and carries on with an empty cycle.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this source."""
        pass

    @abstractmethod
    async def fetch(self, context: CycleContext) -> list[RawSummary]:
        """
        Fetch trace summaries for the cycle window.

        Args:
            context: Entity and time window of the current cycle

        Returns:
            Raw summaries in response order
        """
        pass

    async def close(self) -> None:
        """Close resources."""

    async def __aenter__(self) -> "BaseSummarySource":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name})>"
