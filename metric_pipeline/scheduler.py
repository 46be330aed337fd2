"""
Metric Pipeline - Poll Scheduler.

============================================================
RESPONSIBILITY
============================================================
Drives the collection-and-publish cycle on a fixed cadence.

- fetch summaries -> aggregate -> resolve names -> publish
- First cycle runs immediately
- Interval is measured start-to-start
- No step failure ends the loop

============================================================
STATES
============================================================
RUNNING  executing a cycle
IDLE     waiting max(0, interval - elapsed) before the next one

Cycles never overlap; every stage runs sequentially in one task.

============================================================
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from core.clock import ClockProtocol, get_clock
from core.exceptions import ExporterError, PipelineError
from metric_pipeline.aggregator import MetricAggregator
from metric_pipeline.name_resolver import NameResolver
from metric_pipeline.publisher import Publisher
from metric_pipeline.types import CycleResult, SchedulerState
from trace_sources.base import BaseSummarySource
from trace_sources.models import CycleContext, RawSummary


logger = logging.getLogger(__name__)


def compute_wait(interval_seconds: float, elapsed_seconds: float) -> float:
    """Seconds to wait before the next cycle; never negative."""
    return max(0.0, interval_seconds - elapsed_seconds)


class PollScheduler:
    """
    Runs poll cycles for one entity.

    ============================================================
    USAGE
    ============================================================
    ```python
    scheduler = PollScheduler(
        entity_guid=config.entity_guid,
        interval_seconds=config.poll_interval_seconds,
        source=source,
        aggregator=aggregator,
        resolver=resolver,
        publisher=publisher,
    )

    # Run single cycle
    result = await scheduler.run_cycle()

    # Or run until cancelled
    await scheduler.run_forever()
    ```

    ============================================================
    """

    def __init__(
        self,
        entity_guid: str,
        interval_seconds: float,
        source: BaseSummarySource,
        aggregator: MetricAggregator,
        resolver: NameResolver,
        publisher: Publisher,
        clock: Optional[ClockProtocol] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._entity_guid = entity_guid
        self._interval = interval_seconds
        self._source = source
        self._aggregator = aggregator
        self._resolver = resolver
        self._publisher = publisher
        self._clock = clock or get_clock()
        self._sleep = sleep

        self._state = SchedulerState.RUNNING
        self._cycle_count = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    # =========================================================
    # CYCLE EXECUTION
    # =========================================================

    async def run_cycle(self) -> CycleResult:
        """
        Run one fetch, aggregate, resolve, publish cycle.

        Every stage failure is recorded on the result; the remaining stages
        still run with whatever data is available.
        """
        self._state = SchedulerState.RUNNING
        self._cycle_count += 1
        started = self._clock.monotonic()

        context = CycleContext.for_cycle(self._entity_guid, self._clock.now_ms())
        result = CycleResult(
            cycle_timestamp=context.current_time_ms,
            started_at=self._clock.now(),
        )

        summaries = await self._fetch(context, result)
        result.summaries_fetched = len(summaries)

        aggregation = self._aggregator.aggregate(summaries, context.current_time_ms)
        result.samples_built = len(aggregation.samples)

        if aggregation.unresolved:
            try:
                resolution = await self._resolver.resolve(
                    aggregation.unresolved, aggregation.samples
                )
                result.names_requested = len(resolution.requested)
                result.names_resolved = len(resolution.resolved)
                if resolution.error is not None:
                    result.add_error(resolution.error)
            except Exception as e:
                logger.exception("Unexpected error resolving names")
                result.add_error(PipelineError(f"Unexpected resolver error: {e}", cause=e))

        try:
            publish = await self._publisher.publish(aggregation.sample_list)
            result.publish_skipped = publish.skipped
            if publish.error is None:
                result.samples_published = publish.sample_count
            else:
                result.add_error(publish.error)
        except Exception as e:
            logger.exception("Unexpected error publishing metrics")
            result.add_error(PipelineError(f"Unexpected publisher error: {e}", cause=e))

        result.mark_complete(self._clock.now(), self._clock.monotonic() - started)
        self._log_result(result)
        return result

    async def _fetch(self, context: CycleContext, result: CycleResult) -> List[RawSummary]:
        """Fetch summaries; any failure yields an empty cycle."""
        try:
            return await self._source.fetch(context)
        except ExporterError as e:
            logger.error(f"Fetch from {self._source.name} failed: {e.to_log_format()}")
            result.add_error(e)
        except Exception as e:
            logger.exception(f"Unexpected error fetching from {self._source.name}")
            result.add_error(PipelineError(f"Unexpected fetch error: {e}", cause=e))
        return []

    def _log_result(self, result: CycleResult) -> None:
        if result.success:
            logger.info(f"Cycle complete: {result.to_dict()}")
        else:
            logger.warning(f"Cycle completed with errors: {result.to_dict()}")

    # =========================================================
    # CONTINUOUS OPERATION
    # =========================================================

    async def run_forever(self, max_cycles: Optional[int] = None) -> None:
        """
        Run cycles until cancelled.

        Args:
            max_cycles: Stop after this many cycles (no trailing wait)
        """
        logger.info("Starting polling loop")
        cycles = 0
        while True:
            started = self._clock.monotonic()
            await self.run_cycle()
            cycles += 1
            self._state = SchedulerState.IDLE

            if max_cycles is not None and cycles >= max_cycles:
                return

            remainder = compute_wait(self._interval, self._clock.monotonic() - started)
            if remainder > 0:
                logger.info(f"Sleeping {remainder:.1f}s")
                await self._sleep(remainder)
