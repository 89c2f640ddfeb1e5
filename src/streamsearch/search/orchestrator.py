"""Search orchestrator - runs every engine concurrently and merges results.

The flow for one query:
1. Build one adapter per engine configuration
2. Start one producer task per adapter, all sharing one bounded channel
3. Drain the channel in arrival order, deduplicating by URL
4. Report each engine's terminal state the first time it is reached
5. Finish once every engine is terminal and the channel is empty
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from typing import TYPE_CHECKING

import structlog

from streamsearch.core.channel import ChannelClosedError, ResultChannel
from streamsearch.core.config import settings
from streamsearch.engines.base import EngineAdapter, EngineOutcome, EngineStatus
from streamsearch.engines.factories import build_engine_configs, create_engine_adapter
from streamsearch.engines.schemas import EngineConfig, SearchEngine, SearchResult
from streamsearch.search.presentation import compute_result_id
from streamsearch.search.schemas import (
    DuplicateFound,
    EngineFailed,
    EngineFinished,
    ResultFound,
    SearchCompleted,
    SearchEvent,
    SearchStarted,
)

if TYPE_CHECKING:
    from streamsearch.engines.extractor import Clock
    from streamsearch.engines.transport import Transport


log = structlog.get_logger()


# -----------------------------------------------------------------------------
# Custom Exceptions
# -----------------------------------------------------------------------------


class SearchError(Exception):
    """Base exception for search orchestration errors."""

    pass


class NoEnginesConfiguredError(SearchError):
    """Raised when a search is created without any engine."""

    def __init__(self) -> None:
        super().__init__("At least one search engine must be configured")


class DuplicateEngineError(SearchError):
    """Raised when the same engine is configured twice for one search."""

    def __init__(self, engine: SearchEngine) -> None:
        self.engine = engine
        super().__init__(f"Search engine configured more than once: {engine.value}")


class SearchAlreadyConsumedError(SearchError):
    """Raised when a search's event stream is iterated a second time."""

    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f"Search for {query!r} has already been consumed")


# -----------------------------------------------------------------------------
# Orchestrator
# -----------------------------------------------------------------------------


ChannelItem = SearchResult | EngineOutcome


class SearchOrchestrator:
    """Runs one query against several engines and merges their results.

    Created per query; ``events()`` (or ``results()``) may be consumed once.
    Results from one engine keep their extraction order; across engines
    they are merged in arrival order.
    """

    def __init__(
        self,
        query: str,
        configs: Sequence[EngineConfig],
        transport: Transport,
        *,
        queue_capacity: int | None = None,
        clock: Clock | None = None,
        shutdown_grace: float | None = None,
    ) -> None:
        """Validate the engine set; no task is started here.

        Args:
            query: The search query.
            configs: One immutable configuration per engine.
            transport: Fetches each engine's page as a byte stream.
            queue_capacity: Bound of the shared result channel.
            clock: Wall-clock source for relative dates.
            shutdown_grace: Seconds to wait for producers after an early
                consumer exit before cancelling them.

        Raises:
            NoEnginesConfiguredError: If ``configs`` is empty.
            DuplicateEngineError: If an engine appears twice.
        """
        if not configs:
            raise NoEnginesConfiguredError()

        seen: set[SearchEngine] = set()
        for config in configs:
            if config.engine in seen:
                raise DuplicateEngineError(config.engine)
            seen.add(config.engine)

        self.query = query
        self.configs = list(configs)
        self._transport = transport
        self._queue_capacity = (
            settings.queue_capacity if queue_capacity is None else queue_capacity
        )
        self._clock = clock
        self._shutdown_grace = (
            settings.shutdown_grace_seconds if shutdown_grace is None else shutdown_grace
        )
        self._consumed = False

        self.outcomes: dict[SearchEngine, EngineOutcome] = {}
        self.also_found_by: dict[str, list[SearchEngine]] = {}
        self._emitted: dict[str, SearchEngine] = {}
        self._duplicates = 0

    @property
    def engines(self) -> list[SearchEngine]:
        return [config.engine for config in self.configs]

    async def _produce(self, adapter: EngineAdapter, channel: ResultChannel) -> None:
        """Run one adapter and report its outcome exactly once."""
        loop = asyncio.get_running_loop()
        started_at = loop.time()
        try:
            outcome = await adapter.run(self.query, channel, self._transport)
        except Exception as e:
            log.error(
                "Engine producer crashed",
                engine=adapter.engine.value,
                error=str(e),
            )
            outcome = EngineOutcome(
                engine=adapter.engine,
                status=EngineStatus.FAILED,
                elapsed=loop.time() - started_at,
                result_count=adapter.result_count,
                error=str(e),
            )

        try:
            await channel.send(outcome)
        except ChannelClosedError:
            log.debug("Outcome dropped, consumer gone", engine=adapter.engine.value)

    def _merge(self, result: SearchResult) -> ResultFound | DuplicateFound:
        """Deduplicate a result against everything already emitted."""
        result_id = compute_result_id(result.url)
        first_engine = self._emitted.get(result.url)
        if first_engine is None:
            self._emitted[result.url] = result.engine
            return ResultFound(result=result, result_id=result_id)

        self._duplicates += 1
        if result.engine != first_engine:
            also = self.also_found_by.setdefault(result.url, [])
            if result.engine not in also:
                also.append(result.engine)
        return DuplicateFound(
            url=result.url,
            result_id=result_id,
            engine=result.engine,
            first_engine=first_engine,
        )

    def _terminal_event(self, outcome: EngineOutcome) -> EngineFinished | EngineFailed:
        self.outcomes[outcome.engine] = outcome
        if outcome.status is EngineStatus.FAILED:
            log.warning(
                "Engine failed",
                engine=outcome.engine.value,
                elapsed=round(outcome.elapsed, 3),
                error=outcome.error,
            )
            return EngineFailed(
                engine=outcome.engine,
                elapsed=outcome.elapsed,
                error=outcome.error or "unknown error",
            )

        log.info(
            "Engine finished",
            engine=outcome.engine.value,
            elapsed=round(outcome.elapsed, 3),
            results=outcome.result_count,
        )
        return EngineFinished(
            engine=outcome.engine,
            elapsed=outcome.elapsed,
            result_count=outcome.result_count,
            stopped_early=outcome.stopped_early,
        )

    async def _shutdown(self, tasks: list[asyncio.Task[None]]) -> None:
        """Wait briefly for producers, then cancel the ones still running."""
        if not tasks:
            return
        _, pending = await asyncio.wait(tasks, timeout=self._shutdown_grace)
        for task in pending:
            task.cancel()
        if pending:
            log.debug("Cancelled lingering producers", count=len(pending))
            await asyncio.gather(*pending, return_exceptions=True)

    async def events(self) -> AsyncIterator[SearchEvent]:
        """Run the search, yielding events as they happen.

        Yields:
            SearchStarted, then ResultFound / DuplicateFound /
            EngineFinished / EngineFailed in arrival order, then
            SearchCompleted.

        Raises:
            SearchAlreadyConsumedError: On a second call.
        """
        if self._consumed:
            raise SearchAlreadyConsumedError(self.query)
        self._consumed = True

        loop = asyncio.get_running_loop()
        started_at = loop.time()
        channel: ResultChannel[ChannelItem] = ResultChannel(self._queue_capacity)
        adapters = [create_engine_adapter(config, clock=self._clock) for config in self.configs]
        tasks = [
            asyncio.create_task(
                self._produce(adapter, channel),
                name=f"search-{adapter.engine.value}",
            )
            for adapter in adapters
        ]
        log.info("Search started", query=self.query, engines=[e.value for e in self.engines])

        try:
            yield SearchStarted(query=self.query, engines=self.engines)

            # Each producer sends its outcome after all of its results, so
            # the channel is empty once every outcome has been received.
            pending = set(self.engines)
            while pending:
                item = await channel.receive()
                if isinstance(item, EngineOutcome):
                    pending.discard(item.engine)
                    yield self._terminal_event(item)
                    continue

                event = self._merge(item)
                if isinstance(event, ResultFound):
                    log.debug("Result", engine=item.engine.value, url=item.url)
                yield event

            elapsed = loop.time() - started_at
            failed = [
                engine
                for engine in self.engines
                if self.outcomes[engine].status is EngineStatus.FAILED
            ]
            log.info(
                "Search complete",
                query=self.query,
                elapsed=round(elapsed, 3),
                results=len(self._emitted),
                duplicates=self._duplicates,
            )
            yield SearchCompleted(
                elapsed=elapsed,
                total_results=len(self._emitted),
                duplicates=self._duplicates,
                failed_engines=failed,
            )
        finally:
            channel.close()
            await self._shutdown(tasks)

    async def results(self) -> AsyncIterator[SearchResult]:
        """Run the search, yielding only primary (deduplicated) results."""
        events = self.events()
        try:
            async for event in events:
                if isinstance(event, ResultFound):
                    yield event.result
        finally:
            await events.aclose()


async def search(
    query: str,
    *,
    transport: Transport,
    engines: Sequence[SearchEngine | str] | None = None,
) -> AsyncIterator[SearchEvent]:
    """Search the given (or enabled) engines and yield merged events.

    Args:
        query: The search query.
        transport: Fetches each engine's page as a byte stream.
        engines: Engines to query; defaults to the enabled engines.

    Yields:
        The orchestrator's events for this query.
    """
    orchestrator = SearchOrchestrator(query, build_engine_configs(engines), transport)
    events = orchestrator.events()
    try:
        async for event in events:
            yield event
    finally:
        await events.aclose()
