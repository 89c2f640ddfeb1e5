"""Engine adapter: drives one extractor from one engine's byte stream."""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from streamsearch.core.channel import ChannelClosedError
from streamsearch.engines.extractor import Clock, IncrementalExtractor
from streamsearch.engines.schemas import EngineConfig, SearchEngine, SearchResult
from streamsearch.engines.transport import TransportError

if TYPE_CHECKING:
    from streamsearch.core.channel import ResultChannel
    from streamsearch.engines.transport import Transport

logger = logging.getLogger(__name__)


class EngineStatus(str, enum.Enum):
    """Terminal state of one engine within a search."""

    FINISHED = "finished"
    FAILED = "failed"


class EngineOutcome(BaseModel):
    """How one engine's fetch ended."""

    engine: SearchEngine = Field(..., description="The engine this outcome belongs to")
    status: EngineStatus = Field(..., description="Finished normally or failed")
    elapsed: float = Field(..., ge=0, description="Seconds from start to terminal state")
    result_count: int = Field(default=0, ge=0, description="Results delivered to the channel")
    error: str | None = Field(default=None, description="Failure reason, if any")
    stopped_early: bool = Field(
        default=False,
        description="True when the consumer went away before the page was done",
    )


class EngineAdapter:
    """Binds one incremental extractor to one engine configuration.

    The adapter is created per search and owned by a single producer task.
    """

    def __init__(self, config: EngineConfig, *, clock: Clock | None = None) -> None:
        self.config = config
        self.extractor = IncrementalExtractor(config, clock=clock)
        self.result_count = 0

    @property
    def engine(self) -> SearchEngine:
        return self.config.engine

    def feed(self, chunk: bytes) -> None:
        self.extractor.feed(chunk)

    def extract_next(self) -> SearchResult | None:
        return self.extractor.extract_next()

    async def _forward(self, channel: ResultChannel) -> None:
        for result in self.extractor.drain():
            await channel.send(result)
            self.result_count += 1

    async def run(
        self,
        query: str,
        channel: ResultChannel,
        transport: Transport,
    ) -> EngineOutcome:
        """Fetch the engine's page and push every result into the channel.

        Args:
            query: The user's search query.
            channel: Shared bounded channel to the consumer.
            transport: Source of the page's byte chunks.

        Returns:
            The engine's terminal outcome. Transport failures and a closed
            channel are reported here rather than raised.
        """
        loop = asyncio.get_running_loop()
        started_at = loop.time()
        request = self.config.request.render(query)

        def outcome(status: EngineStatus, **kwargs: object) -> EngineOutcome:
            return EngineOutcome(
                engine=self.engine,
                status=status,
                elapsed=loop.time() - started_at,
                result_count=self.result_count,
                **kwargs,
            )

        try:
            async for chunk in transport.stream(request):
                self.feed(chunk)
                await self._forward(channel)

            # Matches completed by the last chunk
            self.extractor.finish()
            await self._forward(channel)
        except TransportError as e:
            logger.warning(
                f"{self.engine.value} transport failed after {self.result_count} results: {e}"
            )
            return outcome(EngineStatus.FAILED, error=str(e))
        except ChannelClosedError:
            logger.info(f"{self.engine.value} stopped early, consumer went away")
            return outcome(EngineStatus.FINISHED, stopped_early=True)

        if not self.extractor.started:
            logger.warning(f"{self.engine.value} page ended without a results section")
        logger.debug(f"{self.engine.value} finished with {self.result_count} results")
        return outcome(EngineStatus.FINISHED)
