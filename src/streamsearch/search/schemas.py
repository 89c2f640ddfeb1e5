"""Events emitted by a running search."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from streamsearch.engines.schemas import SearchEngine, SearchResult


class SearchStarted(BaseModel):
    """All engine producers have been started."""

    kind: Literal["started"] = "started"
    query: str = Field(..., description="The search query")
    engines: list[SearchEngine] = Field(..., description="Engines queried, in display order")


class ResultFound(BaseModel):
    """A result whose URL has not been seen from any engine yet."""

    kind: Literal["result"] = "result"
    result: SearchResult = Field(..., description="The primary result record")
    result_id: str = Field(..., description="Stable identifier derived from the URL")


class DuplicateFound(BaseModel):
    """A result already emitted by another engine, for display only."""

    kind: Literal["duplicate"] = "duplicate"
    url: str = Field(..., description="The shared, decoded URL")
    result_id: str = Field(..., description="Identifier of the primary result")
    engine: SearchEngine = Field(..., description="Engine that also found the URL")
    first_engine: SearchEngine = Field(..., description="Engine whose result was emitted")


class EngineFinished(BaseModel):
    """An engine reached the end of its page (or was told to stop)."""

    kind: Literal["finished"] = "finished"
    engine: SearchEngine
    elapsed: float = Field(..., ge=0, description="Seconds the engine took")
    result_count: int = Field(default=0, ge=0)
    stopped_early: bool = False


class EngineFailed(BaseModel):
    """An engine's fetch or extraction failed."""

    kind: Literal["failed"] = "failed"
    engine: SearchEngine
    elapsed: float = Field(..., ge=0, description="Seconds until the failure")
    error: str = Field(..., description="Failure reason")


class SearchCompleted(BaseModel):
    """Every engine is terminal and every queued result was delivered."""

    kind: Literal["completed"] = "completed"
    elapsed: float = Field(..., ge=0, description="Seconds for the whole search")
    total_results: int = Field(..., ge=0, description="Primary results emitted")
    duplicates: int = Field(..., ge=0, description="Results suppressed as duplicates")
    failed_engines: list[SearchEngine] = Field(default_factory=list)


SearchEvent = Annotated[
    SearchStarted | ResultFound | DuplicateFound | EngineFinished | EngineFailed | SearchCompleted,
    Field(discriminator="kind"),
]
