"""Search module - multi-engine orchestration, events and presentation."""

from streamsearch.search.orchestrator import (
    DuplicateEngineError,
    NoEnginesConfiguredError,
    SearchAlreadyConsumedError,
    SearchError,
    SearchOrchestrator,
    search,
)
from streamsearch.search.presentation import (
    compute_result_id,
    display_host,
    present_result,
    render_event,
)
from streamsearch.search.router import router as search_router
from streamsearch.search.schemas import (
    DuplicateFound,
    EngineFailed,
    EngineFinished,
    ResultFound,
    SearchCompleted,
    SearchEvent,
    SearchStarted,
)

__all__ = [
    "DuplicateEngineError",
    "DuplicateFound",
    "EngineFailed",
    "EngineFinished",
    "NoEnginesConfiguredError",
    "ResultFound",
    "SearchAlreadyConsumedError",
    "SearchCompleted",
    "SearchError",
    "SearchEvent",
    "SearchOrchestrator",
    "SearchStarted",
    "compute_result_id",
    "display_host",
    "present_result",
    "render_event",
    "search",
    "search_router",
]
