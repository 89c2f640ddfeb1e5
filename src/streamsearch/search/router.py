"""API routes for streaming searches."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

import httpx
import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse

from streamsearch.engines.factories import UnsupportedEngineError, build_engine_configs
from streamsearch.engines.transport import HttpxTransport, Transport, build_default_client
from streamsearch.search.orchestrator import SearchError, SearchOrchestrator
from streamsearch.search.presentation import render_event

log = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["search"])


def get_transport() -> Transport | None:
    """Transport override hook; None means a fresh httpx client per search."""
    return None


TransportDep = Annotated[Transport | None, Depends(get_transport)]


async def _stream_events(
    orchestrator: SearchOrchestrator,
    client: httpx.AsyncClient | None,
) -> AsyncIterator[str]:
    """Render events as NDJSON lines; owns the client for the search."""
    events = orchestrator.events()
    try:
        async for event in events:
            yield render_event(event)
    finally:
        await events.aclose()
        if client is not None:
            await client.aclose()


@router.get("/search")
async def search_endpoint(
    transport: TransportDep,
    q: Annotated[str, Query(min_length=1, max_length=500, description="Search query")],
    engines: Annotated[
        list[str] | None,
        Query(description="Engines to query; defaults to all enabled engines"),
    ] = None,
) -> StreamingResponse:
    """Stream search events as newline-delimited JSON while engines respond."""
    try:
        configs = build_engine_configs(engines or None)
    except UnsupportedEngineError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    client = None
    if transport is None:
        client = build_default_client()
        transport = HttpxTransport(client)

    try:
        orchestrator = SearchOrchestrator(q, configs, transport)
    except SearchError as e:
        if client is not None:
            await client.aclose()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    log.info("Search requested", query=q, engines=[e.value for e in orchestrator.engines])
    return StreamingResponse(
        _stream_events(orchestrator, client),
        media_type="application/x-ndjson",
    )
