"""Presentation helpers: turn results and events into client-ready data."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel

from streamsearch.engines.schemas import SearchEngine, SearchResult
from streamsearch.search.schemas import ResultFound


def compute_result_id(url: str) -> str:
    """Compute a SHA-256 hash of a URL for client-side grouping.

    Args:
        url: The decoded result URL.

    Returns:
        A 64-character hexadecimal hash string.
    """
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


def display_host(url: str) -> str:
    """Host part of a URL without a leading "www."."""
    host = urlsplit(url).hostname or ""
    return host.removeprefix("www.")


def present_result(
    result: SearchResult,
    also_found_by: Iterable[SearchEngine] = (),
) -> dict[str, Any]:
    """Convert a result into the data a client needs to render it.

    Args:
        result: The primary result record.
        also_found_by: Other engines that reported the same URL.

    Returns:
        A JSON-serializable dict.
    """
    date = result.date
    return {
        "id": compute_result_id(result.url),
        "title": result.title,
        "url": result.url,
        "host": display_host(result.url),
        "description": result.description,
        "engine": result.engine.value,
        "image": result.image,
        "date": date.timestamp.isoformat() if date else None,
        "date_is_relative": date.is_relative if date else False,
        "also_found_by": [engine.value for engine in also_found_by],
    }


def render_event(event: BaseModel) -> str:
    """Serialize one search event as an NDJSON line."""
    if isinstance(event, ResultFound):
        payload = {"kind": event.kind, **present_result(event.result)}
    else:
        payload = event.model_dump(mode="json")
    return json.dumps(payload) + "\n"
