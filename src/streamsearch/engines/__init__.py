"""Engines module - incremental extraction and per-engine configuration."""

from streamsearch.engines.base import EngineAdapter, EngineOutcome, EngineStatus
from streamsearch.engines.bing import bing_config
from streamsearch.engines.brave import brave_config
from streamsearch.engines.duckduckgo import duckduckgo_config
from streamsearch.engines.extractor import IncrementalExtractor
from streamsearch.engines.factories import (
    UnsupportedEngineError,
    build_engine_config,
    build_engine_configs,
    create_engine_adapter,
)
from streamsearch.engines.schemas import (
    EngineConfig,
    EngineRequest,
    RequestTemplate,
    SearchEngine,
    SearchResult,
    SearchResultDate,
)
from streamsearch.engines.transport import (
    HttpxTransport,
    Transport,
    TransportError,
    build_default_client,
)

__all__ = [
    "EngineAdapter",
    "EngineConfig",
    "EngineOutcome",
    "EngineRequest",
    "EngineStatus",
    "HttpxTransport",
    "IncrementalExtractor",
    "RequestTemplate",
    "SearchEngine",
    "SearchResult",
    "SearchResultDate",
    "Transport",
    "TransportError",
    "UnsupportedEngineError",
    "bing_config",
    "brave_config",
    "build_default_client",
    "build_engine_config",
    "build_engine_configs",
    "create_engine_adapter",
    "duckduckgo_config",
]
