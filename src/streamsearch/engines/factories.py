"""Factory functions to build engine configurations and adapters."""

from __future__ import annotations

from collections.abc import Iterable

from streamsearch.core.config import settings
from streamsearch.engines.base import EngineAdapter
from streamsearch.engines.bing import bing_config
from streamsearch.engines.brave import brave_config
from streamsearch.engines.duckduckgo import duckduckgo_config
from streamsearch.engines.extractor import Clock
from streamsearch.engines.schemas import EngineConfig, SearchEngine


class UnsupportedEngineError(Exception):
    """Raised when asked for an engine that has no configuration."""

    def __init__(self, engine: str) -> None:
        self.engine = engine
        super().__init__(f"Unsupported search engine: {engine}")


def build_engine_config(engine: SearchEngine | str) -> EngineConfig:
    """Build the configuration for one engine.

    Args:
        engine: The engine, or its string value.

    Returns:
        A fresh, immutable EngineConfig.

    Raises:
        UnsupportedEngineError: If the engine is unknown.
    """
    try:
        engine = SearchEngine(engine)
    except ValueError as e:
        raise UnsupportedEngineError(str(engine)) from e

    match engine:
        case SearchEngine.DUCKDUCKGO:
            return duckduckgo_config()
        case SearchEngine.BING:
            return bing_config()
        case SearchEngine.BRAVE:
            return brave_config()
        case _:
            raise UnsupportedEngineError(engine.value)


def build_engine_configs(
    engines: Iterable[SearchEngine | str] | None = None,
) -> list[EngineConfig]:
    """Build configurations for the given engines, or the enabled ones."""
    if engines is None:
        engines = settings.enabled_engines
    return [build_engine_config(engine) for engine in engines]


def create_engine_adapter(config: EngineConfig, *, clock: Clock | None = None) -> EngineAdapter:
    """Create a per-search adapter around a shared configuration."""
    return EngineAdapter(config, clock=clock)
