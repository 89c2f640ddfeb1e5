"""Incremental extraction of search results from a chunked HTML stream.

The extractor is a pure state machine with no I/O. Pages arrive as
arbitrarily sized network chunks, so nothing here assumes a result (or the
start marker) lies inside a single chunk: results are only ever matched
against the accumulated buffer, and the buffer only ever loses the text a
successful match consumed. Feeding a document in any chunking therefore
yields the same results as feeding it whole.
"""

from __future__ import annotations

import codecs
import logging
from collections.abc import Callable, Iterator
from datetime import UTC, datetime

from streamsearch.core.config import settings
from streamsearch.engines.dates import parse_result_date
from streamsearch.engines.schemas import EngineConfig, SearchResult
from streamsearch.engines.text import collapse_whitespace, decode_text, decode_url, strip_markup

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default extraction clock."""
    return datetime.now(UTC)


class IncrementalExtractor:
    """Pulls results for one engine out of a stream of byte chunks.

    Two states: seeking the start-of-results marker, then in-results for
    the rest of the search. ``feed`` only buffers; ``extract_next`` returns
    at most one result per call.
    """

    def __init__(
        self,
        config: EngineConfig,
        *,
        clock: Clock | None = None,
        marker_window: int | None = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            config: The engine's immutable matching configuration.
            clock: Wall-clock source used to resolve relative dates.
            marker_window: How many characters of pre-marker text to keep
                so a marker split across chunks is still found.
        """
        self.config = config
        self._clock = clock or utc_now
        self._marker_window = settings.marker_window if marker_window is None else marker_window
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._started = False
        self._ends_with_space = False
        self._pending = ""
        self._buffer = ""

    @property
    def started(self) -> bool:
        """Whether the start-of-results marker has been seen."""
        return self._started

    @property
    def buffer(self) -> str:
        """Normalized text received but not yet consumed by a match."""
        return self._buffer

    def _append(self, text: str) -> None:
        text = collapse_whitespace(text)
        # A whitespace run split across chunks still collapses to one space
        if self._ends_with_space and text.startswith(" "):
            text = text[1:]
        if not text:
            return
        self._ends_with_space = text.endswith(" ")

        if self._started:
            self._buffer += text
            return

        seen = self._pending + text
        marker = self.config.start_marker.search(seen)
        if marker is None:
            self._pending = seen[max(len(seen) - self._marker_window, 0) :]
            return

        self._started = True
        self._pending = ""
        self._buffer = seen[marker.end() :]

    def feed(self, chunk: bytes) -> None:
        """Consume one raw chunk from the network."""
        self._append(self._decoder.decode(chunk))

    def finish(self) -> None:
        """Flush bytes held back by the decoder at end of stream."""
        self._append(self._decoder.decode(b"", final=True))

    def extract_next(self) -> SearchResult | None:
        """Try to pull one result out of the buffer.

        Matches whose URL decodes to nothing are consumed and skipped.

        Returns:
            The next result, or None when the buffer holds no complete
            match yet. A miss leaves the buffer unchanged.
        """
        if not self._started:
            return None

        while (match := self.config.result_pattern.search(self._buffer)) is not None:
            fields = match.groupdict()
            self._buffer = self._buffer[match.end() :]
            result = self._build_result(fields)
            if result is not None:
                return result
        return None

    def drain(self) -> Iterator[SearchResult]:
        """Yield results until the buffer holds no further match."""
        while (result := self.extract_next()) is not None:
            yield result

    def _build_result(self, fields: dict[str, str | None]) -> SearchResult | None:
        config = self.config
        url = decode_url(fields.get("url") or "", config.redirect_param)
        if not url:
            logger.debug(f"{config.engine.value} result without a URL skipped")
            return None

        image = fields.get("image")
        return SearchResult(
            title=decode_text(fields.get("title") or ""),
            url=url,
            description=strip_markup(decode_text(fields.get("description") or "")),
            engine=config.engine,
            image=decode_url(image) if image else None,
            date=parse_result_date(fields.get("date"), config.date_format, self._clock()),
        )
