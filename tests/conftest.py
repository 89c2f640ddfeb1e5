"""Pytest configuration and fixtures."""

import asyncio
import re
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from urllib.parse import urlsplit

import pytest

from streamsearch.engines.schemas import (
    EngineConfig,
    EngineRequest,
    RequestTemplate,
    SearchEngine,
    tempered_gap,
)
from streamsearch.engines.transport import TransportError

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)

_HIT_OPEN = '<div class="hit">'
_GAP = tempered_gap(_HIT_OPEN)

# Fields before an optional date, closed by a required </div> so a
# partly received result never matches early.
TEST_RESULT_PATTERN = (
    re.escape(_HIT_OPEN)
    + _GAP
    + r'<a href="(?P<url>[^"]*)">(?P<title>(?:(?!</a>).)*)</a>'
    + r'(?: ?<img src="(?P<image>[^"]*)">)?'
    + _GAP
    + r"<p>(?P<description>(?:(?!</p>).)*)</p>"
    + r'(?: ?<span class="age">(?P<date>[^<]*)</span>)? ?</div>'
)


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_config(engine: SearchEngine = SearchEngine.BING, host: str | None = None) -> EngineConfig:
    """Engine configuration matching pages produced by build_page."""
    host = host or f"{engine.value}.test"
    return EngineConfig(
        engine=engine,
        start_marker=re.compile(r'id="results"'),
        result_pattern=re.compile(TEST_RESULT_PATTERN),
        date_format="%Y-%m-%d",
        request=RequestTemplate(url_template=f"https://{host}/search?q={{query}}"),
    )


def build_hit(
    url: str,
    title: str,
    description: str,
    *,
    image: str | None = None,
    date: str | None = None,
) -> str:
    image_html = f'\n    <img src="{image}">' if image else ""
    date_html = f'\n    <span class="age">{date}</span>' if date else ""
    return (
        f'<div class="hit">\n'
        f'  <a href="{url}">{title}</a>{image_html}\n'
        f"  <p>{description}</p>{date_html}\n"
        f"</div>\n"
    )


def build_page(hits: list[str]) -> bytes:
    """A results page with a header, the start marker and the given hits."""
    body = "".join(hits)
    return (
        "<!DOCTYPE html>\n<html>\n<head><title>results</title></head>\n"
        '<body>\n  <nav><div class="hit">not a result</div></nav>\n'
        f'  <main id="results">\n{body}  </main>\n'
        "</body>\n</html>\n"
    ).encode("utf-8")


def numbered_page(prefix: str, count: int) -> bytes:
    return build_page(
        [
            build_hit(f"https://example.com/{prefix}/{i}", f"{prefix} {i}", f"Result {i}")
            for i in range(count)
        ]
    )


def split_every(data: bytes, size: int) -> list[bytes]:
    return [data[i : i + size] for i in range(0, len(data), size)]


class FakeTransport:
    """Serves canned pages per host, optionally failing or pausing."""

    def __init__(
        self,
        pages: dict[str, bytes],
        *,
        chunk_size: int = 64,
        fail_after: dict[str, int] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.pages = pages
        self.chunk_size = chunk_size
        self.fail_after = fail_after or {}
        self.delay = delay
        self.requests: list[EngineRequest] = []
        self.chunks_sent: dict[str, int] = {}

    async def stream(self, request: EngineRequest) -> AsyncIterator[bytes]:
        self.requests.append(request)
        host = urlsplit(request.url).hostname or ""
        if host not in self.pages:
            raise TransportError(f"connection refused: {host}")

        fail_after = self.fail_after.get(host)
        for index, chunk in enumerate(split_every(self.pages[host], self.chunk_size)):
            if fail_after is not None and index >= fail_after:
                raise TransportError(f"connection reset by {host}")
            if self.delay:
                await asyncio.sleep(self.delay)
            else:
                await asyncio.sleep(0)
            self.chunks_sent[host] = index + 1
            yield chunk


@pytest.fixture
def clock():
    return fixed_clock


@pytest.fixture
def config() -> EngineConfig:
    return make_config()


@pytest.fixture
def sample_page() -> bytes:
    """A page exercising entities, percent-encoding, markup, dates and UTF-8."""
    return build_page(
        [
            build_hit(
                "https://example.com/caf%C3%A9?a=1&amp;b=2",
                "Caf&eacute; &amp; Bar",
                "Best <b>coffee</b>   in\n town &#8212; café",
                image="//img.example.com/1.png",
                date="2024-03-05",
            ),
            build_hit(
                "https://example.org/page",
                "Second &#x27;result&#x27;",
                "Found    3 days   ago &unknown; &#99999999;",
                date="3 days ago",
            ),
            build_hit("https://example.net/", "Third 日本", "No date here"),
            build_hit("https://example.net/x", "Fourth", "Unparseable date", date="someday"),
        ]
    )
