"""Tests for result presentation and event rendering."""

import json
from datetime import UTC, datetime

from streamsearch.engines.schemas import SearchEngine, SearchResult, SearchResultDate
from streamsearch.search.presentation import (
    compute_result_id,
    display_host,
    present_result,
    render_event,
)
from streamsearch.search.schemas import (
    DuplicateFound,
    EngineFailed,
    ResultFound,
    SearchCompleted,
    SearchStarted,
)

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)


def make_result(**overrides) -> SearchResult:
    data = {
        "title": "Welcome to Python.org",
        "url": "https://www.python.org/",
        "description": "The official home of Python",
        "engine": SearchEngine.BING,
    }
    data.update(overrides)
    return SearchResult(**data)


class TestComputeResultId:
    """Tests for compute_result_id."""

    def test_stable_hex_digest(self):
        """The same URL always gets the same 64-character id."""
        first = compute_result_id("https://www.python.org/")
        assert first == compute_result_id("https://www.python.org/")
        assert len(first) == 64
        assert all(c in "0123456789abcdef" for c in first)

    def test_different_urls(self):
        """Different URLs get different ids."""
        assert compute_result_id("https://a.example/") != compute_result_id("https://b.example/")


class TestPresentResult:
    """Tests for present_result and display_host."""

    def test_display_host_strips_www(self):
        """The leading www. is not shown."""
        assert display_host("https://www.python.org/about") == "python.org"
        assert display_host("https://docs.python.org/3/") == "docs.python.org"
        assert display_host("not a url") == ""

    def test_minimal_result(self):
        """Optional fields present as empty values."""
        data = present_result(make_result())
        assert data == {
            "id": compute_result_id("https://www.python.org/"),
            "title": "Welcome to Python.org",
            "url": "https://www.python.org/",
            "host": "python.org",
            "description": "The official home of Python",
            "engine": "bing",
            "image": None,
            "date": None,
            "date_is_relative": False,
            "also_found_by": [],
        }

    def test_full_result(self):
        """Dates are ISO formatted and other engines listed."""
        date = SearchResultDate(timestamp=NOW, is_relative=True, reference_time=NOW)
        result = make_result(image="https://img.example/x.png", date=date)

        data = present_result(result, also_found_by=[SearchEngine.BRAVE, SearchEngine.DUCKDUCKGO])

        assert data["image"] == "https://img.example/x.png"
        assert data["date"] == "2024-05-01T12:00:00+00:00"
        assert data["date_is_relative"] is True
        assert data["also_found_by"] == ["brave", "duckduckgo"]


class TestRenderEvent:
    """Tests for render_event."""

    def test_one_json_line(self):
        """Each event is one line of JSON."""
        line = render_event(SearchStarted(query="python", engines=[SearchEngine.BING]))
        assert line.endswith("\n")
        assert line.count("\n") == 1
        assert json.loads(line) == {"kind": "started", "query": "python", "engines": ["bing"]}

    def test_result_is_flattened(self):
        """Results are rendered in their client-ready form."""
        result = make_result()
        line = render_event(ResultFound(result=result, result_id=compute_result_id(result.url)))
        data = json.loads(line)
        assert data["kind"] == "result"
        assert data["host"] == "python.org"
        assert data["id"] == compute_result_id(result.url)

    def test_other_events(self):
        """Lifecycle events keep their fields."""
        duplicate = json.loads(
            render_event(
                DuplicateFound(
                    url="https://x.example/",
                    result_id="abc",
                    engine=SearchEngine.BRAVE,
                    first_engine=SearchEngine.BING,
                )
            )
        )
        assert duplicate["kind"] == "duplicate"
        assert duplicate["first_engine"] == "bing"

        failed = json.loads(
            render_event(EngineFailed(engine=SearchEngine.BRAVE, elapsed=0.2, error="timeout"))
        )
        assert failed == {"kind": "failed", "engine": "brave", "elapsed": 0.2, "error": "timeout"}

        completed = json.loads(
            render_event(
                SearchCompleted(
                    elapsed=1.5,
                    total_results=3,
                    duplicates=1,
                    failed_engines=[SearchEngine.BRAVE],
                )
            )
        )
        assert completed["failed_engines"] == ["brave"]
