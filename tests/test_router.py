"""Tests for the streaming search API."""

import json

import pytest
from fastapi.testclient import TestClient

from conftest import FakeTransport
from streamsearch.main import app
from streamsearch.search.router import get_transport

BING_PAGE = (
    b'<html><body><ol id="b_results">'
    b'<li class="b_algo"><h2><a href="https://www.python.org/">Welcome to Python.org</a></h2>'
    b'<div class="b_caption"><p>The official home of <strong>Python</strong></p></div></li>'
    b'<li class="b_algo"><h2><a href="https://docs.python.org/3/">3.12 Documentation</a></h2>'
    b'<div class="b_caption"><p>Python docs</p></div></li>'
    b"</ol></body></html>"
)


@pytest.fixture
def transport():
    fake = FakeTransport({"www.bing.com": BING_PAGE}, chunk_size=32)
    app.dependency_overrides[get_transport] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def client(transport):
    return TestClient(app)


def read_lines(response) -> list[dict]:
    return [json.loads(line) for line in response.text.splitlines() if line]


class TestSearchEndpoint:
    """Tests for GET /api/v1/search."""

    def test_streams_ndjson_events(self, client, transport):
        """Events arrive as one JSON object per line."""
        response = client.get("/api/v1/search", params={"q": "python", "engines": "bing"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/x-ndjson")

        lines = read_lines(response)
        assert [line["kind"] for line in lines] == [
            "started",
            "result",
            "result",
            "finished",
            "completed",
        ]
        assert lines[1]["title"] == "Welcome to Python.org"
        assert lines[1]["host"] == "python.org"
        assert lines[1]["description"] == "The official home of Python"
        assert lines[-1]["total_results"] == 2
        assert transport.requests[0].url == "https://www.bing.com/search?q=python"

    def test_failing_engine_is_reported(self, client):
        """An engine that cannot be reached shows up as a failure line."""
        response = client.get(
            "/api/v1/search", params=[("q", "python"), ("engines", "bing"), ("engines", "brave")]
        )

        assert response.status_code == 200
        lines = read_lines(response)
        failed = [line for line in lines if line["kind"] == "failed"]
        assert [line["engine"] for line in failed] == ["brave"]
        assert lines[-1]["failed_engines"] == ["brave"]
        assert lines[-1]["total_results"] == 2

    def test_unknown_engine(self, client):
        """Unknown engines are rejected before streaming starts."""
        response = client.get("/api/v1/search", params={"q": "python", "engines": "altavista"})

        assert response.status_code == 400
        assert "altavista" in response.json()["detail"]

    def test_duplicate_engine(self, client):
        """The same engine twice is rejected."""
        response = client.get(
            "/api/v1/search", params=[("q", "python"), ("engines", "bing"), ("engines", "bing")]
        )

        assert response.status_code == 400
        assert "more than once" in response.json()["detail"]

    def test_empty_query(self, client):
        """A query is required."""
        response = client.get("/api/v1/search", params={"q": ""})
        assert response.status_code == 422

    def test_missing_query(self, client):
        """The q parameter cannot be omitted."""
        response = client.get("/api/v1/search")
        assert response.status_code == 422
