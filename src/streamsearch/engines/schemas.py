"""Schemas for search engines, their configuration and extracted results."""

from __future__ import annotations

import enum
import re
from datetime import datetime
from typing import Literal
from urllib.parse import quote_plus

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Named groups a result pattern must / may define
REQUIRED_FIELDS = frozenset({"url", "title", "description"})
OPTIONAL_FIELDS = frozenset({"image", "date"})

QUERY_PLACEHOLDER = "{query}"


def tempered_gap(stop: str) -> str:
    """Regex for a lazy run of text that never crosses ``stop``.

    Result patterns put this between their fields, anchored on the marker
    that opens the next result, so a match tried on a partly received
    result cannot borrow fields from the one after it.
    """
    return f"(?:(?!{re.escape(stop)}).)*?"


class SearchEngine(str, enum.Enum):
    """Supported search engines, in display order."""

    DUCKDUCKGO = "duckduckgo"
    BING = "bing"
    BRAVE = "brave"


class SearchResultDate(BaseModel):
    """A normalized result date.

    Relative dates ("3 days ago") are resolved against the extraction
    wall-clock time, which is kept in ``reference_time`` so the timestamp
    can be reproduced.
    """

    timestamp: datetime = Field(..., description="UTC timestamp of the result")
    is_relative: bool = Field(
        default=False,
        description="True when derived from a relative expression",
    )
    reference_time: datetime | None = Field(
        default=None,
        description="Wall-clock time a relative offset was subtracted from",
    )

    @model_validator(mode="after")
    def _relative_needs_reference(self) -> SearchResultDate:
        if self.is_relative and self.reference_time is None:
            raise ValueError("relative dates must record their reference_time")
        return self


class SearchResult(BaseModel):
    """A single result extracted from a search engine page."""

    title: str = Field(..., description="Decoded result title")
    url: str = Field(..., description="Absolute, decoded result URL")
    description: str = Field(
        default="",
        description="Decoded description with markup stripped",
    )
    engine: SearchEngine = Field(..., description="Engine that produced the result")
    image: str | None = Field(default=None, description="Optional image/favicon URL")
    date: SearchResultDate | None = Field(default=None, description="Optional result date")


class EngineRequest(BaseModel):
    """A concrete request handed to the transport."""

    model_config = ConfigDict(frozen=True)

    method: Literal["GET", "POST"] = "GET"
    url: str
    content: bytes | None = None
    headers: dict[str, str] = Field(default_factory=dict)


class RequestTemplate(BaseModel):
    """How to ask one engine for a results page."""

    model_config = ConfigDict(frozen=True)

    method: Literal["GET", "POST"] = "GET"
    url_template: str
    body_template: str | None = None
    content_type: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _query_is_substituted(self) -> RequestTemplate:
        in_url = QUERY_PLACEHOLDER in self.url_template
        in_body = self.body_template is not None and QUERY_PLACEHOLDER in self.body_template
        if not (in_url or in_body):
            raise ValueError(f"request template must contain {QUERY_PLACEHOLDER} in url or body")
        if self.body_template is not None and self.method == "GET":
            raise ValueError("GET requests cannot carry a body")
        return self

    def render(self, query: str) -> EngineRequest:
        """Substitute the form-encoded query into the template."""
        encoded = quote_plus(query)
        headers = dict(self.headers)
        content = None
        if self.body_template is not None:
            content = self.body_template.replace(QUERY_PLACEHOLDER, encoded).encode("utf-8")
            if self.content_type:
                headers["Content-Type"] = self.content_type
        return EngineRequest(
            method=self.method,
            url=self.url_template.replace(QUERY_PLACEHOLDER, encoded),
            content=content,
            headers=headers,
        )


class EngineConfig(BaseModel):
    """Immutable matching and request configuration for one engine.

    ``result_pattern`` must define the named groups ``url``, ``title`` and
    ``description``; ``image`` and ``date`` are optional. Patterns are
    matched against whitespace-collapsed text, so they never need DOTALL.
    """

    model_config = ConfigDict(frozen=True)

    engine: SearchEngine
    start_marker: re.Pattern[str]
    result_pattern: re.Pattern[str]
    request: RequestTemplate
    date_format: str | None = None
    redirect_param: str | None = None

    @model_validator(mode="after")
    def _check_groups(self) -> EngineConfig:
        groups = set(self.result_pattern.groupindex)
        missing = REQUIRED_FIELDS - groups
        if missing:
            raise ValueError(
                f"{self.engine.value} result pattern is missing groups: {sorted(missing)}"
            )
        unknown = groups - REQUIRED_FIELDS - OPTIONAL_FIELDS
        if unknown:
            raise ValueError(
                f"{self.engine.value} result pattern has unknown groups: {sorted(unknown)}"
            )
        return self
