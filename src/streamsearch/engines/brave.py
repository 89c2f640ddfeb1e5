"""Brave Search engine configuration (clearnet, unlocalized)."""

from __future__ import annotations

import re

from streamsearch.engines.schemas import EngineConfig, RequestTemplate, SearchEngine, tempered_gap

BRAVE_URL = "https://search.brave.com/search?q={query}&source=web"

_RESULT_OPEN = '<div class="snippet svelte-'
_GAP = tempered_gap(_RESULT_OPEN)

RESULTS_START = r"<body"
SINGLE_RESULT = (
    r'<div class="snippet svelte-[^"]*"'
    + _GAP
    + r'<a [^>]*href="(?P<url>[^"]*)"'
    + r"(?:" + _GAP + r'<img [^>]*src="(?P<image>[^"]*)")?'
    + _GAP
    + r'<div class="title(?: [^"]*)?"[^>]*>(?P<title>(?:(?!</div>).)*)</div>'
    + _GAP
    + r'<div class="snippet-description[^"]*"[^>]*>'
    # "Mar 5, 2024 - " or "3 days ago - " in front of the description
    + r"(?: ?(?P<date>[A-Z][a-z]{2} \d{1,2}, \d{4}|\d+ [a-z]+ ago) - )?"
    + r"(?P<description>(?:(?!</div>).)*)</div>"
)

DATE_FORMAT = "%b %d, %Y"


def brave_config() -> EngineConfig:
    """Build the Brave Search configuration."""
    return EngineConfig(
        engine=SearchEngine.BRAVE,
        start_marker=re.compile(RESULTS_START),
        result_pattern=re.compile(SINGLE_RESULT),
        date_format=DATE_FORMAT,
        request=RequestTemplate(method="GET", url_template=BRAVE_URL),
    )
