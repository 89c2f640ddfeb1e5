"""Bing engine configuration (clearnet, unlocalized)."""

from __future__ import annotations

import re

from streamsearch.engines.schemas import EngineConfig, RequestTemplate, SearchEngine, tempered_gap

BING_URL = "https://www.bing.com/search?q={query}"

_RESULT_OPEN = '<li class="b_algo"'
_GAP = tempered_gap(_RESULT_OPEN)

RESULTS_START = r'id="b_results"'
SINGLE_RESULT = (
    re.escape(_RESULT_OPEN)
    + _GAP
    + r'<h2(?: [^>]*)?> ?<a [^>]*href="(?P<url>[^"]*)"[^>]*>(?P<title>(?:(?!</a>).)*)</a> ?</h2>'
    + _GAP
    + r"<p(?: [^>]*)?>"
    # icon label ("WEB") that precedes the caption text
    + r'(?: ?<span class="algoSlug_icon"[^>]*>(?:(?!</span>).)*</span>)?'
    + r'(?: ?<span class="news_dt">(?P<date>[^<]*)</span>(?: ?&nbsp;&#0183;&#32;| ?· )?)?'
    + r"(?P<description>(?:(?!</p>).)*)</p>"
)

DATE_FORMAT = "%b %d, %Y"


def bing_config() -> EngineConfig:
    """Build the Bing configuration."""
    return EngineConfig(
        engine=SearchEngine.BING,
        start_marker=re.compile(RESULTS_START),
        result_pattern=re.compile(SINGLE_RESULT),
        date_format=DATE_FORMAT,
        request=RequestTemplate(method="GET", url_template=BING_URL),
    )
