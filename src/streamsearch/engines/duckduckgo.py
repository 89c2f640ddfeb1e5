"""DuckDuckGo engine configuration.

Uses the JavaScript-free HTML endpoint. A result looks like::

    <div class="result results_links results_links_deep web-result ">
      <div class="links_main links_deep result__body">
        <h2 class="result__title">
          <a rel="nofollow" class="result__a"
             href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fwww.speedtest.net%2F&amp;rut=...">
            Speedtest by Ookla - The Global Broadband Speed Test
          </a>
        </h2>
        ...
        <a class="result__snippet" href="...">Use Speedtest on all your devices...</a>
        <div class="clear"></div>
      </div>
    </div>

Links point at DuckDuckGo's redirector; the real target is in ``uddg``.
"""

from __future__ import annotations

import re

from streamsearch.engines.schemas import EngineConfig, RequestTemplate, SearchEngine, tempered_gap

DUCKDUCKGO_URL = "https://html.duckduckgo.com/html/"

_RESULT_OPEN = '<div class="result '
_GAP = tempered_gap(_RESULT_OPEN)

RESULTS_START = r'id="links"'
SINGLE_RESULT = (
    r'<div class="result results_links[^"]*"'
    + _GAP
    + r'<a [^>]*class="result__a"[^>]*href="(?P<url>[^"]*)"[^>]*>'
    + r"(?P<title>(?:(?!</a>).)*)</a>"
    + _GAP
    + r'<a class="result__snippet"[^>]*>(?P<description>(?:(?!</a>).)*)</a>'
)


def duckduckgo_config() -> EngineConfig:
    """Build the DuckDuckGo configuration."""
    return EngineConfig(
        engine=SearchEngine.DUCKDUCKGO,
        start_marker=re.compile(RESULTS_START),
        result_pattern=re.compile(SINGLE_RESULT),
        redirect_param="uddg",
        request=RequestTemplate(
            method="POST",
            url_template=DUCKDUCKGO_URL,
            body_template="q={query}&b=",
            content_type="application/x-www-form-urlencoded",
            headers={"Referer": "https://html.duckduckgo.com/"},
        ),
    )
