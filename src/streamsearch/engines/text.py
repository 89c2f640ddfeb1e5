"""Text normalization for raw page chunks and extracted result fields."""

from __future__ import annotations

import re
from html.entities import name2codepoint
from urllib.parse import parse_qs, urlsplit

WHITESPACE = re.compile(r"\s+")
HTML_ENTITY = re.compile(
    r"&(?:(?P<name>[a-zA-Z][a-zA-Z0-9]*)|#(?P<num>\d+)|#[xX](?P<hex>[0-9a-fA-F]+));"
)
MARKUP_TAG = re.compile(r"<[^>]*>")
PERCENT_RUN = re.compile(r"(?:%[0-9a-fA-F]{2})+")

MAX_CODEPOINT = 0x10FFFF
# html.entities has no entry for the XML apostrophe
_EXTRA_ENTITIES = {"apos": 0x27}


def collapse_whitespace(text: str) -> str:
    """Collapse every run of whitespace (newlines included) to one space."""
    return WHITESPACE.sub(" ", text)


def normalize_chunk(chunk: bytes) -> str:
    """Decode a raw network chunk and collapse its whitespace.

    Malformed byte sequences are replaced rather than rejected. This is the
    stateless form of what the extractor does per chunk; the extractor keeps
    decoder and whitespace state between chunks so a character or a
    whitespace run split across a chunk boundary comes out the same.
    """
    return collapse_whitespace(chunk.decode("utf-8", errors="replace"))


def _codepoint_to_str(codepoint: int) -> str | None:
    if codepoint > MAX_CODEPOINT or 0xD800 <= codepoint <= 0xDFFF:
        return None
    return chr(codepoint)


def _replace_entity(match: re.Match[str]) -> str:
    name, num, hex_ = match.group("name", "num", "hex")
    if name is not None:
        codepoint = name2codepoint.get(name, _EXTRA_ENTITIES.get(name))
    elif num is not None:
        codepoint = int(num)
    else:
        codepoint = int(hex_, 16)

    if codepoint is None:
        return match.group(0)
    replacement = _codepoint_to_str(codepoint)
    # Leave references we cannot resolve untouched
    return match.group(0) if replacement is None else replacement


def decode_entities(text: str) -> str:
    """Resolve named, decimal and hex HTML character references.

    Unknown names and out-of-range code points are left as they are.
    """
    return HTML_ENTITY.sub(_replace_entity, text)


def _decode_percent_run(match: re.Match[str]) -> str:
    escapes = match.group(0).split("%")[1:]
    raw = bytes(int(escape, 16) for escape in escapes)
    decoded = raw.decode("utf-8", errors="surrogateescape")

    # Undecodable bytes come back as lone surrogates, one per byte
    parts = []
    position = 0
    for char in decoded:
        if 0xDC80 <= ord(char) <= 0xDCFF:
            parts.append(f"%{escapes[position]}")
            position += 1
        else:
            parts.append(char)
            position += len(char.encode("utf-8"))
    return "".join(parts)


def decode_percent(text: str) -> str:
    """Decode percent-escapes as UTF-8.

    Malformed escapes ("100% sure") and escapes of bytes that are not valid
    UTF-8 ("%FF") are kept verbatim.
    """
    return PERCENT_RUN.sub(_decode_percent_run, text)


def decode_text(text: str) -> str:
    """Decode a field: percent-encoding first, then HTML entities."""
    return decode_entities(decode_percent(text)).strip()


def strip_markup(text: str) -> str:
    """Remove inline tags left in a decoded description."""
    return collapse_whitespace(MARKUP_TAG.sub("", text)).strip()


def _unwrap_redirect(url: str, param: str) -> str | None:
    """Return the target of an engine redirect link, if it carries one."""
    query = urlsplit(url).query
    if not query:
        return None
    values = parse_qs(query).get(param)
    return values[0] if values else None


def decode_url(raw: str, redirect_param: str | None = None) -> str:
    """Decode an extracted href into an absolute URL.

    Args:
        raw: The href exactly as captured from the page.
        redirect_param: Query parameter an engine uses to wrap the real
            target in a redirect link (DuckDuckGo's ``uddg``).

    Returns:
        The decoded URL, unwrapped when it was a redirect link.
    """
    if redirect_param:
        # parse_qs percent-decodes the value, so it must see the raw href
        target = _unwrap_redirect(decode_entities(raw), redirect_param)
        if target:
            return target.strip()

    url = decode_text(raw)
    if url.startswith("//"):
        url = f"https:{url}"
    return url
