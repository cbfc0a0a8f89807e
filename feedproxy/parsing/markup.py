"""Regex helpers shared by the feed parser and the article extractor.

These are best-effort extractors, not a validating XML parser. Matching is
case-insensitive and non-greedy, so the first closing tag of the same name
ends a match and the first occurrence in document order wins.
"""

import re
from functools import lru_cache
from typing import Optional

from .entities import decode_entities

MAX_SUMMARY_LENGTH = 500

_TAG_RE = re.compile(r'<[^>]+>')
_WS_RE = re.compile(r'\s+')
_FLAGS = re.IGNORECASE | re.DOTALL


def open_tag(tag: str) -> str:
    """Pattern for an opening tag with optional attributes, excluding ``<tag/>``."""
    return rf'<{re.escape(tag)}(?:\s[^>]*?)?(?<!/)>'


def close_tag(tag: str) -> str:
    return rf'</{re.escape(tag)}\s*>'


@lru_cache(maxsize=128)
def element_pattern(tag: str, greedy: bool = False) -> re.Pattern:
    """Compiled pattern capturing the inner markup of ``<tag>...</tag>``."""
    body = '(.*)' if greedy else '(.*?)'
    return re.compile(open_tag(tag) + body + close_tag(tag), _FLAGS)


@lru_cache(maxsize=128)
def _cdata_pattern(tag: str) -> re.Pattern:
    return re.compile(
        open_tag(tag) + r'\s*<!\[CDATA\[(.*?)\]\]>\s*' + close_tag(tag),
        _FLAGS,
    )


def inner(markup: str, tag: str, greedy: bool = False) -> Optional[str]:
    """Inner markup of the first ``tag`` element, or None."""
    match = element_pattern(tag, greedy).search(markup)
    return match.group(1) if match else None


def iter_blocks(markup: str, tag: str):
    """Yield the inner markup of every ``tag`` element, in document order."""
    for match in element_pattern(tag).finditer(markup):
        yield match.group(1)


def remove_blocks(markup: str, tag: str) -> str:
    """Remove every ``tag`` element together with its contents."""
    return element_pattern(tag).sub('', markup)


def extract_tag(markup: str, parent: Optional[str], tag: str) -> Optional[str]:
    """Text of the first ``tag`` element, optionally scoped to ``parent``.

    CDATA content is preferred and returned verbatim (trimmed). Plain content
    is entity-decoded and trimmed. Returns None when nothing matched, callers
    substitute their own defaults.
    """
    if not markup:
        return None

    search = markup
    if parent:
        scoped = inner(markup, parent)
        if scoped is not None:
            search = scoped

    cdata = _cdata_pattern(tag).search(search)
    if cdata:
        return cdata.group(1).strip()

    plain = element_pattern(tag).search(search)
    if plain:
        return decode_entities(plain.group(1).strip())

    return None


def strip_html(text: str, limit: int = MAX_SUMMARY_LENGTH) -> str:
    """Drop markup, collapse whitespace and cut to ``limit`` characters."""
    if not text:
        return ""
    text = _TAG_RE.sub('', text)
    # An unterminated tag such as "a < b" or "<br" survives the pass above
    text = text.replace('<', '').replace('>', '')
    text = _WS_RE.sub(' ', text).strip()
    return text[:limit]


def collapse_whitespace(text: str) -> str:
    return _WS_RE.sub(' ', text).strip()
