"""Heuristic article extraction from raw page HTML.

The pipeline strips page chrome by tag and by class/id vocabulary, picks the
most likely content region, then reduces it to a small set of safe tags with
absolute links. It is a best-effort extractor, not a readability algorithm:
atypical page structures can select the wrong region.
"""

import logging
import re
from dataclasses import dataclass, asdict
from typing import Dict, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Comment, Declaration, Doctype, ProcessingInstruction

from .entities import decode_entities
from .markup import extract_tag, inner, remove_blocks, collapse_whitespace

logger = logging.getLogger("feedproxy.parsing")

DEFAULT_TITLE = 'Untitled'

CHROME_TAGS = ('script', 'style', 'noscript', 'iframe', 'nav', 'header', 'footer', 'aside', 'form')
FORM_CONTROLS = ('button', 'input', 'select', 'textarea', 'label')
SAFE_TAGS = frozenset((
    'p', 'br', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'ul', 'ol', 'li', 'blockquote',
    'pre', 'code', 'em', 'strong', 'b', 'i', 'a', 'figure', 'figcaption', 'img',
))
SAFE_ATTRIBUTES = {
    'a': ('href', 'title'),
    'img': ('src', 'alt', 'title'),
}
URL_ATTRIBUTES = ('href', 'src')

BOILERPLATE_WORDS = (
    'social', 'share', 'comment', 'sidebar', 'widget', 'ad-', 'ads-',
    'advertisement', 'promo', 'newsletter', 'related', 'recommended',
)
CONTENT_WORDS = ('article', 'post', 'entry', 'content', 'story', 'body')

_FLAGS = re.IGNORECASE | re.DOTALL

_OG_TITLE_RES = (
    re.compile(r'''<meta[^>]+property\s*=\s*["']og:title["'][^>]*?content\s*=\s*(["'])((?:(?!\1).)*)\1''', re.IGNORECASE),
    re.compile(r'''<meta[^>]+content\s*=\s*(["'])((?:(?!\1).)*)\1[^>]*?property\s*=\s*["']og:title["']''', re.IGNORECASE),
)
_COMMENT_RE = re.compile(r'<!--.*?-->', re.DOTALL)


def _div_with_vocabulary(words: str, capture: bool) -> re.Pattern:
    body = '(.*?)' if capture else '.*?'
    return re.compile(
        r'''<div\b[^>]*?\b(?:class|id)\s*=\s*["'][^"']*?\b(?:''' + words + r''')[^"']*["'][^>]*>'''
        + body + r'</div\s*>',
        _FLAGS,
    )


_BOILERPLATE_DIV_RE = _div_with_vocabulary('|'.join(re.escape(w) for w in BOILERPLATE_WORDS), capture=False)
_CONTENT_DIV_RE = _div_with_vocabulary('|'.join(CONTENT_WORDS), capture=True)
_FORM_CONTROL_RE = re.compile(r'<(' + '|'.join(FORM_CONTROLS) + r')\b[^>]*>.*?</\1\s*>', _FLAGS)
_VOID_FORM_CONTROL_RE = re.compile(r'<(?:' + '|'.join(FORM_CONTROLS) + r')\b[^>]*/?>', re.IGNORECASE)
_BLOCK_TEXT_RE = re.compile(r'<(?:p|h[1-6])\b', re.IGNORECASE)
_BLANK_LINE_RE = re.compile(r'\n\s*\n')
_JS_URL_RE = re.compile(r'^\s*javascript:', re.IGNORECASE)


@dataclass
class ArticleResult:
    title: str
    content: str
    url: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def extract_title(html: str) -> str:
    """Open Graph title, else the document ``<title>``."""
    for pattern in _OG_TITLE_RES:
        match = pattern.search(html)
        if match and match.group(2).strip():
            return decode_entities(match.group(2)).strip()

    # extract_tag decodes and trims already
    return extract_tag(html, None, 'title') or DEFAULT_TITLE


def strip_chrome(html: str) -> str:
    """Remove non-content elements and boilerplate containers, contents included."""
    html = _COMMENT_RE.sub('', html)
    for tag in CHROME_TAGS:
        html = remove_blocks(html, tag)
    return _BOILERPLATE_DIV_RE.sub('', html)


def select_content_region(html: str) -> str:
    """First of ``<article>``, ``<main>``, a content-like div, ``<body>``, the whole text."""
    for tag in ('article', 'main'):
        region = inner(html, tag)
        if region is not None:
            return region

    match = _CONTENT_DIV_RE.search(html)
    if match:
        return match.group(1)

    region = inner(html, 'body', greedy=True)
    if region is not None:
        return region
    return html


def absolutize(value: str, base_url: str) -> str:
    try:
        return urljoin(base_url, value.strip())
    except ValueError:
        return value


def sanitize(fragment: str, base_url: str) -> str:
    """Reduce a fragment to whitelisted tags with absolute ``href``/``src`` values."""
    fragment = _FORM_CONTROL_RE.sub('', fragment)
    fragment = _VOID_FORM_CONTROL_RE.sub('', fragment)

    soup = BeautifulSoup(fragment, 'html.parser')

    for node in soup.find_all(string=lambda s: isinstance(s, (Comment, Declaration, Doctype, ProcessingInstruction))):
        node.extract()

    for tag in soup.find_all(True):
        if tag.name not in SAFE_TAGS:
            tag.unwrap()
            continue

        allowed = SAFE_ATTRIBUTES.get(tag.name, ())
        tag.attrs = {name: value for name, value in tag.attrs.items() if name in allowed}

        for name in URL_ATTRIBUTES:
            value = tag.get(name)
            if value is None:
                continue
            if _JS_URL_RE.match(value):
                del tag[name]
            else:
                tag[name] = absolutize(value, base_url)

    return str(soup)


def wrap_plain_text(text: str) -> str:
    paragraphs = [collapse_whitespace(chunk) for chunk in _BLANK_LINE_RE.split(text)]
    return ''.join(f'<p>{p}</p>' for p in paragraphs if p)


def extract_article(html: str, url: str, base_url: Optional[str] = None) -> ArticleResult:
    """Extract ``{title, content, url}`` from an article page.

    Args:
        html: Raw page HTML
        url: Address the article was requested as, returned unchanged
        base_url: Address relative links resolve against, defaults to ``url``.
            Differs from ``url`` when the fetch was redirected.
    """
    html = html or ''
    title = extract_title(html)

    cleaned = strip_chrome(html)
    region = select_content_region(cleaned)
    content = sanitize(region, base_url or url)

    # No block structure left: treat it as text split on blank lines
    if _BLOCK_TEXT_RE.search(content):
        content = collapse_whitespace(content)
    else:
        content = wrap_plain_text(content)

    logger.debug(f"Extracted article '{title}'", extra={
        'context': {
            'url': url,
            'title': title,
            'content_length': len(content),
            'component': 'parsing.article'
        }
    })
    return ArticleResult(title=title, content=content, url=url)
