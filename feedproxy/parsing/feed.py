"""RSS 2.0 and Atom parsing into a normalized feed structure."""

import logging
import re
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any

from .entities import decode_entities
from .markup import extract_tag, strip_html, inner, iter_blocks, remove_blocks

logger = logging.getLogger("feedproxy.parsing")

ATOM_NAMESPACE = 'http://www.w3.org/2005/Atom'
DEFAULT_FEED_TITLE = 'Untitled Feed'
DEFAULT_ITEM_TITLE = 'Untitled'

_ATOM_LINK_RE = re.compile(r'''<link\b[^>]*?\bhref\s*=\s*["']([^"']+)["']''', re.IGNORECASE)


@dataclass
class FeedItem:
    title: str = DEFAULT_ITEM_TITLE
    link: str = ''
    description: str = ''
    pubDate: str = ''

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass
class FeedResult:
    title: str = DEFAULT_FEED_TITLE
    items: List[FeedItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'items': [item.to_dict() for item in self.items],
        }


def is_atom(xml: str) -> bool:
    return '<feed' in xml and ATOM_NAMESPACE in xml


def parse_feed(xml: str) -> FeedResult:
    """Parse feed text, choosing the Atom or RSS 2.0 path."""
    xml = xml or ''
    if is_atom(xml):
        result = parse_atom(xml)
        dialect = 'atom'
    else:
        result = parse_rss(xml)
        dialect = 'rss'

    logger.debug(f"Parsed {dialect} feed with {len(result.items)} items", extra={
        'context': {
            'dialect': dialect,
            'feed_title': result.title,
            'item_count': len(result.items),
            'component': 'parsing.feed'
        }
    })
    return result


def parse_rss(xml: str) -> FeedResult:
    channel = inner(xml, 'channel')
    if channel is None:
        channel = xml

    # Item titles must not be mistaken for the channel title
    channel_meta = remove_blocks(channel, 'item')
    title = extract_tag(channel_meta, None, 'title') or DEFAULT_FEED_TITLE

    items = []
    for item_xml in iter_blocks(xml, 'item'):
        items.append(FeedItem(
            title=extract_tag(item_xml, None, 'title') or DEFAULT_ITEM_TITLE,
            link=extract_tag(item_xml, None, 'link') or '',
            description=strip_html(extract_tag(item_xml, None, 'description') or ''),
            pubDate=extract_tag(item_xml, None, 'pubDate') or '',
        ))

    return FeedResult(title=title, items=items)


def parse_atom(xml: str) -> FeedResult:
    body = inner(xml, 'feed', greedy=True)
    if body is None:
        body = xml

    feed_meta = remove_blocks(body, 'entry')
    title = extract_tag(feed_meta, None, 'title') or DEFAULT_FEED_TITLE

    items = []
    for entry_xml in iter_blocks(xml, 'entry'):
        # Atom links live in the href attribute, not the element text
        link_match = _ATOM_LINK_RE.search(entry_xml)
        description = extract_tag(entry_xml, None, 'summary') or extract_tag(entry_xml, None, 'content') or ''
        items.append(FeedItem(
            title=extract_tag(entry_xml, None, 'title') or DEFAULT_ITEM_TITLE,
            link=decode_entities(link_match.group(1)) if link_match else '',
            description=strip_html(description),
            pubDate=extract_tag(entry_xml, None, 'published') or extract_tag(entry_xml, None, 'updated') or '',
        ))

    return FeedResult(title=title, items=items)
