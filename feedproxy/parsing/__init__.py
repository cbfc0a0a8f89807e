"""Feed and article parsing."""

from .entities import decode_entities
from .markup import extract_tag, strip_html
from .feed import FeedItem, FeedResult, parse_feed
from .article import ArticleResult, extract_article

__all__ = [
    'decode_entities',
    'extract_tag',
    'strip_html',
    'FeedItem',
    'FeedResult',
    'parse_feed',
    'ArticleResult',
    'extract_article',
]
