import codecs
import logging
import re
from dataclasses import dataclass
from typing import Optional

import requests

from ..config import Config
from ..exceptions import UpstreamError

logger = logging.getLogger("feedproxy.fetching")

FEED_ACCEPT = 'application/rss+xml, application/atom+xml, application/xml, text/xml'
ARTICLE_ACCEPT = 'text/html, application/xhtml+xml, application/xml;q=0.9, */*;q=0.8'

# Encoding declared inside the document, used when the Content-Type has no charset
_DECLARED_ENCODING_RE = re.compile(
    rb'''<\?xml[^>]*?encoding\s*=\s*["']([\w.:-]+)["']|<meta[^>]*?charset\s*=\s*["']?([\w.:-]+)''',
    re.IGNORECASE,
)


@dataclass
class FetchedDocument:
    text: str
    url: str  # final URL after redirects
    status: int
    content_type: str = ''


class Fetcher:
    """Outbound HTTP client for feeds and article pages.

    One attempt per call: no retries, and no timeout unless one is configured.
    """

    def __init__(self, user_agent: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.user_agent = user_agent or Config.USER_AGENT
        self.timeout = timeout if timeout is not None else Config.FETCH_TIMEOUT
        self.session = session or requests.Session()

    def fetch_feed(self, url: str) -> FetchedDocument:
        return self._fetch(url, FEED_ACCEPT, kind='feed')

    def fetch_article(self, url: str) -> FetchedDocument:
        return self._fetch(url, ARTICLE_ACCEPT, kind='article')

    def close(self):
        self.session.close()

    def _fetch(self, url: str, accept: str, kind: str) -> FetchedDocument:
        logger.info(f"Fetching {kind}: {url}", extra={
            'context': {
                'url': url,
                'kind': kind,
                'component': 'fetching'
            }
        })
        headers = {
            'User-Agent': self.user_agent,
            'Accept': accept,
        }
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            logger.warning(f"Network error fetching {kind} {url}: {e}", extra={
                'context': {
                    'url': url,
                    'kind': kind,
                    'component': 'fetching'
                }
            })
            raise UpstreamError(f"Failed to fetch {kind}: {e}") from e

        if not response.ok:
            logger.warning(f"Upstream returned {response.status_code} for {url}", extra={
                'context': {
                    'url': url,
                    'kind': kind,
                    'upstream_status': response.status_code,
                    'component': 'fetching'
                }
            })
            raise UpstreamError(f"Failed to fetch {kind}: {response.status_code}",
                                upstream_status=response.status_code)

        content_type = response.headers.get('Content-Type', '')
        if 'charset' not in content_type.lower():
            response.encoding = declared_encoding(response.content) or 'utf-8'

        logger.debug(f"Fetched {kind} {url} ({len(response.content)} bytes)", extra={
            'context': {
                'url': url,
                'final_url': response.url,
                'status': response.status_code,
                'content_type': content_type,
                'component': 'fetching'
            }
        })
        return FetchedDocument(
            text=response.text,
            url=response.url or url,
            status=response.status_code,
            content_type=content_type,
        )


def declared_encoding(content: bytes) -> Optional[str]:
    match = _DECLARED_ENCODING_RE.search(content[:2048])
    if not match:
        return None
    name = (match.group(1) or match.group(2)).decode('ascii', 'ignore')
    try:
        codecs.lookup(name)
    except LookupError:
        return None
    return name
