import asyncio
import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlsplit, parse_qsl

from ..cache.store import create_cache_store, normalize_cache_key
from ..config import Config
from ..exceptions import InputError, MethodNotAllowedError, UpstreamError
from ..fetching import Fetcher
from ..logging import log_function_call
from ..parsing import parse_feed, extract_article
from ..responses import ProxyResponse, json_response, error_response, preflight_response
from .background import BackgroundWriter

logger = logging.getLogger("feedproxy.gateway")

FEED = 'feed'
ARTICLE = 'article'


def valid_absolute_url(value: str) -> bool:
    try:
        parts = urlsplit(value)
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return False
    return parts.scheme.lower() in ('http', 'https') and bool(parts.hostname)


class Gateway:
    """HTTP request handling for the feed and article proxy.

    A request moves through preflight, validation, cache lookup, fetch,
    transform and respond. Successful responses are written to the cache in
    the background after the reply has been built. Every failure becomes a
    ``{"error": ...}`` JSON response, nothing propagates out of ``handle``.
    """

    def __init__(self, cache, fetcher: Optional[Fetcher] = None,
                 writer: Optional[BackgroundWriter] = None, cache_ttl: Optional[int] = None):
        self.cache = cache
        self.fetcher = fetcher or Fetcher()
        self.writer = writer or BackgroundWriter()
        self.cache_ttl = cache_ttl or Config.CACHE_TTL

    @classmethod
    def from_config(cls) -> 'Gateway':
        cache = create_cache_store(Config.CACHE_BACKEND, Config.CACHE_URL)
        return cls(cache, Fetcher(), BackgroundWriter(), Config.CACHE_TTL)

    async def handle(self, method: str, request_url: str) -> ProxyResponse:
        method = method.upper()
        if method == 'OPTIONS':
            return preflight_response()

        try:
            mode, target = self.validate(method, request_url)
        except InputError as e:
            self._log_response(logging.INFO, f"Rejected request: {e.message}", method, request_url, e.status)
            return error_response(e.message, e.status)

        key = normalize_cache_key(request_url)
        cached = await self._cache_lookup(key)
        if cached is not None:
            self._log_response(logging.DEBUG, "Cache hit", method, request_url, cached.status)
            return cached

        try:
            payload = await asyncio.to_thread(self.fetch_and_transform, mode, target)
            response = json_response(payload, 200, {
                'Cache-Control': f'public, max-age={self.cache_ttl}',
            })
        except UpstreamError as e:
            self._log_response(logging.WARNING, e.message, method, request_url, e.status)
            return error_response(e.message, e.status)
        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.error(f"Error handling {mode} request for {target}: {message}", exc_info=True, extra={
                'request_url': request_url,
                'request_method': method,
                'response_status': 500
            })
            return error_response(message, 500)

        self.writer.spawn(self.cache.put, key, response)
        self._log_response(logging.INFO, f"Served {mode} {target}", method, request_url, 200)
        return response

    def validate(self, method: str, request_url: str) -> Tuple[str, str]:
        """Return ``(mode, target URL)`` or raise InputError"""
        if method != 'GET':
            raise MethodNotAllowedError()

        # First occurrence wins for repeated parameters
        params = {}
        for name, value in parse_qsl(urlsplit(request_url).query, keep_blank_values=True):
            params.setdefault(name, value)
        if params.get('article'):
            mode, target = ARTICLE, params['article']
        elif params.get('url'):
            mode, target = FEED, params['url']
        else:
            raise InputError("Missing url or article parameter")

        if not valid_absolute_url(target):
            raise InputError("Invalid URL")
        return mode, target

    @log_function_call(logger)
    def fetch_and_transform(self, mode: str, target: str) -> Dict[str, Any]:
        if mode == ARTICLE:
            document = self.fetcher.fetch_article(target)
            return extract_article(document.text, target, base_url=document.url).to_dict()

        document = self.fetcher.fetch_feed(target)
        return parse_feed(document.text).to_dict()

    async def shutdown(self):
        await self.writer.shutdown()
        self.fetcher.close()

    async def _cache_lookup(self, key: str) -> Optional[ProxyResponse]:
        try:
            return await asyncio.to_thread(self.cache.get, key)
        except Exception as e:
            # An unreadable cache degrades to a miss
            logger.warning(f"Cache lookup failed for {key}: {str(e)}", exc_info=True, extra={
                'context': {
                    'key': key,
                    'component': 'gateway.cache'
                }
            })
            return None

    def _log_response(self, level: int, message: str, method: str, request_url: str, status: int):
        logger.log(level, message, extra={
            'request_url': request_url,
            'request_method': method,
            'response_status': status
        })
