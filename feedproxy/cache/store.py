import logging
import re
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

from ..responses import ProxyResponse
from . import create_session_factory
from .models import CachedResponse

logger = logging.getLogger("feedproxy.cache")

_MAX_AGE_RE = re.compile(r'(?:^|,)\s*(s-maxage|max-age)\s*=\s*"?(\d+)"?', re.IGNORECASE)
_UNCACHEABLE = ('no-store', 'no-cache', 'private')


def freshness_lifetime(headers: Dict[str, str]) -> Optional[int]:
    """Seconds a response may be served from cache, per its Cache-Control header.

    ``s-maxage`` wins over ``max-age``. Returns None when the response must not
    be stored.
    """
    cache_control = ''
    for name, value in headers.items():
        if name.lower() == 'cache-control':
            cache_control = value
            break

    directives = [d.strip().lower() for d in cache_control.split(',')]
    if any(d in _UNCACHEABLE for d in directives):
        return None

    ages = dict((name.lower(), int(value)) for name, value in _MAX_AGE_RE.findall(cache_control))
    lifetime = ages.get('s-maxage', ages.get('max-age'))
    if not lifetime:
        return None
    return lifetime


def normalize_cache_key(url: str) -> str:
    """Canonical form of a request URL: lowercase scheme and host, no fragment,
    query re-encoded in its original order."""
    parts = urlsplit(url)
    query = urlencode(parse_qsl(parts.query, keep_blank_values=True))
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path or '/', query, ''))


def _utc(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp, timezone.utc).replace(tzinfo=None)


class MemoryCacheStore:
    """Process-local TTL cache of serialized responses"""

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._store: Dict[str, Tuple[ProxyResponse, float, float]] = {}  # key -> (response, created, expires)
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[ProxyResponse]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            response, _, expires = entry
            if self.clock() >= expires:
                del self._store[key]
                return None
            return response

    def put(self, key: str, response: ProxyResponse) -> bool:
        lifetime = freshness_lifetime(response.headers)
        if lifetime is None:
            return False
        now = self.clock()
        with self._lock:
            # Expired entries are dropped on every write
            self._evict_expired(now)
            self._store[key] = (response, now, now + lifetime)
        return True

    def purge(self, expired_only: bool = False) -> int:
        with self._lock:
            if not expired_only:
                removed = len(self._store)
                self._store.clear()
                return removed
            return self._evict_expired(self.clock())

    def stats(self) -> Dict[str, int]:
        now = self.clock()
        with self._lock:
            fresh = sum(1 for _, _, expires in self._store.values() if now < expires)
            return {'entries': len(self._store), 'fresh': fresh}

    def _evict_expired(self, now: float) -> int:
        stale = [key for key, (_, _, expires) in self._store.items() if now >= expires]
        for key in stale:
            del self._store[key]
        return len(stale)


class SQLCacheStore:
    """Response cache kept in a SQL table, shared between processes on one database"""

    def __init__(self, session_factory, clock: Callable[[], float] = time.time):
        self.session_factory = session_factory
        self.clock = clock

    def get(self, key: str) -> Optional[ProxyResponse]:
        with self.session_factory() as session:
            row = session.get(CachedResponse, key)
            if row is None or _utc(self.clock()) >= row.expires_at:
                return None
            return ProxyResponse(status=row.status, headers=dict(row.headers), body=row.body)

    def put(self, key: str, response: ProxyResponse) -> bool:
        lifetime = freshness_lifetime(response.headers)
        if lifetime is None:
            return False
        now = self.clock()
        with self.session_factory() as session:
            session.merge(CachedResponse(
                key=key,
                status=response.status,
                headers=dict(response.headers),
                body=response.body,
                created_at=_utc(now),
                expires_at=_utc(now + lifetime),
            ))
            session.commit()
        return True

    def purge(self, expired_only: bool = False) -> int:
        with self.session_factory() as session:
            query = session.query(CachedResponse)
            if expired_only:
                query = query.filter(CachedResponse.expires_at <= _utc(self.clock()))
            removed = query.delete(synchronize_session=False)
            session.commit()
            return removed

    def stats(self) -> Dict[str, int]:
        with self.session_factory() as session:
            total = session.query(CachedResponse).count()
            fresh = session.query(CachedResponse).filter(
                CachedResponse.expires_at > _utc(self.clock())
            ).count()
            return {'entries': total, 'fresh': fresh}


def create_cache_store(backend: str, database_url: Optional[str] = None, clock: Callable[[], float] = time.time):
    """Build the cache backend named by ``backend`` (``memory`` or ``sqlite``)."""
    if backend == 'memory':
        store = MemoryCacheStore(clock=clock)
    elif backend == 'sqlite':
        store = SQLCacheStore(create_session_factory(database_url), clock=clock)
    else:
        raise ValueError(f"Unknown cache backend: {backend}")

    logger.info(f"Using {backend} response cache", extra={
        'context': {
            'backend': backend,
            'component': 'cache'
        }
    })
    return store
