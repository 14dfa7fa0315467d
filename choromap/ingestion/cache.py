"""In-memory TTL cache for remote file downloads.

Boundary files are a few megabytes and rarely change, so a session that
renders several maps fetches each URL once. Nothing is written to disk.
"""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Callable

logger = logging.getLogger(__name__)

_downloads: dict[str, tuple[float, bytes]] = {}

DEFAULT_TTL = 600  # 10 minutes


def _evict_expired(now: float) -> None:
    for url in [u for u, (expires, _) in _downloads.items() if now >= expires]:
        del _downloads[url]


def cached_download(ttl: int = DEFAULT_TTL):
    """Decorator memoizing ``func(url) -> bytes`` per URL for *ttl* seconds.

    Failed downloads are not cached; the exception reaches the caller.
    """
    def decorator(func: Callable[[str], bytes]) -> Callable[[str], bytes]:
        @wraps(func)
        def wrapper(url: str) -> bytes:
            now = time.time()
            _evict_expired(now)
            hit = _downloads.get(url)
            if hit is not None:
                logger.debug("Cache hit for %s", url)
                return hit[1]
            payload = func(url)
            _downloads[url] = (now + ttl, payload)
            return payload
        return wrapper
    return decorator


def cached_urls() -> list[str]:
    """URLs currently held in the cache and not yet expired."""
    _evict_expired(time.time())
    return sorted(_downloads)


def clear_cache() -> int:
    """Flush the entire cache. Returns the number of evicted entries."""
    count = len(_downloads)
    _downloads.clear()
    return count
