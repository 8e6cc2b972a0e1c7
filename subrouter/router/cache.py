"""
Hostname parse cache shared by all requests handled by one router.

- Dict lookups for reads, lock-guarded inserts
- Hit/miss metrics tracking
- No expiry; the number of distinct Host headers a deployment sees is small
"""

import logging
import threading
from typing import Any

from subrouter.router.utils import ParsedHostname, parse_hostname

logger = logging.getLogger("subrouter.router.cache")


class HostnameCache:
    """
    Memoizes ``parse_hostname`` per raw Host header.

    Concurrent requests may insert the same key at the same time; every
    computed value for a key is identical, so the later write simply wins.
    Clearing the cache never changes routing results.
    """

    def __init__(self) -> None:
        self._entries: dict[str, ParsedHostname] = {}
        self._lock = threading.Lock()

        self._cache_hits = 0
        self._cache_misses = 0

    def parse(self, host_header: str | None) -> ParsedHostname:
        """
        Return the parsed form of ``host_header``, computing it on first use.

        Args:
            host_header: Raw Host header value (may be None or empty)

        Returns:
            ParsedHostname for the header
        """
        key = host_header or ""
        cached = self._entries.get(key)
        if cached is not None:
            self._cache_hits += 1
            return cached

        parsed = parse_hostname(key)
        with self._lock:
            self._entries[key] = parsed
            self._cache_misses += 1
        return parsed

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, host_header: object) -> bool:
        return host_header in self._entries

    def get_metrics(self) -> dict[str, Any]:
        """
        Get cache metrics.

        Returns:
            Dict with cache statistics including hit rate
        """
        total_requests = self._cache_hits + self._cache_misses
        hit_rate = self._cache_hits / total_requests if total_requests > 0 else 0.0

        return {
            "cache_hits": self._cache_hits,
            "cache_misses": self._cache_misses,
            "hit_rate": hit_rate,
            "entries": len(self._entries),
        }

    def clear(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            self._entries.clear()
        logger.debug("Hostname cache cleared")
