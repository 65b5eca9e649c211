"""
TTL cache for analysis results with per-key request coalescing.
"""

import asyncio
import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from jtbd_forces.schemas import AnalysisResult, CacheStats
from jtbd_forces.services.forces.exceptions import ValidationError

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "jtbd"


@dataclass
class CacheEntry:
    result: AnalysisResult
    stored_at: float
    expires_at: float


class AnalysisCache:
    """
    In-memory cache of analysis results.

    Entries expire once their TTL has elapsed; the oldest-expiring entry is
    evicted when max_entries is exceeded. A single lock guards both the entry
    map and the in-flight map and is never held while a result is computed.
    """

    def __init__(
        self,
        default_ttl_seconds: float = 3600.0,
        max_entries: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the analysis cache.

        Args:
            default_ttl_seconds: TTL used when put() is called without one
            max_entries: Maximum number of stored results
            clock: Monotonic time source, injectable for tests
        """
        if default_ttl_seconds <= 0:
            raise ValidationError("default_ttl_seconds must be positive")
        if max_entries <= 0:
            raise ValidationError("max_entries must be positive")

        self.default_ttl_seconds = default_ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, CacheEntry] = {}
        self._in_flight: Dict[str, Future] = {}
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    def _lookup_locked(self, key: str) -> Optional[AnalysisResult]:
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            self._expirations += 1
            self._misses += 1
            logger.debug(f"Cache entry expired: {key}")
            return None
        self._hits += 1
        return entry.result

    def _resolve_ttl(self, ttl_seconds: Optional[float]) -> float:
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            raise ValidationError(f"ttl_seconds must be positive, got {ttl}")
        return ttl

    def _store_locked(self, key: str, result: AnalysisResult, ttl_seconds: Optional[float]) -> None:
        ttl = self._resolve_ttl(ttl_seconds)
        now = self._clock()
        self._entries[key] = CacheEntry(result=result, stored_at=now, expires_at=now + ttl)

        if len(self._entries) > self.max_entries:
            for expired_key in [k for k, e in self._entries.items() if now >= e.expires_at]:
                del self._entries[expired_key]
                self._expirations += 1

        while len(self._entries) > self.max_entries:
            victim = min(
                (k for k in self._entries if k != key),
                key=lambda k: self._entries[k].expires_at,
            )
            del self._entries[victim]
            self._evictions += 1
            logger.debug(f"Evicted cache entry: {victim}")

    def get(self, key: str) -> Optional[AnalysisResult]:
        """Return the cached result, or None when missing or expired."""
        with self._lock:
            return self._lookup_locked(key)

    def put(self, key: str, result: AnalysisResult, ttl_seconds: Optional[float] = None) -> None:
        with self._lock:
            self._store_locked(key, result, ttl_seconds)

    def invalidate(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def invalidate_survey(self, survey_id: str) -> int:
        """
        Remove every cached result of a survey.

        Returns:
            Number of removed entries
        """
        prefix = f"{CACHE_KEY_PREFIX}:{survey_id}:"
        with self._lock:
            keys = [k for k in self._entries if k.startswith(prefix)]
            for key in keys:
                del self._entries[key]
        if keys:
            logger.info(f"Invalidated {len(keys)} cached analyses for survey {survey_id}")
        return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            lookups = self._hits + self._misses
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                expirations=self._expirations,
                size=len(self._entries),
                in_flight=len(self._in_flight),
                hit_rate=self._hits / lookups if lookups else 0.0,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[AnalysisResult]],
        ttl_seconds: Optional[float] = None,
    ) -> AnalysisResult:
        """
        Return the cached result or compute it once for all concurrent callers.

        Args:
            key: Cache key
            compute: Zero-argument coroutine function producing the result
            ttl_seconds: TTL for the stored result

        Returns:
            The cached, shared or freshly computed result

        Raises:
            Whatever compute raises; failures are shared with waiting callers and not cached
        """
        ttl = self._resolve_ttl(ttl_seconds)
        with self._lock:
            cached = self._lookup_locked(key)
            if cached is not None:
                return cached
            future = self._in_flight.get(key)
            is_leader = future is None
            if is_leader:
                future = Future()
                self._in_flight[key] = future

        if not is_leader:
            logger.debug(f"Awaiting in-flight analysis for {key}")
            return await asyncio.shield(asyncio.wrap_future(future))

        try:
            result = await compute()
        except asyncio.CancelledError:
            with self._lock:
                self._in_flight.pop(key, None)
            future.cancel()
            raise
        except Exception as exc:
            with self._lock:
                self._in_flight.pop(key, None)
            future.set_exception(exc)
            raise

        with self._lock:
            self._in_flight.pop(key, None)
            self._store_locked(key, result, ttl)
        future.set_result(result)
        return result
