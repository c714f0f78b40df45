"""
Timed Cache

Time-bounded memoization of one upstream data source with stale-on-error
fallback. Each source owns its own instance, so caches never share state and
tests can build isolated ones.
"""
import asyncio
from collections.abc import Sized
from dataclasses import asdict, dataclass
import logging
import time
from typing import Awaitable, Callable, Generic, TypeVar

from tvloo.utils.http import FetchError


logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(slots=True)
class CacheStats:
    """Read-only snapshot of a cache's state"""
    has_cached_data: bool
    item_count: int
    cache_age: float | None
    cache_expired: bool

    def to_dict(self) -> dict:
        return asdict(self)


class TimedCache(Generic[T]):
    """
    Cache for a single fetch-and-parse loader.

    ``get()`` serves the cached value while it is younger than the TTL. Once
    expired, the loader runs again; if it fails (a :class:`FetchError` or any
    unexpected error) the previous value keeps being served and get() never
    raises. Concurrent callers that miss the cache
    share one in-flight refresh instead of each hitting the upstream source.
    """

    def __init__(
        self,
        name: str,
        loader: Callable[[], Awaitable[T]],
        ttl_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            name: Label used in log messages
            loader: Async callable fetching and parsing fresh data
            ttl_seconds: Age after which cached data is refreshed
            clock: Monotonic time source in seconds
        """
        self.name = name
        self.ttl_seconds = ttl_seconds
        self._loader = loader
        self._clock = clock
        self._value: T | None = None
        self._fetched_at: float | None = None
        self._inflight: asyncio.Task | None = None
        self._generation = 0

    async def get(self) -> T | None:
        """
        Return cached data, refreshing it when expired.

        Returns:
            Fresh data, stale data when the refresh failed, or None when
            nothing was ever loaded successfully
        """
        if self._is_fresh():
            logger.debug("[%s] Serving from cache", self.name)
            return self._value

        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.create_task(self._refresh(self._generation))
        else:
            logger.debug("[%s] Joining in-flight refresh", self.name)

        return await asyncio.shield(self._inflight)

    def clear(self) -> None:
        """Drop cached data so the next get() fetches again."""
        self._value = None
        self._fetched_at = None
        self._generation += 1
        logger.info("[%s] Cache cleared", self.name)

    def stats(self) -> CacheStats:
        age = self._age()
        return CacheStats(
            has_cached_data=self._value is not None,
            item_count=len(self._value) if isinstance(self._value, Sized) else 0,
            cache_age=age,
            cache_expired=age is None or age >= self.ttl_seconds,
        )

    def _age(self) -> float | None:
        if self._fetched_at is None:
            return None
        return self._clock() - self._fetched_at

    def _is_fresh(self) -> bool:
        age = self._age()
        return self._value is not None and age is not None and age < self.ttl_seconds

    async def _refresh(self, generation: int) -> T | None:
        try:
            value = await self._loader()
        except FetchError as e:
            if self._value is not None:
                logger.warning("[%s] Refresh failed (%s), serving stale data", self.name, e)
                return self._value
            logger.error("[%s] Refresh failed (%s), no cached data available", self.name, e)
            return None
        except Exception as e:
            logger.error("[%s] Unexpected error in refresh: %s", self.name, e, exc_info=True)
            return self._value

        if generation != self._generation:
            # cleared while fetching, keep the result out of the cache
            logger.debug("[%s] Discarding result of refresh started before clear()", self.name)
            return value

        self._value = value
        self._fetched_at = self._clock()
        logger.info("[%s] Cache refreshed", self.name)
        return value
