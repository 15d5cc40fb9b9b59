"""In-memory, background-refreshed cache of the latest weather feed values."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from nightscope.weather.models import FeedKind
from nightscope.weather.protocols import FeedFetcher

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_INTERVALS = {
    FeedKind.POINT_OBSERVATION: 5 * 60.0,
    FeedKind.CLOUD_GRID: 10 * 60.0,
}


@dataclass(frozen=True)
class CachedValue(Generic[T]):
    """A feed value together with the wall-clock time it was fetched."""

    value: T
    fetched_at: float

    @property
    def age_seconds(self) -> float:
        return max(0.0, time.time() - self.fetched_at)


@dataclass
class CacheEntry(Generic[T]):
    """Per-feed cache slot."""

    value: T | None = None
    fetched_at: float | None = None
    refresh_in_flight: bool = False


class WeatherFeedCache:
    """Keeps the latest value of each weather feed warm.

    Each feed has a zero-argument async fetcher and a refresh interval.
    At most one refresh per feed runs at a time; a failed refresh keeps
    the last good value.

    Lifecycle: construct, start(), read with get(), stop().
    """

    def __init__(
        self,
        fetchers: dict[FeedKind, FeedFetcher[Any]],
        intervals: dict[FeedKind, float] | None = None,
        timeout: float = 30.0,
    ):
        """Initialize the cache.

        Args:
            fetchers: Fetcher per feed kind
            intervals: Refresh interval in seconds per feed kind
                (default: 5 min point observation, 10 min cloud grid)
            timeout: Upper bound on a single fetch, in seconds
        """
        self._fetchers = dict(fetchers)
        self._intervals = {**DEFAULT_INTERVALS, **(intervals or {})}
        self.timeout = timeout
        self._entries: dict[FeedKind, CacheEntry] = {
            kind: CacheEntry() for kind in self._fetchers
        }
        self._tasks: dict[FeedKind, asyncio.Task] = {}

    @property
    def kinds(self) -> list[FeedKind]:
        return list(self._fetchers)

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    def interval(self, kind: FeedKind) -> float:
        return self._intervals[kind]

    def get(self, kind: FeedKind) -> CachedValue | None:
        """Latest value of a feed, or None if it was never fetched.

        Never performs I/O.
        """
        entry = self._entries.get(kind)
        if entry is None or entry.value is None or entry.fetched_at is None:
            return None
        return CachedValue(value=entry.value, fetched_at=entry.fetched_at)

    def is_refreshing(self, kind: FeedKind) -> bool:
        entry = self._entries.get(kind)
        return entry is not None and entry.refresh_in_flight

    async def refresh(self, kind: FeedKind) -> bool:
        """Fetch a feed and replace its cached value.

        Does nothing if a refresh of the same feed is already running.

        Args:
            kind: Feed to refresh

        Returns:
            True if the cached value was replaced
        """
        entry = self._entries.get(kind)
        if entry is None:
            raise KeyError(f"No fetcher registered for {kind.value}")
        if entry.refresh_in_flight:
            logger.debug(f"Refresh of {kind.value} already in flight, skipping")
            return False

        # Set before the first await so concurrent callers see it
        entry.refresh_in_flight = True
        try:
            logger.debug(f"Refreshing {kind.value}")
            value = await asyncio.wait_for(self._fetchers[kind](), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Refresh of {kind.value} timed out after {self.timeout}s")
            return False
        except Exception as e:
            logger.warning(f"Refresh of {kind.value} failed: {e}")
            return False
        finally:
            entry.refresh_in_flight = False

        self._entries[kind] = CacheEntry(value=value, fetched_at=time.time())
        logger.info(f"Refreshed {kind.value}")
        return True

    async def refresh_all(self) -> dict[FeedKind, bool]:
        """Refresh every feed concurrently.

        Returns:
            Whether each feed's value was replaced
        """
        kinds = self.kinds
        results = await asyncio.gather(*(self.refresh(kind) for kind in kinds))
        return dict(zip(kinds, results))

    async def _run(self, kind: FeedKind) -> None:
        interval = self._intervals[kind]
        while True:
            await self.refresh(kind)
            await asyncio.sleep(interval)

    def start(self) -> None:
        """Start one background refresh loop per feed.

        Each loop refreshes immediately, then once per interval. Must be
        called from a running event loop. Calling it again is a no-op.
        """
        if self._tasks:
            return
        for kind in self._fetchers:
            self._tasks[kind] = asyncio.create_task(
                self._run(kind), name=f"refresh-{kind.value}"
            )
        logger.info(f"Started refresh loops for {', '.join(k.value for k in self._tasks)}")

    async def stop(self) -> None:
        """Cancel the refresh loops and wait for them to finish."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            logger.info("Stopped refresh loops")
