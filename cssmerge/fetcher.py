"""Remote CSS fetching with caching, retries and concurrent fan-out.

Failures never escape this module: a URL whose attempts are all exhausted
resolves to an empty string, and that outcome is cached like any other.
"""

import asyncio
import threading
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Protocol, Set

import requests
from loguru import logger

from .models import FetchedEntry, SourceEntry

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 0.5
DEFAULT_TIMEOUT = 30.0

Sleep = Callable[[float], Awaitable[Any]]


class Transport(Protocol):
    """Anything that can GET a URL as text.

    Implementations raise ``ConnectionError`` for non-2xx responses and
    transport-level failures.
    """

    async def get_text(self, url: str) -> str: ...


class RequestsTransport:
    """Transport backed by requests, run in worker threads.

    requests does not promise that a Session is thread-safe, so each worker
    thread gets its own session from ``session_factory``.
    """

    def __init__(
        self, timeout: float = DEFAULT_TIMEOUT, session_factory: Callable[[], requests.Session] = requests.Session
    ):
        self.timeout = timeout
        self.session_factory = session_factory
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        """The calling thread's session, created on first use."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = self.session_factory()
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def _get(self, url: str) -> str:
        try:
            response = self.session.get(url, timeout=self.timeout)
            if not response.ok:
                raise ConnectionError(f"HTTP error {response.status_code}: {response.reason}")
            return response.text
        except requests.exceptions.RequestException as e:
            raise ConnectionError(f"Request to {url} failed: {e}") from e

    async def get_text(self, url: str) -> str:
        return await asyncio.to_thread(self._get, url)

    def close(self) -> None:
        """Close every session opened by any worker thread."""
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
        self._local = threading.local()


class FetchCache:
    """Process-lifetime cache of fetch outcomes keyed by URL.

    Stores successful text and the empty-string failure sentinel alike, so a
    URL is attempted over the network at most once per cache.

    Usage:
        cache = FetchCache()
        fetcher = CssFetcher(cache=cache)
        await fetcher.fetch(url)   # network
        await fetcher.fetch(url)   # cache hit
    """

    def __init__(self):
        self._cache: Dict[str, str] = {}
        self._failed: Set[str] = set()
        self._hits = 0
        self._misses = 0

    def get(self, url: str) -> Optional[str]:
        """Return the cached outcome for a URL, or None if it was never fetched."""
        if url in self._cache:
            self._hits += 1
            return self._cache[url]
        self._misses += 1
        return None

    def set(self, url: str, content: str, failed: bool = False) -> None:
        self._cache[url] = content
        if failed:
            self._failed.add(url)
        else:
            self._failed.discard(url)

    def is_failure(self, url: str) -> bool:
        """True if the cached outcome for this URL is the failure sentinel."""
        return url in self._failed

    def clear(self) -> None:
        """Clear entire cache."""
        self._cache.clear()
        self._failed.clear()
        self._hits = 0
        self._misses = 0

    def get_stats(self) -> Dict[str, Any]:
        total = self._hits + self._misses
        hit_rate = (self._hits / total * 100) if total > 0 else 0

        return {
            "hits": self._hits,
            "misses": self._misses,
            "total_lookups": total,
            "hit_rate_percent": hit_rate,
            "cached_entries": len(self._cache),
            "failed_entries": len(self._failed),
        }

    def __contains__(self, url: str) -> bool:
        return url in self._cache

    def __len__(self) -> int:
        return len(self._cache)


class CssFetcher:
    """Fetches CSS text with a shared cache, fixed-delay retries and single-flight per URL."""

    def __init__(
        self,
        transport: Optional[Transport] = None,
        cache: Optional[FetchCache] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Sleep = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.transport = transport or RequestsTransport()
        self.cache = cache if cache is not None else FetchCache()
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._sleep = sleep
        self._inflight: Dict[str, asyncio.Future] = {}
        self._lock = asyncio.Lock()

    async def fetch(self, url: str) -> str:
        """Return the text at ``url``, or an empty string if every attempt failed."""
        async with self._lock:
            cached = self.cache.get(url)
            if cached is not None:
                logger.debug(f"Cache hit for {url}")
                return cached
            fut = self._inflight.get(url)
            if fut is None:
                fut = asyncio.get_running_loop().create_future()
                self._inflight[url] = fut
                creator = True
            else:
                creator = False

        if not creator:
            return await fut

        try:
            content = await self._fetch_with_retry(url)
            failed = content is None
            content = content or ""
            self.cache.set(url, content, failed=failed)
            fut.set_result(content)
        except Exception as e:
            # Unexpected errors still release waiters before propagating
            fut.set_exception(e)
            raise
        finally:
            async with self._lock:
                self._inflight.pop(url, None)
        return content

    async def _fetch_with_retry(self, url: str) -> Optional[str]:
        for attempt in range(1, self.max_attempts + 1):
            logger.info(f"Fetching {url} (attempt {attempt}/{self.max_attempts})")
            try:
                return await self.transport.get_text(url)
            except (ConnectionError, TimeoutError) as e:
                logger.warning(f"Error fetching {url}: {e}")
            if attempt < self.max_attempts:
                logger.info(f"Retrying {url} in {self.retry_delay}s")
                await self._sleep(self.retry_delay)

        logger.warning(f"Giving up on {url} after {self.max_attempts} attempts; using empty content")
        return None

    async def _fetch_entry(self, entry: SourceEntry) -> FetchedEntry:
        return FetchedEntry.from_source(entry, await self.fetch(entry.url))

    async def fetch_all(self, entries: Iterable[SourceEntry]) -> List[FetchedEntry]:
        """Fetch every entry concurrently and wait for all of them.

        Results come back in completion order; callers sort them.
        """
        tasks = [asyncio.ensure_future(self._fetch_entry(entry)) for entry in entries]
        return [await done for done in asyncio.as_completed(tasks)]
