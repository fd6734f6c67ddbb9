"""Shared test doubles for cssmerge tests."""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Union

import pytest

from cssmerge.fetcher import CssFetcher, FetchCache

Response = Union[str, Exception]


@dataclass
class FakeTransport:
    """Transport double returning scripted responses and counting calls.

    ``responses`` maps a URL to either a single response or a list consumed one
    per attempt (the last item repeats). Exceptions are raised, strings returned.
    ``delays`` lets a test control completion order.
    """

    responses: Dict[str, Union[Response, List[Response]]] = field(default_factory=dict)
    delays: Dict[str, float] = field(default_factory=dict)
    calls: List[str] = field(default_factory=list)

    async def get_text(self, url: str) -> str:
        self.calls.append(url)
        await asyncio.sleep(self.delays.get(url, 0))
        scripted = self.responses.get(url, ConnectionError(f"HTTP error 404: Not Found ({url})"))
        if isinstance(scripted, list):
            attempt = self.calls.count(url) - 1
            scripted = scripted[min(attempt, len(scripted) - 1)]
        if isinstance(scripted, Exception):
            raise scripted
        return scripted

    def call_count(self, url: str) -> int:
        return self.calls.count(url)


@dataclass
class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays without waiting."""

    delays: List[float] = field(default_factory=list)

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fetcher(transport: FakeTransport, sleep: RecordingSleep) -> CssFetcher:
    """Fetcher wired to the fake transport with a fresh cache per test."""
    return CssFetcher(transport=transport, cache=FetchCache(), sleep=sleep)
