"""
Shared test fixtures.

============================================================
PURPOSE
============================================================
Scripted aiohttp doubles so pipeline tests never touch the network.

FakeSession.request() replays a script of outcomes, one per attempt:
- (status, body) tuple  -> response with that status and body
- Exception instance    -> raised as a transport failure

============================================================
"""

import json
from typing import Any, List, Optional, Tuple, Union
from unittest.mock import AsyncMock

import pytest

from metric_pipeline import (
    EntityNameCache,
    MetricAggregator,
    NameResolver,
    Publisher,
    ResilientHttpClient,
)


Outcome = Union[Tuple[int, bytes], BaseException]


class FakeResponse:
    """Minimal aiohttp response double."""

    def __init__(self, status: int, body: bytes) -> None:
        self.status = status
        self._body = body

    async def read(self) -> bytes:
        return self._body


class _RequestContext:
    def __init__(self, outcome: Outcome) -> None:
        self._outcome = outcome

    async def __aenter__(self) -> FakeResponse:
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        status, body = self._outcome
        return FakeResponse(status, body)

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None


class FakeSession:
    """Replays scripted outcomes and records each request."""

    def __init__(self, outcomes: Optional[List[Outcome]] = None) -> None:
        self.outcomes: List[Outcome] = list(outcomes or [])
        self.requests: List[dict] = []
        self.closed = False

    def request(self, method: str, url: str, data: Any = None, headers: Any = None):
        self.requests.append({
            "method": method,
            "url": url,
            "data": data,
            "headers": dict(headers or {}),
        })
        if not self.outcomes:
            raise AssertionError(f"Unexpected request: {method} {url}")
        return _RequestContext(self.outcomes.pop(0))

    def json_body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index]["data"])

    async def close(self) -> None:
        self.closed = True


def ok(document: Any, status: int = 200) -> Tuple[int, bytes]:
    """Scripted response with a JSON body."""
    return status, json.dumps(document).encode()


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def no_sleep():
    """Async sleep replacement that records requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def client(fake_session, no_sleep):
    return ResilientHttpClient(session=fake_session, sleep=no_sleep)


@pytest.fixture
def name_cache():
    return EntityNameCache()


@pytest.fixture
def aggregator(name_cache):
    return MetricAggregator(name_cache)


@pytest.fixture
def resolver(client, name_cache):
    return NameResolver(client, name_cache, user_key="user-key", endpoint="https://graphql.test")


@pytest.fixture
def publisher(client):
    return Publisher(client, license_key="license-key", endpoint="https://metrics.test")
