"""
Publisher Tests.
"""

import aiohttp
import pytest

from core.exceptions import HTTPStatusError, TransportError
from metric_pipeline import MetricSample


def sample(guid, name=None):
    return MetricSample(
        entity_guid=guid, display_name=name or guid, depth=2, value=4.5, timestamp=99,
    )


class TestPublish:
    """Tests for Publisher.publish()."""

    @pytest.mark.asyncio
    async def test_empty_input_is_skipped(self, publisher, fake_session):
        result = await publisher.publish([])

        assert result.skipped
        assert result.ok
        assert fake_session.requests == []

    @pytest.mark.asyncio
    async def test_sends_single_envelope(self, publisher, fake_session):
        fake_session.outcomes = [(202, b'{"requestId": "abc"}')]

        result = await publisher.publish([sample("A", "Alice"), sample("B")])

        assert result.ok
        assert result.sample_count == 2
        assert len(fake_session.requests) == 1

        payload = fake_session.json_body()
        assert len(payload) == 1
        metrics = payload[0]["metrics"]
        assert [m["attributes"]["entity.guid"] for m in metrics] == ["A", "B"]
        assert metrics[0]["attributes"]["name"] == "Alice"
        assert metrics[0]["timestamp"] == 99

    @pytest.mark.asyncio
    async def test_headers(self, publisher, fake_session):
        fake_session.outcomes = [(202, b"{}")]

        await publisher.publish([sample("A")])

        request = fake_session.requests[0]
        assert request["method"] == "POST"
        assert request["url"] == "https://metrics.test"
        assert request["headers"]["Api-Key"] == "license-key"
        assert request["headers"]["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_bad_status_returns_error(self, publisher, fake_session):
        fake_session.outcomes = [(403, b"forbidden")] * 3

        result = await publisher.publish([sample("A")])

        assert not result.ok
        assert isinstance(result.error, HTTPStatusError)
        assert result.http.read() == b"forbidden"

    @pytest.mark.asyncio
    async def test_transport_failure_returns_error(self, publisher, fake_session):
        fake_session.outcomes = [aiohttp.ClientConnectionError("down")] * 3

        result = await publisher.publish([sample("A")])

        assert not result.ok
        assert isinstance(result.error, TransportError)
