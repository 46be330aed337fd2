"""
Session Summary Source Tests.

============================================================
PURPOSE
============================================================
Trace-summary request construction and response parsing.

============================================================
"""

import aiohttp
import pytest

from conftest import ok
from core.exceptions import HTTPStatusError, ParseError, TransportError
from trace_sources import CycleContext, EntitySummaries, RawSummary, SessionSummarySource


ENDPOINT = "https://summaries.test"

CONTEXT = CycleContext.for_cycle("ENTITY", 1_700_003_600_000)


def by_entity(*items):
    return {"data": {"byEntity": list(items)}}


def item(guid, depth=1, exclusive=3.25):
    return {
        "direction": "OUTGOING",
        "depth": depth,
        "entityCallPath": f"ENTITY/{guid}",
        "entityGuid": guid,
        "count": 10,
        "errorCount": 1,
        "averageDurationMs": 8.0,
        "averageExclusiveDurationMs": exclusive,
    }


@pytest.fixture
def source(client):
    return SessionSummarySource(client, session_cookie="sid=abc", endpoint=ENDPOINT)


# ============================================================
# MODELS
# ============================================================

class TestModels:
    """Tests for the summary models."""

    def test_context_window(self):
        assert CONTEXT.start_time_ms == 1_700_000_000_000
        assert CONTEXT.to_payload() == {
            "entityGuid": "ENTITY",
            "startTimeMs": 1_700_000_000_000,
            "durationMs": 3_600_000,
        }

    def test_raw_summary_from_dict(self):
        raw = RawSummary.from_dict(item("A", depth=2.5))

        assert raw.entity_guid == "A"
        assert raw.depth == 2.5
        assert raw.call_path == "ENTITY/A"
        assert raw.error_count == 1
        assert raw.average_exclusive_duration_ms == 3.25

    def test_missing_by_entity_is_empty(self):
        assert len(EntitySummaries.from_dict({"data": {}})) == 0
        assert len(EntitySummaries.from_dict({})) == 0

    def test_wrong_shape_raises(self):
        with pytest.raises(ParseError):
            EntitySummaries.from_dict([])
        with pytest.raises(ParseError):
            EntitySummaries.from_dict({"data": {"byEntity": {"a": 1}}})
        with pytest.raises(ParseError):
            EntitySummaries.from_dict({"data": {"byEntity": [{"depth": "deep"}]}})


# ============================================================
# FETCH
# ============================================================

class TestFetch:
    """Tests for SessionSummarySource.fetch()."""

    @pytest.mark.asyncio
    async def test_returns_summaries_in_order(self, source, fake_session):
        fake_session.outcomes = [ok(by_entity(item("B"), item("A")))]

        summaries = await source.fetch(CONTEXT)

        assert [s.entity_guid for s in summaries] == ["B", "A"]

    @pytest.mark.asyncio
    async def test_request_shape(self, source, fake_session):
        fake_session.outcomes = [ok(by_entity())]

        await source.fetch(CONTEXT)

        request = fake_session.requests[0]
        assert request["method"] == "POST"
        assert request["url"] == ENDPOINT
        assert request["headers"]["Cookie"] == "sid=abc"
        assert request["headers"]["Content-Type"] == "application/json; charset=utf-8"
        assert fake_session.json_body() == CONTEXT.to_payload()

    @pytest.mark.asyncio
    async def test_no_cookie_header_without_session(self, client, fake_session):
        fake_session.outcomes = [ok(by_entity())]
        source = SessionSummarySource(client, endpoint=ENDPOINT)

        await source.fetch(CONTEXT)

        assert "Cookie" not in fake_session.requests[0]["headers"]

    @pytest.mark.asyncio
    async def test_invalid_json_raises_parse_error(self, source, fake_session):
        fake_session.outcomes = [(200, b"<html>login</html>")]

        with pytest.raises(ParseError):
            await source.fetch(CONTEXT)

    @pytest.mark.asyncio
    async def test_bad_status_raises(self, source, fake_session):
        fake_session.outcomes = [(401, b"unauthorized")] * 3

        with pytest.raises(HTTPStatusError):
            await source.fetch(CONTEXT)

    @pytest.mark.asyncio
    async def test_no_response_raises(self, source, fake_session):
        fake_session.outcomes = [aiohttp.ClientConnectionError("down")] * 3

        with pytest.raises(TransportError):
            await source.fetch(CONTEXT)
