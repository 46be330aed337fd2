"""
Session Summary Source - Cookie-authenticated trace-summary adapter.

Posts the cycle window to the trace-summary endpoint using a session cookie
the operator copied from a logged-in dashboard session. The request mirrors
the dashboard's own same-origin fetch.
"""

import json
import logging
from typing import Optional

from core.constants import TRACE_SUMMARY_ENDPOINT
from core.exceptions import ParseError
from metric_pipeline.http_client import Header, ResilientHttpClient
from trace_sources.base import BaseSummarySource
from trace_sources.models import CycleContext, EntitySummaries, RawSummary


logger = logging.getLogger(__name__)


class SessionSummarySource(BaseSummarySource):
    """
    Trace-summary source authenticated by an existing browser session.

    Headers sent:
    - Content-Type: application/json; charset=utf-8
    - Accept: application/json
    - Cookie: <operator session cookie>, when configured
    """

    ORIGIN = "https://one.newrelic.com"

    def __init__(
        self,
        client: ResilientHttpClient,
        session_cookie: Optional[str] = None,
        endpoint: str = TRACE_SUMMARY_ENDPOINT,
    ) -> None:
        self._client = client
        self._session_cookie = session_cookie
        self._endpoint = endpoint

    @property
    def name(self) -> str:
        return "session_summaries"

    def _headers(self) -> list[Header]:
        headers: list[Header] = [
            ("Content-Type", "application/json; charset=utf-8"),
            ("Accept", "application/json"),
            ("Origin", self.ORIGIN),
        ]
        if self._session_cookie:
            headers.append(("Cookie", self._session_cookie))
        return headers

    async def fetch(self, context: CycleContext) -> list[RawSummary]:
        """
        Post the cycle window and parse the summaries.

        Raises:
            TransportError: No response after retries
            HTTPStatusError: Retries ended on a bad status
            ParseError: Body is not a summaries document
        """
        logger.info(f"Posting to {self._endpoint}")
        result = await self._client.execute(
            "POST",
            self._endpoint,
            json.dumps(context.to_payload()),
            self._headers(),
        )
        body = result.raise_for_status()

        try:
            document = json.loads(body)
        except ValueError as e:
            raise ParseError(
                f"Invalid JSON from trace-summary endpoint: {e}",
                url=self._endpoint,
                body_size=len(body),
                cause=e,
            )

        summaries = EntitySummaries.from_dict(document)
        logger.info(f"Got response with {len(summaries)} trace entities")
        return list(summaries.by_entity)
