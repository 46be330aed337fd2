"""
Metric Pipeline - Resilient HTTP Client.

============================================================
RESPONSIBILITY
============================================================
Issues one HTTP request with a bounded retry policy.

- Up to 3 attempts per request
- 200 and 202 are the only success statuses
- Fixed 500 ms pause between failed attempts
- Returns an explicit HttpResult, never a bare body

============================================================
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Iterable, Optional, Tuple, Union

import aiohttp

from core.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    MAX_ATTEMPTS,
    RETRY_DELAY_SECONDS,
    SUCCESS_STATUSES,
    SYSTEM_NAME,
    SYSTEM_VERSION,
)
from core.exceptions import HTTPStatusError, TransportError
from metric_pipeline.types import HttpOutcome, HttpResult


logger = logging.getLogger(__name__)

Header = Tuple[str, str]
Body = Union[bytes, str, None]


class ResilientHttpClient:
    """
    HTTP client with bounded retry.

    Any outcome other than a 200/202 response counts as a failed attempt:
    another status, a connection error or a timeout. The same fixed delay
    applies to all of them.
    """

    def __init__(
        self,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay: float = RETRY_DELAY_SECONDS,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[aiohttp.ClientSession] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._timeout = timeout
        self._session = session
        self._owns_session = session is None
        self._sleep = sleep

    async def execute(
        self,
        method: str,
        url: str,
        body: Body = None,
        headers: Iterable[Header] = (),
    ) -> HttpResult:
        """
        Execute a request, retrying on failure.

        Args:
            method: HTTP method
            url: Request URL
            body: Request body, may be empty
            headers: Ordered (name, value) pairs; a later pair replaces an
                earlier one with the same name

        Returns:
            HttpResult with outcome SUCCESS, EXHAUSTED_WITH_RESPONSE or
            EXHAUSTED_NO_RESPONSE
        """
        data = _encode_body(body)
        header_map = _merge_headers(headers)
        session = await self._get_session()

        last_status: Optional[int] = None
        last_body: Optional[bytes] = None
        last_cause: Optional[BaseException] = None

        for attempt in range(1, self._max_attempts + 1):
            start_time = time.time()
            try:
                async with session.request(
                    method,
                    url,
                    data=data,
                    headers=header_map,
                ) as response:
                    payload = await response.read()
                    latency_ms = (time.time() - start_time) * 1000

                    if response.status in SUCCESS_STATUSES:
                        logger.debug(
                            f"{method} {url} -> {response.status} in {latency_ms:.1f}ms "
                            f"(attempt {attempt})"
                        )
                        return HttpResult(
                            outcome=HttpOutcome.SUCCESS,
                            url=url,
                            attempts=attempt,
                            status=response.status,
                            body=payload,
                        )

                    last_status = response.status
                    last_body = payload
                    logger.warning(f"Retry {attempt}: http status {response.status}")

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                # A bad status from an earlier attempt is still the last response seen
                last_cause = e
                logger.warning(f"Retry {attempt}: no response ({type(e).__name__}: {e})")

            if attempt < self._max_attempts:
                await self._sleep(self._retry_delay)

        if last_status is not None:
            return HttpResult(
                outcome=HttpOutcome.EXHAUSTED_WITH_RESPONSE,
                url=url,
                attempts=self._max_attempts,
                status=last_status,
                body=last_body if last_body is not None else b"",
                error=HTTPStatusError(
                    f"HTTP {last_status} after {self._max_attempts} attempts",
                    status_code=last_status,
                    url=url,
                    response_body=(last_body or b"")[:1000].decode("utf-8", errors="replace"),
                ),
            )

        logger.error(f"No response from {url} after {self._max_attempts} attempts")
        return HttpResult(
            outcome=HttpOutcome.EXHAUSTED_NO_RESPONSE,
            url=url,
            attempts=self._max_attempts,
            error=TransportError(
                f"No response after {self._max_attempts} attempts",
                url=url,
                attempts=self._max_attempts,
                cause=last_cause,
            ),
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers={"User-Agent": f"{SYSTEM_NAME}/{SYSTEM_VERSION}"},
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close resources."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "ResilientHttpClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def _encode_body(body: Body) -> Optional[bytes]:
    if not body:
        return None
    if isinstance(body, str):
        return body.encode("utf-8")
    return body


def _merge_headers(headers: Iterable[Header]) -> dict:
    merged: dict = {}
    for name, value in headers:
        # Header names are case-insensitive; keep the latest spelling
        for existing in [k for k in merged if k.lower() == name.lower()]:
            del merged[existing]
        merged[name] = value
    return merged
