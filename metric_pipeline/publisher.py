"""
Metric Pipeline - Publisher.

Serializes a cycle's samples into the metric API envelope and submits them
through the resilient client. Outcomes are logged and returned; nothing is
raised to the poll loop and nothing is retried in a later cycle.
"""

import json
import logging
from typing import Iterable

from core.constants import METRIC_ENDPOINT
from metric_pipeline.http_client import Header, ResilientHttpClient
from metric_pipeline.types import MetricSample, PublishResult, build_metric_payload


logger = logging.getLogger(__name__)


class Publisher:
    """Sends metric samples to the metric ingestion API."""

    def __init__(
        self,
        client: ResilientHttpClient,
        license_key: str,
        endpoint: str = METRIC_ENDPOINT,
    ) -> None:
        self._client = client
        self._endpoint = endpoint
        self._headers: list[Header] = [
            ("Content-Type", "application/json"),
            ("Api-Key", license_key),
        ]

    async def publish(self, samples: Iterable[MetricSample]) -> PublishResult:
        """
        Publish samples in a single request.

        An empty sample set is skipped without any network call.
        """
        sample_list = list(samples)
        if not sample_list:
            logger.info("No metrics to send")
            return PublishResult(skipped=True)

        body = json.dumps(build_metric_payload(sample_list))
        logger.info(f"Sending {len(sample_list)} metrics to the metric api")
        http = await self._client.execute("POST", self._endpoint, body, self._headers)

        result = PublishResult(sample_count=len(sample_list), http=http, error=http.error)
        if http.has_response:
            logger.info(f"Submitted {http.read().decode('utf-8', errors='replace')}")
        if http.error is not None:
            logger.error(f"Publish failed, metrics dropped: {http.error.to_log_format()}")
        return result
