"""
Metric Pipeline - Name Resolver.

============================================================
RESPONSIBILITY
============================================================
Looks up display names for entity guids missing from the cache.

- One batched GraphQL query per cycle, skipped when nothing is missing
- Updates the name cache
- Backfills names on the current cycle's pending samples

============================================================
FAILURE POLICY
============================================================
Transport failures, bad statuses and unparseable bodies are logged and
returned in ResolutionResult.error. The cycle continues; affected samples
keep their guid as the display name.

============================================================
"""

import json
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from core.constants import GRAPHQL_ENDPOINT, GRAPHQL_QUERY_TEMPLATE
from core.exceptions import ParseError, PipelineError
from metric_pipeline.http_client import Header, ResilientHttpClient
from metric_pipeline.name_cache import EntityNameCache
from metric_pipeline.types import MetricSample, ResolutionResult


logger = logging.getLogger(__name__)


def build_entity_query(guids: Iterable[str]) -> str:
    """Build the GraphQL entity lookup for the given guids (quoted, comma-joined)."""
    guid_list = ",".join(json.dumps(guid) for guid in guids)
    return GRAPHQL_QUERY_TEMPLATE.format(guids=guid_list)


def parse_entities(body: bytes) -> Dict[str, str]:
    """
    Parse {data:{actor:{entities:[{name,guid}...]}}} into guid -> name.

    Entities without a guid are ignored; a null name becomes "".

    Raises:
        ParseError: If the body is not JSON or has the wrong shape
    """
    try:
        document: Any = json.loads(body)
    except ValueError as e:
        raise ParseError(f"Error parsing GraphQl result: {e}", body_size=len(body), cause=e)

    try:
        entities = ((document.get("data") or {}).get("actor") or {}).get("entities") or []
    except AttributeError as e:
        raise ParseError(f"Unexpected GraphQl result shape: {e}", body_size=len(body), cause=e)
    if not isinstance(entities, list):
        raise ParseError("Field 'data.actor.entities' is not a list", body_size=len(body))

    names: Dict[str, str] = {}
    for entity in entities:
        if not isinstance(entity, dict) or not entity.get("guid"):
            continue
        names[str(entity["guid"])] = str(entity.get("name") or "")
    return names


class NameResolver:
    """Resolves entity guids to display names via the identity API."""

    def __init__(
        self,
        client: ResilientHttpClient,
        name_cache: EntityNameCache,
        user_key: str,
        endpoint: str = GRAPHQL_ENDPOINT,
    ) -> None:
        self._client = client
        self._name_cache = name_cache
        self._endpoint = endpoint
        self._headers: list[Header] = [
            ("Content-Type", "application/json"),
            ("API-Key", user_key),
        ]

    async def resolve(
        self,
        missing_guids: Iterable[str],
        samples: Optional[Mapping[str, MetricSample]] = None,
    ) -> ResolutionResult:
        """
        Resolve names for guids not yet cached.

        Args:
            missing_guids: Guids to look up; duplicates are dropped
            samples: Current cycle's samples keyed by guid, backfilled in place

        Returns:
            ResolutionResult; never raises for pipeline failures
        """
        requested = list(dict.fromkeys(missing_guids))
        result = ResolutionResult(requested=requested)
        if not requested:
            return result

        query = build_entity_query(requested)
        body = json.dumps({"query": query})
        logger.info(f"Looking up names for {', '.join(requested)}")

        try:
            http = await self._client.execute("POST", self._endpoint, body, self._headers)
            payload = http.raise_for_status()
            logger.info(f"Parsing response {len(payload)} bytes")
            names = parse_entities(payload)
        except PipelineError as e:
            logger.warning(f"Name lookup failed, keeping guids as names: {e.to_log_format()}")
            result.error = e
            return result

        for guid, name in names.items():
            self._name_cache.insert(guid, name)
            result.resolved[guid] = name
            if samples is not None and guid in samples:
                samples[guid].display_name = name

        missing = result.unresolved
        if missing:
            logger.info(f"No names returned for {', '.join(missing)}")
        return result
