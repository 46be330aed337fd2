"""
Orchestrator - Configuration.

============================================================
RESPONSIBILITY
============================================================
Loads exporter settings from the environment.

- Reads a .env file first (python-dotenv)
- Validates required settings
- Parses the poll interval duration string

============================================================
ENVIRONMENT
============================================================
Required:
  NEW_RELIC_ACCOUNT        Account identifier
  ENTITY_GUID              Entity to observe
  NEW_RELIC_LICENSE_KEY    Metric API key
  NEW_RELIC_USER_KEY       GraphQL user key

Optional:
  POLL_INTERVAL            Duration string, e.g. 90s, 5m, 1h30m (default 5m)
  NEW_RELIC_SESSION_COOKIE Dashboard session cookie for trace summaries
  TRACE_SUMMARY_ENDPOINT   Override trace-summary URL
  GRAPHQL_ENDPOINT         Override identity-lookup URL
  METRIC_ENDPOINT          Override metric-ingestion URL
  LOG_LEVEL                Logging level (default INFO)
  LOG_FORMAT               text or json (default text)

============================================================
"""

import os
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from dotenv import load_dotenv

from core.constants import (
    DEFAULT_POLL_INTERVAL,
    GRAPHQL_ENDPOINT,
    METRIC_ENDPOINT,
    TRACE_SUMMARY_ENDPOINT,
)
from core.exceptions import ConfigError, InvalidConfigError, MissingConfigError


# ============================================================
# DURATION PARSING
# ============================================================

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: str) -> float:
    """
    Parse a Go-style duration string into seconds.

    Accepts a signed sequence of decimal numbers, each with a unit suffix
    (ns, us, ms, s, m, h), e.g. "300ms", "1.5h", "2h45m". "0" is allowed.

    Raises:
        ValueError: If the string is not a valid duration
    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if text == "0":
        return 0.0

    total = 0.0
    position = 0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        if match is None:
            raise ValueError(f"invalid duration {value!r}")
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()
    if position == 0:
        raise ValueError(f"invalid duration {value!r}")
    return sign * total


def format_duration(seconds: float) -> str:
    """Render seconds as h/m/s, e.g. 5400 -> "1h30m0s"."""
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{int(hours)}h{int(minutes)}m{secs:g}s"
    if minutes:
        return f"{int(minutes)}m{secs:g}s"
    return f"{secs:g}s"


# ============================================================
# EXPORTER CONFIGURATION
# ============================================================

REQUIRED_SETTINGS = (
    ("NEW_RELIC_ACCOUNT", "account_id"),
    ("ENTITY_GUID", "entity_guid"),
    ("NEW_RELIC_LICENSE_KEY", "license_key"),
    ("NEW_RELIC_USER_KEY", "user_key"),
)


@dataclass(frozen=True)
class ExporterConfig:
    """Configuration for one account/entity exporter process."""

    account_id: str
    """Account identifier."""

    entity_guid: str
    """Entity under observation."""

    license_key: str
    """Metric ingestion key."""

    user_key: str
    """Identity lookup key."""

    poll_interval_seconds: float = 300.0
    """Start-to-start cycle interval."""

    session_cookie: Optional[str] = None
    """Dashboard session cookie for the trace-summary request."""

    summary_endpoint: str = TRACE_SUMMARY_ENDPOINT
    graphql_endpoint: str = GRAPHQL_ENDPOINT
    metric_endpoint: str = METRIC_ENDPOINT

    log_level: str = "INFO"
    log_format: str = "text"

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        load_env_file: bool = True,
    ) -> "ExporterConfig":
        """
        Load configuration from environment variables.

        Raises:
            MissingConfigError: First missing required setting
            InvalidConfigError: POLL_INTERVAL is not a positive duration
        """
        if environ is None:
            if load_env_file:
                load_dotenv()
            environ = os.environ

        values: Dict[str, str] = {}
        for env_key, field_name in REQUIRED_SETTINGS:
            value = environ.get(env_key, "")
            if not value:
                raise MissingConfigError(env_key)
            values[field_name] = value

        raw_interval = environ.get("POLL_INTERVAL") or DEFAULT_POLL_INTERVAL
        try:
            interval = parse_duration(raw_interval)
        except ValueError as e:
            raise InvalidConfigError(
                "POLL_INTERVAL", raw_interval, f"{e}, must be a duration (ex: 1h)"
            )
        if interval <= 0:
            raise InvalidConfigError("POLL_INTERVAL", raw_interval, "must be positive")

        return cls(
            poll_interval_seconds=interval,
            session_cookie=environ.get("NEW_RELIC_SESSION_COOKIE") or None,
            summary_endpoint=environ.get("TRACE_SUMMARY_ENDPOINT") or TRACE_SUMMARY_ENDPOINT,
            graphql_endpoint=environ.get("GRAPHQL_ENDPOINT") or GRAPHQL_ENDPOINT,
            metric_endpoint=environ.get("METRIC_ENDPOINT") or METRIC_ENDPOINT,
            log_level=environ.get("LOG_LEVEL", "INFO"),
            log_format=environ.get("LOG_FORMAT", "text"),
            **values,
        )

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        for env_key, field_name in REQUIRED_SETTINGS:
            if not getattr(self, field_name):
                errors.append(f"{env_key} is required")

        if self.poll_interval_seconds <= 0:
            errors.append("poll interval must be positive")

        if self.log_format not in ("text", "json"):
            errors.append("LOG_FORMAT must be 'text' or 'json'")

        return errors

    def raise_if_invalid(self) -> None:
        errors = self.validate()
        if errors:
            raise ConfigError("; ".join(errors))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with secrets masked."""
        return {
            "account_id": self.account_id,
            "entity_guid": self.entity_guid,
            "license_key": _mask(self.license_key),
            "user_key": _mask(self.user_key),
            "session_cookie": _mask(self.session_cookie) if self.session_cookie else None,
            "poll_interval": format_duration(self.poll_interval_seconds),
            "summary_endpoint": self.summary_endpoint,
            "graphql_endpoint": self.graphql_endpoint,
            "metric_endpoint": self.metric_endpoint,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }


def _mask(secret: str) -> str:
    if len(secret) <= 4:
        return "****"
    return f"{secret[:4]}****"
