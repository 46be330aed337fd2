"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines all custom exceptions for the trace exporter.

- Provides clear exception hierarchy
- Enables specific error handling per pipeline stage
- Carries context for debugging
- Separates fatal startup errors from per-cycle errors

============================================================
EXCEPTION HIERARCHY
============================================================
ExporterError (base)
├── ConfigError
│   ├── MissingConfigError
│   └── InvalidConfigError
└── PipelineError
    ├── TransportError
    ├── HTTPStatusError
    └── ParseError

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# SEVERITY LEVELS
# ============================================================

class Severity(Enum):
    """Exception severity levels."""

    LOW = "low"
    """Minor issue, informational."""

    MEDIUM = "medium"
    """Moderate issue, one cycle degraded."""

    HIGH = "high"
    """Serious issue, one cycle lost its output."""

    CRITICAL = "critical"
    """Process cannot start."""


# ============================================================
# ERROR CLASSIFICATION
# ============================================================

class ErrorClassification(Enum):
    """Classification of error recoverability."""

    RECOVERABLE = "recoverable"
    """Cycle continues with partial data."""

    TRANSIENT = "transient"
    """Temporary error, next cycle may succeed."""

    NON_RECOVERABLE = "non_recoverable"
    """Permanent error, requires operator intervention."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class ExporterError(Exception):
    """
    Base exception for all exporter errors.

    All exceptions carry:
    - severity: for log level selection
    - context: for debugging
    - recoverable: whether the poll loop may continue
    - timestamp: when the error occurred
    """

    default_severity: Severity = Severity.MEDIUM
    default_recoverable: bool = True
    default_classification: ErrorClassification = ErrorClassification.RECOVERABLE

    def __init__(
        self,
        message: str,
        severity: Optional[Severity] = None,
        context: Optional[Dict[str, Any]] = None,
        recoverable: Optional[bool] = None,
        classification: Optional[ErrorClassification] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)

        self.message = message
        self.severity = severity or self.default_severity
        self.context = context or {}
        self.recoverable = recoverable if recoverable is not None else self.default_recoverable
        self.classification = classification or self.default_classification
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause:
            self.context["cause_type"] = type(cause).__name__
            self.context["cause_message"] = str(cause)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "classification": self.classification.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }

    def to_log_format(self) -> str:
        """Format exception for single-line logging."""
        ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        line = (
            f"[{self.severity.value.upper()}] {type(self).__name__}: {self.message}"
            f" | recoverable={self.recoverable}"
        )
        if ctx_str:
            line += f" | {ctx_str}"
        return line


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigError(ExporterError):
    """Error in process configuration. Fatal at startup only."""

    default_severity = Severity.CRITICAL
    default_recoverable = False
    default_classification = ErrorClassification.NON_RECOVERABLE

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if config_key:
            context["config_key"] = config_key
        if actual_value is not None:
            context["actual_value"] = str(actual_value)[:100]

        super().__init__(message, context=context, **kwargs)
        self.config_key = config_key


class MissingConfigError(ConfigError):
    """Required setting is missing."""

    def __init__(self, key: str):
        super().__init__(
            message=f"Please set env var {key}",
            config_key=key,
        )


class InvalidConfigError(ConfigError):
    """Setting is present but cannot be used."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            message=f"Could not parse env var {key}: {reason}",
            config_key=key,
            actual_value=value,
            context={"reason": reason},
        )


# ============================================================
# PIPELINE ERRORS
# ============================================================

class PipelineError(ExporterError):
    """Base class for errors raised inside a poll cycle."""

    default_severity = Severity.MEDIUM
    default_recoverable = True
    default_classification = ErrorClassification.TRANSIENT

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if url:
            context["url"] = url
        super().__init__(message, context=context, **kwargs)
        self.url = url


class TransportError(PipelineError):
    """No response was obtained after exhausting retries."""

    default_severity = Severity.HIGH

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        attempts: int = 0,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        context["attempts"] = attempts
        super().__init__(message, url=url, context=context, **kwargs)
        self.attempts = attempts


class HTTPStatusError(PipelineError):
    """The final response carried a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        url: Optional[str] = None,
        response_body: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        context["status_code"] = status_code
        super().__init__(message, url=url, context=context, **kwargs)
        self.status_code = status_code
        self.response_body = response_body


class ParseError(PipelineError):
    """A response body was not the expected JSON document."""

    default_classification = ErrorClassification.RECOVERABLE

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        body_size: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if body_size is not None:
            context["body_size"] = body_size
        super().__init__(message, url=url, context=context, **kwargs)
        self.body_size = body_size
