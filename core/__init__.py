"""
Core Module Package.

This package contains the core infrastructure components
that all other modules depend on.

Components:
- clock: Testable time abstraction
- exceptions: Custom exception hierarchy
- constants: Endpoints, retry discipline and metric naming
"""

from core.clock import ClockProtocol, MockClock, SystemClock, get_clock
from core.exceptions import (
    ConfigError,
    ErrorClassification,
    ExporterError,
    HTTPStatusError,
    InvalidConfigError,
    MissingConfigError,
    ParseError,
    PipelineError,
    Severity,
    TransportError,
)


__all__ = [
    # Clock
    "ClockProtocol",
    "SystemClock",
    "MockClock",
    "get_clock",
    # Exceptions
    "Severity",
    "ErrorClassification",
    "ExporterError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "PipelineError",
    "TransportError",
    "HTTPStatusError",
    "ParseError",
]
