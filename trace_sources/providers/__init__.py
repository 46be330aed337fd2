"""
Providers package - Trace summary source implementations.
"""

from trace_sources.providers.session_fetch import SessionSummarySource


__all__ = [
    "SessionSummarySource",
]
