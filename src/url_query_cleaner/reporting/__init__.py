"""Event logging and removal summaries."""

from __future__ import annotations

__all__ = ["log_event", "summarize_removed"]

from url_query_cleaner.reporting.logging import log_event
from url_query_cleaner.reporting.summary import summarize_removed
