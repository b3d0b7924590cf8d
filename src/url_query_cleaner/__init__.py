"""Remove tracking and other unwanted query parameters from URLs."""

from __future__ import annotations

__all__ = [
    "TRACKING_CATEGORIES",
    "CleanResult",
    "ParseError",
    "QueryParam",
    "TrackingPolicy",
    "clean",
    "filter_query",
    "untrack",
]

from url_query_cleaner.cleaner import ParseError, clean, filter_query, untrack
from url_query_cleaner.models import CleanResult, QueryParam
from url_query_cleaner.policy import TRACKING_CATEGORIES, TrackingPolicy
