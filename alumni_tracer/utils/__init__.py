"""Utilities module."""
from alumni_tracer.utils.datetime_helpers import ensure_utc, utc_now

__all__ = ["ensure_utc", "utc_now"]
