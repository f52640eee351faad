from __future__ import annotations

import logging

from flask import has_app_context

from ..extensions import cache

__all__ = [
    "dashboard_cache_key",
    "invalidate_dashboard_cache",
]

logger = logging.getLogger(__name__)

_DASHBOARD_KEY = "dashboard:summary:v1"


def dashboard_cache_key() -> str:
    return _DASHBOARD_KEY


def invalidate_dashboard_cache() -> None:
    if not has_app_context():
        return
    try:
        cache.delete(dashboard_cache_key())
    except Exception as exc:
        # A stale dashboard expires on its own; the mutation already committed.
        logger.debug("Failed to invalidate dashboard cache: %s", exc)
