"""
Freshness policy: how long a category's stored records may be served.

All records for one (category, location) share a `created_at`, so the
verdict is computed once per group from the first row.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from .categories import CATEGORY_SPECS, Category

TTLS: dict[Category, timedelta | None] = {category: spec.ttl for category, spec in CATEGORY_SPECS.items()}


def is_fresh(category: Category, created_at: datetime, now: datetime) -> bool:
    """
    Stale only when the age is strictly greater than the TTL.
    """
    ttl = TTLS[category]
    if ttl is None:
        return True
    return (now - created_at) <= ttl


def group_is_fresh(category: Category, rows: list[dict[str, Any]], now: datetime) -> bool:
    if not rows:
        return False
    created_at = rows[0].get("created_at")
    if not isinstance(created_at, datetime):
        return False
    return is_fresh(category, created_at, now)
