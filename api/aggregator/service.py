"""
Category resolver (cache-or-fetch orchestration).

Per request:
- check the store for the category's records
- fresh -> serve them
- stale/absent -> delete stale rows, fetch upstream, normalize, persist, serve

Degradation rules:
- store read failure: treated as a cache miss
- store delete/clock/write failure: logged, upstream data is still served
- NoUpstreamData on a list category: empty list
- UpstreamUnavailable / MalformedUpstreamData: propagate (the app turns
  them into a generic 500)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable

import httpx

from core.config import UpstreamSettings
from core.errors import MalformedUpstreamData, NoUpstreamData, StoreUnavailable

from . import freshness
from .categories import Category, normalize, project, spec_for
from .repository import Store
from .schemas import LocationParams

logger = logging.getLogger(__name__)

SERVED_FROM_CACHE = "served-from-cache"
SERVED_FROM_UPSTREAM = "served-from-upstream"

PAYLOAD_LOG_CHARS = 500


@dataclass(frozen=True)
class Resolution:
    state: str
    body: Any


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _unique(category: Category, records: Iterable[dict[str, Any]], limit: int | None) -> list[dict[str, Any]]:
    """
    Drop records that would collide on the category's unique key, keeping the first,
    and stop once `limit` records are kept.

    The store keeps only one row per key, so the response must too. NULLs never
    collide in Postgres unique constraints, so records with a NULL key part are kept.
    """
    key_names = [name for name in spec_for(category).conflict_key if name != "location_id"]
    seen: set[tuple[Any, ...]] = set()
    unique: list[dict[str, Any]] = []
    dropped = 0
    for record in records:
        if limit is not None and len(unique) >= limit:
            break
        key = tuple(record.get(name) for name in key_names)
        if None not in key:
            if key in seen:
                dropped += 1
                continue
            seen.add(key)
        unique.append(record)
    if dropped:
        logger.info("duplicate_upstream_items category=%s dropped=%s", category.value, dropped)
    return unique


class Resolver:
    def __init__(self, store: Store, http: httpx.AsyncClient, settings: UpstreamSettings) -> None:
        self.store = store
        self.http = http
        self.settings = settings

    async def resolve_location(self, search_query: str) -> Resolution:
        """
        Geocode a free-text place, serving the stored row when there is one.

        Raises NoUpstreamData when the geocoder finds nothing.
        """
        category = Category.LOCATION
        spec = spec_for(category)

        try:
            rows = await self.store.find(category, search_query)
        except StoreUnavailable:
            rows = []

        if rows:
            logger.info("resolved category=location search_query=%r state=%s", search_query, SERVED_FROM_CACHE)
            return Resolution(SERVED_FROM_CACHE, project(category, rows[0]))

        items = await spec.gateway(self.http, self.settings, search_query)
        record = self._normalize(category, items[0], search_query=search_query)

        try:
            record["id"] = await self.store.insert(category, record)
        except StoreUnavailable:
            record["id"] = None
            logger.warning("location_not_persisted search_query=%r", search_query)

        logger.info("resolved category=location search_query=%r state=%s", search_query, SERVED_FROM_UPSTREAM)
        return Resolution(SERVED_FROM_UPSTREAM, project(category, record))

    async def resolve(self, category: Category, location: LocationParams) -> Resolution:
        """
        Serve one list category for an already-resolved location.
        """
        spec = spec_for(category)
        if not spec.keyed_by_location:
            raise ValueError(f"{category.value} is not keyed by location.")

        location_id = location.id
        persist = location_id is not None
        now: datetime | None = None

        if location_id is not None:
            try:
                rows = await self.store.find(category, location_id)
            except StoreUnavailable:
                rows = []

            if rows:
                try:
                    now = await self.store.clock()
                except StoreUnavailable:
                    # No trustworthy clock: refetch, but leave the stored group alone.
                    persist = False
                else:
                    if freshness.group_is_fresh(category, rows, now):
                        body = [project(category, row) for row in rows[: spec.limit]]
                        self._log_resolved(category, location_id, SERVED_FROM_CACHE, len(body))
                        return Resolution(SERVED_FROM_CACHE, body)
                    try:
                        await self.store.delete_all(category, location_id)
                    except StoreUnavailable:
                        persist = False

        try:
            items = await spec.gateway(self.http, self.settings, location)
        except NoUpstreamData:
            logger.info("no_upstream_data category=%s location_id=%s", category.value, location_id)
            self._log_resolved(category, location_id, SERVED_FROM_UPSTREAM, 0)
            return Resolution(SERVED_FROM_UPSTREAM, [])

        records = _unique(category, (self._normalize(category, item) for item in items), spec.limit)

        # Stamp rows with the time they were fetched, not the time the cache was checked.
        now = None
        if persist:
            try:
                now = await self.store.clock()
            except StoreUnavailable:
                persist = False
        created_at = now or _utc_now()

        for record in records:
            record["location_id"] = location_id
            record["created_at"] = created_at

        if persist:
            await self._persist_all(category, records)

        body = [project(category, record) for record in records]
        self._log_resolved(category, location_id, SERVED_FROM_UPSTREAM, len(body))
        return Resolution(SERVED_FROM_UPSTREAM, body)

    async def _persist_all(self, category: Category, records: list[dict[str, Any]]) -> None:
        # Each row is written on its own; one failed insert must not block the rest.
        failed = 0
        for record in records:
            try:
                await self.store.insert(category, record)
            except StoreUnavailable:
                failed += 1
        if failed:
            logger.warning(
                "records_not_persisted category=%s failed=%s total=%s",
                category.value,
                failed,
                len(records),
            )

    def _normalize(self, category: Category, item: Any, *, search_query: str | None = None) -> dict[str, Any]:
        try:
            return normalize(category, item, search_query=search_query)
        except MalformedUpstreamData as e:
            logger.error(
                "malformed_upstream_data category=%s error=%s payload=%.*s",
                category.value,
                e,
                PAYLOAD_LOG_CHARS,
                repr(e.payload),
            )
            raise

    @staticmethod
    def _log_resolved(category: Category, location_id: int | None, state: str, count: int) -> None:
        logger.info(
            "resolved category=%s location_id=%s state=%s count=%s",
            category.value,
            location_id,
            state,
            count,
        )
