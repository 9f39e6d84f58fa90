"""
Aggregator persistence (raw SQL).

`Store` is the only cache: one table per category (see `categories.py` for
the declarations and `db/migrations/` for the DDL). Table and column names
come only from the declarations; every caller-supplied value is bound as a
$n parameter.

Any backing-store failure is logged and re-raised as `StoreUnavailable`;
the resolver decides how to degrade.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from functools import lru_cache
from typing import Any

import asyncpg

from core import db
from core.errors import StoreUnavailable

from .categories import Category, spec_for

logger = logging.getLogger(__name__)

_STORE_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    asyncio.TimeoutError,
    OSError,
    RuntimeError,
)


def _placeholders(start: int, count: int) -> str:
    return ", ".join(f"${i}" for i in range(start, start + count))


@lru_cache(maxsize=None)
def _find_sql(category: Category) -> str:
    spec = spec_for(category)
    if spec.keyed_by_location:
        columns = ", ".join(("id", "location_id", *spec.column_names, "created_at"))
        return f"SELECT {columns} FROM {spec.table} WHERE location_id = $1 ORDER BY id"
    columns = ", ".join(("id", *spec.column_names, "created_at"))
    return f"SELECT {columns} FROM {spec.table} WHERE search_query = $1 ORDER BY id"


@lru_cache(maxsize=None)
def _insert_sql(category: Category) -> str:
    spec = spec_for(category)
    conflict = ", ".join(spec.conflict_key)
    if spec.keyed_by_location:
        names = ("location_id", *spec.column_names)
        values = _placeholders(1, len(names))
        created_at = f"COALESCE(${len(names) + 1}::timestamptz, now())"
        return (
            f"INSERT INTO {spec.table} ({', '.join(names)}, created_at) "
            f"VALUES ({values}, {created_at}) "
            f"ON CONFLICT ({conflict}) DO NOTHING"
        )
    names = spec.column_names
    return (
        f"INSERT INTO {spec.table} ({', '.join(names)}) "
        f"VALUES ({_placeholders(1, len(names))}) "
        f"ON CONFLICT ({conflict}) DO NOTHING "
        "RETURNING id"
    )


@lru_cache(maxsize=None)
def _delete_sql(category: Category) -> str:
    spec = spec_for(category)
    return f"DELETE FROM {spec.table} WHERE location_id = $1"


def _insert_args(category: Category, record: dict[str, Any]) -> list[Any]:
    spec = spec_for(category)
    args = [record.get(name) for name in spec.column_names]
    if spec.keyed_by_location:
        return [record.get("location_id"), *args, record.get("created_at")]
    return args


class Store:
    def __init__(self, database: db.Database) -> None:
        self.database = database

    async def find(self, category: Category, key: str | int) -> list[dict[str, Any]]:
        """
        Locations by search query; every other category by location id.
        """
        try:
            return await self.database.fetch_all(_find_sql(category), key)
        except _STORE_ERRORS as e:
            logger.exception("store_read_failed category=%s key=%s", category.value, key)
            raise StoreUnavailable(f"Could not read {category.value} records.") from e

    async def insert(self, category: Category, record: dict[str, Any]) -> int | None:
        """
        Insert one record.

        Returns the location id for locations (the existing row's id when a
        concurrent request inserted the same search query first), None for
        every other category. Conflicting rows are dropped silently.
        """
        try:
            row = await self.database.fetch_one(_insert_sql(category), *_insert_args(category, record))
        except _STORE_ERRORS as e:
            logger.exception("store_write_failed category=%s", category.value)
            raise StoreUnavailable(f"Could not write {category.value} record.") from e

        if category is not Category.LOCATION:
            return None
        if row is not None:
            return int(row["id"])

        # Lost the race: someone else stored this search query already.
        existing = await self.find(category, record["search_query"])
        if not existing:
            raise StoreUnavailable("Location insert conflicted but no row was found.")
        return int(existing[0]["id"])

    async def delete_all(self, category: Category, location_id: int) -> None:
        try:
            await self.database.execute(_delete_sql(category), location_id)
        except _STORE_ERRORS as e:
            logger.exception("store_delete_failed category=%s location_id=%s", category.value, location_id)
            raise StoreUnavailable(f"Could not delete {category.value} records.") from e

    async def clock(self) -> datetime:
        """
        The store's current time; the one clock used for freshness and created_at.
        """
        try:
            row = await self.database.fetch_one("SELECT now() AS now")
        except _STORE_ERRORS as e:
            logger.exception("store_clock_failed")
            raise StoreUnavailable("Could not read the store clock.") from e
        if row is None:
            raise StoreUnavailable("Store clock returned no row.")
        return row["now"]
