"""
Category registry.

Every data domain the aggregator serves is a member of `Category`, and each
member has exactly one `CategorySpec` declaring:
- the table it is stored in and its ordered payload columns (with SQL types)
- the unique key used to drop conflicting concurrent inserts
- its TTL (None: never expires)
- an optional cap on how many records are stored and returned
- its normalizer and upstream gateway

The column declarations are shared by the normalizers' output, the store's
SQL/parameter binding (`repository.py`) and the response projection below.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any

from . import gateways, normalizers


class Category(str, Enum):
    LOCATION = "location"
    WEATHER = "weather"
    EVENTS = "events"
    MOVIES = "movies"
    YELP = "yelp"
    TRAILS = "trails"


@dataclass(frozen=True)
class Column:
    name: str
    sql_type: str


@dataclass(frozen=True)
class CategorySpec:
    category: Category
    table: str
    columns: tuple[Column, ...]
    conflict_key: tuple[str, ...]
    ttl: timedelta | None
    normalizer: Callable[..., dict[str, Any]]
    gateway: Callable[..., Awaitable[list[Any]]]
    limit: int | None = None

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    @property
    def keyed_by_location(self) -> bool:
        return self.category is not Category.LOCATION


TEXT = "text"
FLOAT = "double precision"
INT = "integer"

EVENTS_LIMIT = 20


CATEGORY_SPECS: dict[Category, CategorySpec] = {
    Category.LOCATION: CategorySpec(
        category=Category.LOCATION,
        table="locations",
        columns=(
            Column("search_query", TEXT),
            Column("formatted_address", TEXT),
            Column("latitude", FLOAT),
            Column("longitude", FLOAT),
        ),
        conflict_key=("search_query",),
        ttl=None,
        normalizer=normalizers.normalize_location,
        gateway=gateways.geocode,
    ),
    Category.WEATHER: CategorySpec(
        category=Category.WEATHER,
        table="weathers",
        columns=(
            Column("forecast", TEXT),
            Column("time", TEXT),
        ),
        conflict_key=("location_id", "time"),
        ttl=timedelta(seconds=15),
        normalizer=normalizers.normalize_weather,
        gateway=gateways.fetch_weather,
    ),
    Category.EVENTS: CategorySpec(
        category=Category.EVENTS,
        table="events",
        columns=(
            Column("link", TEXT),
            Column("name", TEXT),
            Column("event_date", TEXT),
            Column("summary", TEXT),
        ),
        conflict_key=("location_id", "link"),
        ttl=timedelta(hours=6),
        normalizer=normalizers.normalize_event,
        gateway=gateways.fetch_events,
        limit=EVENTS_LIMIT,
    ),
    Category.MOVIES: CategorySpec(
        category=Category.MOVIES,
        table="movies",
        columns=(
            Column("title", TEXT),
            Column("overview", TEXT),
            Column("average_votes", FLOAT),
            Column("total_votes", INT),
            Column("image_url", TEXT),
            Column("popularity", FLOAT),
            Column("released_on", TEXT),
        ),
        conflict_key=("location_id", "title", "released_on"),
        ttl=timedelta(days=30),
        normalizer=normalizers.normalize_movie,
        gateway=gateways.fetch_movies,
    ),
    Category.YELP: CategorySpec(
        category=Category.YELP,
        table="yelps",
        columns=(
            Column("name", TEXT),
            Column("image_url", TEXT),
            Column("price", TEXT),
            Column("rating", FLOAT),
            Column("url", TEXT),
        ),
        conflict_key=("location_id", "url"),
        ttl=timedelta(hours=24),
        normalizer=normalizers.normalize_business,
        gateway=gateways.fetch_businesses,
    ),
    Category.TRAILS: CategorySpec(
        category=Category.TRAILS,
        table="trails",
        columns=(
            Column("name", TEXT),
            Column("location", TEXT),
            Column("length", FLOAT),
            Column("stars", FLOAT),
            Column("star_votes", INT),
            Column("summary", TEXT),
            Column("trail_url", TEXT),
            Column("conditions", TEXT),
            Column("condition_date", TEXT),
            Column("condition_time", TEXT),
        ),
        conflict_key=("location_id", "trail_url"),
        ttl=timedelta(days=7),
        normalizer=normalizers.normalize_trail,
        gateway=gateways.fetch_trails,
    ),
}


def spec_for(category: Category) -> CategorySpec:
    return CATEGORY_SPECS[category]


def normalize(category: Category, item: Any, *, search_query: str | None = None) -> dict[str, Any]:
    """
    Map one upstream item into the category's payload columns.
    """
    spec = spec_for(category)
    if category is Category.LOCATION:
        return spec.normalizer(item, search_query=search_query or "")
    return spec.normalizer(item)


def project(category: Category, row: dict[str, Any]) -> dict[str, Any]:
    """
    Shape a stored (or freshly normalized) row for the response body.

    Locations: payload columns + id.
    Other categories: payload columns + location_id + created_at.
    """
    spec = spec_for(category)
    body = {name: row.get(name) for name in spec.column_names}
    if spec.keyed_by_location:
        body["location_id"] = row.get("location_id")
        body["created_at"] = row.get("created_at")
    else:
        body["id"] = row.get("id")
    return body
