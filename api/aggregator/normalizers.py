"""
Upstream payload -> storable record, one function per category.

Pure functions, no I/O. Each returns a dict keyed by the category's payload
columns (see `categories.py`). Optional fields that are absent or unusable
become None; a missing required field raises `MalformedUpstreamData`.

`location_id` and `created_at` are not set here; the resolver attaches them
so normalizing the same item twice yields equal records.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

from core.errors import MalformedUpstreamData

DISPLAY_DATE_FORMAT = "%a %b %d %Y"
MOVIE_OVERVIEW_CHARS = 750
TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/original"


def _dig(item: Any, *keys: str) -> Any:
    node = item
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _as_int(value: Any) -> int | None:
    number = _as_float(value)
    return int(number) if number is not None else None


def _require(item: Any, value: Any, field: str, category: str) -> Any:
    if value is None:
        raise MalformedUpstreamData(f"{category} item is missing required field '{field}'.", payload=item)
    return value


def _display_date(value: datetime) -> str:
    # e.g. "Mon Jan 01 2024"
    return value.strftime(DISPLAY_DATE_FORMAT)


def normalize_location(item: Any, *, search_query: str) -> dict[str, Any]:
    latitude = _require(item, _as_float(_dig(item, "geometry", "location", "lat")), "geometry.location.lat", "location")
    longitude = _require(item, _as_float(_dig(item, "geometry", "location", "lng")), "geometry.location.lng", "location")
    return {
        "search_query": search_query,
        "formatted_address": _as_text(_dig(item, "formatted_address")) or search_query,
        "latitude": latitude,
        "longitude": longitude,
    }


def normalize_weather(item: Any) -> dict[str, Any]:
    epoch = _require(item, _as_float(_dig(item, "time")), "time", "weather")
    try:
        day = datetime.fromtimestamp(epoch, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedUpstreamData("weather item has an unusable 'time'.", payload=item) from e
    return {
        "forecast": _as_text(_dig(item, "summary")),
        "time": _display_date(day),
    }


def _event_date(raw: Any) -> str | None:
    text = _as_text(raw)
    if text is None:
        return None
    try:
        return _display_date(datetime.fromisoformat(text))
    except ValueError:
        return None


def _event_name(item: Any) -> str | None:
    # Eventbrite nests the name as {"text": ..., "html": ...}; some feeds send a plain string.
    raw = _dig(item, "name")
    if isinstance(raw, dict):
        return _as_text(raw.get("text"))
    return _as_text(raw)


def normalize_event(item: Any) -> dict[str, Any]:
    return {
        "link": _as_text(_dig(item, "url")),
        "name": _require(item, _event_name(item), "name.text", "event"),
        "event_date": _event_date(_dig(item, "start", "local")),
        "summary": _as_text(_dig(item, "summary")),
    }


def normalize_movie(item: Any) -> dict[str, Any]:
    title = _as_text(_dig(item, "original_title")) or _as_text(_dig(item, "title"))
    overview = _as_text(_dig(item, "overview"))
    poster_path = _as_text(_dig(item, "poster_path"))
    return {
        "title": _require(item, title, "original_title", "movie"),
        "overview": overview[:MOVIE_OVERVIEW_CHARS] if overview else None,
        "average_votes": _as_float(_dig(item, "vote_average")),
        "total_votes": _as_int(_dig(item, "vote_count")),
        "image_url": f"{TMDB_IMAGE_BASE_URL}{poster_path}" if poster_path else None,
        "popularity": _as_float(_dig(item, "popularity")),
        "released_on": _as_text(_dig(item, "release_date")),
    }


def normalize_business(item: Any) -> dict[str, Any]:
    return {
        "name": _require(item, _as_text(_dig(item, "name")), "name", "yelp"),
        "image_url": _as_text(_dig(item, "image_url")),
        "price": _as_text(_dig(item, "price")),
        "rating": _as_float(_dig(item, "rating")),
        "url": _as_text(_dig(item, "url")),
    }


def _split_condition_date(raw: Any) -> tuple[str | None, str | None]:
    # Hiking Project sends "YYYY-MM-DD HH:MM:SS".
    text = _as_text(raw)
    if text is None:
        return None, None
    date_part, _, time_part = text.partition(" ")
    return date_part or None, time_part.strip() or None


def normalize_trail(item: Any) -> dict[str, Any]:
    condition_date, condition_time = _split_condition_date(_dig(item, "conditionDate"))
    return {
        "name": _require(item, _as_text(_dig(item, "name")), "name", "trail"),
        "location": _as_text(_dig(item, "location")),
        "length": _as_float(_dig(item, "length")),
        "stars": _as_float(_dig(item, "stars")),
        "star_votes": _as_int(_dig(item, "starVotes")),
        "summary": _as_text(_dig(item, "summary")),
        "trail_url": _as_text(_dig(item, "url")),
        "conditions": _as_text(_dig(item, "conditionDetails")),
        "condition_date": condition_date,
        "condition_time": condition_time,
    }
