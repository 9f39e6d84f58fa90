"""
Test doubles and canned provider payloads.

- FakeStore: an in-memory stand-in with the same interface as `repository.Store`
- ProviderStub: an `httpx.MockTransport` handler that answers every provider
  path with a canned payload and records each request it receives
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx

from aggregator.categories import Category, spec_for
from core.config import ProviderSettings, UpstreamSettings
from core.errors import StoreUnavailable

UPSTREAM_BASE_URL = "https://upstream.test"
NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

PROVIDER_PATHS = {
    Category.LOCATION: "/maps/api/geocode/json",
    Category.WEATHER: "/forecast/",
    Category.EVENTS: "/v3/events/search/",
    Category.MOVIES: "/3/search/movie",
    Category.YELP: "/v3/businesses/search",
    Category.TRAILS: "/data/get-trails",
}

GEOCODE_PAYLOAD = {
    "results": [
        {
            "formatted_address": "Seattle, WA, USA",
            "geometry": {"location": {"lat": 47.6062, "lng": -122.3321}},
        }
    ],
    "status": "OK",
}

WEATHER_PAYLOAD = {
    "daily": {
        "data": [
            {"time": 1704067200, "summary": "Light rain in the morning."},
            {"time": 1704153600, "summary": "Overcast throughout the day."},
        ]
    }
}

EVENTS_PAYLOAD = {
    "events": [
        {
            "url": "https://www.eventbrite.com/e/1",
            "name": {"text": "Harbor Jazz Night", "html": "<b>Harbor Jazz Night</b>"},
            "summary": "Live jazz on the pier.",
            "start": {"local": "2024-01-05T19:00:00"},
        }
    ]
}

MOVIES_PAYLOAD = {
    "results": [
        {
            "original_title": "Sleepless in Seattle",
            "overview": "A widowed architect and a reporter fall in love over the radio.",
            "vote_average": 6.8,
            "vote_count": 1900,
            "poster_path": "/sleepless.jpg",
            "popularity": 14.2,
            "release_date": "1993-06-24",
        }
    ]
}

YELP_PAYLOAD = {
    "businesses": [
        {
            "name": "Pike Place Chowder",
            "image_url": "https://s3-media.yelp.test/chowder.jpg",
            "price": "$$",
            "rating": 4.5,
            "url": "https://www.yelp.com/biz/pike-place-chowder-seattle",
        }
    ]
}

TRAILS_PAYLOAD = {
    "trails": [
        {
            "name": "Rattlesnake Ledge",
            "location": "North Bend, Washington",
            "length": 4.3,
            "stars": 4.4,
            "starVotes": 82,
            "summary": "A popular hike with views over Rattlesnake Lake.",
            "url": "https://www.hikingproject.com/trail/1",
            "conditionDetails": "Dry",
            "conditionDate": "2018-07-21 00:00:00",
        }
    ]
}

PAYLOADS = {
    Category.LOCATION: GEOCODE_PAYLOAD,
    Category.WEATHER: WEATHER_PAYLOAD,
    Category.EVENTS: EVENTS_PAYLOAD,
    Category.MOVIES: MOVIES_PAYLOAD,
    Category.YELP: YELP_PAYLOAD,
    Category.TRAILS: TRAILS_PAYLOAD,
}


class FakeStore:
    """
    In-memory store with the `repository.Store` interface.
    """

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now
        self.rows: dict[Category, list[dict[str, Any]]] = {c: [] for c in Category}
        self.calls: list[tuple[str, Category | None]] = []
        self.fail_reads = False
        self.fail_writes = False
        self.fail_deletes = False
        self.fail_clock = False
        self._next_id = 1

    def _key_field(self, category: Category) -> str:
        return "location_id" if spec_for(category).keyed_by_location else "search_query"

    def seed(self, category: Category, record: dict[str, Any]) -> int:
        row = dict(record)
        row["id"] = self._next_id
        self._next_id += 1
        self.rows[category].append(row)
        return row["id"]

    async def find(self, category: Category, key: str | int) -> list[dict[str, Any]]:
        self.calls.append(("find", category))
        if self.fail_reads:
            raise StoreUnavailable("read failed")
        field = self._key_field(category)
        return [dict(row) for row in self.rows[category] if row.get(field) == key]

    async def insert(self, category: Category, record: dict[str, Any]) -> int | None:
        self.calls.append(("insert", category))
        if self.fail_writes:
            raise StoreUnavailable("write failed")
        row = dict(record)
        existing = self._conflicting(category, row)
        if existing is not None:
            # ON CONFLICT DO NOTHING; a location insert reads the winning row back.
            return existing["id"] if category is Category.LOCATION else None
        if category is Category.LOCATION:
            row.setdefault("created_at", self.now)
        row_id = self.seed(category, row)
        return row_id if category is Category.LOCATION else None

    def _conflicting(self, category: Category, row: dict[str, Any]) -> dict[str, Any] | None:
        key = tuple(row.get(name) for name in spec_for(category).conflict_key)
        if None in key:
            return None
        for stored in self.rows[category]:
            if tuple(stored.get(name) for name in spec_for(category).conflict_key) == key:
                return stored
        return None

    async def delete_all(self, category: Category, location_id: int) -> None:
        self.calls.append(("delete_all", category))
        if self.fail_deletes:
            raise StoreUnavailable("delete failed")
        self.rows[category] = [row for row in self.rows[category] if row.get("location_id") != location_id]

    async def clock(self) -> datetime:
        self.calls.append(("clock", None))
        if self.fail_clock:
            raise StoreUnavailable("clock failed")
        return self.now

    def ops(self, op: str) -> list[Category | None]:
        return [category for (name, category) in self.calls if name == op]


class ProviderStub:
    """
    Answers provider paths with canned payloads; counts calls per category.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: dict[Category, tuple[int, Any]] = {
            category: (200, payload) for category, payload in PAYLOADS.items()
        }
        self.raise_error: Exception | None = None

    def respond(self, category: Category, status_code: int, body: Any) -> None:
        self.responses[category] = (status_code, body)

    def calls(self, category: Category) -> int:
        prefix = PROVIDER_PATHS[category]
        return sum(1 for r in self.requests if r.url.path.startswith(prefix))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        for category, prefix in PROVIDER_PATHS.items():
            if request.url.path.startswith(prefix):
                status_code, body = self.responses[category]
                return httpx.Response(status_code, json=body)
        return httpx.Response(404, json={"error": "unknown path"})


def make_settings(base_url: str = UPSTREAM_BASE_URL) -> UpstreamSettings:
    return UpstreamSettings(
        timeout_s=5.0,
        geocode=ProviderSettings(base_url=base_url, api_key="geo-key"),
        weather=ProviderSettings(base_url=base_url, api_key="weather-key"),
        events=ProviderSettings(base_url=base_url, api_key="events-key"),
        movies=ProviderSettings(base_url=base_url, api_key="movies-key"),
        yelp=ProviderSettings(base_url=base_url, api_key="yelp-key"),
        trails=ProviderSettings(base_url=base_url, api_key="trails-key"),
    )


