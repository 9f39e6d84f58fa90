"""
Upstream gateways, one per provider.

Each gateway builds the provider-specific request, performs a single GET
through `core.upstream.get_json`, and returns the provider's result array.

Failure kinds:
- UpstreamUnavailable: transport error, timeout, non-2xx status
- NoUpstreamData: the expected array is absent or empty
"""

from __future__ import annotations

from typing import Any

import httpx

from core import upstream
from core.config import UpstreamSettings
from core.errors import UpstreamUnavailable

from .schemas import LocationParams


def _coordinates(location: LocationParams) -> tuple[float, float]:
    if location.latitude is None or location.longitude is None:
        raise UpstreamUnavailable("Location has no coordinates to query the provider with.")
    return location.latitude, location.longitude


async def geocode(client: httpx.AsyncClient, settings: UpstreamSettings, search_query: str) -> list[Any]:
    """
    Google Geocoding: address -> results[].
    """
    payload = await upstream.get_json(
        client,
        settings.geocode.base_url,
        "/maps/api/geocode/json",
        params={"address": search_query, "key": settings.geocode.api_key},
    )
    return upstream.extract_items(payload, "results")


async def fetch_weather(client: httpx.AsyncClient, settings: UpstreamSettings, location: LocationParams) -> list[Any]:
    """
    Dark Sky style forecast: /forecast/{key}/{lat},{lon} -> daily.data[].
    """
    lat, lon = _coordinates(location)
    payload = await upstream.get_json(
        client,
        settings.weather.base_url,
        f"/forecast/{settings.weather.api_key}/{lat},{lon}",
    )
    return upstream.extract_items(payload, "daily.data")


async def fetch_events(client: httpx.AsyncClient, settings: UpstreamSettings, location: LocationParams) -> list[Any]:
    lat, lon = _coordinates(location)
    payload = await upstream.get_json(
        client,
        settings.events.base_url,
        "/v3/events/search/",
        params={
            "token": settings.events.api_key,
            "location.latitude": lat,
            "location.longitude": lon,
        },
    )
    return upstream.extract_items(payload, "events")


async def fetch_movies(client: httpx.AsyncClient, settings: UpstreamSettings, location: LocationParams) -> list[Any]:
    """
    TMDB movie search by the city part of the formatted address.
    """
    city = location.city()
    if not city:
        raise UpstreamUnavailable("Location has no address to search movies with.")
    payload = await upstream.get_json(
        client,
        settings.movies.base_url,
        "/3/search/movie",
        params={
            "api_key": settings.movies.api_key,
            "language": "en-US",
            "query": city,
            "page": 1,
            "include_adult": "false",
        },
    )
    return upstream.extract_items(payload, "results")


async def fetch_businesses(client: httpx.AsyncClient, settings: UpstreamSettings, location: LocationParams) -> list[Any]:
    lat, lon = _coordinates(location)
    payload = await upstream.get_json(
        client,
        settings.yelp.base_url,
        "/v3/businesses/search",
        params={"latitude": lat, "longitude": lon},
        headers={"Authorization": f"Bearer {settings.yelp.api_key}"},
    )
    return upstream.extract_items(payload, "businesses")


async def fetch_trails(client: httpx.AsyncClient, settings: UpstreamSettings, location: LocationParams) -> list[Any]:
    lat, lon = _coordinates(location)
    payload = await upstream.get_json(
        client,
        settings.trails.base_url,
        "/data/get-trails",
        params={"lat": lat, "lon": lon, "key": settings.trails.api_key},
    )
    return upstream.extract_items(payload, "trails")
