"""
Environment-backed settings.

Every setting is read through a small helper so malformed values fall back
to their defaults instead of crashing startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_list(name: str, default: list[str]) -> list[str]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass(frozen=True)
class ProviderSettings:
    """
    Base URL and credential for one upstream provider.
    """

    base_url: str
    api_key: str = ""


@dataclass(frozen=True)
class UpstreamSettings:
    timeout_s: float
    geocode: ProviderSettings
    weather: ProviderSettings
    events: ProviderSettings
    movies: ProviderSettings
    yelp: ProviderSettings
    trails: ProviderSettings


DEFAULT_UPSTREAM_TIMEOUT_S = 10.0


def upstream_settings() -> UpstreamSettings:
    return UpstreamSettings(
        timeout_s=env_float("UPSTREAM_TIMEOUT_S", DEFAULT_UPSTREAM_TIMEOUT_S),
        geocode=ProviderSettings(
            base_url=env_str("GEOCODE_BASE_URL", "https://maps.googleapis.com"),
            api_key=env_str("GEOCODE_API_KEY"),
        ),
        weather=ProviderSettings(
            base_url=env_str("WEATHER_BASE_URL", "https://api.darksky.net"),
            api_key=env_str("WEATHER_API_KEY"),
        ),
        events=ProviderSettings(
            base_url=env_str("EVENTBRITE_BASE_URL", "https://www.eventbriteapi.com"),
            api_key=env_str("EVENTBRITE_API_KEY"),
        ),
        movies=ProviderSettings(
            base_url=env_str("MOVIE_BASE_URL", "https://api.themoviedb.org"),
            api_key=env_str("MOVIE_API_KEY"),
        ),
        yelp=ProviderSettings(
            base_url=env_str("YELP_BASE_URL", "https://api.yelp.com"),
            api_key=env_str("YELP_API_KEY"),
        ),
        trails=ProviderSettings(
            base_url=env_str("TRAIL_BASE_URL", "https://www.hikingproject.com"),
            api_key=env_str("TRAIL_API_KEY"),
        ),
    )


def cors_allow_origins() -> list[str]:
    return env_list("CORS_ALLOW_ORIGINS", ["*"])


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO").upper()
