"""
Request-scoped dependencies for the aggregator routes.
"""

from __future__ import annotations

from fastapi import HTTPException, Query, Request

from .schemas import LocationParams
from .service import Resolver


def get_resolver(request: Request) -> Resolver:
    # Built once in the app lifespan (see `api/main.py`).
    resolver = getattr(request.app.state, "resolver", None)
    if resolver is None:
        raise RuntimeError("Resolver is not initialized. It is created in the app lifespan.")
    return resolver


def get_location_params(
    location_id: int | None = Query(default=None, alias="data[id]"),
    search_query: str | None = Query(default=None, alias="data[search_query]", max_length=500),
    formatted_address: str | None = Query(default=None, alias="data[formatted_address]", max_length=500),
    latitude: float | None = Query(default=None, alias="data[latitude]", ge=-90.0, le=90.0),
    longitude: float | None = Query(default=None, alias="data[longitude]", ge=-180.0, le=180.0),
) -> LocationParams:
    return LocationParams(
        id=location_id,
        search_query=search_query,
        formatted_address=formatted_address,
        latitude=latitude,
        longitude=longitude,
    )


def require_coordinates(location: LocationParams) -> LocationParams:
    if location.latitude is None or location.longitude is None:
        raise HTTPException(
            status_code=422,
            detail="data[latitude] and data[longitude] are required.",
        )
    return location


def require_address(location: LocationParams) -> LocationParams:
    if not location.city():
        raise HTTPException(
            status_code=422,
            detail="data[formatted_address] is required.",
        )
    return location
