"""
Aggregator API endpoints.

Query parameters use the bracketed form the City Explorer frontend sends:
`/location?data=Seattle` and `/weather?data[id]=1&data[latitude]=..&data[longitude]=..`.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from . import dependencies
from .categories import Category
from .schemas import LocationParams
from .service import Resolver

router = APIRouter()


@router.get("/location")
async def get_location(
    data: str = Query(..., min_length=1, max_length=500),
    resolver: Resolver = Depends(dependencies.get_resolver),
) -> dict:
    search_query = data.strip()
    if not search_query:
        raise HTTPException(status_code=422, detail="data is required.")
    resolution = await resolver.resolve_location(search_query)
    return resolution.body


@router.get("/weather")
async def get_weather(
    location: LocationParams = Depends(dependencies.get_location_params),
    resolver: Resolver = Depends(dependencies.get_resolver),
) -> list[dict]:
    resolution = await resolver.resolve(Category.WEATHER, dependencies.require_coordinates(location))
    return resolution.body


@router.get("/events")
async def get_events(
    location: LocationParams = Depends(dependencies.get_location_params),
    resolver: Resolver = Depends(dependencies.get_resolver),
) -> list[dict]:
    resolution = await resolver.resolve(Category.EVENTS, dependencies.require_coordinates(location))
    return resolution.body


@router.get("/movies")
async def get_movies(
    location: LocationParams = Depends(dependencies.get_location_params),
    resolver: Resolver = Depends(dependencies.get_resolver),
) -> list[dict]:
    resolution = await resolver.resolve(Category.MOVIES, dependencies.require_address(location))
    return resolution.body


@router.get("/yelp")
async def get_yelp(
    location: LocationParams = Depends(dependencies.get_location_params),
    resolver: Resolver = Depends(dependencies.get_resolver),
) -> list[dict]:
    resolution = await resolver.resolve(Category.YELP, dependencies.require_coordinates(location))
    return resolution.body


@router.get("/trails")
async def get_trails(
    location: LocationParams = Depends(dependencies.get_location_params),
    resolver: Resolver = Depends(dependencies.get_resolver),
) -> list[dict]:
    resolution = await resolver.resolve(Category.TRAILS, dependencies.require_coordinates(location))
    return resolution.body
