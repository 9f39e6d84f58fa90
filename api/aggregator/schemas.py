"""
Pydantic schemas for the aggregator endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class LocationParams(BaseModel):
    """
    The resolved location a category request is made for.

    Callers pass back what `/location` returned. `id` may be None when the
    location could not be persisted; such requests are served upstream-only.
    """

    id: int | None = None
    search_query: str | None = Field(default=None, max_length=500)
    formatted_address: str | None = Field(default=None, max_length=500)
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)

    def city(self) -> str:
        # "Seattle, WA, USA" -> "Seattle"
        address = (self.formatted_address or self.search_query or "").strip()
        return address.split(",")[0].strip()
