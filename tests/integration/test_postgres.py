"""
Store round trip against a real Postgres.

Runs only when TEST_DATABASE_URL points at a database the tests may write
to; the migration in `db/migrations/` is applied first.
"""

import os
from pathlib import Path

import pytest

from aggregator.categories import Category
from aggregator.repository import Store
from core import db

MIGRATION = next((Path(__file__).parents[2] / "db" / "migrations").glob("*.sql"))

pytestmark = [
    pytest.mark.postgres,
    pytest.mark.skipif(not os.environ.get("TEST_DATABASE_URL"), reason="TEST_DATABASE_URL is not set"),
]


def _migrate_up_sql() -> str:
    text = MIGRATION.read_text()
    return text.split("-- migrate:up", 1)[1].split("-- migrate:down", 1)[0]


@pytest.mark.asyncio
async def test_insert_then_find_round_trip():
    database = db.Database(db._sanitize_database_url(os.environ["TEST_DATABASE_URL"]))
    await database.connect()
    try:
        await database.execute(_migrate_up_sql())
        await database.execute("DELETE FROM locations WHERE search_query = $1", "Round Trip, WA")
        store = Store(database)

        location = {
            "search_query": "Round Trip, WA",
            "formatted_address": "Round Trip, WA, USA",
            "latitude": 47.0,
            "longitude": -122.0,
        }
        location_id = await store.insert(Category.LOCATION, location)
        assert await store.insert(Category.LOCATION, location) == location_id

        now = await store.clock()
        movie = {
            "title": "Heat",
            "overview": "A heist.",
            "average_votes": 7.9,
            "total_votes": 6000,
            "image_url": None,
            "popularity": 30.5,
            "released_on": "1995-12-15",
            "location_id": location_id,
            "created_at": now,
        }
        await store.insert(Category.MOVIES, movie)
        await store.insert(Category.MOVIES, movie)

        rows = await store.find(Category.MOVIES, location_id)
        assert len(rows) == 1
        assert {k: rows[0][k] for k in movie} == movie

        await store.delete_all(Category.MOVIES, location_id)
        assert await store.find(Category.MOVIES, location_id) == []
    finally:
        await database.close()
