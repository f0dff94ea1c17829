"""Pytest configuration and test helpers."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest


# Ensure the application package is importable when running tests without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


def make_result(movie_id: int, **overrides: Any) -> dict[str, Any]:
    """Return a provider listing entry shaped like ``/discover/movie`` results."""

    payload: dict[str, Any] = {
        "id": movie_id,
        "title": f"Movie {movie_id}",
        "overview": f"Overview {movie_id}",
        "poster_path": f"/poster{movie_id}.jpg",
        "backdrop_path": f"/backdrop{movie_id}.jpg",
        "release_date": "2010-07-16",
        "vote_average": 8.4,
        "vote_count": 35000,
        "genre_ids": [28, 878],
        "adult": False,
        "popularity": 80.5,
    }
    payload.update(overrides)
    return payload


def make_page(start: int, count: int) -> dict[str, Any]:
    return {
        "page": 1,
        "results": [make_result(start + index) for index in range(count)],
        "total_results": 1000,
        "total_pages": 50,
    }
