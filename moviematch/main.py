"""Entry point for the FastAPI-powered movie catalog API."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, NoReturn

import httpx
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .errors import CatalogError, InvalidCriteria, ProviderError, TransportError
from .models import Movie, SearchCriteria
from .services.tmdb import TMDBClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    tmdb_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.tmdb_api_url),
            timeout=httpx.Timeout(settings.http_timeout_seconds, connect=5.0),
            headers={"Accept": "application/json"},
        )
    )
    try:
        tmdb = TMDBClient(settings, tmdb_http_client)
        await tmdb.initialize()
        fastapi_app.state.tmdb_client = tmdb
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Movie discovery and search backed by The Movie Database",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_tmdb_client(fastapi_app: FastAPI) -> TMDBClient:
    client = getattr(fastapi_app.state, "tmdb_client", None)
    if not isinstance(client, TMDBClient):
        raise RuntimeError("TMDB client not initialised")
    return client


def _raise_http_error(exc: CatalogError) -> NoReturn:
    if isinstance(exc, InvalidCriteria):
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if isinstance(exc, ProviderError):
        status = 404 if exc.status_code == 404 else 502
        raise HTTPException(status_code=status, detail=str(exc)) from exc
    if isinstance(exc, TransportError):
        raise HTTPException(status_code=504, detail=str(exc)) from exc
    raise HTTPException(status_code=500, detail=str(exc)) from exc


def _movies_payload(movies: list[Movie], page: int) -> dict[str, Any]:
    return {
        "page": page,
        "results": [movie.to_payload() for movie in movies],
    }


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/genres")
    async def list_genres() -> dict[str, list[str]]:
        client = get_tmdb_client(fastapi_app)
        return {"genres": client.list_genres()}

    @fastapi_app.get("/movies/discover")
    async def discover_movies(
        genres: list[str] = Query(default=[]),
        release_year_min: int | None = None,
        release_year_max: int | None = None,
        runtime_min: int | None = None,
        runtime_max: int | None = None,
        min_rating: float | None = None,
        include_adult: bool = False,
        sort_by: str = "popularity",
        page: int = 1,
    ) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        try:
            criteria = SearchCriteria.parse(
                {
                    "genres": genres,
                    "release_year_min": release_year_min,
                    "release_year_max": release_year_max,
                    "runtime_min": runtime_min,
                    "runtime_max": runtime_max,
                    "min_rating": min_rating,
                    "include_adult": include_adult,
                    "sort_by": sort_by,
                    "page": page,
                }
            )
            movies = await client.discover(criteria)
        except CatalogError as exc:
            _raise_http_error(exc)
        return _movies_payload(movies, criteria.page)

    @fastapi_app.get("/movies/search")
    async def search_movies(query: str = "", page: int = 1) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        try:
            movies = await client.search(query, page)
        except CatalogError as exc:
            _raise_http_error(exc)
        return _movies_payload(movies, page)

    @fastapi_app.get("/movies/{movie_id}")
    async def movie_details(movie_id: str) -> dict[str, Any]:
        client = get_tmdb_client(fastapi_app)
        try:
            movie = await client.get_details(movie_id)
        except CatalogError as exc:
            _raise_http_error(exc)
        return movie.to_payload()


app = create_app()
