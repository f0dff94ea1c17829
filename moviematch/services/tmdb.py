"""Client for discovering, searching and describing movies on TMDB."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Iterable
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..errors import MissingCredential, ProviderError, TransportError
from ..models import Movie, ProviderMovie, ProviderMovieDetails, SearchCriteria
from .criteria import CriteriaTranslator
from .genres import GenreCatalog
from .normalizer import normalize_movie

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MoviePage:
    """Normalized movies plus the number of entries the provider sent.

    ``result_count`` includes entries that were skipped as malformed, so
    callers can tell a full provider page from a short one.
    """

    movies: list[Movie]
    result_count: int


class TMDBClient:
    """Orchestrates provider calls and owns the genre catalog lifecycle.

    The HTTP client is supplied by the caller and must have its ``base_url``
    set to the TMDB API root. Nothing is cached beyond the genre list and no
    request is retried.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        genre_catalog: GenreCatalog | None = None,
    ):
        if not settings.tmdb_api_key:
            raise MissingCredential(
                "TMDB API key is required when initialising TMDBClient"
            )
        self._settings = settings
        self._client = http_client
        if genre_catalog is None:
            genre_catalog = GenreCatalog(loader=self._fetch_genres)
        elif not genre_catalog.has_loader:
            genre_catalog.set_loader(self._fetch_genres)
        self._genres = genre_catalog
        self._translator = CriteriaTranslator(settings, genre_catalog)

    @property
    def genre_catalog(self) -> GenreCatalog:
        return self._genres

    @property
    def translator(self) -> CriteriaTranslator:
        return self._translator

    async def initialize(self) -> None:
        """Load the genre catalog ahead of the first request."""

        await self._genres.ensure_loaded()

    async def refresh_genres(self) -> None:
        await self._genres.refresh()

    def list_genres(self) -> list[str]:
        """Return known genre names; empty until the catalog has been loaded."""

        return self._genres.all_names()

    async def discover(self, criteria: SearchCriteria | None = None) -> list[Movie]:
        """Return one page of movies matching ``criteria``."""

        return (await self.discover_page(criteria)).movies

    async def discover_page(self, criteria: SearchCriteria | None = None) -> MoviePage:
        criteria = criteria or SearchCriteria()
        await self._genres.ensure_loaded()
        params = await self._translator.build_discover_params(criteria)
        payload = await self._get_json("/discover/movie", params)
        return self._normalize_results(payload)

    async def search(self, text: str, page: int = 1) -> list[Movie]:
        """Return one page of movies whose title matches ``text``."""

        return (await self.search_page(text, page)).movies

    async def search_page(self, text: str, page: int = 1) -> MoviePage:
        params = self._translator.build_search_params(text, page)
        await self._genres.ensure_loaded()
        payload = await self._get_json("/search/movie", params)
        return self._normalize_results(payload)

    async def get_details(self, movie_id: str) -> Movie:
        """Fetch a movie with runtime and credits filled in.

        The detail and credits records are requested concurrently; if either
        request fails the whole call fails.
        """

        await self._genres.ensure_loaded()
        path = f"/movie/{quote(str(movie_id), safe='')}"
        base_params = {"api_key": self._settings.tmdb_api_key}
        detail_payload, credits_payload = await asyncio.gather(
            self._get_json(
                path,
                {**base_params, "language": self._settings.tmdb_language},
            ),
            self._get_json(f"{path}/credits", base_params),
        )

        merged = {**detail_payload, "credits": credits_payload}
        try:
            details = ProviderMovieDetails.model_validate(merged)
        except ValidationError as exc:
            raise ProviderError(
                f"TMDB returned an unreadable record for movie {movie_id}",
                status_code=200,
                path=path,
            ) from exc

        return normalize_movie(
            details,
            self._genres,
            image_base_url=self._settings.tmdb_image_base_url,
            details=details,
        )

    async def _fetch_genres(self) -> Iterable[tuple[int, str]]:
        payload = await self._get_json(
            "/genre/movie/list",
            {
                "api_key": self._settings.tmdb_api_key,
                "language": self._settings.tmdb_language,
            },
        )
        genres = payload.get("genres")
        if not isinstance(genres, list):
            raise ValueError("Genre list payload is missing 'genres'")
        return [
            (int(entry["id"]), str(entry["name"]))
            for entry in genres
            if isinstance(entry, dict) and entry.get("id") is not None and entry.get("name")
        ]

    async def _get_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            logger.warning("TMDB request to %s failed: %s", path, exc)
            raise TransportError(f"TMDB request to {path} failed: {exc}") from exc

        if not response.is_success:
            logger.warning(
                "TMDB request to %s returned %s: %s",
                path,
                response.status_code,
                response.text[:200],
            )
            raise ProviderError(
                f"TMDB API error: {response.status_code}",
                status_code=response.status_code,
                path=path,
                body_snippet=response.text[:400],
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(
                "TMDB returned a non-JSON response",
                status_code=response.status_code,
                path=path,
                body_snippet=response.text[:400],
            ) from exc
        if not isinstance(payload, dict):
            raise ProviderError(
                "TMDB returned an unexpected JSON shape",
                status_code=response.status_code,
                path=path,
            )
        return payload

    def _normalize_results(self, payload: dict[str, Any]) -> MoviePage:
        results = payload.get("results") or []
        if not isinstance(results, list):
            return MoviePage(movies=[], result_count=0)

        movies: list[Movie] = []
        for entry in results:
            if not isinstance(entry, dict):
                continue
            try:
                record = ProviderMovie.model_validate(entry)
            except ValidationError:
                logger.debug("Skipping malformed TMDB result: %s", entry.get("id"))
                continue
            movies.append(
                normalize_movie(
                    record,
                    self._genres,
                    image_base_url=self._settings.tmdb_image_base_url,
                )
            )
        return MoviePage(movies=movies, result_count=len(results))
