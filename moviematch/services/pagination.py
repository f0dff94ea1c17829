"""Pagination state machine driving discover, search and load-more flows."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum

from ..errors import CatalogError
from ..models import Movie, SearchCriteria
from .tmdb import MoviePage, TMDBClient

logger = logging.getLogger(__name__)

PAGE_SIZE = 20


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


@dataclass(frozen=True, slots=True)
class CriteriaQuery:
    """A discovery request remembered for continuation."""

    criteria: SearchCriteria


@dataclass(frozen=True, slots=True)
class TextQuery:
    """A title search remembered for continuation."""

    text: str


LastQuery = CriteriaQuery | TextQuery | None


@dataclass(frozen=True, slots=True)
class PaginationState:
    """Snapshot of everything a presentation layer needs to render a list."""

    movies: tuple[Movie, ...] = ()
    loading: bool = False
    error: str | None = None
    has_more: bool = False
    current_page: int = 1
    last_query: LastQuery = None
    phase: Phase = Phase.IDLE


class MovieBrowser:
    """Tracks loading, error and result state across paged requests.

    One caller drives a browser at a time: each operation should be awaited
    before the next is issued. Overlapping calls are not serialized and the
    last one to finish wins.
    """

    def __init__(self, client: TMDBClient):
        self._client = client
        self._state = PaginationState()

    @property
    def state(self) -> PaginationState:
        return self._state

    @property
    def movies(self) -> list[Movie]:
        return list(self._state.movies)

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def has_more(self) -> bool:
        return self._state.has_more

    @property
    def current_page(self) -> int:
        return self._state.current_page

    @property
    def last_query(self) -> LastQuery:
        return self._state.last_query

    @property
    def phase(self) -> Phase:
        return self._state.phase

    async def discover(self, criteria: SearchCriteria | None = None) -> None:
        """Replace the current results with the first page for ``criteria``."""

        criteria = (criteria or SearchCriteria()).with_page(1)
        await self._load_first_page(CriteriaQuery(criteria))

    async def search(self, text: str) -> None:
        """Replace the current results with the first page of a title search.

        Blank text resets the browser and falls back to a default discovery.
        """

        query = (text or "").strip()
        if not query:
            self.reset()
            await self.discover(SearchCriteria())
            return
        await self._load_first_page(TextQuery(query))

    async def load_more(self) -> None:
        """Append the next page of the last query; no-op when nothing is left."""

        state = self._state
        # has_more is only ever set together with a last_query.
        if state.loading or not state.has_more or state.last_query is None:
            return

        next_page = state.current_page + 1
        self._state = replace(state, loading=True, error=None, phase=Phase.LOADING)
        try:
            result = await self._fetch(state.last_query, next_page)
        except CatalogError as exc:
            logger.warning("Failed to load page %s: %s", next_page, exc)
            self._state = replace(
                self._state,
                loading=False,
                error=str(exc) or "Failed to load more movies",
                phase=Phase.ERRORED,
            )
            return

        self._state = replace(
            self._state,
            movies=self._state.movies + tuple(result.movies),
            loading=False,
            has_more=result.result_count == PAGE_SIZE,
            current_page=next_page,
            phase=Phase.LOADED,
        )

    def reset(self) -> None:
        self._state = PaginationState()

    async def get_details(self, movie_id: str) -> Movie | None:
        """Return a fully populated movie, or ``None`` if it could not be fetched."""

        try:
            return await self._client.get_details(movie_id)
        except CatalogError as exc:
            logger.warning("Failed to get movie details for %s: %s", movie_id, exc)
            return None

    async def load_genres(self) -> list[str]:
        await self._client.initialize()
        return self._client.list_genres()

    def list_genres(self) -> list[str]:
        return self._client.list_genres()

    async def _load_first_page(self, query: CriteriaQuery | TextQuery) -> None:
        self._state = replace(
            self._state, loading=True, error=None, phase=Phase.LOADING
        )
        try:
            result = await self._fetch(query, 1)
        except CatalogError as exc:
            logger.warning("Failed to load movies: %s", exc)
            self._state = replace(
                self._state,
                loading=False,
                error=str(exc) or "Failed to load movies",
                phase=Phase.ERRORED,
            )
            return

        self._state = PaginationState(
            movies=tuple(result.movies),
            loading=False,
            error=None,
            has_more=result.result_count == PAGE_SIZE,
            current_page=1,
            last_query=query,
            phase=Phase.LOADED,
        )

    async def _fetch(self, query: CriteriaQuery | TextQuery, page: int) -> MoviePage:
        if isinstance(query, TextQuery):
            return await self._client.search_page(query.text, page)
        return await self._client.discover_page(query.criteria.with_page(page))
