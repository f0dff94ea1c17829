"""Translate search criteria into provider query parameters."""

from __future__ import annotations

import logging
from typing import Any

from ..config import Settings
from ..errors import InvalidCriteria
from ..models import SearchCriteria
from .genres import GenreCatalog

logger = logging.getLogger(__name__)

SORT_TOKENS: dict[str, str] = {
    "popularity": "popularity.desc",
    "rating": "vote_average.desc",
    "release_date": "release_date.desc",
    "revenue": "revenue.desc",
}


class CriteriaTranslator:
    """Builds ``/discover/movie`` and ``/search/movie`` query strings."""

    def __init__(self, settings: Settings, catalog: GenreCatalog):
        self._settings = settings
        self._catalog = catalog

    def _base_params(self, page: int) -> dict[str, Any]:
        return {
            "api_key": self._settings.tmdb_api_key,
            "language": self._settings.tmdb_language,
            "page": page,
        }

    async def build_discover_params(self, criteria: SearchCriteria) -> dict[str, Any]:
        """Return query parameters for a discovery request."""

        sort_token = SORT_TOKENS.get(criteria.sort_by)
        if sort_token is None:
            raise InvalidCriteria(f"Unsupported sort key: {criteria.sort_by!r}")

        params = self._base_params(criteria.page)
        params["include_adult"] = "true" if criteria.include_adult else "false"
        params["vote_count.gte"] = self._settings.tmdb_min_vote_count

        if criteria.genres:
            await self._catalog.ensure_loaded()
            genre_ids = self._catalog.resolve_names_to_ids(criteria.genres)
            if genre_ids:
                params["with_genres"] = ",".join(str(genre_id) for genre_id in genre_ids)
            else:
                logger.debug("No genre ids resolved for %s", criteria.genres)

        if criteria.release_year_min is not None:
            params["primary_release_date.gte"] = f"{criteria.release_year_min:04d}-01-01"
        if criteria.release_year_max is not None:
            params["primary_release_date.lte"] = f"{criteria.release_year_max:04d}-12-31"

        if criteria.runtime_min is not None:
            params["with_runtime.gte"] = criteria.runtime_min
        if criteria.runtime_max is not None:
            params["with_runtime.lte"] = criteria.runtime_max

        if criteria.min_rating is not None:
            params["vote_average.gte"] = criteria.min_rating

        params["sort_by"] = sort_token
        return params

    def build_search_params(self, text: str, page: int = 1) -> dict[str, Any]:
        """Return query parameters for a free-text title search."""

        query = (text or "").strip()
        if not query:
            raise InvalidCriteria("Search text must not be empty")
        if page < 1:
            raise InvalidCriteria("Page numbers start at 1")

        params = self._base_params(page)
        params["query"] = query
        params["include_adult"] = "false"
        return params
