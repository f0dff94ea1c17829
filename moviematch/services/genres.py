"""Lazily populated mapping between provider genre ids and display names."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Mapping

logger = logging.getLogger(__name__)

GenreLoader = Callable[[], Awaitable[Iterable[tuple[int, str]]]]

DEFAULT_GENRES: tuple[tuple[int, str], ...] = (
    (28, "Action"),
    (12, "Adventure"),
    (16, "Animation"),
    (35, "Comedy"),
    (80, "Crime"),
    (99, "Documentary"),
    (18, "Drama"),
    (10751, "Family"),
    (14, "Fantasy"),
    (36, "History"),
    (27, "Horror"),
    (10402, "Music"),
    (9648, "Mystery"),
    (10749, "Romance"),
    (878, "Science Fiction"),
    (10770, "TV Movie"),
    (53, "Thriller"),
    (10752, "War"),
    (37, "Western"),
)


class GenreCatalog:
    """Bidirectional genre lookup owned by a single catalog client.

    The mapping starts empty and is populated on the first call to
    :meth:`ensure_loaded`. A successful load replaces it with the provider's
    list; any failure replaces it with :data:`DEFAULT_GENRES`. Lookups never
    raise for unknown names or ids, they simply drop them.
    """

    def __init__(
        self,
        loader: GenreLoader | None = None,
        genres: Mapping[int, str] | None = None,
    ) -> None:
        self._loader = loader
        self._genres: dict[int, str] = dict(genres or {})
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._genres)

    def __contains__(self, genre_id: object) -> bool:
        return genre_id in self._genres

    @property
    def is_loaded(self) -> bool:
        return bool(self._genres)

    @property
    def has_loader(self) -> bool:
        return self._loader is not None

    def set_loader(self, loader: GenreLoader) -> None:
        self._loader = loader

    async def ensure_loaded(self) -> None:
        """Populate the mapping once; fall back to the default table on failure."""

        if self._genres:
            return
        async with self._lock:
            if self._genres:
                return
            self._genres = await self._load()

    async def refresh(self) -> None:
        """Discard the current mapping and load it again."""

        async with self._lock:
            self._genres = await self._load()

    async def _load(self) -> dict[int, str]:
        if self._loader is None:
            logger.info("No genre loader configured, using default genre table")
            return dict(DEFAULT_GENRES)

        try:
            pairs = await self._loader()
            mapping = {int(genre_id): str(name) for genre_id, name in pairs}
        except Exception as exc:
            logger.warning(
                "Failed to load movie genres (%s), using default genre table", exc
            )
            return dict(DEFAULT_GENRES)

        if not mapping:
            logger.warning("Provider returned no genres, using default genre table")
            return dict(DEFAULT_GENRES)
        return mapping

    def resolve_names_to_ids(self, names: Iterable[str]) -> list[int]:
        """Return ids for the given names, matched case-insensitively."""

        index = {name.casefold(): genre_id for genre_id, name in self._genres.items()}
        resolved: list[int] = []
        for name in names:
            genre_id = index.get(str(name).strip().casefold())
            if genre_id is not None and genre_id not in resolved:
                resolved.append(genre_id)
        return resolved

    def names_of(self, ids: Iterable[int]) -> list[str]:
        """Return display names for ``ids`` in input order, skipping unknowns."""

        names: list[str] = []
        for genre_id in ids:
            name = self._genres.get(genre_id)
            if name is not None and name not in names:
                names.append(name)
        return names

    def all_names(self) -> list[str]:
        """Return every known genre name, sorted for filter menus."""

        return sorted(self._genres.values())
