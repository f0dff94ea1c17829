"""Convert provider movie records into :class:`~moviematch.models.Movie`."""

from __future__ import annotations

from ..models import (
    NO_SYNOPSIS,
    Movie,
    ProviderCredits,
    ProviderMovie,
    ProviderMovieDetails,
)
from ..utils import build_image_url, format_duration, parse_release_year, round_half_up
from .genres import GenreCatalog

POSTER_SIZE = "w500"
BACKDROP_SIZE = "w1280"
STARRING_LIMIT = 3
WRITER_JOBS: tuple[str, ...] = ("Screenplay", "Writer", "Story")
ADULT_RATING = "R"


def find_director(credits: ProviderCredits | None) -> str | None:
    if credits is None:
        return None
    for member in credits.crew:
        if member.job == "Director" and member.name:
            return member.name
    return None


def find_writer(credits: ProviderCredits | None) -> str | None:
    """Return the first credited writer, preferring screenplay credits."""

    if credits is None:
        return None
    for job in WRITER_JOBS:
        for member in credits.crew:
            if member.job == job and member.name:
                return member.name
    return None


def top_billed(credits: ProviderCredits | None, limit: int = STARRING_LIMIT) -> list[str] | None:
    """Return up to ``limit`` cast names in billing order, or ``None`` if no cast."""

    if credits is None:
        return None
    cast = [member for member in credits.cast if member.name]
    if not cast:
        return None
    # Entries without a billing order go last; sorted() keeps provider order for ties.
    cast = sorted(
        cast, key=lambda member: member.order if member.order is not None else float("inf")
    )
    return [member.name for member in cast[:limit] if member.name]


def _genre_ids(record: ProviderMovie) -> list[int] | None:
    if record.genre_ids is not None:
        return record.genre_ids
    if isinstance(record, ProviderMovieDetails) and record.genres:
        return [genre.id for genre in record.genres]
    return None


def normalize_movie(
    record: ProviderMovie,
    catalog: GenreCatalog,
    *,
    image_base_url: str,
    details: ProviderMovieDetails | None = None,
) -> Movie:
    """Build a :class:`Movie` from a listing record and optional detail record."""

    credits = details.credits if details is not None else None
    runtime = details.runtime if details is not None else None

    genre_ids = _genre_ids(record)
    if genre_ids is None and details is not None:
        genre_ids = _genre_ids(details)
    genres = catalog.names_of(genre_ids) if genre_ids is not None else None

    return Movie(
        id=str(record.id),
        title=record.title or record.original_title or "Untitled",
        synopsis=(record.overview or "").strip() or NO_SYNOPSIS,
        director=find_director(credits),
        writer=find_writer(credits),
        starring=top_billed(credits),
        rating=ADULT_RATING if record.adult else None,
        year=parse_release_year(record.release_date),
        duration=format_duration(runtime),
        imdb_score=round_half_up(record.vote_average),
        genres=genres,
        poster_url=build_image_url(image_base_url, POSTER_SIZE, record.poster_path),
        backdrop_url=build_image_url(image_base_url, BACKDROP_SIZE, record.backdrop_path),
    )
