"""Pydantic models for provider payloads and the canonical movie entity."""

from __future__ import annotations

from typing import Any, Literal, Mapping

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .errors import InvalidCriteria

SortKey = Literal["popularity", "rating", "release_date", "revenue"]

NO_SYNOPSIS = "No synopsis available."


class Movie(BaseModel):
    """Canonical movie entity handed to presentation code."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    synopsis: str = NO_SYNOPSIS
    director: str | None = None
    writer: str | None = None
    starring: tuple[str, ...] | None = None
    # Derived from the provider's adult flag only; not a certification.
    rating: str | None = None
    year: int | None = None
    duration: str | None = None
    imdb_score: float | None = Field(default=None, alias="imdbScore")
    genres: tuple[str, ...] | None = None
    poster_url: str | None = Field(default=None, alias="posterUrl")
    backdrop_url: str | None = Field(default=None, alias="backdropUrl")

    def to_payload(self) -> dict[str, Any]:
        """Return the camelCase JSON payload, omitting absent fields."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SearchCriteria(BaseModel):
    """Filter and sort options for a discovery request."""

    model_config = ConfigDict(frozen=True)

    genres: tuple[str, ...] = ()
    release_year_min: int | None = None
    release_year_max: int | None = None
    runtime_min: int | None = Field(default=None, ge=0)
    runtime_max: int | None = Field(default=None, ge=0)
    min_rating: float | None = Field(default=None, ge=0, le=10)
    include_adult: bool = False
    sort_by: SortKey = "popularity"
    page: int = Field(default=1, ge=1)

    @field_validator("genres", mode="before")
    @classmethod
    def _split_genres(cls, value: object) -> object:
        """Accept comma separated strings as well as lists of names."""

        if value is None:
            return ()
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            return [str(name).strip() for name in value if str(name).strip()]
        return value

    @model_validator(mode="after")
    def _check_ranges(self) -> "SearchCriteria":
        if (
            self.release_year_min is not None
            and self.release_year_max is not None
            and self.release_year_min > self.release_year_max
        ):
            raise ValueError("release_year_min must not exceed release_year_max")
        if (
            self.runtime_min is not None
            and self.runtime_max is not None
            and self.runtime_min > self.runtime_max
        ):
            raise ValueError("runtime_min must not exceed runtime_max")
        return self

    @classmethod
    def parse(cls, data: Mapping[str, Any]) -> "SearchCriteria":
        """Validate caller input, raising :class:`InvalidCriteria` on failure."""

        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise InvalidCriteria(str(exc)) from exc

    def with_page(self, page: int) -> "SearchCriteria":
        return self.model_copy(update={"page": page})


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _only_mappings(value: object) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, dict)]


def _blank_wrong_types(
    value: object,
    *,
    text: tuple[str, ...] = (),
    integers: tuple[str, ...] = (),
    numbers: tuple[str, ...] = (),
) -> object:
    """Replace badly typed optional fields with ``None`` instead of failing."""

    if not isinstance(value, dict):
        return value
    cleaned = dict(value)
    for key in text:
        if key in cleaned and not isinstance(cleaned[key], str):
            cleaned[key] = None
    for key in integers:
        if key in cleaned and not _is_int(cleaned[key]):
            cleaned[key] = None
    for key in numbers:
        if key in cleaned and not (
            _is_int(cleaned[key]) or isinstance(cleaned[key], float)
        ):
            cleaned[key] = None
    return cleaned


class ProviderGenre(BaseModel):
    id: int
    name: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _tolerate_fields(cls, value: object) -> object:
        return _blank_wrong_types(value, text=("name",))


class ProviderCastMember(BaseModel):
    name: str | None = None
    character: str | None = None
    order: int | None = None

    @model_validator(mode="before")
    @classmethod
    def _tolerate_fields(cls, value: object) -> object:
        return _blank_wrong_types(
            value, text=("name", "character"), integers=("order",)
        )


class ProviderCrewMember(BaseModel):
    name: str | None = None
    job: str | None = None
    department: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _tolerate_fields(cls, value: object) -> object:
        return _blank_wrong_types(value, text=("name", "job", "department"))


class ProviderCredits(BaseModel):
    """Cast and crew lists from the provider's credits endpoint."""

    cast: list[ProviderCastMember] = Field(default_factory=list)
    crew: list[ProviderCrewMember] = Field(default_factory=list)

    @field_validator("cast", "crew", mode="before")
    @classmethod
    def _drop_malformed_entries(cls, value: object) -> object:
        return _only_mappings(value)


class ProviderMovie(BaseModel):
    """A movie entry as returned by discovery and search listings.

    Only ``id`` is required. Any other field with an unexpected type is read
    as absent so one odd value never costs the whole record.
    """

    id: int | str
    title: str | None = None
    original_title: str | None = None
    overview: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    release_date: str | None = None
    vote_average: float | None = None
    vote_count: int | None = None
    genre_ids: list[int] | None = None
    adult: bool = False
    popularity: float | None = None

    @model_validator(mode="before")
    @classmethod
    def _tolerate_fields(cls, value: object) -> object:
        return _blank_wrong_types(
            value,
            text=(
                "title",
                "original_title",
                "overview",
                "poster_path",
                "backdrop_path",
                "release_date",
            ),
            integers=("vote_count",),
            numbers=("vote_average", "popularity"),
        )

    @field_validator("genre_ids", mode="before")
    @classmethod
    def _drop_malformed_genre_ids(cls, value: object) -> object:
        if value is None:
            return None
        if not isinstance(value, list):
            return None
        return [genre_id for genre_id in value if _is_int(genre_id)]

    @field_validator("adult", mode="before")
    @classmethod
    def _non_boolean_adult_is_false(cls, value: object) -> object:
        return value if isinstance(value, bool) else False


class ProviderMovieDetails(ProviderMovie):
    """A single-movie detail record, optionally carrying merged credits."""

    runtime: int | None = None
    genres: list[ProviderGenre] = Field(default_factory=list)
    credits: ProviderCredits | None = None

    @field_validator("runtime", mode="before")
    @classmethod
    def _non_integer_runtime_is_unknown(cls, value: object) -> object:
        return value if _is_int(value) else None

    @field_validator("genres", mode="before")
    @classmethod
    def _drop_malformed_genres(cls, value: object) -> object:
        return [entry for entry in _only_mappings(value) if _is_int(entry.get("id"))]

    @field_validator("credits", mode="before")
    @classmethod
    def _non_mapping_credits_are_absent(cls, value: object) -> object:
        return value if isinstance(value, (dict, ProviderCredits)) else None
