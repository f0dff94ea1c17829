"""Exception types raised by the movie catalog client."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for every failure surfaced by the catalog client."""


class MissingCredential(CatalogError, RuntimeError):
    """Raised at construction time when no provider API key is configured."""


class TransportError(CatalogError):
    """The provider could not be reached; no HTTP response was received."""


class ProviderError(CatalogError):
    """The provider answered with a non-success status or an unusable body."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        path: str | None = None,
        body_snippet: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.path = path
        self.body_snippet = body_snippet


class InvalidCriteria(CatalogError, ValueError):
    """Caller supplied search input that cannot be translated into a query."""
