"""MovieMatch: a TMDB-backed movie catalog client.

The client, genre catalog and pagination state machine live in
``moviematch.services``. The FastAPI app serving them over HTTP is
imported lazily, so using the client does not build a web app.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = ["app", "create_app"]


def __getattr__(name: str) -> Any:
    if name in __all__:
        module = import_module("moviematch.main")
        return getattr(module, name)
    raise AttributeError(f"module 'moviematch' has no attribute {name}")
