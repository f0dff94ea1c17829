"""Tests for the pagination state machine."""

from __future__ import annotations

import httpx
import pytest
from conftest import make_page, make_result

from moviematch.config import Settings
from moviematch.models import SearchCriteria
from moviematch.services.genres import DEFAULT_GENRES, GenreCatalog
from moviematch.services.pagination import (
    PAGE_SIZE,
    CriteriaQuery,
    MovieBrowser,
    PaginationState,
    Phase,
    TextQuery,
)
from moviematch.services.tmdb import TMDBClient

BASE_URL = "https://api.example.com/3"


class FakeProvider:
    """Serves numbered pages and records every request it sees."""

    def __init__(self, page_sizes: dict[int, int] | None = None) -> None:
        self.page_sizes = page_sizes or {}
        self.requests: list[httpx.Request] = []
        self.fail_pages: set[int] = set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        page = int(request.url.params.get("page", "1"))
        if page in self.fail_pages:
            return httpx.Response(503, text="unavailable")
        count = self.page_sizes.get(page, PAGE_SIZE)
        return httpx.Response(200, json=make_page((page - 1) * 100 + 1, count))

    @property
    def pages(self) -> list[str]:
        return [request.url.params["page"] for request in self.requests]


def build_browser(http_client: httpx.AsyncClient) -> MovieBrowser:
    settings = Settings(_env_file=None, TMDB_API_KEY="test-key")
    catalog = GenreCatalog(genres=dict(DEFAULT_GENRES))
    return MovieBrowser(TMDBClient(settings, http_client, genre_catalog=catalog))


def test_initial_state_is_idle() -> None:
    state = PaginationState()

    assert state.phase is Phase.IDLE
    assert state.movies == ()
    assert state.loading is False
    assert state.error is None
    assert state.has_more is False
    assert state.last_query is None


@pytest.mark.anyio("asyncio")
async def test_discover_full_page_then_load_more_appends() -> None:
    provider = FakeProvider({1: 20, 2: 20})
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(provider), base_url=BASE_URL
    ) as http_client:
        browser = build_browser(http_client)

        await browser.discover(SearchCriteria(sort_by="rating"))
        assert browser.phase is Phase.LOADED
        assert len(browser.movies) == 20
        assert browser.has_more is True
        assert browser.current_page == 1
        assert browser.last_query == CriteriaQuery(SearchCriteria(sort_by="rating"))

        await browser.load_more()

    assert provider.pages == ["1", "2"]
    assert provider.requests[1].url.params["sort_by"] == "vote_average.desc"
    assert len(browser.movies) == 40
    assert browser.movies[20].id == "101"
    assert browser.current_page == 2
    assert browser.has_more is True


@pytest.mark.anyio("asyncio")
async def test_short_page_ends_pagination() -> None:
    provider = FakeProvider({1: 20, 2: 7})
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(provider), base_url=BASE_URL
    ) as http_client:
        browser = build_browser(http_client)
        await browser.discover()
        await browser.load_more()
        assert browser.has_more is False
        before = browser.state

        await browser.load_more()

    assert len(browser.movies) == 27
    assert provider.pages == ["1", "2"]
    assert browser.state == before


@pytest.mark.anyio("asyncio")
async def test_load_more_is_noop_when_idle() -> None:
    provider = FakeProvider()
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(provider), base_url=BASE_URL
    ) as http_client:
        browser = build_browser(http_client)
        await browser.load_more()

    assert provider.requests == []
    assert browser.state == PaginationState()


@pytest.mark.anyio("asyncio")
async def test_discover_ignores_requested_page() -> None:
    provider = FakeProvider({1: 3})
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(provider), base_url=BASE_URL
    ) as http_client:
        browser = build_browser(http_client)
        await browser.discover(SearchCriteria(page=5))

    assert provider.pages == ["1"]
    assert browser.has_more is False


@pytest.mark.anyio("asyncio")
async def test_search_replays_text_query_on_load_more() -> None:
    provider = FakeProvider({1: 20, 2: 1})
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(provider), base_url=BASE_URL
    ) as http_client:
        browser = build_browser(http_client)
        await browser.search("  alien ")
        await browser.load_more()

    assert browser.last_query == TextQuery("alien")
    assert [request.url.path for request in provider.requests] == [
        "/3/search/movie",
        "/3/search/movie",
    ]
    assert provider.requests[1].url.params["query"] == "alien"
    assert provider.requests[1].url.params["page"] == "2"
    assert len(browser.movies) == 21


@pytest.mark.anyio("asyncio")
async def test_blank_search_matches_reset_then_default_discover() -> None:
    first_provider = FakeProvider({1: 20})
    second_provider = FakeProvider({1: 20})
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(first_provider), base_url=BASE_URL
    ) as first_client, httpx.AsyncClient(
        transport=httpx.MockTransport(second_provider), base_url=BASE_URL
    ) as second_client:
        searched = build_browser(first_client)
        await searched.search("heat")
        await searched.search("   ")

        discovered = build_browser(second_client)
        discovered.reset()
        await discovered.discover(SearchCriteria(sort_by="popularity"))

    assert searched.state == discovered.state
    assert searched.last_query == CriteriaQuery(SearchCriteria())
    assert first_provider.requests[-1].url.path == "/3/discover/movie"


@pytest.mark.anyio("asyncio")
async def test_failed_discover_keeps_previous_movies() -> None:
    provider = FakeProvider({1: 20})
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(provider), base_url=BASE_URL
    ) as http_client:
        browser = build_browser(http_client)
        await browser.discover()
        previous = browser.movies
        provider.fail_pages.add(1)

        await browser.search("anything")

    assert browser.phase is Phase.ERRORED
    assert browser.loading is False
    assert browser.error == "TMDB API error: 503"
    assert browser.movies == previous
    assert browser.last_query == CriteriaQuery(SearchCriteria())


@pytest.mark.anyio("asyncio")
async def test_failed_load_more_keeps_movies_and_page() -> None:
    provider = FakeProvider({1: 20})
    provider.fail_pages.add(2)
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(provider), base_url=BASE_URL
    ) as http_client:
        browser = build_browser(http_client)
        await browser.discover()
        await browser.load_more()

        assert browser.phase is Phase.ERRORED
        assert len(browser.movies) == 20
        assert browser.current_page == 1
        assert browser.has_more is True

        provider.fail_pages.clear()
        await browser.load_more()

    assert browser.phase is Phase.LOADED
    assert browser.error is None
    assert len(browser.movies) == 40
    assert browser.current_page == 2


@pytest.mark.anyio("asyncio")
async def test_reset_clears_results_and_last_query() -> None:
    provider = FakeProvider({1: 20})
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(provider), base_url=BASE_URL
    ) as http_client:
        browser = build_browser(http_client)
        await browser.discover()
        browser.reset()

    assert browser.state == PaginationState()
    assert browser.phase is Phase.IDLE


@pytest.mark.anyio("asyncio")
async def test_get_details_returns_none_on_failure() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"status_message": "missing"})

    async with httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url=BASE_URL
    ) as http_client:
        browser = build_browser(http_client)
        movie = await browser.get_details("999999")

    assert movie is None
    assert browser.state == PaginationState()


@pytest.mark.anyio("asyncio")
async def test_load_genres_returns_sorted_names() -> None:
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(FakeProvider()), base_url=BASE_URL
    ) as http_client:
        browser = build_browser(http_client)
        genres = await browser.load_genres()

    assert genres[0] == "Action"
    assert genres == sorted(genres)
    assert len(genres) == 19


@pytest.mark.anyio("asyncio")
async def test_odd_genre_ids_do_not_end_pagination() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        payload = make_page(1, PAGE_SIZE)
        payload["results"][4] = make_result(5, genre_ids=[28, None])
        return httpx.Response(200, json=payload)

    async with httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url=BASE_URL
    ) as http_client:
        browser = build_browser(http_client)
        await browser.discover()

    assert len(browser.movies) == PAGE_SIZE
    assert browser.movies[4].genres == ("Action",)
    assert browser.has_more is True


@pytest.mark.anyio("asyncio")
async def test_skipped_entry_on_full_page_keeps_has_more() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        payload = make_page(1, PAGE_SIZE)
        del payload["results"][0]["id"]
        return httpx.Response(200, json=payload)

    async with httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url=BASE_URL
    ) as http_client:
        browser = build_browser(http_client)
        await browser.discover()

    assert len(browser.movies) == PAGE_SIZE - 1
    assert browser.has_more is True


@pytest.mark.anyio("asyncio")
async def test_load_more_replays_genres_from_first_request() -> None:
    provider = FakeProvider({1: 20, 2: 20})
    names = ["Action"]
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(provider), base_url=BASE_URL
    ) as http_client:
        browser = build_browser(http_client)
        await browser.discover(SearchCriteria(genres=names))
        names.append("Horror")
        await browser.load_more()

    first, second = provider.requests
    assert first.url.params["with_genres"] == "28"
    assert second.url.params["with_genres"] == first.url.params["with_genres"]


@pytest.mark.anyio("asyncio")
async def test_load_more_without_last_query_sends_nothing() -> None:
    provider = FakeProvider()
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(provider), base_url=BASE_URL
    ) as http_client:
        browser = build_browser(http_client)
        browser._state = PaginationState(has_more=True)
        await browser.load_more()

    assert provider.requests == []
    assert browser.state == PaginationState(has_more=True)
