"""Tests for the Exa and Sanity HTTP clients against a local aiohttp server."""

from __future__ import annotations

import json
from dataclasses import replace

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer as HttpServer

from config import Config
from database import StoreError
from enricher import to_draft
from models.classification import ClassifiedCandidate
from sanity import EXISTS_BY_SLUG_QUERY, EXISTS_BY_URL_QUERY, SanityStore
from tests.fakes import make_candidate, make_result
from tools.search import ExaSearchClient, SearchError, SearchQuery

QUERY = SearchQuery(
    query="AI bubble OR AI winter",
    category="news",
    start_published_date="2024-06-14T09:00:00Z",
    num_results=10,
    include_domains=["ft.com"],
)


def base_url(server: HttpServer) -> str:
    return str(server.make_url("")).rstrip("/")


def exa_app(seen: list[dict], *, status: int = 200, body: dict | None = None) -> web.Application:
    async def search(request: web.Request) -> web.Response:
        seen.append({"api_key": request.headers.get("x-api-key"), "json": await request.json()})
        return web.json_response(body if body is not None else {"results": []}, status=status)

    app = web.Application()
    app.router.add_post("/search", search)
    return app


class TestExaSearchClient:

    async def test_parses_results_and_sends_query(self, config) -> None:
        seen: list[dict] = []
        body = {"results": [
            {"url": "https://www.ft.com/content/1", "title": "Bubble", "publishedDate": "2024-06-15",
             "author": "FT View", "text": "The AI bubble", "score": 0.3},
            {"title": "no url, dropped"},
            {"url": "https://www.ft.com/content/2"},
        ]}
        async with HttpServer(exa_app(seen, body=body)) as server:
            client = ExaSearchClient(replace(config, exa_base_url=base_url(server)))
            hits = await client.search(QUERY)

        assert [h.url for h in hits] == ["https://www.ft.com/content/1", "https://www.ft.com/content/2"]
        assert hits[0].published_date == "2024-06-15"
        assert hits[0].author == "FT View"
        assert hits[0].score == 0.3
        assert hits[1].title is None

        (request,) = seen
        assert request["api_key"] == "exa-test"
        assert request["json"] == QUERY.to_payload()
        assert request["json"]["includeDomains"] == ["ft.com"]

    @pytest.mark.parametrize(
        "status, retryable",
        [(401, False), (403, False), (400, False), (404, False), (429, True), (500, True), (503, True)],
    )
    async def test_status_maps_to_retryability(self, config, status: int, retryable: bool) -> None:
        async with HttpServer(exa_app([], status=status, body={"message": "nope"})) as server:
            client = ExaSearchClient(replace(config, exa_base_url=base_url(server)))
            with pytest.raises(SearchError) as exc_info:
                await client.search(QUERY)

        assert exc_info.value.retryable is retryable

    async def test_error_payload_is_not_retryable(self, config) -> None:
        async with HttpServer(exa_app([], body={"error": "invalid category"})) as server:
            client = ExaSearchClient(replace(config, exa_base_url=base_url(server)))
            with pytest.raises(SearchError, match="Exa error: invalid category") as exc_info:
                await client.search(QUERY)

        assert exc_info.value.retryable is False

    async def test_missing_key_fails_without_request(self, config) -> None:
        seen: list[dict] = []
        async with HttpServer(exa_app(seen)) as server:
            client = ExaSearchClient(replace(config, exa_api_key="", exa_base_url=base_url(server)))
            with pytest.raises(SearchError) as exc_info:
                await client.search(QUERY)

        assert exc_info.value.retryable is False
        assert seen == []


def _record(request: web.Request, method: str) -> dict:
    return {
        "method": method,
        "dataset": request.match_info["dataset"],
        "auth": request.headers.get("Authorization"),
        "query": dict(request.query),
    }


def sanity_app(seen: list[dict], *, count: int = 0, mutate_status: int = 200,
               mutate_body: dict | None = None, query_status: int = 200) -> web.Application:
    async def query(request: web.Request) -> web.Response:
        seen.append(_record(request, "GET"))
        if query_status != 200:
            return web.Response(status=query_status, text="query exploded")
        return web.json_response({"result": count, "ms": 1})

    async def mutate(request: web.Request) -> web.Response:
        seen.append(_record(request, "POST") | {"json": await request.json()})
        if mutate_status != 200:
            return web.Response(status=mutate_status, text="mutation rejected")
        body = mutate_body if mutate_body is not None else {
            "transactionId": "tx1", "results": [{"id": "drafts.abc", "operation": "create"}],
        }
        return web.json_response(body)

    app = web.Application()
    app.router.add_get("/query/{dataset}", query)
    app.router.add_post("/mutate/{dataset}", mutate)
    return app


def sanity_store(server: HttpServer) -> SanityStore:
    config = Config(sanity_project_id="abc123", sanity_write_token="tok", request_timeout=5)
    return SanityStore(config, base_url=base_url(server))


def draft():
    classified = ClassifiedCandidate(candidate=make_candidate(), result=make_result())
    return to_draft(classified, "2024-06-16T09:00:00.000Z")


class TestSanityStoreHttp:

    async def test_exists_by_url_sends_json_quoted_variable(self) -> None:
        seen: list[dict] = []
        url = 'https://www.ft.com/content/1?a=b&c="d"'
        async with HttpServer(sanity_app(seen, count=1)) as server:
            assert await sanity_store(server).exists_by_url(url) is True

        (request,) = seen
        assert request["dataset"] == "production"
        assert request["query"]["query"] == EXISTS_BY_URL_QUERY
        assert request["query"]["$url"] == json.dumps(url)
        assert request["auth"] == "Bearer tok"

    async def test_exists_by_url_zero_count(self) -> None:
        async with HttpServer(sanity_app([], count=0)) as server:
            assert await sanity_store(server).exists_by_url("https://www.ft.com/content/9") is False

    async def test_exists_by_slug_query(self) -> None:
        seen: list[dict] = []
        async with HttpServer(sanity_app(seen, count=2)) as server:
            assert await sanity_store(server).exists_by_slug("llms-are-a-dead-end-20240615") is True

        assert seen[0]["query"]["query"] == EXISTS_BY_SLUG_QUERY
        assert seen[0]["query"]["$slug"] == '"llms-are-a-dead-end-20240615"'

    async def test_query_error_raises_store_error(self) -> None:
        async with HttpServer(sanity_app([], query_status=500)) as server:
            with pytest.raises(StoreError, match="Sanity HTTP 500: query exploded"):
                await sanity_store(server).exists_by_url("https://www.ft.com/content/1")

    async def test_create_posts_mutation_and_returns_id(self) -> None:
        seen: list[dict] = []
        d = draft()
        async with HttpServer(sanity_app(seen)) as server:
            doc_id = await sanity_store(server).create(d)

        assert doc_id == "drafts.abc"
        (request,) = seen
        assert request["method"] == "POST"
        assert request["query"] == {"returnIds": "true"}
        assert request["json"] == {"mutations": [{"create": d.to_document()}]}
        assert request["auth"] == "Bearer tok"

    async def test_create_without_results_raises(self) -> None:
        async with HttpServer(sanity_app([], mutate_body={"transactionId": "tx1", "results": []})) as server:
            with pytest.raises(StoreError, match="no document id"):
                await sanity_store(server).create(draft())

    async def test_create_rejected_raises(self) -> None:
        async with HttpServer(sanity_app([], mutate_status=409)) as server:
            with pytest.raises(StoreError, match="Sanity HTTP 409"):
                await sanity_store(server).create(draft())

    async def test_connection_failure_raises_store_error(self) -> None:
        async with HttpServer(sanity_app([])) as server:
            store = sanity_store(server)
        # server is closed now
        with pytest.raises(StoreError, match="Sanity request failed"):
            await store.exists_by_url("https://www.ft.com/content/1")
