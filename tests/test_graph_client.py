"""Tests for the content graph client."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from app.clients.graph_client import (
    FACETED_SEARCH_QUERY,
    GraphClient,
    GraphQueryError,
    facets_from_graph,
)
from app.clients.locale import to_graph_locale
from factories import make_article, make_experience


def graph_response(include_experiences: bool = True) -> dict:
    data = {
        "ArticlePage": {
            "total": 12,
            "items": [make_article("a1", score=3.0), None, make_article("a2", score=1.0)],
            "facets": {
                "Author": [{"name": "jane", "count": 7}, {"name": None, "count": 1}],
                "_metadata": {"types": [{"name": "ArticlePage", "count": 12}]},
            },
        }
    }
    if include_experiences:
        data["BlankExperience"] = {
            "total": 4,
            "items": [make_experience("e1", score=2.0)],
            "facets": {"_metadata": {"types": [{"name": "BlankExperience", "count": 4}]}},
        }
    return {"data": data}


def make_client(handler, max_retries: int = 1, single_key: str | None = "key-123") -> GraphClient:
    return GraphClient(
        gateway="https://graph.example.com/",
        single_key=single_key,
        max_retries=max_retries,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def search_kwargs(**overrides):
    kwargs = {
        "search_term": "pricing",
        "locale": "en",
        "domain": "https://example.com",
        "limit": 60,
        "article_order_by": {"_ranking": "RELEVANCE"},
        "experience_order_by": {"_ranking": "RELEVANCE"},
    }
    kwargs.update(overrides)
    return kwargs


class TestFacetedSearchRequest:
    """Shape of the outbound request."""

    @pytest.mark.asyncio
    async def test_request_payload(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = request.url
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=graph_response())

        async with make_client(handler) as client:
            await client.faceted_search(
                **search_kwargs(author_filters=[], type_filters=["ArticlePage"])
            )

        assert captured["url"].path == "/content/v2"
        assert captured["url"].params["auth"] == "key-123"
        assert captured["body"]["query"] == FACETED_SEARCH_QUERY
        variables = captured["body"]["variables"]
        assert variables["searchTerm"] == "pricing"
        assert variables["locale"] == ["en"]
        assert variables["offset"] == 0
        assert variables["limit"] == 60
        assert variables["authorFilters"] is None
        assert variables["typeFilters"] == ["ArticlePage"]
        assert variables["includeExperiences"] is True

    @pytest.mark.asyncio
    async def test_response_adapted_into_blocks(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=graph_response())

        async with make_client(handler) as client:
            result = await client.faceted_search(**search_kwargs(author_filters=["jane"]))

        assert result.articles.total == 12
        assert [item["_metadata"]["key"] for item in result.articles.items] == ["a1", "a2"]
        assert result.experiences.total == 4
        assert len(result.experiences.items) == 1

        authors = result.articles.facets[0]
        assert authors.name == "authors"
        assert [(v.key, v.doc_count, v.is_selected) for v in authors.values] == [("jane", 7, True)]

    @pytest.mark.asyncio
    async def test_experiences_skipped_when_excluded(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content)["variables"]["includeExperiences"] is False
            return httpx.Response(200, json=graph_response(include_experiences=False))

        async with make_client(handler) as client:
            result = await client.faceted_search(**search_kwargs(include_experiences=False))

        assert result.experiences.items == []
        assert result.experiences.total == 0

    @pytest.mark.asyncio
    async def test_null_blocks_become_empty(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": {"ArticlePage": None, "BlankExperience": None}})

        async with make_client(handler) as client:
            result = await client.faceted_search(**search_kwargs())

        assert result.articles.total == 0
        assert result.articles.facets == []


class TestFailures:
    """Backend failures surface as GraphQueryError."""

    @pytest.mark.asyncio
    async def test_graphql_errors(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"errors": [{"message": "Unknown field"}, {"message": "Bad arg"}]}
            )

        async with make_client(handler) as client:
            with pytest.raises(GraphQueryError, match="Unknown field, Bad arg"):
                await client.faceted_search(**search_kwargs())

    @pytest.mark.asyncio
    async def test_non_2xx_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="invalid key")

        async with make_client(handler) as client:
            with pytest.raises(GraphQueryError) as exc_info:
                await client.faceted_search(**search_kwargs())

        assert exc_info.value.status_code == 401
        assert "invalid key" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_data(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": None})

        async with make_client(handler) as client:
            with pytest.raises(GraphQueryError, match="no data"):
                await client.faceted_search(**search_kwargs())

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        async with make_client(handler) as client:
            with pytest.raises(GraphQueryError, match="Invalid JSON"):
                await client.faceted_search(**search_kwargs())

    @pytest.mark.asyncio
    async def test_missing_single_key(self):
        handler_calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            handler_calls.append(request)
            return httpx.Response(200, json=graph_response())

        async with make_client(handler, single_key=None) as client:
            with pytest.raises(GraphQueryError, match="not configured"):
                await client.faceted_search(**search_kwargs())

        assert handler_calls == []

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(GraphQueryError, match="ConnectError"):
                await client.faceted_search(**search_kwargs())


class TestRetries:
    """Exponential backoff for retryable failures."""

    @pytest.mark.asyncio
    async def test_server_error_retried_then_succeeds(self):
        responses = [httpx.Response(503, text="busy"), httpx.Response(200, json=graph_response())]

        def handler(request: httpx.Request) -> httpx.Response:
            return responses.pop(0)

        with patch("app.clients.graph_client.asyncio.sleep", new=AsyncMock()) as sleep:
            async with make_client(handler, max_retries=3) as client:
                result = await client.faceted_search(**search_kwargs())

        assert result.articles.total == 12
        sleep.assert_awaited_once_with(1)

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(502, text="bad gateway")

        with patch("app.clients.graph_client.asyncio.sleep", new=AsyncMock()) as sleep:
            async with make_client(handler, max_retries=3) as client:
                with pytest.raises(GraphQueryError, match="502"):
                    await client.faceted_search(**search_kwargs())

        assert len(calls) == 3
        assert [call.args[0] for call in sleep.await_args_list] == [1, 2]

    @pytest.mark.asyncio
    async def test_graphql_errors_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"errors": [{"message": "nope"}]})

        with patch("app.clients.graph_client.asyncio.sleep", new=AsyncMock()):
            async with make_client(handler, max_retries=3) as client:
                with pytest.raises(GraphQueryError):
                    await client.faceted_search(**search_kwargs())

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_single_attempt_by_default(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500, text="boom")

        async with make_client(handler) as client:
            with pytest.raises(GraphQueryError):
                await client.faceted_search(**search_kwargs())

        assert len(calls) == 1


class TestFacetAdapter:
    """Graph facet blocks adapted into Facet models."""

    def test_authors_and_types(self):
        facets = facets_from_graph(
            {
                "Author": [{"name": "jane", "count": 3}, {"name": "joe", "count": None}],
                "_metadata": {"types": [{"name": "ArticlePage", "count": 5}]},
            },
            total=5,
            selected={"types": ["ArticlePage"]},
        )

        assert [facet.name for facet in facets] == ["authors", "types"]
        authors, types = facets
        assert authors.doc_count == 5
        assert authors.config.parameter_name == "authors[]"
        assert authors.config.is_multi_value is True
        assert [(v.key, v.label, v.doc_count) for v in authors.values] == [
            ("jane", "jane", 3),
            ("joe", "joe", 0),
        ]
        assert types.values[0].is_selected is True

    def test_missing_facets(self):
        assert facets_from_graph(None) == []
        assert [f.name for f in facets_from_graph({"_metadata": {"types": []}})] == ["types"]


class TestLocale:
    """URL locale to graph locale conversion."""

    @pytest.mark.parametrize(
        ("locale", "expected"),
        [
            ("en", "en"),
            ("EN", "en"),
            ("fr-ca", "fr_CA"),
            ("pt-BR", "pt_BR"),
            ("zh-Hans-HK", "zh_Hans_HK"),
            ("nb_no", "nb_NO"),
        ],
    )
    def test_to_graph_locale(self, locale, expected):
        assert to_graph_locale(locale) == expected
