import asyncio
import json

import httpx
import pytest

from domains.finance.config import RetrieverSettings
from domains.finance.retriever import VectorStoreClient, parse_search_results
from shared.errors import ErrorKind, RetrieverError

SEARCH_URL = "https://vectors.example.test/v1/vector_stores/vs_123/search"

SEARCH_PAYLOAD = {
    "object": "vector_store.search_results.page",
    "data": [
        {
            "file_id": "file-abc",
            "filename": "acme-annual-report.pdf",
            "score": 0.91,
            "attributes": {"year": 2025},
            "content": [{"type": "text", "text": "Subscription revenue reached $15M."}],
        }
    ],
}


def _client(handler, api_key: str | None = "sk-test", timeout: float = 5.0) -> VectorStoreClient:
    settings = RetrieverSettings(search_url=SEARCH_URL, api_key=api_key, timeout_seconds=timeout)
    return VectorStoreClient(settings, transport=httpx.MockTransport(handler))


def test_search_posts_payload_and_normalizes_chunks() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=SEARCH_PAYLOAD)

    chunks = asyncio.run(_client(handler).search(
        "Acme revenue by segment", max_results=3, score_threshold=0.5, filters={"key": "year", "type": "eq", "value": 2025},
    ))

    assert seen["url"] == SEARCH_URL
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"] == {
        "query": "Acme revenue by segment",
        "max_num_results": 3,
        "ranking_options": {"ranker": "auto", "score_threshold": 0.5},
        "rewrite_query": False,
        "filters": {"key": "year", "type": "eq", "value": 2025},
    }
    assert chunks == [{
        "file_id": "file-abc",
        "filename": "acme-annual-report.pdf",
        "content_items": [{"type": "text", "text": "Subscription revenue reached $15M."}],
        "score": 0.91,
        "attributes": {"year": 2025},
    }]


def test_search_without_api_key_or_filters() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": []})

    chunks = asyncio.run(_client(handler, api_key=None).search("Acme"))
    assert chunks == []
    assert seen["auth"] is None
    assert "filters" not in seen["body"]


def test_unconfigured_endpoint_is_a_retriever_error() -> None:
    client = VectorStoreClient(RetrieverSettings())
    with pytest.raises(RetrieverError) as exc_info:
        asyncio.run(client.search("Acme"))
    assert exc_info.value.kind is ErrorKind.RETRIEVER_ERROR
    assert "not configured" in exc_info.value.message


def test_non_success_status_is_a_retriever_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="upstream unavailable")

    with pytest.raises(RetrieverError) as exc_info:
        asyncio.run(_client(handler).search("Acme"))
    assert "503" in exc_info.value.message


def test_timeout_is_a_retriever_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(RetrieverError) as exc_info:
        asyncio.run(_client(handler, timeout=2.0).search("Acme"))
    assert "timed out" in exc_info.value.message


def test_network_error_is_a_retriever_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RetrieverError):
        asyncio.run(_client(handler).search("Acme"))


def test_malformed_payloads_are_retriever_errors() -> None:
    def not_json(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(RetrieverError):
        asyncio.run(_client(not_json).search("Acme"))

    with pytest.raises(RetrieverError):
        parse_search_results({"results": []})
    with pytest.raises(RetrieverError):
        parse_search_results({"data": ["chunk"]})
    with pytest.raises(RetrieverError):
        parse_search_results({"data": [{"file_id": "f", "content": "text"}]})


def test_parse_search_results_fills_missing_optional_fields() -> None:
    chunks = parse_search_results({"data": [{"file_id": "f-1", "content": [{"text": "hello"}]}]})
    assert chunks == [{
        "file_id": "f-1",
        "filename": None,
        "content_items": [{"type": "text", "text": "hello"}],
        "score": None,
        "attributes": {},
    }]
