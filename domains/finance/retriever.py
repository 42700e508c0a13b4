"""
VectorStoreClient — Client for an OpenAI-compatible vector store search endpoint.

Responsibility:
- Builds the search payload (query, ranking options, filters)
- POSTs it with a bearer token when one is configured
- Normalizes the response into plain chunk dicts
- Maps every network, status and payload failure to RetrieverError
"""

import logging
from typing import Any, Protocol

import httpx

from domains.finance.config import RetrieverSettings
from shared.errors import RetrieverError

logger = logging.getLogger(__name__)


class MetricsRetriever(Protocol):
    async def search(
        self,
        query: str,
        max_results: int = 10,
        score_threshold: float = 0.0,
        ranker: str = "auto",
        rewrite_query: bool = False,
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        ...


class VectorStoreClient:
    """Async search client; one short-lived httpx.AsyncClient per call."""

    def __init__(self, settings: RetrieverSettings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self.transport = transport
        self.headers = {"Content-Type": "application/json"}
        if settings.api_key:
            self.headers["Authorization"] = f"Bearer {settings.api_key}"

    async def search(
        self,
        query: str,
        max_results: int = 10,
        score_threshold: float = 0.0,
        ranker: str = "auto",
        rewrite_query: bool = False,
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        url = self.settings.search_url
        if not url:
            raise RetrieverError("vector store search endpoint is not configured (VECTOR_STORE_SEARCH_URL)")

        payload: dict[str, Any] = {
            "query": query,
            "max_num_results": max_results,
            "ranking_options": {"ranker": ranker, "score_threshold": score_threshold},
            "rewrite_query": rewrite_query,
        }
        if filters is not None:
            payload["filters"] = filters

        logger.info("Searching vector store: max_results=%d ranker=%s", max_results, ranker)
        try:
            async with httpx.AsyncClient(timeout=self.settings.timeout_seconds, transport=self.transport) as client:
                response = await client.post(url, json=payload, headers=self.headers)
        except httpx.TimeoutException as e:
            logger.error("Vector store search timed out after %.1fs: %r", self.settings.timeout_seconds, e)
            raise RetrieverError(f"vector store search timed out after {self.settings.timeout_seconds:g}s") from e
        except httpx.RequestError as e:
            logger.error("Network error calling vector store: %r", e)
            raise RetrieverError(f"network error contacting vector store: {type(e).__name__}") from e

        if not response.is_success:
            logger.error("Vector store error %s: %s", response.status_code, response.text[:500])
            raise RetrieverError(f"vector store returned status {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise RetrieverError("vector store returned a non-JSON payload") from e

        return parse_search_results(data)


def parse_search_results(data: Any) -> list[dict[str, Any]]:
    """{"data": [...]} → [{file_id, filename, content_items, score, attributes}]"""
    if not isinstance(data, dict) or not isinstance(data.get("data"), list):
        raise RetrieverError("vector store payload is missing the 'data' list")

    chunks = []
    for item in data["data"]:
        if not isinstance(item, dict):
            raise RetrieverError("vector store payload contains a malformed result entry")
        content = item.get("content") or []
        if not isinstance(content, list):
            raise RetrieverError("vector store result 'content' must be a list")
        chunks.append({
            "file_id": item.get("file_id"),
            "filename": item.get("filename"),
            "content_items": [
                {"type": part.get("type", "text"), "text": part.get("text", "")}
                for part in content
                if isinstance(part, dict)
            ],
            "score": item.get("score"),
            "attributes": item.get("attributes") or {},
        })
    return chunks
