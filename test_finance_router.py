import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from domains.finance.config import CALCULATOR_NAMES
from domains.finance.router import build_router
from shared.errors import RetrieverError

logging.basicConfig(level=logging.INFO)

CHUNK = {
    "file_id": "file-1",
    "filename": "acme-10k.pdf",
    "content_items": [{"type": "text", "text": "Revenue grew 9% year over year."}],
    "score": 0.82,
    "attributes": {},
}


def _retriever(chunks=None) -> MagicMock:
    retriever = MagicMock()
    retriever.search = AsyncMock(return_value=[CHUNK] if chunks is None else chunks)
    return retriever


def _dispatch(router, tool, arguments):
    return asyncio.run(router.dispatch(tool, arguments))


def test_catalogue_lists_every_tool_with_schema() -> None:
    router = build_router(retriever=_retriever())
    descriptors = {d.name: d for d in router.list_tools()}

    assert set(descriptors) == set(CALCULATOR_NAMES) | {"get_metrics_from_vector_store"}
    health = descriptors["company_health_score"]
    assert health.required == ["revenue_growth", "sla_compliance", "customer_satisfaction"]
    assert health.input_schema["type"] == "object"
    assert "modern_revenue_pct" in health.input_schema["properties"]
    assert descriptors["get_metrics_from_vector_store"].required == ["function_name", "company_name"]


def test_success_envelope() -> None:
    router = build_router(retriever=_retriever())
    response = _dispatch(router, "operating_leverage", {"revenue_growth_rate": 0.09, "cost_growth_rate": 0.06})

    assert response.status == "success"
    assert response.ok
    assert response.tool == "operating_leverage"
    assert response.error is None
    assert response.result["efficiency_rating"] == "Excellent"
    assert response.explanation == response.result["interpretation"]
    assert response.metadata["invocation_id"]
    assert response.metadata["duration_ms"] >= 0


def test_legacy_prefixed_name_resolves_to_canonical_tool() -> None:
    router = build_router(retriever=_retriever())
    response = _dispatch(router, "calculate_gini_coefficient", {"revenues": [10, 10, 10, 10]})
    assert response.ok
    assert response.tool == "gini_coefficient"


def test_unknown_tool_envelope_is_sanitized() -> None:
    router = build_router(retriever=_retriever())
    response = _dispatch(router, "drop_tables<script>", {})

    assert response.status == "failure"
    assert response.error.kind == "unknown_tool"
    assert "<" not in response.error.message
    assert "<" not in response.tool
    assert response.result == {}


def test_invalid_argument_envelope() -> None:
    router = build_router(retriever=_retriever())
    response = _dispatch(router, "gini_coefficient", {"revenues": "15,25"})
    assert response.status == "failure"
    assert response.error.kind == "invalid_argument"
    assert "revenues" in response.error.message

    response = _dispatch(router, "gini_coefficient", ["not", "an", "object"])
    assert response.error.kind == "invalid_argument"


def test_arithmetic_domain_error_envelope() -> None:
    router = build_router(retriever=_retriever())
    response = _dispatch(router, "operating_leverage", {"revenue_growth_rate": 0.09, "cost_growth_rate": 0})
    assert response.status == "failure"
    assert response.error.kind == "arithmetic_domain_error"
    assert "cost_growth_rate" in response.error.message


def test_results_beyond_float_range_are_arithmetic_domain_errors() -> None:
    router = build_router(retriever=_retriever())
    response = _dispatch(router, "hhi_and_diversification", {"revenues": [1e308, 1e308]})
    assert response.status == "failure"
    assert response.error.kind == "arithmetic_domain_error"
    assert "total revenue" in response.error.message

    response = _dispatch(router, "operating_leverage", {"revenue_growth_rate": 1e308, "cost_growth_rate": -1e308})
    assert response.error.kind == "arithmetic_domain_error"


def test_organic_growth_over_a_very_short_span_succeeds() -> None:
    router = build_router(retriever=_retriever())
    response = _dispatch(router, "organic_growth", {"revenue_prior": 1, "revenue_current": 10, "period_years": 0.001})
    assert response.status == "success"
    assert response.result["annualized_cagr"] == 9.0


def test_vector_store_lookup_builds_query_and_returns_chunks_unmodified() -> None:
    retriever = _retriever()
    router = build_router(retriever=retriever)
    response = _dispatch(router, "get_metrics_from_vector_store", {
        "function_name": "calculate_operating_leverage",
        "company_name": "Acme Corp",
        "max_num_results": 5,
        "score_threshold": 0.3,
        "filters": {"type": "eq", "key": "year", "value": 2025},
    })

    assert response.ok
    assert response.result["results"] == [CHUNK]
    assert response.result["function_name"] == "operating_leverage"
    retriever.search.assert_awaited_once()
    args, kwargs = retriever.search.call_args
    assert args[0].startswith("Acme Corp ")
    assert "operating cost growth" in args[0]
    assert kwargs["max_results"] == 5
    assert kwargs["score_threshold"] == 0.3
    assert kwargs["ranker"] == "auto"
    assert kwargs["rewrite_query"] is False
    assert kwargs["filters"] == {"type": "eq", "key": "year", "value": 2025}


@pytest.mark.parametrize("max_num_results", [0, 101])
def test_vector_store_lookup_rejects_out_of_range_before_search(max_num_results) -> None:
    retriever = _retriever()
    router = build_router(retriever=retriever)
    response = _dispatch(router, "get_metrics_from_vector_store", {
        "function_name": "gini_coefficient",
        "company_name": "Acme",
        "max_num_results": max_num_results,
    })
    assert response.error.kind == "invalid_argument"
    retriever.search.assert_not_awaited()


def test_retriever_failure_envelope() -> None:
    retriever = MagicMock()
    retriever.search = AsyncMock(side_effect=RetrieverError("vector store returned status 503"))
    router = build_router(retriever=retriever)
    response = _dispatch(router, "get_metrics_from_vector_store", {"function_name": "gini_coefficient", "company_name": "Acme"})
    assert response.status == "failure"
    assert response.error.kind == "retriever_error"
    assert response.result == {}


def test_unexpected_exceptions_propagate() -> None:
    retriever = MagicMock()
    retriever.search = AsyncMock(side_effect=RuntimeError("bug"))
    router = build_router(retriever=retriever)
    with pytest.raises(RuntimeError):
        _dispatch(router, "get_metrics_from_vector_store", {"function_name": "gini_coefficient", "company_name": "Acme"})


def test_enabled_tools_limit_the_catalogue() -> None:
    router = build_router(retriever=_retriever(), enabled_tools=["gini_coefficient", "calculate_organic_growth"])
    assert [d.name for d in router.list_tools()] == ["gini_coefficient", "organic_growth"]

    response = _dispatch(router, "operating_leverage", {"revenue_growth_rate": 0.09, "cost_growth_rate": 0.06})
    assert response.error.kind == "unknown_tool"

    with pytest.raises(ValueError):
        build_router(retriever=_retriever(), enabled_tools=["black_scholes"])


def test_identical_input_gives_identical_result() -> None:
    router = build_router(retriever=_retriever())
    arguments = {"revenues": [15, 25, 5, 8]}
    first = _dispatch(router, "hhi_and_diversification", arguments)
    second = _dispatch(router, "hhi_and_diversification", arguments)
    assert first.result == second.result
    assert first.metadata["invocation_id"] != second.metadata["invocation_id"]
