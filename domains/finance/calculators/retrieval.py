"""
Context Retrieval — Fetch source passages for a calculator's inputs.

Not a calculation: the query is built from a template keyed by the target
calculator and handed to the configured MetricsRetriever. Chunks come back
unmodified.
"""

import logging
from typing import Any

from domains.finance.catalog import CalculatorFunction, ToolCatalog, ToolDefinition
from domains.finance.config import METRIC_QUERY_TEMPLATES
from domains.finance.retriever import MetricsRetriever
from domains.finance.schemas import VectorStoreLookupInput

logger = logging.getLogger(__name__)


def build_metric_query(function_name: str, company_name: str) -> str:
    return METRIC_QUERY_TEMPLATES[function_name].format(company=company_name.strip())


def make_vector_store_lookup(retriever: MetricsRetriever) -> CalculatorFunction:
    """Bind get_metrics_from_vector_store to a retriever."""

    async def get_metrics_from_vector_store(params: VectorStoreLookupInput) -> dict[str, Any]:
        query = build_metric_query(params.function_name, params.company_name)
        chunks = await retriever.search(
            query,
            max_results=params.max_num_results,
            score_threshold=params.score_threshold,
            ranker=params.ranker,
            rewrite_query=params.rewrite_query,
            filters=params.filters,
        )
        logger.info("Vector store returned %d chunk(s) for %s", len(chunks), params.function_name)
        return {
            "function_name": params.function_name,
            "company_name": params.company_name,
            "query": query,
            "result_count": len(chunks),
            "results": chunks,
            "interpretation": (
                f"Retrieved {len(chunks)} passage(s) with inputs for {params.function_name}."
            ),
        }

    return get_metrics_from_vector_store


# ─── Registration ────────────────────────────────────────────────────────────


def register_retrieval_tools(catalog: ToolCatalog, retriever: MetricsRetriever) -> None:
    catalog.register(ToolDefinition(
        name="get_metrics_from_vector_store",
        description=(
            "Search the vector store for the figures a calculator needs. Builds a natural-language query from "
            "the target calculator (function_name) and company_name, and returns ranked source chunks "
            "(file_id, filename, content_items, score, attributes) unmodified."
        ),
        input_model=VectorStoreLookupInput,
        calculator=make_vector_store_lookup(retriever),
    ))
    logger.info("Registered vector store lookup tool")
