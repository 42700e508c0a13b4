"""
Tool Dispatch Router — the single invocation interface every transport uses.

Responsibility:
- Resolve the tool by name or alias
- Validate the argument bag into the tool's input model
- Run the calculator (awaiting it when it is async)
- Wrap the outcome in a ToolResponse envelope

ToolError subclasses become failure envelopes. Anything else is a bug and
propagates to the transport.
"""

import inspect
import logging
from typing import Any, Iterable

from domains.finance.calculators import (
    register_business_calculators,
    register_concentration_calculators,
    register_growth_calculators,
    register_retrieval_tools,
)
from domains.finance.catalog import ToolCatalog
from domains.finance.config import RetrieverSettings
from domains.finance.retriever import MetricsRetriever, VectorStoreClient
from domains.finance.validator import validate_arguments
from observability.logger import Observability
from shared.errors import ToolError, UnknownToolError, sanitize_for_message
from shared.models import ErrorPayload, ToolDescriptor, ToolResponse

logger = logging.getLogger(__name__)


class ToolRouter:
    """Dispatches tool calls against an immutable catalog."""

    def __init__(self, catalog: ToolCatalog, observability: Observability | None = None):
        self.catalog = catalog
        self.observability = observability or Observability()

    def list_tools(self) -> list[ToolDescriptor]:
        return [
            ToolDescriptor(
                name=definition.name,
                description=definition.description,
                input_schema=definition.input_schema(),
                required=definition.required_fields(),
            )
            for definition in self.catalog.definitions()
        ]

    async def dispatch(self, tool_name: str, arguments: Any) -> ToolResponse:
        definition = self.catalog.resolve(tool_name) if isinstance(tool_name, str) else None
        label = definition.name if definition else sanitize_for_message(tool_name)

        with self.observability.measure("dispatch", {"tool": label}) as span:
            try:
                if definition is None:
                    raise UnknownToolError(str(tool_name))
                request = validate_arguments(definition.input_model, arguments)
                result = definition.calculator(request)
                if inspect.isawaitable(result):
                    result = await result
            except ToolError as e:
                span["status"] = "failure"
                span["error_kind"] = e.kind.value
                logger.info("Tool %s failed: %s", label, e.message)
                failure = e
            else:
                failure = None

        metadata = {"invocation_id": span["invocation_id"], "duration_ms": span["duration_ms"]}
        if failure is not None:
            return ToolResponse(
                status="failure",
                tool=label,
                error=ErrorPayload(**failure.to_payload()),
                explanation=failure.message,
                metadata=metadata,
            )
        return ToolResponse(
            status="success",
            tool=label,
            result=result,
            explanation=result.get("interpretation", f"Calculated {label}."),
            metadata=metadata,
        )


def build_catalog(retriever: MetricsRetriever) -> ToolCatalog:
    """Full catalogue: every calculator plus the vector store lookup."""
    catalog = ToolCatalog()
    register_business_calculators(catalog)
    register_concentration_calculators(catalog)
    register_growth_calculators(catalog)
    register_retrieval_tools(catalog, retriever)
    return catalog


def build_router(
    retriever_settings: RetrieverSettings | None = None,
    retriever: MetricsRetriever | None = None,
    enabled_tools: Iterable[str] | None = None,
    observability: Observability | None = None,
) -> ToolRouter:
    """
    Assemble a router.

    enabled_tools limits the catalogue (None = everything). Without an
    explicit retriever a VectorStoreClient is built from retriever_settings.
    """
    if retriever is None:
        retriever = VectorStoreClient(retriever_settings or RetrieverSettings())
    catalog = build_catalog(retriever)
    if enabled_tools is not None:
        catalog = catalog.subset(enabled_tools)
    logger.info("Finance engine ready with %d tool(s)", len(catalog))
    return ToolRouter(catalog, observability)
