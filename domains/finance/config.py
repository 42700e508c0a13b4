"""
Finance Engine Configuration - Static catalogue data and runtime settings.

Static data (query templates, engine identity) lives here as module constants.
Runtime settings are read from the environment by the load_* helpers and passed
into collaborators explicitly; calculators never read the environment.
"""

import os

from pydantic import BaseModel, Field

ENGINE_NAME = "finance-engine"
ENGINE_VERSION = "2.1.0"

ENGINE_INSTRUCTIONS = (
    "Finance Engine providing deterministic business and financial calculations.\n\n"
    "Critical business metrics: company_health_score, revenue_quality_score, "
    "hhi_and_diversification.\n"
    "Operational metrics: operating_leverage, support_efficiency_score.\n"
    "Portfolio analytics: portfolio_momentum, gini_coefficient, organic_growth, "
    "growth_attribution, segment_growth_analysis, lifecycle_weighted_growth.\n"
    "Context retrieval: get_metrics_from_vector_store fetches source passages for any of the above.\n\n"
    "All rates and percentages are decimals (0.09 = 9%)."
)

# Legacy tool names carried this prefix; both forms resolve to the same tool.
LEGACY_TOOL_PREFIX = "calculate_"

# Natural-language search templates (target calculator → query).
METRIC_QUERY_TEMPLATES = {
    "company_health_score": (
        "{company} revenue growth rate, SLA compliance rate, customer satisfaction score, "
        "subscription revenue percentage and sales pipeline coverage"
    ),
    "revenue_quality_score": (
        "{company} revenue by segment split into high-growth, stable and declining revenue, total revenue"
    ),
    "hhi_and_diversification": "{company} revenue breakdown by business segment",
    "operating_leverage": "{company} year-over-year revenue growth rate and operating cost growth rate",
    "portfolio_momentum": "{company} segment revenue and year-over-year growth rate for each segment",
    "gini_coefficient": "{company} revenue by business segment",
    "organic_growth": (
        "{company} prior period revenue and current period revenue excluding acquisitions and divestitures"
    ),
    "support_efficiency_score": (
        "{company} first contact resolution rate, average handling time prior and current year, SLA compliance"
    ),
    "growth_attribution": "{company} segment revenue for fiscal year 2024 and fiscal year 2025",
    "segment_growth_analysis": (
        "{company} modern and traditional segment revenue for fiscal year 2024 and fiscal year 2025"
    ),
    "lifecycle_weighted_growth": "{company} revenue and growth rate by segment and product lifecycle stage",
}

CALCULATOR_NAMES = tuple(METRIC_QUERY_TEMPLATES)


class RetrieverSettings(BaseModel):
    """Connection settings for the vector-store search endpoint."""
    model_config = {"frozen": True}

    search_url: str | None = Field(default=None, description="Full search endpoint URL")
    api_key: str | None = Field(default=None, description="Bearer token, if the store requires one")
    timeout_seconds: float = Field(default=30.0, gt=0)


class ServerSettings(BaseModel):
    model_config = {"frozen": True}

    host: str = "127.0.0.1"
    port: int = 8001
    log_level: str = "INFO"


def load_retriever_settings() -> RetrieverSettings:
    return RetrieverSettings(
        search_url=os.getenv("VECTOR_STORE_SEARCH_URL", "").strip() or None,
        api_key=os.getenv("VECTOR_STORE_API_KEY", "").strip() or None,
        timeout_seconds=float(os.getenv("VECTOR_STORE_TIMEOUT_SECONDS", "30")),
    )


def load_server_settings() -> ServerSettings:
    return ServerSettings(
        host=os.getenv("BIND_HOST", "127.0.0.1"),
        port=int(os.getenv("BIND_PORT", "8001")),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )


def load_enabled_tools() -> list[str] | None:
    """Tool names from FINANCE_ENGINE_TOOLS, or None for the full catalogue."""
    raw = os.getenv("FINANCE_ENGINE_TOOLS", "").strip()
    if not raw:
        return None
    return [name.strip() for name in raw.split(",") if name.strip()]
