"""
Finance Engine Input Schemas — one frozen model per tool.

Numbers are never coerced from strings or booleans: the argument bag arrives
loosely typed from the transport and is decoded here into typed requests.
"""

import math
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, StrictBool, StrictStr, field_validator
from pydantic_core import PydanticCustomError

from domains.finance.config import CALCULATOR_NAMES, LEGACY_TOOL_PREFIX


def _require_number(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PydanticCustomError("number_type", "Input should be a number")
    if not math.isfinite(value):
        raise PydanticCustomError("finite_number", "Input should be a finite number")
    return value


def _require_integer(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, int):
        raise PydanticCustomError("int_type", "Input should be an integer")
    return value


Number = Annotated[float, BeforeValidator(_require_number)]
Count = Annotated[int, BeforeValidator(_require_integer)]


class MetricInput(BaseModel):
    model_config = {"frozen": True, "extra": "ignore"}


# ─── Segment Records ──────────────────────────────────────────────────────────

class SegmentGrowth(MetricInput):
    revenue: Number = Field(..., ge=0, description="Segment revenue (e.g. in millions)")
    growth_rate: Number = Field(..., description="Year-over-year growth rate as decimal (0.20 = 20%)")


class SegmentPeriods(MetricInput):
    fy_prior: Number = Field(..., ge=0, description="Segment revenue in the prior fiscal year (FY2024)")
    fy_current: Number = Field(..., ge=0, description="Segment revenue in the current fiscal year (FY2025)")


# ─── Critical Business Metrics ────────────────────────────────────────────────

class CompanyHealthScoreInput(MetricInput):
    revenue_growth: Number = Field(..., description="Year-over-year revenue growth rate as decimal (0.09 = 9%)")
    sla_compliance: Number = Field(..., ge=0, le=1, description="SLA compliance rate as decimal (0.985 = 98.5%)")
    customer_satisfaction: Number = Field(..., ge=0, le=100, description="Customer satisfaction score on 0-100 scale")
    modern_revenue_pct: Number | None = Field(
        default=None, ge=0, le=1,
        description="Share of revenue from subscription/recurring streams as decimal (optional)",
    )
    pipeline_coverage: Number | None = Field(
        default=None, ge=0,
        description="Active pipeline value / annual revenue as decimal (optional)",
    )


class RevenueQualityScoreInput(MetricInput):
    high_growth_revenue: Number = Field(..., ge=0, description="Revenue growing above 15% YoY")
    stable_revenue: Number = Field(..., ge=0, description="Revenue growing 0-15% YoY")
    declining_revenue: Number = Field(..., ge=0, description="Revenue with negative YoY growth")
    total_revenue: Number = Field(..., ge=0, description="Total company revenue")


class RevenueListInput(MetricInput):
    revenues: list[Annotated[Number, Field(ge=0)]] = Field(
        ..., min_length=1, description="Revenue values for each business segment (any order)"
    )


# ─── Operational Metrics ──────────────────────────────────────────────────────

class OperatingLeverageInput(MetricInput):
    revenue_growth_rate: Number = Field(..., description="YoY revenue growth rate as decimal (0.09 = 9%)")
    cost_growth_rate: Number = Field(..., description="YoY operating cost growth rate as decimal (0.06 = 6%)")


class SupportEfficiencyInput(MetricInput):
    fcr_current: Number = Field(..., ge=0, le=1, description="First-contact resolution rate as decimal")
    sla_compliance: Number = Field(..., ge=0, le=1, description="Support SLA compliance rate as decimal")
    handling_time_prior: Number = Field(..., ge=0, description="Average handling time, prior period")
    handling_time_current: Number = Field(..., ge=0, description="Average handling time, current period")


# ─── Portfolio Analytics ──────────────────────────────────────────────────────

class SegmentGrowthMapInput(MetricInput):
    segments: dict[str, SegmentGrowth] = Field(
        ..., min_length=1, description="Segment name → {revenue, growth_rate}"
    )


class OrganicGrowthInput(MetricInput):
    revenue_prior: Number = Field(..., ge=0, description="Revenue from prior period")
    revenue_current: Number = Field(..., ge=0, description="Revenue from current period")
    period_years: Number = Field(default=1.0, gt=0, description="Years between the two periods (CAGR annualization)")


class GrowthAttributionInput(MetricInput):
    segments: dict[str, SegmentPeriods] = Field(
        ..., min_length=1, description="Segment name → {fy_prior, fy_current}"
    )


class SegmentGrowthAnalysisInput(MetricInput):
    modern_fy2024: Number = Field(..., ge=0, description="Modern (subscription/digital) segment revenue FY2024")
    modern_fy2025: Number = Field(..., ge=0, description="Modern segment revenue FY2025")
    traditional_fy2024: Number = Field(..., ge=0, description="Traditional segment revenue FY2024")
    traditional_fy2025: Number = Field(..., ge=0, description="Traditional segment revenue FY2025")


# ─── Context Retrieval ────────────────────────────────────────────────────────

class VectorStoreLookupInput(MetricInput):
    function_name: StrictStr = Field(..., description="Target calculator the metrics are needed for")
    company_name: StrictStr = Field(..., min_length=1, max_length=100, description="Company to search for")
    max_num_results: Count = Field(default=10, ge=1, le=100, description="Maximum chunks to return (1-100)")
    score_threshold: Number = Field(default=0.0, ge=0, le=1, description="Minimum relevance score (0.0-1.0)")
    ranker: StrictStr = Field(default="auto", description="Ranker used by the vector store")
    rewrite_query: StrictBool = Field(default=False, description="Let the store rewrite the query")
    filters: dict[str, Any] | None = Field(default=None, description="Attribute filters passed through unmodified")

    @field_validator("company_name", mode="before")
    @classmethod
    def _strip_company(cls, value: Any) -> Any:
        # Whitespace-only names must fail min_length
        return value.strip() if isinstance(value, str) else value

    @field_validator("function_name")
    @classmethod
    def _known_calculator(cls, value: str) -> str:
        name = value.strip()
        if name.startswith(LEGACY_TOOL_PREFIX):
            name = name[len(LEGACY_TOOL_PREFIX):]
        if name not in CALCULATOR_NAMES:
            raise PydanticCustomError(
                "unknown_function",
                "Input should be one of the known calculators: {known}",
                {"known": ", ".join(CALCULATOR_NAMES)},
            )
        return name
