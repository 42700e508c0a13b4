"""
Growth Calculators — Growth rates, attribution and portfolio momentum.

Functions:
- operating_leverage: Revenue growth relative to cost growth, margin expansion in bps
- portfolio_momentum: Revenue-weighted growth across segments
- organic_growth: Period growth and CAGR between two revenue figures
- growth_attribution: Share of total revenue change contributed by each segment
- segment_growth_analysis: Modern vs traditional segment growth ratio
- lifecycle_weighted_growth: Revenue-weighted growth per lifecycle stage
"""

import logging
import math
from typing import Any

from domains.finance.calculators.guards import finite_sum, require_finite
from domains.finance.catalog import ToolCatalog, ToolDefinition
from domains.finance.classifiers import (
    ATTRIBUTION_TOLERANCE,
    LIFECYCLE_STAGE,
    MOMENTUM_RATING,
    OPERATING_LEVERAGE_EFFICIENCY,
    ORGANIC_GROWTH_RATING,
    SEGMENT_TRANSITION,
    classify,
    classify_lifecycle_quality,
)
from domains.finance.schemas import (
    GrowthAttributionInput,
    OperatingLeverageInput,
    OrganicGrowthInput,
    SegmentGrowthAnalysisInput,
    SegmentGrowthMapInput,
)
from shared.errors import ArithmeticDomainError

logger = logging.getLogger(__name__)


def _pct(rate: float, ndigits: int = 2) -> float:
    """0.0877 → 8.77"""
    return round(require_finite(rate * 100.0, "percentage"), ndigits)


def _segment_total(segments: dict) -> float:
    total = finite_sum((segment.revenue for segment in segments.values()), "total segment revenue")
    if total == 0:
        raise ArithmeticDomainError("total segment revenue must be non-zero")
    return total


# ─── Operating Efficiency ────────────────────────────────────────────────────


def operating_leverage(params: OperatingLeverageInput) -> dict[str, Any]:
    """
    Operating leverage = revenue growth / cost growth.

    Required: revenue_growth_rate, cost_growth_rate (non-zero)
    """
    if params.cost_growth_rate == 0:
        raise ArithmeticDomainError("cost_growth_rate must be non-zero to compute operating leverage")

    leverage = require_finite(params.revenue_growth_rate / params.cost_growth_rate, "operating leverage")
    margin_expansion_bps = require_finite(
        (params.revenue_growth_rate - params.cost_growth_rate) * 10000.0, "margin expansion"
    )
    rating = classify(leverage, OPERATING_LEVERAGE_EFFICIENCY)

    return {
        "operating_leverage": round(leverage, 2),
        "revenue_growth_pct": _pct(params.revenue_growth_rate, 1),
        "cost_growth_pct": _pct(params.cost_growth_rate, 1),
        "margin_expansion_bps": round(margin_expansion_bps),
        "efficiency_rating": rating,
        "interpretation": f"Revenue growing {leverage:.1f}x faster than costs ({rating.lower()} operating leverage).",
    }


# ─── Portfolio Growth ────────────────────────────────────────────────────────


def portfolio_momentum(params: SegmentGrowthMapInput) -> dict[str, Any]:
    """
    Momentum = Σ (segment revenue / total revenue × segment growth rate).

    The top contributor is the segment with the largest dollar contribution
    (revenue × growth rate); ties go to the segment listed first.
    """
    total = _segment_total(params.segments)

    momentum = 0.0
    contributions = {}
    top_contributor = None
    top_dollars = -math.inf
    for name, segment in params.segments.items():
        weight = segment.revenue / total
        contribution = require_finite(weight * segment.growth_rate, f"momentum contribution of {name}")
        momentum = require_finite(momentum + contribution, "portfolio momentum")

        dollars = require_finite(segment.revenue * segment.growth_rate, f"dollar contribution of {name}")
        if dollars > top_dollars:
            top_dollars = dollars
            top_contributor = name

        contributions[name] = {
            "revenue": round(segment.revenue, 2),
            "revenue_pct": _pct(weight, 1),
            "growth_rate_pct": _pct(segment.growth_rate, 1),
            "dollar_contribution": round(dollars, 4),
            "contribution_to_momentum_pct": _pct(contribution),
        }

    rating = classify(momentum, MOMENTUM_RATING)

    return {
        "portfolio_momentum": round(momentum, 4),
        "portfolio_momentum_pct": _pct(momentum),
        "total_revenue": round(total, 2),
        "segment_contributions": contributions,
        "top_contributor": top_contributor,
        "momentum_rating": rating,
        "interpretation": (
            f"{rating} portfolio momentum of {momentum:.2%}; {top_contributor} is the largest contributor "
            f"to growth."
        ),
    }


def organic_growth(params: OrganicGrowthInput) -> dict[str, Any]:
    """
    Organic growth between two periods, with CAGR over period_years.

    Spans of a year or less are not annualized (CAGR equals the period
    growth). The rating is applied to the period growth rate.
    """
    prior, current = params.revenue_prior, params.revenue_current
    if prior == 0:
        raise ArithmeticDomainError("revenue_prior must be positive to compute a growth rate")

    absolute_growth = require_finite(current - prior, "absolute growth")
    growth_rate = require_finite(absolute_growth / prior, "organic growth rate")
    if params.period_years <= 1:
        cagr = growth_rate
    else:
        try:
            cagr = (current / prior) ** (1.0 / params.period_years) - 1.0
        except OverflowError:
            raise ArithmeticDomainError("annualized growth exceeds the floating-point range") from None
        require_finite(cagr, "annualized growth")
    rating = classify(growth_rate, ORGANIC_GROWTH_RATING)

    return {
        "organic_growth_rate": round(growth_rate, 4),
        "organic_growth_pct": _pct(growth_rate),
        "absolute_growth": round(absolute_growth, 2),
        "revenue_prior": round(prior, 2),
        "revenue_current": round(current, 2),
        "period_years": params.period_years,
        "annualized_cagr": round(cagr, 4),
        "annualized_cagr_pct": _pct(cagr),
        "growth_rating": rating,
        "interpretation": (
            f"Revenue grew {growth_rate:.2%} organically over {params.period_years:g} year(s) "
            f"({cagr:.2%} annualized), rated {rating}."
        ),
    }


def growth_attribution(params: GrowthAttributionInput) -> dict[str, Any]:
    """
    Attribute the total revenue change to segments.

    contribution = segment change / total change. Drivers (positive change)
    are listed largest first, drags (negative change) most negative first.
    """
    changes = {
        name: require_finite(seg.fy_current - seg.fy_prior, f"revenue change of {name}")
        for name, seg in params.segments.items()
    }
    total_change = finite_sum(changes.values(), "total revenue change")
    if total_change == 0:
        raise ArithmeticDomainError("total revenue change is zero; growth cannot be attributed")

    total_prior = finite_sum((seg.fy_prior for seg in params.segments.values()), "total prior revenue")
    total_current = finite_sum((seg.fy_current for seg in params.segments.values()), "total current revenue")

    segments = {}
    for name, seg in params.segments.items():
        contribution = require_finite(changes[name] / total_change, f"growth contribution of {name}")
        growth_rate = None
        if seg.fy_prior:
            growth_rate = require_finite(changes[name] / seg.fy_prior, f"growth rate of {name}")
        segments[name] = {
            "fy_prior": round(seg.fy_prior, 2),
            "fy_current": round(seg.fy_current, 2),
            "change": round(changes[name], 4),
            "growth_rate": round(growth_rate, 4) if growth_rate is not None else None,
            "contribution": round(contribution, 6),
            "contribution_pct": _pct(contribution),
        }

    # sorted() is stable, so equal changes keep their input order
    drivers = sorted((name for name, delta in changes.items() if delta > 0), key=lambda n: -changes[n])
    drags = sorted((name for name, delta in changes.items() if delta < 0), key=lambda n: changes[n])

    contribution_sum = finite_sum((changes[name] / total_change for name in changes), "contribution sum")
    verified = abs(contribution_sum - 1.0) <= ATTRIBUTION_TOLERANCE

    return {
        "total_prior": round(total_prior, 2),
        "total_current": round(total_current, 2),
        "total_change": round(total_change, 4),
        "total_growth_rate": (
            round(require_finite(total_change / total_prior, "total growth rate"), 4) if total_prior else None
        ),
        "segments": segments,
        "drivers": drivers,
        "drags": drags,
        "contribution_sum_pct": _pct(contribution_sum),
        "verified": verified,
        "interpretation": (
            f"Total revenue changed by {total_change:,.2f}; "
            f"{', '.join(drivers) if drivers else 'no segment'} drove growth"
            f"{' while ' + ', '.join(drags) + ' held it back' if drags else ''}."
        ),
    }


def segment_growth_analysis(params: SegmentGrowthAnalysisInput) -> dict[str, Any]:
    """
    Compare modern and traditional segment growth.

    ratio = modern growth / traditional growth
    """
    if params.modern_fy2024 == 0:
        raise ArithmeticDomainError("modern_fy2024 must be non-zero to compute modern segment growth")
    if params.traditional_fy2024 == 0:
        raise ArithmeticDomainError("traditional_fy2024 must be non-zero to compute traditional segment growth")

    modern_growth = require_finite(
        (params.modern_fy2025 - params.modern_fy2024) / params.modern_fy2024, "modern segment growth"
    )
    traditional_growth = require_finite(
        (params.traditional_fy2025 - params.traditional_fy2024) / params.traditional_fy2024, "traditional segment growth"
    )
    if traditional_growth == 0:
        raise ArithmeticDomainError("traditional segment growth is zero; the growth ratio is undefined")

    ratio = require_finite(modern_growth / traditional_growth, "growth ratio")
    status = classify(ratio, SEGMENT_TRANSITION)

    total_2024 = finite_sum((params.modern_fy2024, params.traditional_fy2024), "FY2024 total revenue")
    total_2025 = finite_sum((params.modern_fy2025, params.traditional_fy2025), "FY2025 total revenue")

    return {
        "modern_growth": round(modern_growth, 4),
        "modern_growth_pct": _pct(modern_growth),
        "traditional_growth": round(traditional_growth, 4),
        "traditional_growth_pct": _pct(traditional_growth),
        "growth_ratio": round(ratio, 2),
        "modern_share_fy2024": round(params.modern_fy2024 / total_2024, 4),
        "modern_share_fy2025": round(params.modern_fy2025 / total_2025, 4) if total_2025 else None,
        "transition_status": status,
        "interpretation": (
            f"Modern segment grew {modern_growth:.2%} against {traditional_growth:.2%} for traditional "
            f"(ratio {ratio:.2f}); transition is {status.lower()}."
        ),
    }


def lifecycle_weighted_growth(params: SegmentGrowthMapInput) -> dict[str, Any]:
    """
    Stage each segment by growth rate (High / Mature / Declining) and compute
    revenue-weighted growth per stage and overall.
    """
    total = _segment_total(params.segments)

    stages = {label: {"revenue": 0.0, "weighted_growth": 0.0, "segments": []} for label in LIFECYCLE_STAGE.labels()}
    segment_stages = {}
    for name, segment in params.segments.items():
        stage = classify(segment.growth_rate, LIFECYCLE_STAGE)
        segment_stages[name] = stage
        bucket = stages[stage]
        bucket["revenue"] += segment.revenue
        bucket["weighted_growth"] = require_finite(
            bucket["weighted_growth"] + segment.revenue / total * segment.growth_rate, f"{stage} weighted growth"
        )
        bucket["segments"].append(name)

    overall = finite_sum((bucket["weighted_growth"] for bucket in stages.values()), "weighted growth")
    high_share = stages["High"]["revenue"] / total
    declining_share = stages["Declining"]["revenue"] / total
    quality = classify_lifecycle_quality(high_share, declining_share)

    breakdown = {}
    for label, bucket in stages.items():
        stage_revenue = bucket["revenue"]
        breakdown[label] = {
            "revenue": round(stage_revenue, 2),
            "revenue_share": round(stage_revenue / total, 4),
            "weighted_growth": round(bucket["weighted_growth"], 4),
            "average_growth": (
                round(bucket["weighted_growth"] / (stage_revenue / total), 4) if stage_revenue else None
            ),
            "segments": bucket["segments"],
        }

    return {
        "weighted_growth": round(overall, 4),
        "weighted_growth_pct": _pct(overall),
        "total_revenue": round(total, 2),
        "stages": breakdown,
        "segment_stages": segment_stages,
        "high_growth_share": round(high_share, 4),
        "declining_share": round(declining_share, 4),
        "portfolio_quality": quality,
        "interpretation": (
            f"{quality} lifecycle mix: {high_share:.1%} of revenue in high-growth segments and "
            f"{declining_share:.1%} in declining ones, for {overall:.2%} weighted growth."
        ),
    }


# ─── Registration ────────────────────────────────────────────────────────────


def register_growth_calculators(catalog: ToolCatalog) -> None:
    """Register growth and portfolio calculators."""
    definitions = [
        ToolDefinition(
            name="operating_leverage",
            description=(
                "Operating leverage ratio (revenue growth / cost growth) and margin expansion in basis points. "
                "Efficiency rating: Excellent >=1.5, Good >=1.2, Adequate >=1.0, Poor <1.0."
            ),
            input_model=OperatingLeverageInput,
            calculator=operating_leverage,
        ),
        ToolDefinition(
            name="portfolio_momentum",
            description=(
                "Portfolio momentum index: revenue-weighted average growth across segments. Returns per-segment "
                "contributions, top contributor and rating (Strong >10%, Moderate 5-10%, Weak 0-5%, Declining <0%)."
            ),
            input_model=SegmentGrowthMapInput,
            calculator=portfolio_momentum,
        ),
        ToolDefinition(
            name="organic_growth",
            description=(
                "Organic revenue growth between a prior and current period, with CAGR when period_years > 1. "
                "Rating: Exceptional >15%, Strong 10-15%, Moderate 5-10%, Weak 0-5%, Declining <0%."
            ),
            input_model=OrganicGrowthInput,
            calculator=organic_growth,
        ),
        ToolDefinition(
            name="growth_attribution",
            description=(
                "Attribute total revenue change (FY2024 to FY2025) to individual segments. Returns each segment's "
                "contribution, growth drivers (largest first), drags and a verification that contributions sum to 100%."
            ),
            input_model=GrowthAttributionInput,
            calculator=growth_attribution,
        ),
        ToolDefinition(
            name="segment_growth_analysis",
            description=(
                "Compare modern vs traditional segment growth (FY2024 to FY2025). Returns growth rates, growth ratio "
                "and transition status (Successful >3.0, Progressing 1.0-3.0, Failing <1.0)."
            ),
            input_model=SegmentGrowthAnalysisInput,
            calculator=segment_growth_analysis,
        ),
        ToolDefinition(
            name="lifecycle_weighted_growth",
            description=(
                "Classify segments into lifecycle stages (High >15%, Mature 0-15%, Declining <0%) and compute "
                "revenue-weighted growth per stage and overall, with a portfolio quality rating."
            ),
            input_model=SegmentGrowthMapInput,
            calculator=lifecycle_weighted_growth,
        ),
    ]
    for definition in definitions:
        catalog.register(definition)
    logger.info("Registered %d growth calculators", len(definitions))
