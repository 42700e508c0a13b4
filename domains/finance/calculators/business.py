"""
Business Health Calculators — Composite scores for company-level health.

Functions:
- company_health_score: Weighted 0-100 score over revenue, SLA, innovation, satisfaction, pipeline
- revenue_quality_score: Revenue mix quality (high-growth / stable / declining)
- support_efficiency_score: Support operations score from FCR, handling time and SLA
"""

import logging
from typing import Any

from domains.finance.calculators.guards import finite_sum, require_finite
from domains.finance.catalog import ToolCatalog, ToolDefinition
from domains.finance.classifiers import (
    HEALTH_RISK,
    REVENUE_QUALITY_GRADE,
    REVENUE_QUALITY_TARGET,
    SUPPORT_EFFICIENCY_GRADE,
    classify,
)
from domains.finance.schemas import CompanyHealthScoreInput, RevenueQualityScoreInput, SupportEfficiencyInput
from shared.errors import ArithmeticDomainError, InvalidArgumentError

logger = logging.getLogger(__name__)

# Five-dimension model; weights sum to 1.0
HEALTH_WEIGHTS = {
    "revenue": 0.30,
    "sla": 0.25,
    "innovation": 0.20,
    "satisfaction": 0.15,
    "pipeline": 0.10,
}

# Three-dimension model used when neither innovation nor pipeline data is supplied
HEALTH_CORE_WEIGHTS = {
    "revenue": 0.40,
    "sla": 0.35,
    "satisfaction": 0.25,
}

# Revenue growth at or above this rate scores 100
FULL_MARKS_REVENUE_GROWTH = 0.15

HEALTH_INTERPRETATIONS = {
    "LOW": "Company health is excellent across all dimensions.",
    "MEDIUM": "Company health is good but some areas need attention for optimal performance.",
    "HIGH": "Company faces significant challenges in multiple areas requiring strategic intervention.",
    "CRITICAL": "Company health is critical with severe issues across key performance indicators.",
}

QUALITY_WEIGHTS = {"high_growth": 1.0, "stable": 0.7, "declining": 0.0}

QUALITY_RECOMMENDATIONS = {
    "A": "Excellent revenue quality. Continue investing in high-growth segments and maintain momentum.",
    "B": "Good revenue quality with room for improvement. Focus on accelerating growth in stable segments.",
    "C": "Moderate revenue quality. Strategic pivot needed to increase high-growth revenue proportion.",
    "D": "Poor revenue quality. Urgent action required to address declining revenue and stimulate growth.",
    "F": "Critical revenue quality issues. Immediate restructuring needed to reverse declining trends.",
}

SUPPORT_INTERPRETATIONS = {
    "A": "Support operations are best-in-class.",
    "B": "Support operations are strong with minor gaps.",
    "C": "Support operations are adequate; resolution or speed needs work.",
    "D": "Support operations are underperforming against SLA and resolution targets.",
    "F": "Support operations are failing; immediate process review required.",
}


def _health_weights(dimensions: list[str]) -> dict[str, float]:
    if dimensions == list(HEALTH_CORE_WEIGHTS):
        return dict(HEALTH_CORE_WEIGHTS)
    available = {name: HEALTH_WEIGHTS[name] for name in dimensions}
    total = sum(available.values())
    return {name: weight / total for name, weight in available.items()}


def company_health_score(params: CompanyHealthScoreInput) -> dict[str, Any]:
    """
    Composite 0-100 health score.

    Required: revenue_growth, sla_compliance, customer_satisfaction
    Optional: modern_revenue_pct, pipeline_coverage (a missing dimension's
    weight is spread proportionally over the supplied ones)
    """
    components: dict[str, float] = {
        "revenue": min(max(params.revenue_growth / FULL_MARKS_REVENUE_GROWTH * 100.0, 0.0), 100.0),
        "sla": params.sla_compliance * 100.0,
    }
    if params.modern_revenue_pct is not None:
        components["innovation"] = params.modern_revenue_pct * 100.0
    components["satisfaction"] = params.customer_satisfaction
    if params.pipeline_coverage is not None:
        components["pipeline"] = min(params.pipeline_coverage * 100.0, 100.0)

    weights = _health_weights(list(components))
    weighted_contributions = {name: components[name] * weights[name] for name in components}
    overall_score = sum(weighted_contributions.values())

    risk_level = classify(overall_score, HEALTH_RISK)

    return {
        "overall_score": round(overall_score, 2),
        "model": f"{len(components)}-dimension",
        "components": {name: round(score, 2) for name, score in components.items()},
        "weights": {name: round(weight, 4) for name, weight in weights.items()},
        "weighted_contributions": {name: round(value, 3) for name, value in weighted_contributions.items()},
        "risk_level": risk_level,
        "interpretation": HEALTH_INTERPRETATIONS[risk_level],
    }


def revenue_quality_score(params: RevenueQualityScoreInput) -> dict[str, Any]:
    """
    Revenue quality on a 0-1 scale from the growth mix.

    Required: high_growth_revenue, stable_revenue, declining_revenue, total_revenue
    """
    total = params.total_revenue
    if total == 0:
        raise ArithmeticDomainError("total_revenue must be non-zero to compute revenue shares")

    category_sum = finite_sum(
        (params.high_growth_revenue, params.stable_revenue, params.declining_revenue), "revenue category sum"
    )
    if abs(category_sum - total) > 0.01 * total:
        raise InvalidArgumentError("total_revenue", "revenue categories must sum to total_revenue (within 1%)")

    distribution = {
        "high_growth": params.high_growth_revenue / total,
        "stable": params.stable_revenue / total,
        "declining": params.declining_revenue / total,
    }
    quality_score = sum(distribution[name] * QUALITY_WEIGHTS[name] for name in distribution)
    grade = classify(quality_score, REVENUE_QUALITY_GRADE)

    return {
        "quality_score": round(quality_score, 4),
        "distribution": {name: round(share, 4) for name, share in distribution.items()},
        "grade": grade,
        "target_score": REVENUE_QUALITY_TARGET,
        "gap_to_target": round(REVENUE_QUALITY_TARGET - quality_score, 4),
        "recommendation": QUALITY_RECOMMENDATIONS[grade],
        "interpretation": (
            f"Revenue quality score {quality_score:.2f} (grade {grade}); "
            f"{distribution['high_growth']:.1%} of revenue is high-growth and "
            f"{distribution['declining']:.1%} is declining."
        ),
    }


def support_efficiency_score(params: SupportEfficiencyInput) -> dict[str, Any]:
    """
    Support efficiency on a 0-1 scale.

    score = 0.4 × (0.7 × FCR + 0.3 × time_improvement) + 0.6 × SLA
    """
    prior = params.handling_time_prior
    if prior == 0:
        raise ArithmeticDomainError("handling_time_prior must be non-zero to compute handling time improvement")

    time_improvement = require_finite((prior - params.handling_time_current) / prior, "handling time improvement")
    resolution_component = 0.7 * params.fcr_current + 0.3 * time_improvement
    score = 0.4 * resolution_component + 0.6 * params.sla_compliance
    grade = classify(score, SUPPORT_EFFICIENCY_GRADE)

    return {
        "efficiency_score": round(score, 4),
        "grade": grade,
        "components": {
            "resolution": round(0.4 * resolution_component, 4),
            "sla": round(0.6 * params.sla_compliance, 4),
        },
        "time_improvement": round(time_improvement, 4),
        "fcr_current": params.fcr_current,
        "sla_compliance": params.sla_compliance,
        "interpretation": (
            f"{SUPPORT_INTERPRETATIONS[grade]} Handling time changed by {-time_improvement:+.1%} "
            f"with FCR at {params.fcr_current:.1%}."
        ),
    }


# ─── Registration ────────────────────────────────────────────────────────────


def register_business_calculators(catalog: ToolCatalog) -> None:
    """Register business health calculators."""
    definitions = [
        ToolDefinition(
            name="company_health_score",
            description=(
                "Comprehensive company health score (0-100) combining weighted dimensions: revenue growth (30%), "
                "SLA compliance (25%), modern revenue percentage (20%), customer satisfaction (15%) and pipeline "
                "coverage (10%). Without modern revenue and pipeline data a 3-dimension model is used "
                "(40/35/25). Returns components, weighted contributions, risk level (LOW/MEDIUM/HIGH/CRITICAL) "
                "and interpretation."
            ),
            input_model=CompanyHealthScoreInput,
            calculator=company_health_score,
        ),
        ToolDefinition(
            name="revenue_quality_score",
            description=(
                "Evaluate revenue quality by weighting high-growth (1.0), stable (0.7) and declining (0.0) revenue. "
                "Returns quality score (0-1), distribution, grade (A-F), recommendation and gap to the 0.75 benchmark."
            ),
            input_model=RevenueQualityScoreInput,
            calculator=revenue_quality_score,
        ),
        ToolDefinition(
            name="support_efficiency_score",
            description=(
                "Support efficiency score (0-1): 0.4 × (0.7 × first-contact resolution + 0.3 × handling time "
                "improvement) + 0.6 × SLA compliance. Returns score, grade (A-F) and components."
            ),
            input_model=SupportEfficiencyInput,
            calculator=support_efficiency_score,
        ),
    ]
    for definition in definitions:
        catalog.register(definition)
    logger.info("Registered %d business calculators", len(definitions))
