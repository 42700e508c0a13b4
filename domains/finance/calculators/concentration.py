"""
Concentration Calculators — How evenly revenue is spread across segments.

Functions:
- hhi_and_diversification: Herfindahl-Hirschman index, diversification, effective segment count
- gini_coefficient: Gini inequality of segment revenues
"""

import logging
import math
from typing import Any

from domains.finance.calculators.guards import finite_sum
from domains.finance.catalog import ToolCatalog, ToolDefinition
from domains.finance.classifiers import GINI_CONCENTRATION, HHI_RISK, classify
from domains.finance.schemas import RevenueListInput
from shared.errors import ArithmeticDomainError

logger = logging.getLogger(__name__)

DOMINANT_SEGMENT_SHARE = 0.50
SEVERE_HHI = 0.35
MIN_EFFECTIVE_SEGMENTS = 3.0


def _total(revenues: list[float]) -> float:
    total = finite_sum(revenues, "total revenue")
    if total == 0:
        raise ArithmeticDomainError("total revenue must be positive; all revenues are zero")
    return total


def hhi_and_diversification(params: RevenueListInput) -> dict[str, Any]:
    """
    HHI = Σ share², diversification = 1 − HHI, effective segments = 1 / HHI.

    market_shares are reported in input order and unrounded.
    """
    revenues = list(params.revenues)
    total = _total(revenues)

    market_shares = [revenue / total for revenue in revenues]
    ordered_shares = sorted(market_shares)
    hhi = math.fsum(share * share for share in ordered_shares)
    diversification_score = 1.0 - hhi
    effective_n = 1.0 / hhi
    largest_share = ordered_shares[-1]

    risk_level = classify(hhi, HHI_RISK)

    concentration_issues = []
    if largest_share > DOMINANT_SEGMENT_SHARE:
        concentration_issues.append(f"Single segment dominance: {largest_share * 100:.1f}% of revenue")
    if hhi > SEVERE_HHI:
        concentration_issues.append(f"HHI exceeds {SEVERE_HHI} indicating severe concentration")
    if effective_n < MIN_EFFECTIVE_SEGMENTS:
        concentration_issues.append(
            f"Effective segment count ({effective_n:.1f}) is below recommended minimum of {MIN_EFFECTIVE_SEGMENTS:.0f}"
        )

    return {
        "hhi": hhi,
        "diversification_score": diversification_score,
        "effective_segments": effective_n,
        "risk_level": risk_level,
        "market_shares": market_shares,
        "largest_share": largest_share,
        "concentration_issues": concentration_issues,
        "interpretation": (
            f"Revenue concentration is {risk_level.lower()} with HHI of {hhi:.3f}. "
            f"The portfolio behaves like {effective_n:.1f} equal-sized segments."
        ),
    }


def gini_coefficient(params: RevenueListInput) -> dict[str, Any]:
    """
    Gini = 2·Σ(i·r_i) / (n·Σr) − (n + 1) / n over revenues sorted ascending (i from 1).
    """
    sorted_revenues = sorted(params.revenues)
    total = _total(sorted_revenues)
    n = len(sorted_revenues)

    # Same formula over shares (r / Σr), which stay in [0, 1] for any finite total
    weighted_shares = math.fsum((i + 1) * (revenue / total) for i, revenue in enumerate(sorted_revenues))
    gini = 2.0 * weighted_shares / n - (n + 1) / n
    # Float noise can push perfectly equal inputs a hair outside [0, 1]
    gini = min(max(gini, 0.0), 1.0)
    diversification_score = 1.0 - gini

    largest_share = sorted_revenues[-1] / total * 100.0
    smallest_share = sorted_revenues[0] / total * 100.0
    effective_segments = 1.0 / (gini + 0.0001) if gini > 0 else float(n)

    concentration_level = classify(gini, GINI_CONCENTRATION)

    return {
        "gini_coefficient": round(gini, 3),
        "diversification_score": round(diversification_score, 3),
        "concentration_level": concentration_level,
        "largest_segment_share": round(largest_share, 1),
        "smallest_segment_share": round(smallest_share, 1),
        "effective_segments": round(effective_segments, 2),
        "sorted_revenues": [round(revenue, 2) for revenue in sorted_revenues],
        "interpretation": (
            f"{concentration_level} revenue inequality (Gini {gini:.3f}); the largest segment holds "
            f"{largest_share:.1f}% and the smallest {smallest_share:.1f}% of revenue."
        ),
    }


# ─── Registration ────────────────────────────────────────────────────────────


def register_concentration_calculators(catalog: ToolCatalog) -> None:
    """Register revenue concentration calculators."""
    definitions = [
        ToolDefinition(
            name="hhi_and_diversification",
            description=(
                "Herfindahl-Hirschman Index and diversification metrics for a list of segment revenues. "
                "Returns HHI, diversification score, effective number of segments, market shares, risk level "
                "(LOW <0.15, MEDIUM 0.15-0.25, HIGH >0.25) and concentration issues."
            ),
            input_model=RevenueListInput,
            calculator=hhi_and_diversification,
        ),
        ToolDefinition(
            name="gini_coefficient",
            description=(
                "Gini coefficient of revenue concentration across segments (0 = perfectly equal, 1 = fully "
                "concentrated). Returns diversification score, concentration level (Low/Moderate/High), "
                "largest and smallest segment shares and effective segments."
            ),
            input_model=RevenueListInput,
            calculator=gini_coefficient,
        ),
    ]
    for definition in definitions:
        catalog.register(definition)
    logger.info("Registered %d concentration calculators", len(definitions))
