"""
Classifier Tables — Threshold-to-label lookups shared by all calculators.

A table is an ordered set of bands scanned from the top. A band matches when
the value is above its threshold, or equal to it when the band is inclusive.
Values falling through every band get the table floor label.

Each threshold is defined exactly once, here.
"""

from __future__ import annotations

from typing import NamedTuple

# Absorbs float noise such as 0.09 / 0.06 == 1.4999999999999998
_BOUNDARY_PRECISION = 9


class Band(NamedTuple):
    threshold: float
    label: str
    inclusive: bool = True


class RatingTable(NamedTuple):
    name: str
    bands: tuple[Band, ...]
    floor: str

    def labels(self) -> list[str]:
        return [band.label for band in self.bands] + [self.floor]


def classify(value: float, table: RatingTable) -> str:
    """Resolve the label for value in table."""
    v = round(value, _BOUNDARY_PRECISION)
    for band in table.bands:
        if v > band.threshold or (band.inclusive and v == band.threshold):
            return band.label
    return table.floor


# ─── Scores (0-100) ───────────────────────────────────────────

HEALTH_RISK = RatingTable(
    name="health_risk",
    bands=(
        Band(80.0, "LOW"),
        Band(65.0, "MEDIUM"),
        Band(50.0, "HIGH"),
    ),
    floor="CRITICAL",
)

# ─── Letter grades (0-1 scores) ───────────────────────────────

REVENUE_QUALITY_GRADE = RatingTable(
    name="revenue_quality_grade",
    bands=(
        Band(0.80, "A"),
        Band(0.65, "B"),
        Band(0.50, "C"),
        Band(0.35, "D"),
    ),
    floor="F",
)

SUPPORT_EFFICIENCY_GRADE = RatingTable(
    name="support_efficiency_grade",
    bands=(
        Band(0.90, "A"),
        Band(0.80, "B"),
        Band(0.70, "C"),
        Band(0.60, "D"),
    ),
    floor="F",
)

# ─── Concentration ────────────────────────────────────────────

HHI_RISK = RatingTable(
    name="hhi_risk",
    bands=(
        Band(0.25, "HIGH", inclusive=False),
        Band(0.15, "MEDIUM"),
    ),
    floor="LOW",
)

GINI_CONCENTRATION = RatingTable(
    name="gini_concentration",
    bands=(
        Band(0.40, "High", inclusive=False),
        Band(0.25, "Moderate"),
    ),
    floor="Low",
)

# ─── Efficiency / growth ratings ──────────────────────────────

OPERATING_LEVERAGE_EFFICIENCY = RatingTable(
    name="operating_leverage_efficiency",
    bands=(
        Band(1.5, "Excellent"),
        Band(1.2, "Good"),
        Band(1.0, "Adequate"),
    ),
    floor="Poor",
)

MOMENTUM_RATING = RatingTable(
    name="momentum_rating",
    bands=(
        Band(0.10, "Strong", inclusive=False),
        Band(0.05, "Moderate"),
        Band(0.0, "Weak"),
    ),
    floor="Declining",
)

ORGANIC_GROWTH_RATING = RatingTable(
    name="organic_growth_rating",
    bands=(
        Band(0.15, "Exceptional", inclusive=False),
        Band(0.10, "Strong"),
        Band(0.05, "Moderate"),
        Band(0.0, "Weak"),
    ),
    floor="Declining",
)

SEGMENT_TRANSITION = RatingTable(
    name="segment_transition",
    bands=(
        Band(3.0, "Successful", inclusive=False),
        Band(1.0, "Progressing"),
    ),
    floor="Failing",
)

LIFECYCLE_STAGE = RatingTable(
    name="lifecycle_stage",
    bands=(
        Band(0.15, "High", inclusive=False),
        Band(0.0, "Mature"),
    ),
    floor="Declining",
)

# Portfolio quality combines two shares, so it is a rule list rather than a band table:
# (label, min high-growth share (exclusive), max declining share (exclusive) or None)
LIFECYCLE_QUALITY_RULES: tuple[tuple[str, float, float | None], ...] = (
    ("Excellent", 0.40, 0.20),
    ("Good", 0.30, 0.25),
    ("Fair", 0.20, None),
)
LIFECYCLE_QUALITY_FLOOR = "Poor"


def classify_lifecycle_quality(high_growth_share: float, declining_share: float) -> str:
    high = round(high_growth_share, _BOUNDARY_PRECISION)
    declining = round(declining_share, _BOUNDARY_PRECISION)
    for label, min_high, max_declining in LIFECYCLE_QUALITY_RULES:
        if high > min_high and (max_declining is None or declining < max_declining):
            return label
    return LIFECYCLE_QUALITY_FLOOR


# ─── Constants used next to the tables ────────────────────────

REVENUE_QUALITY_TARGET = 0.75
ATTRIBUTION_TOLERANCE = 0.0001  # ±0.01% of total change

ALL_TABLES: dict[str, RatingTable] = {
    table.name: table
    for table in (
        HEALTH_RISK,
        REVENUE_QUALITY_GRADE,
        SUPPORT_EFFICIENCY_GRADE,
        HHI_RISK,
        GINI_CONCENTRATION,
        OPERATING_LEVERAGE_EFFICIENCY,
        MOMENTUM_RATING,
        ORGANIC_GROWTH_RATING,
        SEGMENT_TRANSITION,
        LIFECYCLE_STAGE,
    )
}
