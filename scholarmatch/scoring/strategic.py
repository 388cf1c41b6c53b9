"""Application effort, strategic value and priority tiers.

Strategic value is expected award dollars per unit of effort, in
thousands, capped at 10. Priority tiers combine it with match score and
success probability into a single "what to apply for first" signal.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class EffortLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


EFFORT_MULTIPLIERS = {
    EffortLevel.LOW: 1.0,
    EffortLevel.MEDIUM: 0.7,
    EffortLevel.HIGH: 0.4,
}

MAX_STRATEGIC_VALUE = 10.0


@dataclass
class EffortEstimate:
    level: EffortLevel
    essays: int
    documents: int
    recommendations: int

    @property
    def multiplier(self) -> float:
        return EFFORT_MULTIPLIERS[self.level]

    def breakdown(self) -> dict[str, int]:
        return {
            "essays": self.essays,
            "documents": self.documents,
            "recommendations": self.recommendations,
        }


def count_essays(essay_prompts: Any) -> int:
    """Essay count from a prompt list or a ``{"prompts": [...]}`` object."""
    if isinstance(essay_prompts, list):
        return len(essay_prompts)
    if isinstance(essay_prompts, dict) and isinstance(essay_prompts.get("prompts"), list):
        return len(essay_prompts["prompts"])
    return 0


def estimate_effort_level(
    essay_prompts: Any,
    required_documents: list[str] | None,
    recommendation_count: int | None,
) -> EffortEstimate:
    essays = count_essays(essay_prompts)
    documents = len(required_documents or [])
    recommendations = recommendation_count or 0

    if essays >= 3 or documents >= 5 or recommendations >= 2:
        level = EffortLevel.HIGH
    elif essays >= 2 or 3 <= documents <= 4 or recommendations >= 1:
        level = EffortLevel.MEDIUM
    else:
        level = EffortLevel.LOW

    return EffortEstimate(level, essays, documents, recommendations)


def calculate_strategic_value(
    award_amount: float,
    success_probability: float,
    effort_level: EffortLevel,
) -> float:
    """Effort-adjusted expected value in thousands of dollars, 0-10.

    Args:
        award_amount: Award in dollars
        success_probability: Probability as a percentage (0-100)
        effort_level: Estimated application effort

    Returns:
        Strategic value; 0 when the award or probability is not positive
    """
    if award_amount <= 0 or success_probability <= 0:
        return 0.0
    expected = award_amount * success_probability / 100
    return min(expected * EFFORT_MULTIPLIERS[effort_level] / 1000, MAX_STRATEGIC_VALUE)


class StrategicValueTier(str, Enum):
    BEST_BET = "BEST_BET"
    HIGH_VALUE = "HIGH_VALUE"
    MEDIUM_VALUE = "MEDIUM_VALUE"
    LOW_VALUE = "LOW_VALUE"


STRATEGIC_THRESHOLDS = (
    (5.0, StrategicValueTier.BEST_BET),
    (3.0, StrategicValueTier.HIGH_VALUE),
    (1.5, StrategicValueTier.MEDIUM_VALUE),
)


def classify_strategic_value(strategic_value: float) -> StrategicValueTier:
    for threshold, tier in STRATEGIC_THRESHOLDS:
        if strategic_value >= threshold:
            return tier
    return StrategicValueTier.LOW_VALUE


class PriorityTier(str, Enum):
    MUST_APPLY = "MUST_APPLY"
    SHOULD_APPLY = "SHOULD_APPLY"
    IF_TIME_PERMITS = "IF_TIME_PERMITS"
    HIGH_VALUE_REACH = "HIGH_VALUE_REACH"


def assign_priority_tier(
    match_score: float,
    success_probability: float,
    strategic_value: float,
    award_amount: float,
) -> PriorityTier:
    """Coarse application priority.

    ``success_probability`` is a fraction (0-1) here, not a percentage.
    """
    if match_score >= 90 and success_probability >= 0.7 and strategic_value >= 3.0:
        return PriorityTier.MUST_APPLY
    if match_score >= 75 and success_probability >= 0.4:
        return PriorityTier.SHOULD_APPLY
    if award_amount >= 10000 and success_probability < 0.25:
        return PriorityTier.HIGH_VALUE_REACH
    return PriorityTier.IF_TIME_PERMITS


_TIER_REASONS = {
    PriorityTier.MUST_APPLY: "Exceptional match with high probability and strong ROI",
    PriorityTier.SHOULD_APPLY: "Strong match with competitive probability",
    PriorityTier.HIGH_VALUE_REACH: "High-value opportunity worth the calculated risk",
    PriorityTier.IF_TIME_PERMITS: "Decent match, apply if time allows",
}


def get_tier_rationale(
    tier: PriorityTier,
    match_score: float,
    success_probability: float,
    strategic_value: float,
    award_amount: float,
) -> str:
    """One-line explanation, e.g. "SHOULD_APPLY: 80 match, $5,000 award, 45% ..."."""
    base = (
        f"{round(match_score)} match, ${award_amount:,.0f} award, "
        f"{round(success_probability * 100)}% success probability"
    )
    if tier == PriorityTier.MUST_APPLY:
        base += f", {strategic_value:.1f} strategic value"
    return f"{tier.value}: {base} - {_TIER_REASONS[tier]}"
