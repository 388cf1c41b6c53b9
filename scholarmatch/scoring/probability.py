"""Success probability and success tiers.

Probability starts from the match score, is scaled by how competitive the
scholarship is, then nudged by the student's overall profile strength.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

DEFAULT_COMPETITION_FACTOR = 0.3
MIN_COMPETITION_FACTOR = 0.05
MAX_COMPETITION_FACTOR = 0.95
MAX_POOL_ESTIMATE = 0.8

MIN_PROBABILITY = 0.05
MAX_PROBABILITY = 0.95


class CompetitionData(Protocol):
    acceptance_rate: float | None
    applicant_pool_size: int | None
    number_of_awards: int


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def calculate_competition_factor(scholarship: CompetitionData) -> float:
    """Estimated acceptance rate in 0.05-0.95.

    A published acceptance rate wins. Otherwise the rate is estimated from
    the applicant pool size and capped at 0.8. With neither, 0.3.
    """
    if scholarship.acceptance_rate is not None:
        return _clamp(scholarship.acceptance_rate, MIN_COMPETITION_FACTOR, MAX_COMPETITION_FACTOR)

    pool = scholarship.applicant_pool_size
    if pool is not None:
        if pool <= 0:
            return DEFAULT_COMPETITION_FACTOR
        if scholarship.number_of_awards <= 0:
            return MIN_COMPETITION_FACTOR
        estimate = scholarship.number_of_awards * 100 / pool
        return _clamp(estimate, MIN_COMPETITION_FACTOR, MAX_POOL_ESTIMATE)

    return DEFAULT_COMPETITION_FACTOR


def calculate_success_probability(
    match_score: float,
    strength_score: float,
    competition_factor: float,
) -> int:
    """Success probability as a whole percentage in 5-95."""
    probability = match_score / 100 * competition_factor
    probability += (strength_score - 50) / 100
    return round(_clamp(probability, MIN_PROBABILITY, MAX_PROBABILITY) * 100)


class SuccessTier(str, Enum):
    STRONG_MATCH = "STRONG_MATCH"
    COMPETITIVE_MATCH = "COMPETITIVE_MATCH"
    REACH = "REACH"
    LONG_SHOT = "LONG_SHOT"


TIER_THRESHOLDS = (
    (70, SuccessTier.STRONG_MATCH),
    (40, SuccessTier.COMPETITIVE_MATCH),
    (10, SuccessTier.REACH),
)

TIER_METADATA = {
    SuccessTier.STRONG_MATCH: ("Strong Match", "Apply immediately, high confidence"),
    SuccessTier.COMPETITIVE_MATCH: ("Competitive Match", "Solid opportunity, worth effort"),
    SuccessTier.REACH: ("Reach", "Long shot, but possible"),
    SuccessTier.LONG_SHOT: ("Long-Shot", "Very competitive, consider if high value"),
}


@dataclass
class SuccessTierResult:
    tier: SuccessTier
    probability: int
    label: str
    description: str

    def display(self) -> str:
        return f"{self.probability}% success probability - {self.label}"


def classify_success_tier(probability: int) -> SuccessTierResult:
    """Map a success probability percentage to its tier."""
    tier = SuccessTier.LONG_SHOT
    for threshold, candidate in TIER_THRESHOLDS:
        if probability >= threshold:
            tier = candidate
            break
    label, description = TIER_METADATA[tier]
    return SuccessTierResult(tier=tier, probability=probability, label=label, description=description)
