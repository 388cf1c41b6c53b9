"""Full match score for one student and one scholarship.

Combines the six dimension scores with fixed weights, then derives
success probability, effort, strategic value and priority tier.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone

from ..config import settings
from ..schemas import ScholarshipRecord, StudentProfile
from .probability import (
    SuccessTier,
    calculate_competition_factor,
    calculate_success_probability,
    classify_success_tier,
)
from .scorers import (
    score_academic,
    score_demographic,
    score_experience,
    score_financial,
    score_major_field,
    score_special,
)
from .strategic import (
    EffortLevel,
    PriorityTier,
    StrategicValueTier,
    assign_priority_tier,
    calculate_strategic_value,
    classify_strategic_value,
    estimate_effort_level,
    get_tier_rationale,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoringWeights:
    academic: float = 0.30
    demographic: float = 0.15
    major_field: float = 0.20
    experience: float = 0.15
    financial: float = 0.10
    special: float = 0.10


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass
class DimensionScores:
    academic: int
    demographic: int
    major_field: int
    experience: int
    financial: int
    special: int

    def weighted(self, weights: ScoringWeights = DEFAULT_WEIGHTS) -> int:
        return round(
            self.academic * weights.academic
            + self.demographic * weights.demographic
            + self.major_field * weights.major_field
            + self.experience * weights.experience
            + self.financial * weights.financial
            + self.special * weights.special
        )


@dataclass
class MatchScore:
    """Everything the matcher knows about one student/scholarship pair."""
    overall_match_score: int
    dimensions: DimensionScores
    competition_factor: float
    success_probability: int  # percentage
    success_tier: SuccessTier
    application_effort: EffortLevel
    effort_breakdown: dict[str, int]
    strategic_value: float
    strategic_value_tier: StrategicValueTier
    priority_tier: PriorityTier
    tier_rationale: str
    calculated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["calculated_at"] = self.calculated_at.isoformat()
        return data


def calculate_dimension_scores(
    profile: StudentProfile,
    scholarship: ScholarshipRecord,
    as_of: date | None = None,
) -> DimensionScores:
    criteria = scholarship.eligibility_criteria
    return DimensionScores(
        academic=score_academic(profile, criteria.academic),
        demographic=score_demographic(profile, criteria.demographic, as_of),
        major_field=score_major_field(profile, criteria.major_field),
        experience=score_experience(profile, criteria.experience, as_of),
        financial=score_financial(profile, criteria.financial),
        special=score_special(profile, criteria.special),
    )


def calculate_match_score(
    profile: StudentProfile,
    scholarship: ScholarshipRecord,
    as_of: date | None = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> MatchScore:
    """Score one scholarship for one student.

    Args:
        profile: Student profile
        scholarship: Scholarship with criteria and application requirements
        as_of: Reference date for age and ongoing work experience
        weights: Dimension weights (default 30/15/20/15/10/10)

    Returns:
        MatchScore with dimension scores, probability and tiers
    """
    dimensions = calculate_dimension_scores(profile, scholarship, as_of)
    overall = dimensions.weighted(weights)

    strength = profile.strength_score
    if strength is None:
        strength = settings.matching.default_strength_score

    competition = calculate_competition_factor(scholarship)
    probability = calculate_success_probability(overall, strength, competition)
    success = classify_success_tier(probability)

    effort = estimate_effort_level(
        scholarship.essay_prompts,
        scholarship.required_documents,
        scholarship.recommendation_count,
    )
    strategic_value = calculate_strategic_value(scholarship.award_amount, probability, effort.level)
    priority = assign_priority_tier(
        overall, probability / 100, strategic_value, scholarship.award_amount
    )

    logger.debug(
        f"Scored scholarship {scholarship.id}: match={overall}, "
        f"probability={probability}%, priority={priority.value}"
    )

    return MatchScore(
        overall_match_score=overall,
        dimensions=dimensions,
        competition_factor=competition,
        success_probability=probability,
        success_tier=success.tier,
        application_effort=effort.level,
        effort_breakdown=effort.breakdown(),
        strategic_value=round(strategic_value, 2),
        strategic_value_tier=classify_strategic_value(strategic_value),
        priority_tier=priority,
        tier_rationale=get_tier_rationale(
            priority, overall, probability / 100, strategic_value, scholarship.award_amount
        ),
    )
