"""Match scoring: dimension scores, success probability and priority tiers."""
from .match_score import (
    DEFAULT_WEIGHTS,
    DimensionScores,
    MatchScore,
    ScoringWeights,
    calculate_dimension_scores,
    calculate_match_score,
)
from .probability import (
    SuccessTier,
    SuccessTierResult,
    calculate_competition_factor,
    calculate_success_probability,
    classify_success_tier,
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

__all__ = [
    "DEFAULT_WEIGHTS",
    "DimensionScores",
    "EffortLevel",
    "MatchScore",
    "PriorityTier",
    "ScoringWeights",
    "StrategicValueTier",
    "SuccessTier",
    "SuccessTierResult",
    "assign_priority_tier",
    "calculate_competition_factor",
    "calculate_dimension_scores",
    "calculate_match_score",
    "calculate_strategic_value",
    "calculate_success_probability",
    "classify_strategic_value",
    "classify_success_tier",
    "estimate_effort_level",
    "get_tier_rationale",
]
