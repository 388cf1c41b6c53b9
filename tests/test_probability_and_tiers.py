"""Unit tests for competition, success probability, effort and priority tiers."""
import pytest

from scholarmatch.schemas import ScholarshipRecord
from scholarmatch.scoring import (
    EffortLevel,
    PriorityTier,
    StrategicValueTier,
    SuccessTier,
    assign_priority_tier,
    calculate_competition_factor,
    calculate_strategic_value,
    calculate_success_probability,
    classify_strategic_value,
    classify_success_tier,
    estimate_effort_level,
    get_tier_rationale,
)


class TestCompetitionFactor:
    @pytest.mark.parametrize(
        "fields, expected",
        [
            ({"acceptance_rate": 0.5}, 0.5),
            ({"acceptance_rate": 0.01}, 0.05),
            ({"acceptance_rate": 0.99}, 0.95),
            ({"applicant_pool_size": 2000, "number_of_awards": 10}, 0.5),
            ({"applicant_pool_size": 1000, "number_of_awards": 10}, 0.8),
            ({"applicant_pool_size": 10000, "number_of_awards": 1}, 0.05),
            ({"applicant_pool_size": 0}, 0.3),
            ({}, 0.3),
        ],
    )
    def test_factor(self, fields, expected):
        scholarship = ScholarshipRecord(id=1, **fields)
        assert calculate_competition_factor(scholarship) == pytest.approx(expected)

    def test_published_rate_wins_over_pool(self):
        scholarship = ScholarshipRecord(id=1, acceptance_rate=0.2, applicant_pool_size=100, number_of_awards=50)
        assert calculate_competition_factor(scholarship) == pytest.approx(0.2)


class TestSuccessProbability:
    @pytest.mark.parametrize(
        "match, strength, competition, expected",
        [
            (80, 50, 0.5, 40),
            (80, 90, 0.5, 80),
            (100, 100, 0.95, 95),
            (10, 0, 0.05, 5),
        ],
    )
    def test_probability(self, match, strength, competition, expected):
        assert calculate_success_probability(match, strength, competition) == expected

    @pytest.mark.parametrize(
        "probability, tier",
        [
            (95, SuccessTier.STRONG_MATCH),
            (70, SuccessTier.STRONG_MATCH),
            (69, SuccessTier.COMPETITIVE_MATCH),
            (40, SuccessTier.COMPETITIVE_MATCH),
            (39, SuccessTier.REACH),
            (10, SuccessTier.REACH),
            (9, SuccessTier.LONG_SHOT),
        ],
    )
    def test_tier_thresholds(self, probability, tier):
        assert classify_success_tier(probability).tier == tier

    def test_tier_display(self):
        result = classify_success_tier(72)
        assert result.display() == "72% success probability - Strong Match"
        assert result.description == "Apply immediately, high confidence"


class TestEffort:
    @pytest.mark.parametrize(
        "essays, documents, recommendations, level",
        [
            (None, [], 0, EffortLevel.LOW),
            (["a"], ["transcript"], 0, EffortLevel.LOW),
            (["a", "b"], [], 0, EffortLevel.MEDIUM),
            ([], ["a", "b", "c"], 0, EffortLevel.MEDIUM),
            ([], [], 1, EffortLevel.MEDIUM),
            (["a", "b", "c"], [], 0, EffortLevel.HIGH),
            ([], ["a", "b", "c", "d", "e"], 0, EffortLevel.HIGH),
            ([], [], 2, EffortLevel.HIGH),
            ({"prompts": ["a", "b", "c"]}, [], 0, EffortLevel.HIGH),
        ],
    )
    def test_levels(self, essays, documents, recommendations, level):
        assert estimate_effort_level(essays, documents, recommendations).level == level

    def test_breakdown(self):
        estimate = estimate_effort_level(["a", "b"], ["transcript"], 1)
        assert estimate.breakdown() == {"essays": 2, "documents": 1, "recommendations": 1}
        assert estimate.multiplier == 0.7


class TestStrategicValue:
    @pytest.mark.parametrize(
        "effort, expected",
        [(EffortLevel.LOW, 5.0), (EffortLevel.MEDIUM, 3.5), (EffortLevel.HIGH, 2.0)],
    )
    def test_effort_multiplier(self, effort, expected):
        assert calculate_strategic_value(10000, 50, effort) == pytest.approx(expected)

    def test_capped_at_ten(self):
        assert calculate_strategic_value(100000, 90, EffortLevel.LOW) == 10.0

    def test_nothing_to_win(self):
        assert calculate_strategic_value(0, 90, EffortLevel.LOW) == 0.0
        assert calculate_strategic_value(5000, 0, EffortLevel.LOW) == 0.0

    @pytest.mark.parametrize(
        "value, tier",
        [
            (10.0, StrategicValueTier.BEST_BET),
            (5.0, StrategicValueTier.BEST_BET),
            (4.99, StrategicValueTier.HIGH_VALUE),
            (3.0, StrategicValueTier.HIGH_VALUE),
            (1.5, StrategicValueTier.MEDIUM_VALUE),
            (1.49, StrategicValueTier.LOW_VALUE),
            (0.0, StrategicValueTier.LOW_VALUE),
        ],
    )
    def test_tiers(self, value, tier):
        assert classify_strategic_value(value) == tier


class TestPriorityTier:
    @pytest.mark.parametrize(
        "match, probability, value, award, tier",
        [
            (92, 0.75, 3.5, 5000, PriorityTier.MUST_APPLY),
            (92, 0.75, 2.0, 5000, PriorityTier.SHOULD_APPLY),
            (80, 0.45, 1.0, 1000, PriorityTier.SHOULD_APPLY),
            (60, 0.20, 1.0, 15000, PriorityTier.HIGH_VALUE_REACH),
            (60, 0.30, 1.0, 15000, PriorityTier.IF_TIME_PERMITS),
            (80, 0.30, 1.0, 2000, PriorityTier.IF_TIME_PERMITS),
        ],
    )
    def test_assignment(self, match, probability, value, award, tier):
        assert assign_priority_tier(match, probability, value, award) == tier

    def test_rationale(self):
        text = get_tier_rationale(PriorityTier.SHOULD_APPLY, 80, 0.45, 1.2, 5000)
        assert text == (
            "SHOULD_APPLY: 80 match, $5,000 award, 45% success probability"
            " - Strong match with competitive probability"
        )

    def test_must_apply_rationale_mentions_strategic_value(self):
        text = get_tier_rationale(PriorityTier.MUST_APPLY, 95, 0.8, 4.3, 12000)
        assert text.startswith("MUST_APPLY: 95 match, $12,000 award, 80% success probability, 4.3 strategic value")
