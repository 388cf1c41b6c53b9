"""Unit tests for dimension scorers and the combined match score."""
from datetime import date

import pytest

from scholarmatch.schemas import (
    AcademicCriteria,
    DemographicCriteria,
    ExperienceCriteria,
    FinancialCriteria,
    MajorFieldCriteria,
    ScholarshipRecord,
    SpecialCriteria,
    StudentProfile,
)
from scholarmatch.scoring import (
    DimensionScores,
    EffortLevel,
    PriorityTier,
    ScoringWeights,
    StrategicValueTier,
    SuccessTier,
    calculate_match_score,
)
from scholarmatch.scoring.scorers import (
    score_academic,
    score_demographic,
    score_experience,
    score_financial,
    score_major_field,
    score_special,
)


class TestAcademicScore:
    def test_no_criteria_scores_full(self):
        assert score_academic(StudentProfile(), None) == 100
        assert score_academic(StudentProfile(), AcademicCriteria()) == 100

    def test_near_miss_gets_partial_credit(self):
        assert score_academic(StudentProfile(gpa=3.3), AcademicCriteria(min_gpa=3.5)) == 94

    def test_over_maximum_is_penalized(self):
        assert score_academic(StudentProfile(gpa=3.9), AcademicCriteria(max_gpa=3.5)) == 92

    def test_missing_test_score_scores_zero_for_that_part(self):
        profile = StudentProfile(gpa=3.8)
        assert score_academic(profile, AcademicCriteria(min_gpa=3.5, min_sat=1200)) == 57

    def test_class_rank_only(self):
        profile = StudentProfile(class_rank=20, class_size=100)
        assert score_academic(profile, AcademicCriteria(class_rank_percentile=10)) == 50
        profile = StudentProfile(class_rank=8, class_size=100)
        assert score_academic(profile, AcademicCriteria(class_rank_percentile=10)) == 100


class TestDemographicScore:
    def test_mean_of_checks(self):
        profile = StudentProfile(gender="female", state="TX")
        crit = DemographicCriteria(required_gender="Female", required_state=["CA"])
        assert score_demographic(profile, crit) == 50

    def test_age_over_maximum(self):
        profile = StudentProfile(date_of_birth=date(2004, 1, 1))
        crit = DemographicCriteria(age_max=18)
        assert score_demographic(profile, crit, as_of=date(2024, 6, 1)) == 80


class TestMajorFieldScore:
    @pytest.mark.parametrize(
        "major, eligible, expected",
        [
            ("Biology", ["biology"], 100),
            ("Computer Science", ["Computer Science and Engineering"], 75),
            ("Biology", ["Chemistry"], 50),
            ("History", ["Chemistry"], 0),
        ],
    )
    def test_eligible_major_credit(self, major, eligible, expected):
        profile = StudentProfile(intended_major=major)
        assert score_major_field(profile, MajorFieldCriteria(eligible_majors=eligible)) == expected

    def test_excluded_major_scores_zero(self):
        profile = StudentProfile(intended_major="Business")
        crit = MajorFieldCriteria(eligible_majors=["Business"], excluded_majors=["business"])
        assert score_major_field(profile, crit) == 0

    def test_career_keywords(self):
        profile = StudentProfile(career_goals="I want to be a doctor")
        crit = MajorFieldCriteria(career_goals_keywords=["doctor", "nurse"])
        assert score_major_field(profile, crit) == 60


class TestExperienceScore:
    def test_volunteer_hours_ratio(self):
        profile = StudentProfile(volunteer_hours=50)
        assert score_experience(profile, ExperienceCriteria(min_volunteer_hours=100)) == 50

    def test_activity_share(self):
        profile = StudentProfile(extracurriculars=[{"name": "Robotics Club"}])
        crit = ExperienceCriteria(required_extracurriculars=["Debate", "Robotics"])
        assert score_experience(profile, crit) == 50

    def test_leadership_and_awards(self, strong_profile):
        crit = ExperienceCriteria(leadership_required=True, awards_honors_required=True)
        assert score_experience(strong_profile, crit) == 100
        assert score_experience(StudentProfile(), crit) == 0


class TestFinancialScore:
    def test_low_need_against_need_requirement(self):
        profile = StudentProfile(financial_need="LOW")
        assert score_financial(profile, FinancialCriteria(requires_financial_need=True)) == 50

    def test_need_level_ratio(self):
        profile = StudentProfile(financial_need="MODERATE")
        assert score_financial(profile, FinancialCriteria(financial_need_level="HIGH")) == 67

    def test_efc_over_ceiling(self):
        profile = StudentProfile(efc_range="0-10000")
        assert score_financial(profile, FinancialCriteria(max_efc=5000)) == 50


class TestSpecialScore:
    def test_related_military_affiliation(self):
        profile = StudentProfile(military_affiliation="Active Duty")
        assert score_special(profile, SpecialCriteria(military_affiliation="Veteran")) == 75

    def test_required_none_affiliation(self):
        assert score_special(StudentProfile(), SpecialCriteria(military_affiliation="None")) == 100

    @pytest.mark.parametrize(
        "actual, required, expected",
        [
            ("US Citizen", "US Citizen", 100),
            ("Permanent Resident", "US Citizen", 50),
            ("US Citizen", "Permanent Resident", 100),
            ("International", "US Citizen", 0),
            (None, "US Citizen", 0),
        ],
    )
    def test_citizenship(self, actual, required, expected):
        profile = StudentProfile(citizenship=actual)
        assert score_special(profile, SpecialCriteria(citizenship_required=required)) == expected


class TestMatchScore:
    """Combined score, probability, effort and priority."""

    def test_dimension_weights(self):
        assert DimensionScores(100, 0, 0, 0, 0, 0).weighted() == 30
        assert DimensionScores(90, 80, 70, 60, 50, 40).weighted() == 71

        academic_only = ScoringWeights(1.0, 0.0, 0.0, 0.0, 0.0, 0.0)
        assert DimensionScores(42, 0, 0, 0, 0, 0).weighted(academic_only) == 42

    def test_open_scholarship_with_average_profile(self):
        scholarship = ScholarshipRecord(id=1, award_amount=5000)
        score = calculate_match_score(StudentProfile(), scholarship)

        assert score.overall_match_score == 100
        assert score.competition_factor == 0.3
        assert score.success_probability == 30
        assert score.success_tier == SuccessTier.REACH
        assert score.application_effort == EffortLevel.LOW
        assert score.strategic_value == 1.5
        assert score.strategic_value_tier == StrategicValueTier.MEDIUM_VALUE
        assert score.priority_tier == PriorityTier.IF_TIME_PERMITS
        assert score.tier_rationale == (
            "IF_TIME_PERMITS: 100 match, $5,000 award, 30% success probability"
            " - Decent match, apply if time allows"
        )

    def test_strong_candidate(self, strong_profile):
        scholarship = ScholarshipRecord(
            id=2,
            award_amount=20000,
            acceptance_rate=0.5,
            essay_prompts=["Why this field?"],
            eligibility_criteria={
                "academic": {"minGPA": 3.5},
                "majorField": {"eligibleMajors": ["Biology"]},
            },
        )
        score = calculate_match_score(strong_profile, scholarship)

        assert score.overall_match_score == 100
        assert score.success_probability == 60
        assert score.success_tier == SuccessTier.COMPETITIVE_MATCH
        assert score.effort_breakdown == {"essays": 1, "documents": 0, "recommendations": 0}
        assert score.strategic_value == 10.0
        assert score.strategic_value_tier == StrategicValueTier.BEST_BET
        assert score.priority_tier == PriorityTier.SHOULD_APPLY

    def test_to_dict(self):
        data = calculate_match_score(StudentProfile(), ScholarshipRecord(id=1)).to_dict()
        assert data["dimensions"] == {
            "academic": 100,
            "demographic": 100,
            "major_field": 100,
            "experience": 100,
            "financial": 100,
            "special": 100,
        }
        assert isinstance(data["calculated_at"], str)
