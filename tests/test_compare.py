"""Unit tests for the eligibility checklist."""
from datetime import date

import pytest

from scholarmatch.eligibility import EligibilityStatus, compare_eligibility
from scholarmatch.schemas import EligibilityCriteria, StudentProfile


def criteria(**dimensions) -> EligibilityCriteria:
    return EligibilityCriteria.model_validate(dimensions)


def only_row(profile, crit, **kwargs):
    rows = compare_eligibility(profile, crit, **kwargs)
    assert len(rows) == 1
    return rows[0]


class TestCompareEligibility:
    """Row content and statuses."""

    def test_no_criteria_gives_no_rows(self, strong_profile):
        assert compare_eligibility(strong_profile, None) == []
        assert compare_eligibility(strong_profile, EligibilityCriteria()) == []

    def test_gpa_row(self):
        row = only_row(StudentProfile(gpa=3.8), criteria(academic={"minGPA": 3.5}))
        assert row.category == "Academic"
        assert row.requirement == "GPA: 3.5+"
        assert row.student_value == "You: 3.8"
        assert row.status == EligibilityStatus.MET

    def test_missing_value_is_not_provided(self):
        row = only_row(StudentProfile(), criteria(academic={"minSAT": 1200}))
        assert row.student_value == "Not provided"
        assert row.status == EligibilityStatus.NOT_MET

    def test_class_rank_row(self):
        profile = StudentProfile(class_rank=5, class_size=100)
        row = only_row(profile, criteria(academic={"classRankPercentile": 10}))
        assert row.requirement == "Class rank: top 10%"
        assert row.student_value == "You: rank 5 of 100 (top 5%, 96th percentile)"
        assert row.status == EligibilityStatus.MET

    def test_evaluates_every_criterion(self):
        profile = StudentProfile(gpa=3.0, state="TX", financial_need="LOW")
        crit = criteria(
            academic={"minGPA": 3.5},
            demographic={"requiredState": ["CA"]},
            financial={"requiresFinancialNeed": True},
            special={"firstGenerationRequired": True},
        )
        rows = compare_eligibility(profile, crit)
        assert [r.category for r in rows] == ["Academic", "Demographic", "Financial", "Special"]
        assert all(r.status == EligibilityStatus.NOT_MET for r in rows)
        assert rows[3].student_value == "Not provided"

    def test_one_of_row_joins_options(self):
        row = only_row(
            StudentProfile(intended_major="nursing"),
            criteria(majorField={"eligibleMajors": ["Nursing", "Pharmacy"]}),
        )
        assert row.category == "Major/Field"
        assert row.requirement == "Major: Nursing or Pharmacy"
        assert row.status == EligibilityStatus.MET

    def test_age_row(self):
        profile = StudentProfile(date_of_birth=date(2006, 1, 10))
        row = only_row(profile, criteria(demographic={"ageMax": 18}), as_of=date(2025, 1, 9))
        assert row.requirement == "Age: any-18"
        assert row.student_value == "You: 18"
        assert row.status == EligibilityStatus.MET

    def test_efc_row(self):
        row = only_row(StudentProfile(efc_range="10000+"), criteria(financial={"maxEFC": 5000}))
        assert row.requirement == "EFC: at most $5,000"
        assert row.student_value == "10000+"
        assert row.status == EligibilityStatus.NOT_MET

    def test_military_without_affiliation(self):
        row = only_row(StudentProfile(), criteria(special={"militaryAffiliation": "Veteran"}))
        assert row.student_value == "None"
        assert row.status == EligibilityStatus.NOT_MET


class TestVolunteerHours:
    """Volunteer hours are the one requirement with partial credit."""

    @pytest.mark.parametrize(
        "hours, status, percentage",
        [
            (120, EligibilityStatus.MET, 120.0),
            (100, EligibilityStatus.MET, 100.0),
            (75, EligibilityStatus.PARTIALLY_MET, 75.0),
            (70, EligibilityStatus.PARTIALLY_MET, 70.0),
            (50, EligibilityStatus.NOT_MET, 50.0),
        ],
    )
    def test_statuses(self, hours, status, percentage):
        row = only_row(StudentProfile(volunteer_hours=hours), criteria(experience={"minVolunteerHours": 100}))
        assert row.status == status
        assert row.partial_percentage == percentage
        assert row.student_value == f"You: {hours} hours"

    def test_missing_hours(self):
        row = only_row(StudentProfile(), criteria(experience={"minVolunteerHours": 100}))
        assert row.status == EligibilityStatus.NOT_MET
        assert row.partial_percentage is None
