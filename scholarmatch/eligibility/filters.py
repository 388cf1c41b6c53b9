"""Per-dimension hard filters.

Each filter is a generator that yields a ``FailedCriterion`` for every
criterion the student fails, checking fields in declaration order. Being
lazy lets the caller stop after the first failure without evaluating the
rest. A criterion that needs a student value fails with ``actual=None``
when that value is missing.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import date

from ..schemas import (
    AcademicCriteria,
    DemographicCriteria,
    ExperienceCriteria,
    FinancialCriteria,
    FinancialNeed,
    MajorFieldCriteria,
    SpecialCriteria,
    StudentProfile,
)
from .types import FailedCriterion, FilterDimension
from .values import (
    activity_names,
    calculate_age,
    class_rank_top_percent,
    count_entries,
    gpa_on_four_point_scale,
    has_class_rank,
    is_any,
    is_blank,
    label_set,
    need_priority,
    normalize_label,
    parse_efc_max,
    within_top_percent,
    work_experience_months,
)

logger = logging.getLogger(__name__)

Failures = Iterator[FailedCriterion]


def _check_min(dimension, criterion, required, actual, reported=None) -> FailedCriterion | None:
    if actual is None or actual < required:
        return FailedCriterion(dimension, criterion, required, actual if reported is None else reported)
    return None


def _check_max(dimension, criterion, required, actual, reported=None) -> FailedCriterion | None:
    if actual is None or actual > required:
        return FailedCriterion(dimension, criterion, required, actual if reported is None else reported)
    return None


def filter_academic(profile: StudentProfile, criteria: AcademicCriteria, as_of: date) -> Failures:
    """GPA, SAT and ACT ranges plus class rank percentile.

    GPA is compared on a 4.0 scale but reported as the student entered it.
    """
    dim = FilterDimension.ACADEMIC
    gpa = gpa_on_four_point_scale(profile)

    checks = (
        ("minGPA", criteria.min_gpa, gpa, profile.gpa, _check_min),
        ("maxGPA", criteria.max_gpa, gpa, profile.gpa, _check_max),
        ("minSAT", criteria.min_sat, profile.sat_score, None, _check_min),
        ("maxSAT", criteria.max_sat, profile.sat_score, None, _check_max),
        ("minACT", criteria.min_act, profile.act_score, None, _check_min),
        ("maxACT", criteria.max_act, profile.act_score, None, _check_max),
    )
    for name, required, actual, reported, check in checks:
        if required is None:
            continue
        failure = check(dim, name, required, actual, reported)
        if failure:
            yield failure

    if criteria.class_rank_percentile is not None:
        required = criteria.class_rank_percentile
        if not has_class_rank(profile):
            yield FailedCriterion(dim, "classRankPercentile", required, None)
        elif not within_top_percent(profile.class_rank, profile.class_size, required):
            yield FailedCriterion(
                dim,
                "classRankPercentile",
                required,
                round(class_rank_top_percent(profile.class_rank, profile.class_size), 2),
            )


def _check_membership(dim, criterion, allowed: list[str] | None, actual: str | None) -> FailedCriterion | None:
    labels = label_set(allowed)
    if not labels:
        return None
    if is_blank(actual):
        return FailedCriterion(dim, criterion, allowed, None)
    if normalize_label(actual) not in labels:
        return FailedCriterion(dim, criterion, allowed, actual)
    return None


def filter_demographic(profile: StudentProfile, criteria: DemographicCriteria, as_of: date) -> Failures:
    """Gender, ethnicity, age range, state and city."""
    dim = FilterDimension.DEMOGRAPHIC

    if not is_any(criteria.required_gender):
        required = criteria.required_gender
        if is_blank(profile.gender):
            yield FailedCriterion(dim, "requiredGender", required, None)
        elif normalize_label(profile.gender) != normalize_label(required):
            yield FailedCriterion(dim, "requiredGender", required, profile.gender)

    required_ethnicity = label_set(criteria.required_ethnicity)
    if required_ethnicity:
        if is_blank(profile.ethnicity):
            yield FailedCriterion(dim, "requiredEthnicity", criteria.required_ethnicity, None)
        elif not label_set(profile.ethnicity) & required_ethnicity:
            yield FailedCriterion(dim, "requiredEthnicity", criteria.required_ethnicity, profile.ethnicity)

    if criteria.age_min is not None or criteria.age_max is not None:
        if profile.date_of_birth is None:
            yield FailedCriterion(
                dim,
                "age",
                f"{criteria.age_min if criteria.age_min is not None else 'any'}-"
                f"{criteria.age_max if criteria.age_max is not None else 'any'}",
                None,
            )
        else:
            age = calculate_age(profile.date_of_birth, as_of)
            if criteria.age_min is not None and age < criteria.age_min:
                yield FailedCriterion(dim, "ageMin", criteria.age_min, age)
            if criteria.age_max is not None and age > criteria.age_max:
                yield FailedCriterion(dim, "ageMax", criteria.age_max, age)

    for name, allowed, actual in (
        ("requiredState", criteria.required_state, profile.state),
        ("requiredCity", criteria.required_city, profile.city),
    ):
        failure = _check_membership(dim, name, allowed, actual)
        if failure:
            yield failure


def filter_major_field(profile: StudentProfile, criteria: MajorFieldCriteria, as_of: date) -> Failures:
    """Eligible and excluded majors, field of study, career-goal keywords."""
    dim = FilterDimension.MAJOR_FIELD

    failure = _check_membership(dim, "eligibleMajors", criteria.eligible_majors, profile.intended_major)
    if failure:
        yield failure

    excluded = label_set(criteria.excluded_majors)
    if excluded:
        required = f"Not in: {', '.join(criteria.excluded_majors)}"
        if is_blank(profile.intended_major):
            yield FailedCriterion(dim, "excludedMajors", required, None)
        elif normalize_label(profile.intended_major) in excluded:
            yield FailedCriterion(dim, "excludedMajors", required, profile.intended_major)

    failure = _check_membership(
        dim, "requiredFieldOfStudy", criteria.required_field_of_study, profile.field_of_study
    )
    if failure:
        yield failure

    keywords = [k for k in criteria.career_goals_keywords or () if k and k.strip()]
    if keywords:
        if is_blank(profile.career_goals):
            yield FailedCriterion(dim, "careerGoalsKeywords", criteria.career_goals_keywords, None)
        else:
            goals = normalize_label(profile.career_goals)
            if not any(normalize_label(k) in goals for k in keywords):
                yield FailedCriterion(
                    dim, "careerGoalsKeywords", criteria.career_goals_keywords, profile.career_goals
                )


def filter_experience(profile: StudentProfile, criteria: ExperienceCriteria, as_of: date) -> Failures:
    """Volunteer hours, leadership, extracurriculars, work months, awards."""
    dim = FilterDimension.EXPERIENCE

    if criteria.min_volunteer_hours is not None:
        failure = _check_min(dim, "minVolunteerHours", criteria.min_volunteer_hours, profile.volunteer_hours)
        if failure:
            yield failure

    if criteria.leadership_required:
        if profile.leadership_roles is None:
            yield FailedCriterion(dim, "leadershipRequired", True, None)
        elif count_entries(profile.leadership_roles) == 0:
            yield FailedCriterion(dim, "leadershipRequired", True, False)

    required_activities = [a for a in criteria.required_extracurriculars or () if a and a.strip()]
    if required_activities:
        if profile.extracurriculars is None:
            yield FailedCriterion(dim, "requiredExtracurriculars", criteria.required_extracurriculars, None)
        else:
            names = activity_names(profile.extracurriculars)
            lowered = [normalize_label(n) for n in names]
            matched = any(
                normalize_label(required) in name
                for required in required_activities
                for name in lowered
            )
            if not matched:
                yield FailedCriterion(dim, "requiredExtracurriculars", criteria.required_extracurriculars, names)

    if criteria.min_work_experience is not None:
        months = (
            None
            if profile.work_experience is None
            else work_experience_months(profile.work_experience, as_of)
        )
        failure = _check_min(dim, "minWorkExperience", criteria.min_work_experience, months)
        if failure:
            yield failure

    if criteria.awards_honors_required:
        if profile.awards_honors is None:
            yield FailedCriterion(dim, "awardsHonorsRequired", True, None)
        elif count_entries(profile.awards_honors) == 0:
            yield FailedCriterion(dim, "awardsHonorsRequired", True, False)


def filter_financial(profile: StudentProfile, criteria: FinancialCriteria, as_of: date) -> Failures:
    """Financial need, EFC ceiling, Pell eligibility, minimum need level."""
    dim = FilterDimension.FINANCIAL
    need = profile.financial_need

    if criteria.requires_financial_need:
        # LOW need does not count as demonstrated need
        if need is None:
            yield FailedCriterion(dim, "requiresFinancialNeed", True, None)
        elif need == FinancialNeed.LOW:
            yield FailedCriterion(dim, "requiresFinancialNeed", True, need.value)

    if criteria.max_efc is not None:
        failure = _check_max(dim, "maxEFC", criteria.max_efc, parse_efc_max(profile.efc_range))
        if failure:
            yield failure

    if criteria.pell_grant_required:
        if profile.pell_grant_eligible is None:
            yield FailedCriterion(dim, "pellGrantRequired", True, None)
        elif profile.pell_grant_eligible is not True:
            yield FailedCriterion(dim, "pellGrantRequired", True, False)

    if criteria.financial_need_level is not None:
        required = criteria.financial_need_level
        if need is None:
            yield FailedCriterion(dim, "financialNeedLevel", required.value, None)
        elif need_priority(need) < need_priority(required):
            yield FailedCriterion(dim, "financialNeedLevel", required.value, need.value)


def filter_special(profile: StudentProfile, criteria: SpecialCriteria, as_of: date) -> Failures:
    """First-generation, military affiliation, citizenship, disability."""
    dim = FilterDimension.SPECIAL

    if criteria.first_generation_required:
        if profile.first_generation is None:
            yield FailedCriterion(dim, "firstGenerationRequired", True, None)
        elif profile.first_generation is not True:
            yield FailedCriterion(dim, "firstGenerationRequired", True, False)

    if not is_any(criteria.military_affiliation):
        required = criteria.military_affiliation
        if is_blank(profile.military_affiliation):
            yield FailedCriterion(dim, "militaryAffiliation", required, None)
        elif normalize_label(profile.military_affiliation) != normalize_label(required):
            yield FailedCriterion(dim, "militaryAffiliation", required, profile.military_affiliation)

    if not is_any(criteria.citizenship_required):
        required = criteria.citizenship_required
        if is_blank(profile.citizenship):
            yield FailedCriterion(dim, "citizenshipRequired", required, None)
        elif normalize_label(profile.citizenship) != normalize_label(required):
            yield FailedCriterion(dim, "citizenshipRequired", required, profile.citizenship)

    if criteria.disability_required:
        if profile.disabilities is None:
            yield FailedCriterion(dim, "disabilityRequired", True, None)
        elif not profile.disabilities.strip():
            yield FailedCriterion(dim, "disabilityRequired", True, False)

    if criteria.other_requirements:
        # Free-text requirements need human review and never auto-reject
        logger.debug(f"Scholarship has requirements for manual review: {criteria.other_requirements}")
