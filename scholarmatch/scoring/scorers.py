"""Dimension scorers with partial credit.

Each scorer returns an int in 0-100. A dimension the scholarship leaves
empty scores 100. Near misses earn proportional credit, so a 3.3 GPA
against a 3.5 minimum scores 94.
"""
from __future__ import annotations

from datetime import date

from config.major_families import CITIZENSHIP_EQUIVALENTS, MAJOR_FAMILIES, MILITARY_RELATED

from ..eligibility.values import (
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
    work_experience_months,
)
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

FULL = 100


def _ratio(actual: float, required: float) -> int:
    """Share of a minimum reached, as a 0-100 score."""
    if required <= 0 or actual >= required:
        return FULL
    return round(max(0.0, actual / required * 100))


def _penalty(overage: float, per_unit: float) -> int:
    return round(max(0.0, 100 - overage * per_unit))


def _weighted(parts: list[tuple[float, float]]) -> int:
    """Weighted mean of ``(score, weight)`` pairs; 100 when nothing applies."""
    total_weight = sum(w for _, w in parts)
    if not total_weight:
        return FULL
    return round(sum(s * w for s, w in parts) / total_weight)


def _mean(scores: list[int]) -> int:
    return round(sum(scores) / len(scores)) if scores else FULL


def _range_score(actual, minimum, maximum, per_unit_over: float) -> int | None:
    if minimum is None and maximum is None:
        return None
    if actual is None:
        return 0
    if minimum is not None and actual < minimum:
        return _ratio(actual, minimum)
    if maximum is not None and actual > maximum:
        return _penalty(actual - maximum, per_unit_over)
    return FULL


# Academic

def score_academic(profile: StudentProfile, criteria: AcademicCriteria | None) -> int:
    """GPA 40%, SAT 30%, ACT 30%; class rank takes a 30% share when set."""
    if criteria is None:
        return FULL

    gpa = _range_score(gpa_on_four_point_scale(profile), criteria.min_gpa, criteria.max_gpa, 20)
    sat = _range_score(profile.sat_score, criteria.min_sat, criteria.max_sat, 0.1)
    act = _range_score(profile.act_score, criteria.min_act, criteria.max_act, 10)

    if criteria.class_rank_percentile is None:
        parts = [(s, w) for s, w in ((gpa, 0.4), (sat, 0.3), (act, 0.3)) if s is not None]
        return _weighted(parts)

    rank = _class_rank_score(profile, criteria.class_rank_percentile)
    if gpa is None and sat is None and act is None:
        return rank

    # Rank replaces one test; the better test result fills the remaining share
    best_test = max(sat or 0, act or 0)
    if gpa is None:
        return round(rank * 0.5 + best_test * 0.5)
    return round(gpa * 0.4 + rank * 0.3 + best_test * 0.3)


def _class_rank_score(profile: StudentProfile, top_percent: float) -> int:
    if not has_class_rank(profile):
        return 0
    student_top = class_rank_top_percent(profile.class_rank, profile.class_size)
    if profile.class_rank * 100 <= top_percent * profile.class_size:
        return FULL
    return round(max(0.0, top_percent / student_top * 100))


# Demographic

def score_demographic(
    profile: StudentProfile,
    criteria: DemographicCriteria | None,
    as_of: date | None = None,
) -> int:
    """Mean of the gender, ethnicity, state, city and age checks."""
    if criteria is None:
        return FULL
    scores: list[int] = []

    if not is_any(criteria.required_gender):
        match = not is_blank(profile.gender) and (
            normalize_label(profile.gender) == normalize_label(criteria.required_gender)
        )
        scores.append(FULL if match else 0)

    required_ethnicity = label_set(criteria.required_ethnicity)
    if required_ethnicity:
        scores.append(FULL if label_set(profile.ethnicity) & required_ethnicity else 0)

    for allowed, actual in (
        (criteria.required_state, profile.state),
        (criteria.required_city, profile.city),
    ):
        allowed_set = label_set(allowed)
        if allowed_set:
            match = not is_blank(actual) and normalize_label(actual) in allowed_set
            scores.append(FULL if match else 0)

    if criteria.age_min is not None or criteria.age_max is not None:
        if profile.date_of_birth is None:
            scores.append(0)
        else:
            age = calculate_age(profile.date_of_birth, as_of or date.today())
            scores.append(_range_score(age, criteria.age_min, criteria.age_max, 10))

    return _mean(scores)


# Major / field

def _related_major(student_major: str, eligible_majors: list[str]) -> bool:
    """True when the student's major shares a family with an eligible major."""
    for family in MAJOR_FAMILIES:
        keywords = family["keywords"]
        if any(k in student_major for k in keywords):
            return any(
                k in normalize_label(major) for major in eligible_majors for k in keywords
            )
    return False


def _eligible_major_score(major: str | None, eligible: list[str]) -> int:
    if is_blank(major):
        return 0
    student = normalize_label(major)
    allowed = label_set(eligible)
    if student in allowed:
        return FULL
    if any(student in m or m in student for m in allowed):
        return 75
    if _related_major(student, eligible):
        return 50
    return 0


def _field_score(field: str | None, required: list[str]) -> int:
    if is_blank(field):
        return 0
    student = normalize_label(field)
    allowed = label_set(required)
    if student in allowed:
        return FULL
    if any(student in f or f in student for f in allowed):
        return 80
    return 0


def _career_goals_score(goals: str | None, keywords: list[str]) -> int:
    if is_blank(goals):
        return 0
    text = normalize_label(goals)
    matched = sum(1 for k in keywords if normalize_label(k) in text)
    if not matched:
        return 0
    return round(min(100.0, matched / len(keywords) * 100 * 1.2))


def score_major_field(profile: StudentProfile, criteria: MajorFieldCriteria | None) -> int:
    """Eligible majors 50%, field of study 30%, career goals 20%.

    An excluded major scores 0 regardless of the rest.
    """
    if criteria is None:
        return FULL

    excluded = label_set(criteria.excluded_majors)
    if excluded and not is_blank(profile.intended_major):
        if normalize_label(profile.intended_major) in excluded:
            return 0

    parts: list[tuple[float, float]] = []
    if label_set(criteria.eligible_majors):
        parts.append((_eligible_major_score(profile.intended_major, criteria.eligible_majors), 0.5))
    if label_set(criteria.required_field_of_study):
        parts.append((_field_score(profile.field_of_study, criteria.required_field_of_study), 0.3))
    keywords = [k for k in criteria.career_goals_keywords or () if k and k.strip()]
    if keywords:
        parts.append((_career_goals_score(profile.career_goals, keywords), 0.2))
    return _weighted(parts)


# Experience

def score_experience(
    profile: StudentProfile,
    criteria: ExperienceCriteria | None,
    as_of: date | None = None,
) -> int:
    """Volunteering 35%, leadership 25%, activities 20%, work 15%, awards 5%."""
    if criteria is None:
        return FULL
    parts: list[tuple[float, float]] = []

    if criteria.min_volunteer_hours is not None:
        parts.append((_ratio(profile.volunteer_hours or 0, criteria.min_volunteer_hours), 0.35))

    if criteria.leadership_required:
        parts.append((FULL if count_entries(profile.leadership_roles) else 0, 0.25))

    required = [a for a in criteria.required_extracurriculars or () if a and a.strip()]
    if required:
        names = [normalize_label(n) for n in activity_names(profile.extracurriculars or [])]
        matched = sum(
            1
            for r in required
            if any(normalize_label(r) in n or n in normalize_label(r) for n in names)
        )
        parts.append((round(matched / len(required) * 100), 0.2))

    if criteria.min_work_experience is not None:
        months = work_experience_months(profile.work_experience or [], as_of or date.today())
        parts.append((_ratio(months, criteria.min_work_experience), 0.15))

    if criteria.awards_honors_required:
        parts.append((FULL if count_entries(profile.awards_honors) else 0, 0.05))

    return _weighted(parts)


# Financial

def score_financial(profile: StudentProfile, criteria: FinancialCriteria | None) -> int:
    """Need 50%, Pell eligibility 30%, EFC ceiling 20%."""
    if criteria is None:
        return FULL
    parts: list[tuple[float, float]] = []
    need = profile.financial_need

    if criteria.requires_financial_need or criteria.financial_need_level is not None:
        parts.append((_need_score(need, criteria), 0.5))

    if criteria.pell_grant_required:
        parts.append((FULL if profile.pell_grant_eligible is True else 0, 0.3))

    if criteria.max_efc is not None:
        efc = parse_efc_max(profile.efc_range)
        if efc is None:
            efc_score = 0
        elif efc <= criteria.max_efc:
            efc_score = FULL
        else:
            efc_score = round(max(0.0, criteria.max_efc / efc * 100))
        parts.append((efc_score, 0.2))

    return _weighted(parts)


def _need_score(need: FinancialNeed | None, criteria: FinancialCriteria) -> int:
    if need is None:
        return 0
    if criteria.financial_need_level is not None:
        return _ratio(need_priority(need), need_priority(criteria.financial_need_level))
    if criteria.requires_financial_need and need == FinancialNeed.LOW:
        return _ratio(need_priority(need), need_priority(FinancialNeed.MODERATE))
    return FULL


# Special

def score_special(profile: StudentProfile, criteria: SpecialCriteria | None) -> int:
    """Mean of first-generation, military, disability and citizenship checks."""
    if criteria is None:
        return FULL
    scores: list[int] = []

    if criteria.first_generation_required:
        scores.append(FULL if profile.first_generation is True else 0)

    if not is_any(criteria.military_affiliation):
        scores.append(_military_score(profile.military_affiliation, criteria.military_affiliation))

    if criteria.disability_required:
        scores.append(0 if is_blank(profile.disabilities) else FULL)

    if not is_any(criteria.citizenship_required):
        scores.append(_citizenship_score(profile.citizenship, criteria.citizenship_required))

    return _mean(scores)


def _military_score(actual: str | None, required: str) -> int:
    required = normalize_label(required)
    if is_blank(actual):
        return FULL if required == "none" else 0
    actual = normalize_label(actual)
    if actual == required:
        return FULL
    if actual in MILITARY_RELATED.get(required, ()):
        return 75
    return 0


def _citizenship_score(actual: str | None, required: str) -> int:
    if is_blank(actual):
        return 0
    actual, required = normalize_label(actual), normalize_label(required)
    if actual == required or actual in CITIZENSHIP_EQUIVALENTS.get(required, ()):
        return FULL
    if required == "us citizen" and actual == "permanent resident":
        return 50
    return 0
