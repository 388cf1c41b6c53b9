"""Requirement-by-requirement eligibility checklist for a scholarship.

Unlike the hard filter this never stops early: every criterion the
scholarship sets becomes one row with a met / not met / partially met
status and a readable description of the student's value.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from ..schemas import EligibilityCriteria, FinancialNeed, StudentProfile
from .values import (
    activity_names,
    calculate_age,
    class_rank_percentile,
    class_rank_top_percent,
    count_entries,
    gpa_on_four_point_scale,
    has_class_rank,
    in_labels,
    is_any,
    is_blank,
    label_set,
    need_priority,
    normalize_label,
    parse_efc_max,
    within_top_percent,
    work_experience_months,
)

NOT_PROVIDED = "Not provided"

# Volunteer hours at or above this share of the requirement count as partial
PARTIAL_THRESHOLD = 0.7


class EligibilityStatus(str, Enum):
    MET = "met"
    NOT_MET = "not_met"
    PARTIALLY_MET = "partially_met"


@dataclass
class EligibilityComparison:
    category: str
    requirement: str
    student_value: str
    status: EligibilityStatus
    partial_percentage: float | None = None


def _status(met: bool) -> EligibilityStatus:
    return EligibilityStatus.MET if met else EligibilityStatus.NOT_MET


def _yes_no(value: bool | None) -> str:
    if value is None:
        return NOT_PROVIDED
    return "Yes" if value else "No"


def _min_row(category, label, required, actual, unit="") -> EligibilityComparison:
    return EligibilityComparison(
        category=category,
        requirement=f"{label}: {required}+{unit}",
        student_value=NOT_PROVIDED if actual is None else f"You: {actual}{unit}",
        status=_status(actual is not None and actual >= required),
    )


def _max_row(category, label, required, actual, unit="") -> EligibilityComparison:
    return EligibilityComparison(
        category=category,
        requirement=f"{label}: at most {required}{unit}",
        student_value=NOT_PROVIDED if actual is None else f"You: {actual}{unit}",
        status=_status(actual is not None and actual <= required),
    )


def _one_of_row(category, label, allowed: list[str], actual: str | None) -> EligibilityComparison:
    return EligibilityComparison(
        category=category,
        requirement=f"{label}: {' or '.join(allowed)}",
        student_value=actual if not is_blank(actual) else NOT_PROVIDED,
        status=_status(not is_blank(actual) and in_labels(actual, allowed)),
    )


def _academic(profile: StudentProfile, criteria, rows: list[EligibilityComparison]) -> None:
    gpa = gpa_on_four_point_scale(profile)
    if criteria.min_gpa is not None:
        rows.append(_min_row("Academic", "GPA", criteria.min_gpa, gpa))
    if criteria.max_gpa is not None:
        rows.append(_max_row("Academic", "GPA", criteria.max_gpa, gpa))
    if criteria.min_sat is not None:
        rows.append(_min_row("Academic", "SAT", criteria.min_sat, profile.sat_score))
    if criteria.max_sat is not None:
        rows.append(_max_row("Academic", "SAT", criteria.max_sat, profile.sat_score))
    if criteria.min_act is not None:
        rows.append(_min_row("Academic", "ACT", criteria.min_act, profile.act_score))
    if criteria.max_act is not None:
        rows.append(_max_row("Academic", "ACT", criteria.max_act, profile.act_score))

    if criteria.class_rank_percentile is not None:
        required = criteria.class_rank_percentile
        if has_class_rank(profile):
            rank, size = profile.class_rank, profile.class_size
            student_value = (
                f"You: rank {rank} of {size} "
                f"(top {class_rank_top_percent(rank, size):.0f}%, "
                f"{class_rank_percentile(rank, size):.0f}th percentile)"
            )
            met = within_top_percent(rank, size, required)
        else:
            student_value, met = NOT_PROVIDED, False
        rows.append(EligibilityComparison(
            category="Academic",
            requirement=f"Class rank: top {required:g}%",
            student_value=student_value,
            status=_status(met),
        ))


def _demographic(profile: StudentProfile, criteria, as_of: date, rows: list[EligibilityComparison]) -> None:
    if not is_any(criteria.required_gender):
        rows.append(_one_of_row("Demographic", "Gender", [criteria.required_gender], profile.gender))

    if label_set(criteria.required_ethnicity):
        student = profile.ethnicity or []
        rows.append(EligibilityComparison(
            category="Demographic",
            requirement=f"Ethnicity: {' or '.join(criteria.required_ethnicity)}",
            student_value=", ".join(student) if student else NOT_PROVIDED,
            status=_status(bool(label_set(student) & label_set(criteria.required_ethnicity))),
        ))

    if criteria.age_min is not None or criteria.age_max is not None:
        low = criteria.age_min if criteria.age_min is not None else "any"
        high = criteria.age_max if criteria.age_max is not None else "any"
        if profile.date_of_birth is None:
            student_value, met = NOT_PROVIDED, False
        else:
            age = calculate_age(profile.date_of_birth, as_of)
            student_value = f"You: {age}"
            met = (criteria.age_min is None or age >= criteria.age_min) and (
                criteria.age_max is None or age <= criteria.age_max
            )
        rows.append(EligibilityComparison(
            category="Demographic",
            requirement=f"Age: {low}-{high}",
            student_value=student_value,
            status=_status(met),
        ))

    if label_set(criteria.required_state):
        rows.append(_one_of_row("Demographic", "State", criteria.required_state, profile.state))
    if label_set(criteria.required_city):
        rows.append(_one_of_row("Demographic", "City", criteria.required_city, profile.city))


def _major_field(profile: StudentProfile, criteria, rows: list[EligibilityComparison]) -> None:
    if label_set(criteria.eligible_majors):
        rows.append(_one_of_row("Major/Field", "Major", criteria.eligible_majors, profile.intended_major))

    if label_set(criteria.excluded_majors):
        major = profile.intended_major
        rows.append(EligibilityComparison(
            category="Major/Field",
            requirement=f"Major not in: {', '.join(criteria.excluded_majors)}",
            student_value=major if not is_blank(major) else NOT_PROVIDED,
            status=_status(not is_blank(major) and not in_labels(major, criteria.excluded_majors)),
        ))

    if label_set(criteria.required_field_of_study):
        rows.append(_one_of_row(
            "Major/Field", "Field of Study", criteria.required_field_of_study, profile.field_of_study
        ))

    keywords = [k for k in criteria.career_goals_keywords or () if k and k.strip()]
    if keywords:
        goals = profile.career_goals
        matched = [k for k in keywords if not is_blank(goals) and normalize_label(k) in normalize_label(goals)]
        rows.append(EligibilityComparison(
            category="Major/Field",
            requirement=f"Career goals mention: {', '.join(keywords)}",
            student_value=goals if not is_blank(goals) else NOT_PROVIDED,
            status=_status(bool(matched)),
        ))


def _experience(profile: StudentProfile, criteria, as_of: date, rows: list[EligibilityComparison]) -> None:
    if criteria.min_volunteer_hours is not None:
        required = criteria.min_volunteer_hours
        hours = profile.volunteer_hours
        if hours is None:
            status, percentage = EligibilityStatus.NOT_MET, None
        else:
            percentage = round(hours / required * 100, 1) if required > 0 else 100.0
            if hours >= required:
                status = EligibilityStatus.MET
            elif required > 0 and hours / required >= PARTIAL_THRESHOLD:
                status = EligibilityStatus.PARTIALLY_MET
            else:
                status = EligibilityStatus.NOT_MET
        rows.append(EligibilityComparison(
            category="Experience",
            requirement=f"Volunteer Hours: {required}+",
            student_value=NOT_PROVIDED if hours is None else f"You: {hours} hours",
            status=status,
            partial_percentage=percentage,
        ))

    if criteria.leadership_required:
        has_roles = count_entries(profile.leadership_roles) > 0
        rows.append(EligibilityComparison(
            category="Experience",
            requirement="Leadership experience required",
            student_value="Yes" if has_roles else "None listed",
            status=_status(has_roles),
        ))

    required_activities = [a for a in criteria.required_extracurriculars or () if a and a.strip()]
    if required_activities:
        names = activity_names(profile.extracurriculars or [])
        matched = any(
            normalize_label(required) in normalize_label(name)
            for required in required_activities
            for name in names
        )
        rows.append(EligibilityComparison(
            category="Experience",
            requirement=f"Activities: {' or '.join(required_activities)}",
            student_value=", ".join(names) if names else "None listed",
            status=_status(matched),
        ))

    if criteria.min_work_experience is not None:
        months = (
            None
            if profile.work_experience is None
            else work_experience_months(profile.work_experience, as_of)
        )
        rows.append(_min_row("Experience", "Work Experience", criteria.min_work_experience, months, " months"))

    if criteria.awards_honors_required:
        has_awards = count_entries(profile.awards_honors) > 0
        rows.append(EligibilityComparison(
            category="Experience",
            requirement="Awards or honors required",
            student_value="Yes" if has_awards else "None listed",
            status=_status(has_awards),
        ))


def _financial(profile: StudentProfile, criteria, rows: list[EligibilityComparison]) -> None:
    need = profile.financial_need
    need_label = need.value if need else NOT_PROVIDED

    if criteria.requires_financial_need:
        rows.append(EligibilityComparison(
            category="Financial",
            requirement="Demonstrated financial need",
            student_value=need_label,
            status=_status(need is not None and need != FinancialNeed.LOW),
        ))

    if criteria.max_efc is not None:
        rows.append(EligibilityComparison(
            category="Financial",
            requirement=f"EFC: at most ${criteria.max_efc:,}",
            student_value=profile.efc_range or NOT_PROVIDED,
            status=_status(
                (efc := parse_efc_max(profile.efc_range)) is not None and efc <= criteria.max_efc
            ),
        ))

    if criteria.pell_grant_required:
        rows.append(EligibilityComparison(
            category="Financial",
            requirement="Pell Grant eligible",
            student_value=_yes_no(profile.pell_grant_eligible),
            status=_status(profile.pell_grant_eligible is True),
        ))

    if criteria.financial_need_level is not None:
        required = criteria.financial_need_level
        rows.append(EligibilityComparison(
            category="Financial",
            requirement=f"Financial Need: {required.value} or higher",
            student_value=need_label,
            status=_status(need is not None and need_priority(need) >= need_priority(required)),
        ))


def _special(profile: StudentProfile, criteria, rows: list[EligibilityComparison]) -> None:
    if criteria.first_generation_required:
        rows.append(EligibilityComparison(
            category="Special",
            requirement="First-generation college student",
            student_value=_yes_no(profile.first_generation),
            status=_status(profile.first_generation is True),
        ))

    if not is_any(criteria.military_affiliation):
        row = _one_of_row("Special", "Military Affiliation", [criteria.military_affiliation],
                          profile.military_affiliation)
        if is_blank(profile.military_affiliation):
            row.student_value = "None"
        rows.append(row)

    if not is_any(criteria.citizenship_required):
        rows.append(_one_of_row("Special", "Citizenship", [criteria.citizenship_required], profile.citizenship))

    if criteria.disability_required:
        has_disability = not is_blank(profile.disabilities)
        rows.append(EligibilityComparison(
            category="Special",
            requirement="Documented disability",
            student_value="Yes" if has_disability else "None listed",
            status=_status(has_disability),
        ))


def compare_eligibility(
    profile: StudentProfile,
    criteria: EligibilityCriteria | None,
    as_of: date | None = None,
) -> list[EligibilityComparison]:
    """Build the eligibility checklist for one student and one scholarship.

    Rows follow the hard filter's dimension order.
    """
    rows: list[EligibilityComparison] = []
    if criteria is None:
        return rows
    as_of = as_of or date.today()

    if criteria.academic:
        _academic(profile, criteria.academic, rows)
    if criteria.demographic:
        _demographic(profile, criteria.demographic, as_of, rows)
    if criteria.major_field:
        _major_field(profile, criteria.major_field, rows)
    if criteria.experience:
        _experience(profile, criteria.experience, as_of, rows)
    if criteria.financial:
        _financial(profile, criteria.financial, rows)
    if criteria.special:
        _special(profile, criteria.special, rows)
    return rows
