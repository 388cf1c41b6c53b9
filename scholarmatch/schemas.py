"""Pydantic models for student profiles, eligibility criteria and scholarships.

Field aliases follow the camelCase keys stored in ``eligibility_criteria``
JSON and exchanged with the frontend; Python code uses the snake_case names.
"""
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FinancialNeed(str, Enum):
    """Self-reported financial need level, ordered low to very high."""
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class CamelModel(BaseModel):
    """Base model accepting both camelCase aliases and field names."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class StudentProfile(CamelModel):
    """Student profile as seen by the eligibility engine.

    Every field is optional; a missing value fails any criterion that
    needs it.
    """
    # Academic
    gpa: float | None = None
    gpa_scale: float | None = None
    sat_score: int | None = None
    act_score: int | None = None
    class_rank: int | None = None
    class_size: int | None = None
    graduation_year: int | None = None

    # Demographic
    date_of_birth: date | None = None
    gender: str | None = None
    ethnicity: list[str] | None = None
    state: str | None = None
    city: str | None = None
    citizenship: str | None = None

    # Major / field
    intended_major: str | None = None
    field_of_study: str | None = None
    career_goals: str | None = None

    # Experience
    volunteer_hours: int | None = None
    extracurriculars: list[Any] | None = None
    leadership_roles: list[Any] | dict[str, Any] | None = None
    work_experience: list[Any] | None = None
    awards_honors: list[Any] | dict[str, Any] | None = None

    # Financial
    financial_need: FinancialNeed | None = None
    efc_range: str | None = None
    pell_grant_eligible: bool | None = None

    # Special circumstances
    first_generation: bool | None = None
    military_affiliation: str | None = None
    disabilities: str | None = None

    strength_score: int | None = Field(default=None, ge=0, le=100)


class AcademicCriteria(CamelModel):
    min_gpa: float | None = Field(default=None, alias="minGPA")
    max_gpa: float | None = Field(default=None, alias="maxGPA")
    min_sat: int | None = Field(default=None, alias="minSAT")
    max_sat: int | None = Field(default=None, alias="maxSAT")
    min_act: int | None = Field(default=None, alias="minACT")
    max_act: int | None = Field(default=None, alias="maxACT")
    class_rank_percentile: float | None = Field(default=None, gt=0, le=100)


class DemographicCriteria(CamelModel):
    required_gender: str | None = None
    required_ethnicity: list[str] | None = None
    age_min: int | None = None
    age_max: int | None = None
    required_state: list[str] | None = None
    required_city: list[str] | None = None


class MajorFieldCriteria(CamelModel):
    eligible_majors: list[str] | None = None
    excluded_majors: list[str] | None = None
    required_field_of_study: list[str] | None = None
    career_goals_keywords: list[str] | None = None


class ExperienceCriteria(CamelModel):
    min_volunteer_hours: int | None = None
    leadership_required: bool | None = None
    required_extracurriculars: list[str] | None = None
    min_work_experience: int | None = Field(default=None, description="Months")
    awards_honors_required: bool | None = None


class FinancialCriteria(CamelModel):
    requires_financial_need: bool | None = None
    max_efc: int | None = Field(default=None, alias="maxEFC")
    pell_grant_required: bool | None = None
    financial_need_level: FinancialNeed | None = None


class SpecialCriteria(CamelModel):
    first_generation_required: bool | None = None
    military_affiliation: str | None = None
    citizenship_required: str | None = None
    disability_required: bool | None = None
    other_requirements: list[str] | None = None


class EligibilityCriteria(CamelModel):
    """A scholarship's requirements grouped into the six dimensions.

    An absent dimension (or an absent field inside one) means no
    constraint.
    """
    academic: AcademicCriteria | None = None
    demographic: DemographicCriteria | None = None
    major_field: MajorFieldCriteria | None = None
    experience: ExperienceCriteria | None = None
    financial: FinancialCriteria | None = None
    special: SpecialCriteria | None = None


class ScholarshipRecord(CamelModel):
    """Scholarship data needed for filtering and scoring."""
    id: int | str
    name: str = ""
    provider: str | None = None
    award_amount: int = Field(default=0, ge=0)
    number_of_awards: int = Field(default=1, ge=0)
    deadline: date | None = None
    eligibility_criteria: EligibilityCriteria = Field(default_factory=EligibilityCriteria)
    essay_prompts: list[Any] | dict[str, Any] | None = None
    required_documents: list[str] = Field(default_factory=list)
    recommendation_count: int = Field(default=0, ge=0)
    applicant_pool_size: int | None = None
    acceptance_rate: float | None = None


class ScholarshipCreate(CamelModel):
    """Incoming scholarship data for create/update and catalog import."""
    name: str = Field(min_length=1, max_length=255)
    provider: str = Field(min_length=1, max_length=255)
    description: str | None = None
    website: str | None = None
    award_amount: int = Field(ge=0)
    number_of_awards: int = Field(default=1, ge=0)
    deadline: date | None = None
    eligibility_criteria: EligibilityCriteria = Field(default_factory=EligibilityCriteria)
    essay_prompts: list[Any] | dict[str, Any] | None = None
    required_documents: list[str] = Field(default_factory=list)
    recommendation_count: int = Field(default=0, ge=0)
    applicant_pool_size: int | None = Field(default=None, ge=0)
    acceptance_rate: float | None = Field(default=None, ge=0, le=1)
    tags: list[str] | None = None
    is_active: bool = True


class StudentCreate(CamelModel):
    """Incoming student with an optional profile."""
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str | None = None
    profile: StudentProfile = Field(default_factory=StudentProfile)
