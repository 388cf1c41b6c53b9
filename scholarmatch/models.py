"""Core SQLAlchemy models (2.x style).

Students own one profile; scholarships keep their eligibility criteria as
JSON in the camelCase shape the eligibility engine reads; matches store
one scored student/scholarship pair per matching run.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import JSON, Boolean, Date, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Student(Base):
    """Students table."""
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    # Relationships
    profile: Mapped[Profile | None] = relationship(
        "Profile",
        back_populates="student",
        uselist=False,
        cascade="all, delete-orphan",
    )
    matches: Mapped[list[ScholarshipMatch]] = relationship("ScholarshipMatch", back_populates="student")


class Profile(Base):
    """Student profile: everything eligibility and scoring look at."""
    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    # Academic
    gpa: Mapped[float | None] = mapped_column(Float)
    gpa_scale: Mapped[float | None] = mapped_column(Float)
    sat_score: Mapped[int | None] = mapped_column(Integer)
    act_score: Mapped[int | None] = mapped_column(Integer)
    class_rank: Mapped[int | None] = mapped_column(Integer)
    class_size: Mapped[int | None] = mapped_column(Integer)
    graduation_year: Mapped[int | None] = mapped_column(Integer, index=True)

    # Demographic
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    gender: Mapped[str | None] = mapped_column(String(50))
    ethnicity: Mapped[list[str] | None] = mapped_column(JSON)
    state: Mapped[str | None] = mapped_column(String(50), index=True)
    city: Mapped[str | None] = mapped_column(String(100))
    citizenship: Mapped[str | None] = mapped_column(String(100))

    # Major / field
    intended_major: Mapped[str | None] = mapped_column(String(255), index=True)
    field_of_study: Mapped[str | None] = mapped_column(String(255))
    career_goals: Mapped[str | None] = mapped_column(Text)

    # Experience
    volunteer_hours: Mapped[int | None] = mapped_column(Integer)
    extracurriculars: Mapped[list | None] = mapped_column(JSON)
    leadership_roles: Mapped[Any] = mapped_column(JSON, nullable=True)
    work_experience: Mapped[list | None] = mapped_column(JSON)
    awards_honors: Mapped[Any] = mapped_column(JSON, nullable=True)

    # Financial
    financial_need: Mapped[str | None] = mapped_column(String(20))
    efc_range: Mapped[str | None] = mapped_column(String(50))
    pell_grant_eligible: Mapped[bool | None] = mapped_column(Boolean)

    # Special
    first_generation: Mapped[bool | None] = mapped_column(Boolean)
    military_affiliation: Mapped[str | None] = mapped_column(String(50))
    disabilities: Mapped[str | None] = mapped_column(Text)

    strength_score: Mapped[int | None] = mapped_column(Integer)
    updated_at: Mapped[datetime] = mapped_column(
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    # Relationship
    student: Mapped[Student] = relationship("Student", back_populates="profile")


class Scholarship(Base):
    """Scholarships table."""
    __tablename__ = "scholarships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    provider: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    website: Mapped[str | None] = mapped_column(String(500))
    award_amount: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    number_of_awards: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    deadline: Mapped[date | None] = mapped_column(Date, index=True)
    eligibility_criteria: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    essay_prompts: Mapped[Any] = mapped_column(JSON, nullable=True)
    required_documents: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    recommendation_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    applicant_pool_size: Mapped[int | None] = mapped_column(Integer)
    acceptance_rate: Mapped[float | None] = mapped_column(Float)
    tags: Mapped[list[str] | None] = mapped_column(JSON)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    # Relationships
    matches: Mapped[list[ScholarshipMatch]] = relationship("ScholarshipMatch", back_populates="scholarship")

    __table_args__ = (
        Index("ix_scholarships_name_provider", "name", "provider", unique=True),
    )


class ScholarshipMatch(Base):
    """Scored matches with the numbers behind them."""
    __tablename__ = "scholarship_matches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    scholarship_id: Mapped[int] = mapped_column(
        ForeignKey("scholarships.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    overall_match_score: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    dimension_scores: Mapped[dict] = mapped_column(JSON, nullable=False)
    success_probability: Mapped[int] = mapped_column(Integer, nullable=False)
    success_tier: Mapped[str] = mapped_column(String(30), nullable=False)
    competition_factor: Mapped[float] = mapped_column(Float, nullable=False)
    application_effort: Mapped[str] = mapped_column(String(10), nullable=False)
    effort_breakdown: Mapped[dict] = mapped_column(JSON, nullable=False)
    strategic_value: Mapped[float] = mapped_column(Float, nullable=False)
    strategic_value_tier: Mapped[str] = mapped_column(String(30), nullable=False)
    priority_tier: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    tier_rationale: Mapped[str] = mapped_column(Text, nullable=False)
    scoring_version: Mapped[str] = mapped_column(String(50), nullable=False)
    computed_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)
    is_stale: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    # Relationships
    student: Mapped[Student] = relationship("Student", back_populates="matches")
    scholarship: Mapped[Scholarship] = relationship("Scholarship", back_populates="matches")

    __table_args__ = (
        Index("ix_scholarship_matches_student_rank", "student_id", "rank"),
        Index("ix_scholarship_matches_student_score", "student_id", "overall_match_score"),
    )
