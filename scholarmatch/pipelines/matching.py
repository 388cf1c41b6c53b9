"""Matching pipeline: Student → Scholarships with hard filtering and scoring.

Workflow:
1. Load the student's profile
2. Load active scholarships whose deadline has not passed
3. Hard-filter them on eligibility
4. Score the survivors
5. Sort by match score and keep the top N
6. Persist to scholarship_matches, marking earlier rows stale
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime

from pydantic import ValidationError
from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .. import models
from ..config import settings
from ..eligibility import HardFilterConfig, filter_scholarships
from ..schemas import ScholarshipRecord, StudentProfile
from ..scoring import MatchScore, calculate_match_score

logger = logging.getLogger(__name__)


class MatchingError(Exception):
    """Raised when matching pipeline fails."""
    pass


class StudentNotFoundError(MatchingError):
    """Raised when the student to match does not exist."""
    pass


@dataclass
class MatchResult:
    """Single scholarship match result."""
    scholarship_id: int
    rank: int
    score: MatchScore


@dataclass
class MatchRun:
    """Complete match list for a student."""
    student_id: int
    total_scholarships: int
    eligible_count: int
    matches: list[MatchResult]
    scoring_version: str
    computed_at: datetime


def profile_from_model(profile: models.Profile) -> StudentProfile:
    """Build the engine's view of a stored profile."""
    return StudentProfile.model_validate(
        {
            name: getattr(profile, name)
            for name in StudentProfile.model_fields
            if hasattr(profile, name)
        }
    )


def scholarship_from_model(scholarship: models.Scholarship) -> ScholarshipRecord:
    """Build the engine's view of a stored scholarship.

    Raises:
        ValidationError: If the stored eligibility criteria are malformed
    """
    return ScholarshipRecord.model_validate(
        {
            "id": scholarship.id,
            "name": scholarship.name,
            "provider": scholarship.provider,
            "award_amount": scholarship.award_amount,
            "number_of_awards": scholarship.number_of_awards,
            "deadline": scholarship.deadline,
            "eligibility_criteria": scholarship.eligibility_criteria or {},
            "essay_prompts": scholarship.essay_prompts,
            "required_documents": scholarship.required_documents or [],
            "recommendation_count": scholarship.recommendation_count,
            "applicant_pool_size": scholarship.applicant_pool_size,
            "acceptance_rate": scholarship.acceptance_rate,
        }
    )


async def load_student_profile(session: AsyncSession, student_id: int) -> StudentProfile:
    """Load a student's profile.

    Raises:
        MatchingError: If the student or their profile does not exist
    """
    query = select(models.Profile).where(models.Profile.student_id == student_id)
    profile = (await session.execute(query)).scalar_one_or_none()

    if profile is None:
        student = await session.get(models.Student, student_id)
        if student is None:
            raise StudentNotFoundError(f"Student {student_id} not found")
        raise MatchingError(f"Student {student_id} has no profile")

    return profile_from_model(profile)


async def load_active_scholarships(
    session: AsyncSession,
    as_of: date | None = None,
) -> list[ScholarshipRecord]:
    """Load active scholarships whose deadline is today or later (or unset).

    Scholarships with malformed criteria are skipped with a warning.
    """
    as_of = as_of or date.today()
    query = (
        select(models.Scholarship)
        .where(models.Scholarship.is_active.is_(True))
        .where(or_(models.Scholarship.deadline.is_(None), models.Scholarship.deadline >= as_of))
        .order_by(models.Scholarship.id)
    )
    rows = (await session.execute(query)).scalars().all()

    records = []
    for row in rows:
        try:
            records.append(scholarship_from_model(row))
        except ValidationError as e:
            logger.warning(f"Skipping scholarship {row.id} with invalid criteria: {e}")
    logger.info(f"Loaded {len(records)} active scholarships")
    return records


async def match_student_to_scholarships(
    session: AsyncSession,
    student_id: int,
    *,
    top_n: int | None = None,
    min_match_score: int | None = None,
    as_of: date | None = None,
    persist: bool = True,
) -> MatchRun:
    """Execute complete matching pipeline for a single student.

    Args:
        session: Database session
        student_id: Student to match
        top_n: Matches to keep (default from config)
        min_match_score: Drop matches scoring below this (default from config)
        as_of: Reference date for deadlines and age (default today)
        persist: Store the results in scholarship_matches

    Returns:
        MatchRun with ranked match results

    Raises:
        MatchingError: If matching fails
    """
    top_n = top_n or settings.matching.top_n
    if min_match_score is None:
        min_match_score = settings.matching.min_match_score
    as_of = as_of or date.today()

    try:
        logger.info(f"Starting matching for student {student_id} (TopN={top_n})")

        profile = await load_student_profile(session, student_id)
        scholarships = await load_active_scholarships(session, as_of)

        config = replace(HardFilterConfig.from_settings(), as_of=as_of)
        eligible = filter_scholarships(profile, scholarships, config, include_statistics=True)

        scored = [
            (scholarship, calculate_match_score(profile, scholarship, as_of=as_of))
            for scholarship in eligible
        ]
        scored = [(s, score) for s, score in scored if score.overall_match_score >= min_match_score]

        # Highest match first; ties go to the larger award, then to catalog order
        scored.sort(key=lambda item: (-item[1].overall_match_score, -item[0].award_amount))
        top = scored[:top_n]

        logger.info(
            f"Student {student_id}: {len(eligible)} eligible of {len(scholarships)}, "
            f"returning top {len(top)}"
        )

        run = MatchRun(
            student_id=student_id,
            total_scholarships=len(scholarships),
            eligible_count=len(eligible),
            matches=[
                MatchResult(scholarship_id=int(s.id), rank=idx + 1, score=score)
                for idx, (s, score) in enumerate(top)
            ],
            scoring_version=settings.matching.scoring_version,
            computed_at=datetime.utcnow(),
        )

        if persist:
            await persist_matches(session, run)

        logger.info(f"Successfully completed matching for student {student_id}")
        return run

    except MatchingError:
        raise
    except Exception as e:
        logger.error(f"Matching failed for student {student_id}: {e}", exc_info=True)
        raise MatchingError(f"Matching pipeline failed: {e}") from e


async def persist_matches(session: AsyncSession, run: MatchRun) -> None:
    """Persist a match run.

    Marks existing match rows for the student as stale and creates new ones.
    """
    try:
        await session.execute(
            update(models.ScholarshipMatch)
            .where(models.ScholarshipMatch.student_id == run.student_id)
            .where(models.ScholarshipMatch.is_stale.is_(False))
            .values(is_stale=True)
        )

        for match in run.matches:
            score = match.score
            session.add(
                models.ScholarshipMatch(
                    student_id=run.student_id,
                    scholarship_id=match.scholarship_id,
                    rank=match.rank,
                    overall_match_score=score.overall_match_score,
                    dimension_scores=score.to_dict()["dimensions"],
                    success_probability=score.success_probability,
                    success_tier=score.success_tier.value,
                    competition_factor=score.competition_factor,
                    application_effort=score.application_effort.value,
                    effort_breakdown=score.effort_breakdown,
                    strategic_value=score.strategic_value,
                    strategic_value_tier=score.strategic_value_tier.value,
                    priority_tier=score.priority_tier.value,
                    tier_rationale=score.tier_rationale,
                    scoring_version=run.scoring_version,
                    computed_at=run.computed_at,
                    is_stale=False,
                )
            )

        await session.commit()
        logger.info(f"Persisted {len(run.matches)} matches for student {run.student_id}")

    except Exception as e:
        await session.rollback()
        logger.error(f"Failed to persist matches: {e}")
        raise MatchingError(f"Match persistence failed: {e}") from e


async def get_current_matches(session: AsyncSession, student_id: int) -> list[models.ScholarshipMatch]:
    """Latest (non-stale) matches for a student, best rank first."""
    query = (
        select(models.ScholarshipMatch)
        .where(models.ScholarshipMatch.student_id == student_id)
        .where(models.ScholarshipMatch.is_stale.is_(False))
        .order_by(models.ScholarshipMatch.rank)
    )
    return list((await session.execute(query)).scalars().all())
