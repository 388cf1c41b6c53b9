"""FastAPI app: eligibility checks, catalog ingestion and student matching.

Request and response bodies use camelCase keys, matching the stored
eligibility criteria JSON.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import date
from io import BytesIO
from typing import Any

from fastapi import Body, Depends, FastAPI, File, HTTPException, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .db import get_session
from .eligibility import (
    EligibilityStatus,
    HardFilterConfig,
    apply_hard_filters,
    compare_eligibility,
    filter_scholarships,
    filter_with_statistics,
)
from .logging_config import setup_logging
from .parsers import ParseError
from .pipelines.ingest import (
    IngestError,
    create_student,
    import_scholarship_file,
    upsert_scholarship,
    validate_scholarship,
)
from .pipelines.matching import (
    MatchingError,
    StudentNotFoundError,
    get_current_matches,
    match_student_to_scholarships,
)
from .schemas import CamelModel, EligibilityCriteria, ScholarshipRecord, StudentCreate, StudentProfile

logger = logging.getLogger(__name__)


# Pydantic request/response models
class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


class ErrorResponse(BaseModel):
    """Error response."""
    error: str
    detail: str | None = None


class FilterOptions(CamelModel):
    """Per-request hard filter options; unset values come from settings."""
    enabled_dimensions: dict[str, bool] | None = None
    early_exit: bool | None = None
    as_of: date | None = None

    def to_config(self) -> HardFilterConfig:
        early_exit = settings.filters.early_exit if self.early_exit is None else self.early_exit
        if self.enabled_dimensions is None:
            return replace(HardFilterConfig.from_settings(), early_exit=early_exit, as_of=self.as_of)
        return HardFilterConfig.from_flags(self.enabled_dimensions, early_exit=early_exit, as_of=self.as_of)


class EligibilityCheckRequest(CamelModel):
    profile: StudentProfile
    criteria: EligibilityCriteria | None = None
    options: FilterOptions = Field(default_factory=FilterOptions)


class FailedCriterionDTO(CamelModel):
    dimension: str
    criterion: str
    required: Any = None
    actual: Any = None


class EligibilityCheckResponse(CamelModel):
    eligible: bool
    failed_criteria: list[FailedCriterionDTO]


class EligibilityFilterRequest(CamelModel):
    profile: StudentProfile
    scholarships: list[ScholarshipRecord]
    options: FilterOptions = Field(default_factory=FilterOptions)
    include_statistics: bool = False


class FilterStatisticsDTO(CamelModel):
    total_scholarships: int
    eligible_count: int
    rejected_count: int
    execution_time_ms: float
    rejections_by_dimension: dict[str, int]


class EligibilityFilterResponse(CamelModel):
    eligible_ids: list[int | str]
    statistics: FilterStatisticsDTO | None = None


class CompareRequest(CamelModel):
    profile: StudentProfile
    criteria: EligibilityCriteria | None = None
    as_of: date | None = None


class ComparisonDTO(CamelModel):
    category: str
    requirement: str
    student_value: str
    status: str
    partial_percentage: float | None = None


class CompareResponse(CamelModel):
    comparisons: list[ComparisonDTO]
    met_count: int
    total_count: int


class StudentResponse(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str | None = None


class ScholarshipResponse(CamelModel):
    id: int
    name: str
    provider: str
    created: bool


class ImportResponse(CamelModel):
    total: int
    created: int
    updated: int
    failed: int
    errors: list[dict[str, Any]] = Field(default_factory=list)


class MatchRequest(CamelModel):
    """Match student to scholarships request."""
    top_n: int | None = Field(default=None, ge=1, le=1000)
    min_match_score: int | None = Field(default=None, ge=0, le=100)
    as_of: date | None = None


class MatchDTO(CamelModel):
    """Single match result."""
    scholarship_id: int
    rank: int
    overall_match_score: int
    dimension_scores: dict[str, int]
    success_probability: int
    success_tier: str
    competition_factor: float
    application_effort: str
    effort_breakdown: dict[str, int]
    strategic_value: float
    strategic_value_tier: str
    priority_tier: str
    tier_rationale: str


class MatchResponse(CamelModel):
    """Match response."""
    status: str
    student_id: int
    total_scholarships: int
    eligible_count: int
    matches: list[MatchDTO]
    scoring_version: str
    computed_at: str
    message: str


class MatchListResponse(CamelModel):
    """Stored matches retrieval response."""
    student_id: int
    matches: list[MatchDTO]
    scoring_version: str
    computed_at: str
    is_stale: bool


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown logic."""
    # Startup
    setup_logging()
    logger.info("Application starting up")

    yield

    # Shutdown
    logger.info("Application shutting down")


app = FastAPI(
    title="Scholarship Matching",
    version=settings.version,
    description="Hard-filter eligibility, match scoring and application priorities",
    lifespan=lifespan,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:3001"],  # Frontend URLs
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=str(exc)).model_dump(),
    )


# Exception handlers
@app.exception_handler(ParseError)
async def parse_error_handler(request, exc: ParseError):
    """Handle catalog parsing errors."""
    logger.error(f"Parse error: {exc}")
    return _error(status.HTTP_400_BAD_REQUEST, "parse_error", exc)


@app.exception_handler(IngestError)
async def ingest_error_handler(request, exc: IngestError):
    """Handle ingestion validation errors."""
    logger.error(f"Ingest error: {exc}")
    return _error(status.HTTP_400_BAD_REQUEST, "ingest_error", exc)


@app.exception_handler(StudentNotFoundError)
async def student_not_found_handler(request, exc: StudentNotFoundError):
    logger.warning(f"Student not found: {exc}")
    return _error(status.HTTP_404_NOT_FOUND, "not_found", exc)


@app.exception_handler(MatchingError)
async def matching_error_handler(request, exc: MatchingError):
    """Handle matching pipeline errors."""
    logger.error(f"Matching error: {exc}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "matching_error", exc)


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        version=settings.version,
    )


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.version,
        "endpoints": {
            "health": "/health",
            "create_student": "/students",
            "create_scholarship": "/scholarships",
            "import_scholarships": "/scholarships/import",
            "check_eligibility": "/eligibility/check",
            "filter_scholarships": "/eligibility/filter",
            "compare_eligibility": "/eligibility/compare",
            "match_student": "/students/{student_id}/match",
            "get_matches": "/students/{student_id}/matches",
            "docs": "/docs",
        },
    }


@app.post("/eligibility/check", response_model=EligibilityCheckResponse)
async def check_eligibility(request: EligibilityCheckRequest) -> EligibilityCheckResponse:
    """Hard-filter one student against one set of criteria."""
    result = apply_hard_filters(request.profile, request.criteria, request.options.to_config())
    return EligibilityCheckResponse(
        eligible=result.eligible,
        failed_criteria=[FailedCriterionDTO(**f.to_dict()) for f in result.failed_criteria],
    )


@app.post("/eligibility/filter", response_model=EligibilityFilterResponse)
async def filter_eligible(request: EligibilityFilterRequest) -> EligibilityFilterResponse:
    """Return the ids of the scholarships the student qualifies for, in input order."""
    config = request.options.to_config()

    statistics = None
    if not request.include_statistics:
        eligible = filter_scholarships(request.profile, request.scholarships, config)
    else:
        eligible, stats = filter_with_statistics(request.profile, request.scholarships, config)
        statistics = FilterStatisticsDTO(
            total_scholarships=stats.total_scholarships,
            eligible_count=stats.eligible_count,
            rejected_count=stats.rejected_count,
            execution_time_ms=round(stats.execution_time_ms, 3),
            rejections_by_dimension={d.value: n for d, n in stats.rejections_by_dimension.items()},
        )

    return EligibilityFilterResponse(eligible_ids=[s.id for s in eligible], statistics=statistics)


@app.post("/eligibility/compare", response_model=CompareResponse)
async def compare(request: CompareRequest) -> CompareResponse:
    """Requirement-by-requirement checklist for one scholarship."""
    rows = compare_eligibility(request.profile, request.criteria, as_of=request.as_of)
    return CompareResponse(
        comparisons=[
            ComparisonDTO(
                category=r.category,
                requirement=r.requirement,
                student_value=r.student_value,
                status=r.status.value,
                partial_percentage=r.partial_percentage,
            )
            for r in rows
        ],
        met_count=sum(1 for r in rows if r.status == EligibilityStatus.MET),
        total_count=len(rows),
    )


@app.post("/students", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student_endpoint(
    request: StudentCreate,
    session: AsyncSession = Depends(get_session),
) -> StudentResponse:
    """Create a student with their profile."""
    student = await create_student(session, request)
    await session.commit()
    return StudentResponse(
        id=student.id,
        first_name=student.first_name,
        last_name=student.last_name,
        email=student.email,
    )


@app.post("/scholarships", response_model=ScholarshipResponse, status_code=status.HTTP_201_CREATED)
async def create_scholarship(
    payload: dict[str, Any] = Body(...),
    session: AsyncSession = Depends(get_session),
) -> ScholarshipResponse:
    """Create or update a scholarship (matched on name and provider)."""
    data = validate_scholarship(payload)
    scholarship, created = await upsert_scholarship(session, data)
    await session.commit()
    return ScholarshipResponse(
        id=scholarship.id,
        name=scholarship.name,
        provider=scholarship.provider,
        created=created,
    )


@app.post("/scholarships/import", response_model=ImportResponse)
async def import_scholarships(
    file: UploadFile = File(..., description="Scholarship catalog (CSV, Excel or JSON)"),
    session: AsyncSession = Depends(get_session),
) -> ImportResponse:
    """Bulk-import a scholarship catalog."""
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Filename is required",
        )

    logger.info(f"Received catalog upload: {file.filename}")
    try:
        content = await file.read()
        summary = await import_scholarship_file(session, BytesIO(content), file.filename)
    finally:
        await file.close()

    return ImportResponse(
        total=summary.total,
        created=summary.created,
        updated=summary.updated,
        failed=summary.failed,
        errors=summary.errors,
    )


def _match_dto(scholarship_id: int, rank: int, score) -> MatchDTO:
    return MatchDTO(
        scholarship_id=scholarship_id,
        rank=rank,
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
    )


@app.post("/students/{student_id}/match", response_model=MatchResponse)
async def match_student(
    student_id: int,
    request: MatchRequest = MatchRequest(),
    session: AsyncSession = Depends(get_session),
) -> MatchResponse:
    """Run the matching pipeline for a student and store the results."""
    logger.info(f"Matching student {student_id}")

    run = await match_student_to_scholarships(
        session=session,
        student_id=student_id,
        top_n=request.top_n,
        min_match_score=request.min_match_score,
        as_of=request.as_of,
    )

    return MatchResponse(
        status="success",
        student_id=run.student_id,
        total_scholarships=run.total_scholarships,
        eligible_count=run.eligible_count,
        matches=[_match_dto(m.scholarship_id, m.rank, m.score) for m in run.matches],
        scoring_version=run.scoring_version,
        computed_at=run.computed_at.isoformat(),
        message=f"Matched {len(run.matches)} scholarships for student {student_id}",
    )


@app.get("/students/{student_id}/matches", response_model=MatchListResponse)
async def get_matches(
    student_id: int,
    session: AsyncSession = Depends(get_session),
) -> MatchListResponse:
    """Latest stored matches for a student."""
    records = await get_current_matches(session, student_id)
    if not records:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No matches found for student {student_id}. Run matching first.",
        )

    first_record = records[0]
    return MatchListResponse(
        student_id=student_id,
        matches=[
            MatchDTO(
                scholarship_id=r.scholarship_id,
                rank=r.rank,
                overall_match_score=r.overall_match_score,
                dimension_scores=r.dimension_scores,
                success_probability=r.success_probability,
                success_tier=r.success_tier,
                competition_factor=r.competition_factor,
                application_effort=r.application_effort,
                effort_breakdown=r.effort_breakdown,
                strategic_value=r.strategic_value,
                strategic_value_tier=r.strategic_value_tier,
                priority_tier=r.priority_tier,
                tier_rationale=r.tier_rationale,
            )
            for r in records
        ],
        scoring_version=first_record.scoring_version,
        computed_at=first_record.computed_at.isoformat(),
        is_stale=first_record.is_stale,
    )
