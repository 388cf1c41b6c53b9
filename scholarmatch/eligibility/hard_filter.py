"""Hard filter: binary eligibility of a student for scholarships.

First stage of matching. Evaluates the six eligibility dimensions in a
fixed order (academic, demographic, major/field, experience, financial,
special) and rejects a scholarship as soon as one criterion fails, unless
early exit is switched off. Batch filtering is plain in-process iteration,
sized for about 10,000 scholarships in roughly 100ms.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import replace
from datetime import date
from functools import lru_cache
from typing import Any, Protocol, TypeVar

from ..config import settings
from ..schemas import EligibilityCriteria, StudentProfile
from .filters import (
    filter_academic,
    filter_demographic,
    filter_experience,
    filter_financial,
    filter_major_field,
    filter_special,
)
from .types import (
    FailedCriterion,
    FilterDimension,
    FilterStatistics,
    HardFilterConfig,
    HardFilterResult,
    empty_rejection_counts,
)

logger = logging.getLogger(__name__)

DimensionFilter = Callable[[StudentProfile, Any, date], Iterator[FailedCriterion]]

DIMENSION_FILTERS: tuple[tuple[FilterDimension, str, DimensionFilter], ...] = (
    (FilterDimension.ACADEMIC, "academic", filter_academic),
    (FilterDimension.DEMOGRAPHIC, "demographic", filter_demographic),
    (FilterDimension.MAJOR_FIELD, "major_field", filter_major_field),
    (FilterDimension.EXPERIENCE, "experience", filter_experience),
    (FilterDimension.FINANCIAL, "financial", filter_financial),
    (FilterDimension.SPECIAL, "special", filter_special),
)


@lru_cache(maxsize=64)
def _active_filters(enabled: frozenset[FilterDimension]) -> tuple[tuple[str, DimensionFilter], ...]:
    return tuple((attr, check) for dimension, attr, check in DIMENSION_FILTERS if dimension in enabled)


class HasCriteria(Protocol):
    eligibility_criteria: EligibilityCriteria


T = TypeVar("T", bound=HasCriteria)

CriteriaInput = EligibilityCriteria | Mapping[str, Any] | None


def _coerce_criteria(criteria: CriteriaInput) -> EligibilityCriteria | None:
    if criteria is None or isinstance(criteria, EligibilityCriteria):
        return criteria
    return EligibilityCriteria.model_validate(criteria)


def apply_hard_filters(
    profile: StudentProfile,
    criteria: CriteriaInput,
    config: HardFilterConfig | None = None,
) -> HardFilterResult:
    """Check one student against one scholarship's eligibility criteria.

    Args:
        profile: Student profile; any field may be missing
        criteria: Scholarship criteria, as a model or its raw JSON dict
        config: Enabled dimensions and early-exit flag (default from settings)

    Returns:
        HardFilterResult. With early exit on, ``failed_criteria`` holds at
        most one entry; otherwise every failure across enabled dimensions.
    """
    criteria = _coerce_criteria(criteria)
    if criteria is None:
        return HardFilterResult(eligible=True)

    config = config or HardFilterConfig.from_settings()
    as_of = config.as_of or date.today()
    failed: list[FailedCriterion] = []

    for attr, check in _active_filters(config.enabled_dimensions):
        dimension_criteria = getattr(criteria, attr)
        if dimension_criteria is None:
            continue
        for failure in check(profile, dimension_criteria, as_of):
            failed.append(failure)
            if config.early_exit:
                return HardFilterResult(eligible=False, failed_criteria=failed)

    return HardFilterResult(eligible=not failed, failed_criteria=failed)


def filter_with_statistics(
    profile: StudentProfile,
    scholarships: Sequence[T],
    config: HardFilterConfig | None = None,
) -> tuple[list[T], FilterStatistics]:
    """Filter a batch once and return the eligible subset with its counts.

    Timing and rejection counts are logged, with a warning when the run
    exceeds the configured latency budget.
    """
    config = config or HardFilterConfig.from_settings()
    if config.as_of is None:
        config = replace(config, as_of=date.today())

    start = time.perf_counter()
    rejections = empty_rejection_counts()
    eligible: list[T] = []

    for scholarship in scholarships:
        result = apply_hard_filters(profile, scholarship.eligibility_criteria, config)
        if result.eligible:
            eligible.append(scholarship)
        else:
            for failure in result.failed_criteria:
                rejections[failure.dimension] += 1

    duration_ms = (time.perf_counter() - start) * 1000
    stats = FilterStatistics(
        total_scholarships=len(scholarships),
        eligible_count=len(eligible),
        rejected_count=len(scholarships) - len(eligible),
        execution_time_ms=duration_ms,
        rejections_by_dimension=rejections,
    )

    logger.info(f"Filtered {stats.total_scholarships} scholarships in {duration_ms:.2f}ms")
    logger.info(f"Eligible: {stats.eligible_count}, Rejected: {stats.rejected_count}")
    logger.info(f"Rejections by dimension: {({d.value: n for d, n in rejections.items()})}")
    if duration_ms > settings.filters.latency_budget_ms:
        logger.warning(
            f"Hard filter exceeded latency budget: {duration_ms:.2f}ms "
            f"> {settings.filters.latency_budget_ms}ms"
        )

    return eligible, stats


def filter_scholarships(
    profile: StudentProfile,
    scholarships: Sequence[T],
    config: HardFilterConfig | None = None,
    include_statistics: bool = False,
) -> list[T]:
    """Return the scholarships the student is eligible for, in input order.

    Args:
        profile: Student profile
        scholarships: Records exposing ``eligibility_criteria``
        config: Filter configuration (default from settings)
        include_statistics: Log timing and rejection counts

    Returns:
        Eligible subset of ``scholarships``
    """
    if include_statistics:
        eligible, _ = filter_with_statistics(profile, scholarships, config)
        return eligible

    config = config or HardFilterConfig.from_settings()
    if config.as_of is None:
        config = replace(config, as_of=date.today())
    return [
        s for s in scholarships
        if apply_hard_filters(profile, s.eligibility_criteria, config).eligible
    ]


def get_filter_statistics(
    profile: StudentProfile,
    scholarships: Sequence[HasCriteria],
    config: HardFilterConfig | None = None,
) -> FilterStatistics:
    """Run the filter over a batch and report counts instead of records."""
    _, stats = filter_with_statistics(profile, scholarships, config)
    return stats
