"""Result and configuration types for the hard filter."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from ..config import FilterSettings, settings


class FilterDimension(str, Enum):
    """The six eligibility dimensions, in evaluation order."""
    ACADEMIC = "academic"
    DEMOGRAPHIC = "demographic"
    MAJOR_FIELD = "majorField"
    EXPERIENCE = "experience"
    FINANCIAL = "financial"
    SPECIAL = "special"


@dataclass
class FailedCriterion:
    """Why a student failed a single criterion."""
    dimension: FilterDimension
    criterion: str
    required: Any
    actual: Any

    def to_dict(self) -> dict[str, Any]:
        return {
            "dimension": self.dimension.value,
            "criterion": self.criterion,
            "required": self.required,
            "actual": self.actual,
        }

    def describe(self) -> str:
        return f"{self.dimension.value}.{self.criterion}: required {self.required}, actual {self.actual}"


@dataclass
class HardFilterResult:
    """Eligibility decision with the failures that caused it."""
    eligible: bool
    failed_criteria: list[FailedCriterion] = field(default_factory=list)


@dataclass(frozen=True)
class HardFilterConfig:
    """Which dimensions to evaluate and whether to stop at the first failure."""
    enabled_dimensions: frozenset[FilterDimension] = frozenset(FilterDimension)
    early_exit: bool = True
    as_of: date | None = None  # reference date for age and ongoing jobs

    @classmethod
    def from_settings(cls, filter_settings: FilterSettings | None = None) -> HardFilterConfig:
        fs = filter_settings or settings.filters
        flags = {
            FilterDimension.ACADEMIC: fs.academic,
            FilterDimension.DEMOGRAPHIC: fs.demographic,
            FilterDimension.MAJOR_FIELD: fs.major_field,
            FilterDimension.EXPERIENCE: fs.experience,
            FilterDimension.FINANCIAL: fs.financial,
            FilterDimension.SPECIAL: fs.special,
        }
        return cls(
            enabled_dimensions=frozenset(d for d, on in flags.items() if on),
            early_exit=fs.early_exit,
        )

    @classmethod
    def from_flags(
        cls,
        enabled: Mapping[str, bool] | None = None,
        *,
        early_exit: bool = True,
        as_of: date | None = None,
    ) -> HardFilterConfig:
        """Build a config from ``{"academic": True, "majorField": False, ...}``.

        Dimensions missing from ``enabled`` stay on.
        """
        enabled = enabled or {}
        return cls(
            enabled_dimensions=frozenset(
                d for d in FilterDimension if enabled.get(d.value, True)
            ),
            early_exit=early_exit,
            as_of=as_of,
        )

    def is_enabled(self, dimension: FilterDimension) -> bool:
        return dimension in self.enabled_dimensions


@dataclass
class FilterStatistics:
    """Summary of a batch filter run."""
    total_scholarships: int
    eligible_count: int
    rejected_count: int
    execution_time_ms: float
    rejections_by_dimension: dict[FilterDimension, int]


def empty_rejection_counts() -> dict[FilterDimension, int]:
    return {dimension: 0 for dimension in FilterDimension}
