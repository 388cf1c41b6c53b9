"""Hard-filter eligibility engine and eligibility checklist."""
from .compare import EligibilityComparison, EligibilityStatus, compare_eligibility
from .hard_filter import (
    apply_hard_filters,
    filter_scholarships,
    filter_with_statistics,
    get_filter_statistics,
)
from .types import (
    FailedCriterion,
    FilterDimension,
    FilterStatistics,
    HardFilterConfig,
    HardFilterResult,
)

__all__ = [
    "EligibilityComparison",
    "EligibilityStatus",
    "FailedCriterion",
    "FilterDimension",
    "FilterStatistics",
    "HardFilterConfig",
    "HardFilterResult",
    "apply_hard_filters",
    "compare_eligibility",
    "filter_scholarships",
    "filter_with_statistics",
    "get_filter_statistics",
]
