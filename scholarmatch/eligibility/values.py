"""Helpers that turn raw profile fields into comparable values.

Shared by the hard filter, the eligibility checklist and the scorers.
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date
from functools import lru_cache
from typing import Any

from ..schemas import FinancialNeed, StudentProfile

NEED_PRIORITY: dict[FinancialNeed, int] = {
    FinancialNeed.LOW: 1,
    FinancialNeed.MODERATE: 2,
    FinancialNeed.HIGH: 3,
    FinancialNeed.VERY_HIGH: 4,
}

# "10000+" ranges have no upper bound
OPEN_EFC_MAX = 999_999

ANY = "any"


@lru_cache(maxsize=8192)
def normalize_label(value: str) -> str:
    """Case- and whitespace-insensitive form of a label."""
    return " ".join(value.split()).casefold()


@lru_cache(maxsize=4096)
def _frozen_labels(values: tuple[str, ...]) -> frozenset[str]:
    return frozenset(normalize_label(v) for v in values if v and v.strip())


def label_set(values: Iterable[str] | None) -> frozenset[str]:
    """Normalized labels of a list, computed once per distinct list."""
    if not values:
        return frozenset()
    return _frozen_labels(tuple(values))


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict, tuple, set)):
        return len(value) == 0
    return False


def is_any(value: str | None) -> bool:
    """True when a single-valued criterion is unset or set to "Any"."""
    return value is None or not value.strip() or normalize_label(value) == ANY


def in_labels(value: str, allowed: Iterable[str]) -> bool:
    return normalize_label(value) in label_set(allowed)


def gpa_on_four_point_scale(profile: StudentProfile) -> float | None:
    if profile.gpa is None:
        return None
    scale = profile.gpa_scale
    if scale and scale > 0 and scale != 4.0:
        return round(profile.gpa / scale * 4.0, 2)
    return profile.gpa


def has_class_rank(profile: StudentProfile) -> bool:
    rank, size = profile.class_rank, profile.class_size
    return bool(rank and size and size > 0 and 0 < rank <= size)


def class_rank_percentile(class_rank: int, class_size: int) -> float:
    """Standing percentile: rank 1 of 100 is the 100th percentile."""
    return (class_size - class_rank + 1) / class_size * 100


def class_rank_top_percent(class_rank: int, class_size: int) -> float:
    """Share of the class at or above this rank, e.g. rank 10 of 100 is top 10%."""
    return class_rank / class_size * 100


def within_top_percent(class_rank: int, class_size: int, top_percent: float) -> bool:
    # Integer-side comparison avoids float drift at exact boundaries
    return class_rank * 100 <= top_percent * class_size


def calculate_age(date_of_birth: date, as_of: date) -> int:
    age = as_of.year - date_of_birth.year
    if (as_of.month, as_of.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def _parse_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def work_experience_months(work_experience: Iterable[Any], as_of: date) -> int:
    """Total months across entries with ``months`` or ``startDate``/``endDate``.

    An entry without an end date counts up to ``as_of``.
    """
    total = 0
    for entry in work_experience:
        if not isinstance(entry, dict):
            continue
        months = entry.get("months")
        if isinstance(months, (int, float)) and not isinstance(months, bool):
            total += max(0, int(months))
            continue
        start = _parse_date(entry.get("startDate") or entry.get("start_date"))
        if start is None:
            continue
        end = _parse_date(entry.get("endDate") or entry.get("end_date")) or as_of
        total += max(0, (end.year - start.year) * 12 + (end.month - start.month))
    return total


def activity_names(activities: Iterable[Any]) -> list[str]:
    names = []
    for activity in activities:
        if isinstance(activity, str):
            name = activity
        elif isinstance(activity, dict):
            name = activity.get("name") or activity.get("activity") or ""
        else:
            name = ""
        if name:
            names.append(str(name))
    return names


def count_entries(value: list[Any] | dict[str, Any] | None) -> int:
    if not value:
        return 0
    return len(value)


def parse_efc_max(efc_range: str | None) -> int | None:
    """Upper bound of an EFC range such as "0-5000", "10000+" or "4000"."""
    if efc_range is None:
        return None
    cleaned = re.sub(r"[\s$,]", "", efc_range)
    if not cleaned:
        return None
    if cleaned.endswith("+"):
        return OPEN_EFC_MAX
    if "-" in cleaned:
        _, _, upper = cleaned.partition("-")
        return int(upper) if upper.isdigit() else None
    return int(cleaned) if cleaned.isdigit() else None


def need_priority(need: FinancialNeed | None) -> int:
    return NEED_PRIORITY[need] if need is not None else 0
