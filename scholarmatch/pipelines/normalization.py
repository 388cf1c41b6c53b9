"""Normalization of scholarship and profile data on the way in.

Trims strings, drops empty values and turns flat catalog rows (CSV/Excel
columns such as ``minGPA`` or ``eligibleMajors``) into the nested
``eligibilityCriteria`` shape.
"""
from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime
from typing import Any, Mapping

logger = logging.getLogger(__name__)

# Multi-value cells separate items with semicolons
LIST_SEPARATOR = ";"

TRUE_VALUES = {"true", "1", "yes", "y"}


def normalize_whitespace(text: str) -> str:
    """Normalize whitespace: collapse multiple spaces, remove leading/trailing."""
    text = re.sub(r'\s+', ' ', text)
    return text.strip()


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def to_list(value: Any) -> list[str]:
    if is_missing(value):
        return []
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = str(value).split(LIST_SEPARATOR)
    return [normalize_whitespace(str(v)) for v in items if not is_missing(v)]


def to_bool(value: Any) -> bool | None:
    if is_missing(value):
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in TRUE_VALUES


def to_float(value: Any) -> float | None:
    if is_missing(value):
        return None
    try:
        return float(str(value).replace(",", "").replace("$", "").strip())
    except ValueError:
        logger.warning(f"Ignoring non-numeric value: {value!r}")
        return None


def to_int(value: Any) -> int | None:
    number = to_float(value)
    return None if number is None else int(number)


def to_str(value: Any) -> str | None:
    return None if is_missing(value) else normalize_whitespace(str(value))


def to_date(value: Any) -> str | None:
    """ISO date string; spreadsheet timestamps lose their time part."""
    if is_missing(value):
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    return str(value).strip()[:10]


def _clean(value: Any) -> Any:
    if isinstance(value, str):
        return normalize_whitespace(value) or None
    if isinstance(value, list):
        items = [_clean(v) for v in value]
        return [v for v in items if v is not None] or None
    if isinstance(value, dict):
        cleaned = {k: _clean(v) for k, v in value.items()}
        return {k: v for k, v in cleaned.items() if v is not None} or None
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def normalize_criteria(criteria: Mapping[str, Any] | None) -> dict[str, Any]:
    """Trim strings and drop empty lists, nulls and empty dimensions.

    ``False`` flags are kept; they mean "not required" and are harmless.
    """
    if not criteria:
        return {}
    return _clean(dict(criteria)) or {}


# Flat column name -> (dimension key, converter)
CRITERIA_COLUMNS: dict[str, tuple[str, Any]] = {
    "minGPA": ("academic", to_float),
    "maxGPA": ("academic", to_float),
    "minSAT": ("academic", to_int),
    "maxSAT": ("academic", to_int),
    "minACT": ("academic", to_int),
    "maxACT": ("academic", to_int),
    "classRankPercentile": ("academic", to_float),
    "requiredGender": ("demographic", to_str),
    "requiredEthnicity": ("demographic", to_list),
    "ageMin": ("demographic", to_int),
    "ageMax": ("demographic", to_int),
    "requiredState": ("demographic", to_list),
    "requiredCity": ("demographic", to_list),
    "eligibleMajors": ("majorField", to_list),
    "excludedMajors": ("majorField", to_list),
    "requiredFieldOfStudy": ("majorField", to_list),
    "careerGoalsKeywords": ("majorField", to_list),
    "minVolunteerHours": ("experience", to_int),
    "leadershipRequired": ("experience", to_bool),
    "requiredExtracurriculars": ("experience", to_list),
    "minWorkExperience": ("experience", to_int),
    "awardsHonorsRequired": ("experience", to_bool),
    "requiresFinancialNeed": ("financial", to_bool),
    "maxEFC": ("financial", to_int),
    "pellGrantRequired": ("financial", to_bool),
    "financialNeedLevel": ("financial", to_str),
    "firstGenerationRequired": ("special", to_bool),
    "militaryAffiliation": ("special", to_str),
    "citizenshipRequired": ("special", to_str),
    "disabilityRequired": ("special", to_bool),
    "otherRequirements": ("special", to_list),
}

SCHOLARSHIP_COLUMNS: dict[str, Any] = {
    "name": to_str,
    "provider": to_str,
    "description": to_str,
    "website": to_str,
    "awardAmount": to_int,
    "numberOfAwards": to_int,
    "deadline": to_date,
    "essayPrompts": to_list,
    "requiredDocuments": to_list,
    "recommendationCount": to_int,
    "applicantPoolSize": to_int,
    "acceptanceRate": to_float,
    "tags": to_list,
}


def flat_row_to_scholarship(row: Mapping[str, Any]) -> dict[str, Any]:
    """Convert one flat catalog row into a nested scholarship dict."""
    criteria: dict[str, dict[str, Any]] = {}
    for column, (dimension, convert) in CRITERIA_COLUMNS.items():
        if column in row:
            value = convert(row[column])
            if value not in (None, []):
                criteria.setdefault(dimension, {})[column] = value

    scholarship: dict[str, Any] = {}
    for column, convert in SCHOLARSHIP_COLUMNS.items():
        if column in row:
            value = convert(row[column])
            if value not in (None, []):
                scholarship[column] = value

    scholarship["eligibilityCriteria"] = normalize_criteria(criteria)
    return scholarship
