"""Ingestion pipeline for students and scholarships.

- Creates students with their profile.
- Creates or updates scholarships (keyed by name + provider), normalizing
  eligibility criteria into the stored camelCase JSON shape.
- Bulk-imports scholarship catalogs from CSV, Excel or JSON uploads.

Each function is reusable from both the API and batch scripts; callers
own the transaction except for ``import_scholarship_file``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Mapping

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .. import models
from ..parsers import FileType, parse_file
from ..schemas import ScholarshipCreate, StudentCreate
from .normalization import flat_row_to_scholarship, normalize_criteria

logger = logging.getLogger(__name__)


class IngestError(Exception):
    """Raised when incoming data cannot be stored."""
    pass


@dataclass
class ImportSummary:
    """Outcome of a catalog import."""
    total: int = 0
    created: int = 0
    updated: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.errors)


async def create_student(session: AsyncSession, data: StudentCreate) -> models.Student:
    """Create a student together with their profile."""
    profile_data = data.profile.model_dump(exclude_none=True, mode="json")
    if data.profile.date_of_birth is not None:
        profile_data["date_of_birth"] = data.profile.date_of_birth

    student = models.Student(
        first_name=data.first_name.strip(),
        last_name=data.last_name.strip(),
        email=data.email.strip().lower() if data.email else None,
        profile=models.Profile(**profile_data),
    )
    session.add(student)
    try:
        await session.flush()
    except IntegrityError as e:
        await session.rollback()
        raise IngestError(f"Student with email {data.email} already exists") from e

    logger.info(f"Created student {student.id}")
    return student


def _scholarship_fields(data: ScholarshipCreate) -> dict[str, Any]:
    fields = data.model_dump(exclude={"eligibility_criteria"})
    fields["name"] = fields["name"].strip()
    fields["provider"] = fields["provider"].strip()
    fields["eligibility_criteria"] = data.eligibility_criteria.model_dump(
        by_alias=True, exclude_none=True, mode="json"
    )
    return fields


def validate_scholarship(raw: Mapping[str, Any]) -> ScholarshipCreate:
    """Normalize criteria and validate a raw camelCase scholarship dict.

    Raises:
        IngestError: If the data fails validation
    """
    payload = dict(raw)
    criteria = payload.get("eligibilityCriteria", payload.get("eligibility_criteria"))
    if criteria is not None and not isinstance(criteria, Mapping):
        raise IngestError(
            f"Invalid scholarship data: eligibilityCriteria must be an object, got {type(criteria).__name__}"
        )
    payload.pop("eligibility_criteria", None)
    payload["eligibilityCriteria"] = normalize_criteria(criteria)
    try:
        return ScholarshipCreate.model_validate(payload)
    except ValidationError as e:
        raise IngestError(f"Invalid scholarship data: {e}") from e


async def upsert_scholarship(
    session: AsyncSession,
    data: ScholarshipCreate,
) -> tuple[models.Scholarship, bool]:
    """Create or update a scholarship matched on (name, provider).

    Returns:
        Tuple of (scholarship, created)
    """
    fields = _scholarship_fields(data)
    query = select(models.Scholarship).where(
        models.Scholarship.name == fields["name"],
        models.Scholarship.provider == fields["provider"],
    )
    existing = (await session.execute(query)).scalar_one_or_none()

    if existing is not None:
        for key, value in fields.items():
            setattr(existing, key, value)
        await session.flush()
        logger.info(f"Updated scholarship {existing.id} ({existing.name})")
        return existing, False

    scholarship = models.Scholarship(**fields)
    session.add(scholarship)
    await session.flush()
    logger.info(f"Created scholarship {scholarship.id} ({scholarship.name})")
    return scholarship, True


async def import_scholarship_file(
    session: AsyncSession,
    file_obj: BinaryIO,
    filename: str,
) -> ImportSummary:
    """Import a scholarship catalog and commit it.

    Rows that fail validation are reported in the summary and skipped;
    the rest are stored. An unreadable file raises ``ParseError``.
    """
    file_type, records = parse_file(file_obj, filename)
    summary = ImportSummary(total=len(records))

    for index, record in enumerate(records, start=1):
        raw = record if file_type == FileType.JSON else flat_row_to_scholarship(record)
        try:
            data = validate_scholarship(raw)
        except IngestError as e:
            logger.warning(f"Skipping row {index} of {filename}: {e}")
            summary.errors.append({"row": index, "name": raw.get("name"), "error": str(e)})
            continue

        _, created = await upsert_scholarship(session, data)
        if created:
            summary.created += 1
        else:
            summary.updated += 1

    await session.commit()
    logger.info(
        f"Imported {filename}: {summary.created} created, {summary.updated} updated, "
        f"{summary.failed} failed of {summary.total}"
    )
    return summary
