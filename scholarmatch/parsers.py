"""Scholarship catalog file parsing.

Supports CSV and Excel (flat, one scholarship per row) via pandas, and
JSON (a list of nested scholarship objects or ``{"scholarships": [...]}``).
"""
from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, BinaryIO

import pandas as pd

logger = logging.getLogger(__name__)


class FileType(str, Enum):
    """Supported file types."""
    CSV = "csv"
    EXCEL = "excel"
    JSON = "json"
    UNKNOWN = "unknown"


class ParseError(Exception):
    """Raised when a catalog file cannot be read."""
    pass


def detect_file_type(filename: str, content: bytes | None = None) -> FileType:
    """Detect file type from filename or content.

    Args:
        filename: Original filename
        content: Optional file content for magic number detection

    Returns:
        Detected FileType
    """
    filename_lower = filename.lower()

    if filename_lower.endswith('.csv'):
        return FileType.CSV
    elif filename_lower.endswith(('.xls', '.xlsx', '.xlsm')):
        return FileType.EXCEL
    elif filename_lower.endswith('.json'):
        return FileType.JSON

    if content:
        if content.startswith(b'PK\x03\x04'):  # ZIP/Office
            return FileType.EXCEL
        if content.lstrip()[:1] in (b'[', b'{'):
            return FileType.JSON

    return FileType.UNKNOWN


def _records(df: pd.DataFrame) -> list[dict[str, Any]]:
    # Empty cells come back as NaN; callers expect None
    df = df.astype(object).where(pd.notna(df), None)
    df.columns = [str(c).strip() for c in df.columns]
    return df.to_dict('records')


def parse_csv(file_obj: BinaryIO, filename: str) -> list[dict[str, Any]]:
    """Parse CSV file into flat row dicts.

    Raises:
        ParseError: If CSV parsing fails or the file has no rows
    """
    try:
        df = pd.read_csv(file_obj, encoding='utf-8', skip_blank_lines=True)
    except Exception as e:
        logger.error(f"CSV parsing failed for {filename}: {e}")
        raise ParseError(f"Failed to parse CSV: {e}") from e

    if df.empty:
        raise ParseError("CSV file is empty")

    logger.info(f"Parsed CSV with {len(df)} rows and {len(df.columns)} columns")
    return _records(df)


def parse_excel(file_obj: BinaryIO, filename: str, sheet_name: str | int = 0) -> list[dict[str, Any]]:
    """Parse Excel file into flat row dicts.

    Args:
        file_obj: Binary file object
        filename: Original filename
        sheet_name: Sheet name or index (default: first sheet)

    Raises:
        ParseError: If Excel parsing fails or the sheet has no rows
    """
    try:
        df = pd.read_excel(file_obj, sheet_name=sheet_name, engine='openpyxl')
    except Exception as e:
        logger.error(f"Excel parsing failed for {filename}: {e}")
        raise ParseError(f"Failed to parse Excel: {e}") from e

    if df.empty:
        raise ParseError("Excel sheet is empty")

    logger.info(f"Parsed Excel with {len(df)} rows and {len(df.columns)} columns")
    return _records(df)


def parse_json(file_obj: BinaryIO, filename: str) -> list[dict[str, Any]]:
    """Parse a JSON catalog of nested scholarship objects."""
    try:
        data = json.load(file_obj)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f"JSON parsing failed for {filename}: {e}")
        raise ParseError(f"Failed to parse JSON: {e}") from e

    if isinstance(data, dict):
        data = data.get("scholarships", [data])
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ParseError("JSON must be a list of scholarship objects")
    if not data:
        raise ParseError("JSON file contains no scholarships")

    logger.info(f"Parsed JSON with {len(data)} scholarships")
    return data


def parse_file(file_obj: BinaryIO, filename: str) -> tuple[FileType, list[dict[str, Any]]]:
    """Parse an uploaded catalog based on its type.

    Returns:
        Tuple of (file_type, records). CSV and Excel records are flat rows;
        JSON records are already nested.

    Raises:
        ParseError: If file type unsupported or parsing fails
    """
    file_type = detect_file_type(filename)

    if file_type == FileType.CSV:
        return file_type, parse_csv(file_obj, filename)
    elif file_type == FileType.EXCEL:
        return file_type, parse_excel(file_obj, filename)
    elif file_type == FileType.JSON:
        return file_type, parse_json(file_obj, filename)
    else:
        raise ParseError(f"Unsupported file type: {filename}")
