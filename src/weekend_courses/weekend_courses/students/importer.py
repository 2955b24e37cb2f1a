from __future__ import annotations

import logging
from typing import IO, Any, Dict, List, Optional

import pandas as pd

from ..core.constants import IMPORT_MAX_ROWS
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".xlsx", ".xls", ".csv")

# Normalized header -> accepted spellings
COLUMN_ALIASES: Dict[str, List[str]] = {
    "student_number": ["student_number", "student_no", "studentnumber", "student_id", "number", "matric_number"],
    "surname": ["surname", "family_name"],
    "first_name": ["first_name", "firstname", "given_name", "name"],
    "last_name": ["last_name", "lastname", "middle_name", "other_names"],
    "email": ["email", "email_address", "e-mail", "mail"],
    "phone_number": ["phone_number", "phone", "phonenumber", "mobile", "telephone"],
}
REQUIRED_COLUMNS = ("student_number", "surname", "first_name", "email")


def _normalize_header(value) -> str:
    return str(value).strip().lower().replace(" ", "_")


def _map_columns(columns) -> Dict[str, str]:
    present = {_normalize_header(c): c for c in columns}
    mapped: Dict[str, str] = {}
    for standard, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in present:
                mapped[standard] = present[alias]
                break
    return mapped


def _cell(value) -> Optional[str]:
    if value is None or pd.isna(value):
        return None
    if isinstance(value, float) and value.is_integer():
        # Numeric student numbers / phones come back as floats from Excel.
        value = int(value)
    text = str(value).strip()
    return text or None


def read_student_rows(stream: IO[bytes], filename: str) -> List[Dict[str, Any]]:
    """Read an Excel or CSV upload into raw row dicts keyed by standard column.

    Each row carries its 1-based spreadsheet line in `"row"` (header is line 1).
    Fully blank rows are dropped.
    """
    name = (filename or "").lower()
    if not name.endswith(ALLOWED_EXTENSIONS):
        raise ValidationError("Only Excel (.xlsx, .xls) and CSV files are allowed")

    try:
        if name.endswith(".csv"):
            df = pd.read_csv(stream, dtype=str, keep_default_na=True)
        else:
            df = pd.read_excel(stream, dtype=object)
    except (ValueError, OSError, pd.errors.ParserError) as e:
        logger.warning("Failed to parse student upload %s: %s", filename, e)
        raise ValidationError("Failed to read the file. Please check the format.")

    mapped = _map_columns(df.columns)
    missing = [c for c in REQUIRED_COLUMNS if c not in mapped]
    if missing:
        raise ValidationError(f"Missing required columns: {', '.join(missing)}")

    df = df.dropna(how="all")
    if len(df) > IMPORT_MAX_ROWS:
        raise ValidationError(f"File contains too many rows. Maximum allowed: {IMPORT_MAX_ROWS}")

    rows: List[Dict[str, Any]] = []
    for index, record in df.iterrows():
        row: Dict[str, Any] = {"row": int(index) + 2}
        for standard in COLUMN_ALIASES:
            original = mapped.get(standard)
            row[standard] = _cell(record[original]) if original is not None else None
        rows.append(row)

    logger.info("Read %s student rows from %s", len(rows), filename)
    return rows
