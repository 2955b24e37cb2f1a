from __future__ import annotations

import csv
import io
import json
from typing import Iterable

EXPORT_FIELDS = [
    "attend_date",
    "student_number",
    "student_name",
    "email",
    "class_name",
    "session_day",
    "session_time",
    "status",
    "scan_time",
]


def rows_to_csv(rows: Iterable[dict]) -> bytes:
    """CSV with a BOM so Excel picks up UTF-8."""
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=EXPORT_FIELDS, extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return out.getvalue().encode("utf-8-sig")


def rows_to_json(rows: Iterable[dict]) -> bytes:
    return json.dumps([{k: row.get(k) for k in EXPORT_FIELDS} for row in rows], ensure_ascii=False, indent=2).encode(
        "utf-8"
    )


def export_filename(prefix: str, start, end, extension: str) -> str:
    return f"{prefix}_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.{extension}"
