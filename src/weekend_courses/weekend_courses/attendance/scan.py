from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from ..core.exceptions import FieldValidationError

UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE)


@dataclass(frozen=True)
class ScanPayload:
    """Identity carried by a student's QR code: `{"uuid": ..., "student_id": ...}`.

    `student_id` is the human student number printed on the card, not the
    database key.
    """

    uuid: str
    student_id: str

    @classmethod
    def parse(cls, raw: Any) -> "ScanPayload":
        """Accept the decoded QR text (JSON) or an already-decoded dict.

        Unknown keys are ignored.
        """
        data = raw
        if isinstance(raw, (str, bytes)):
            try:
                data = json.loads(raw)
            except ValueError:
                raise FieldValidationError({"qr_data": "QR code does not contain valid JSON"}, "Invalid QR code")

        if not isinstance(data, dict):
            raise FieldValidationError({"qr_data": "QR code must contain a JSON object"}, "Invalid QR code")

        uuid = data.get("uuid")
        student_id = data.get("student_id")
        errors = {}
        if not isinstance(uuid, str) or not uuid.strip():
            errors["uuid"] = "This field is required"
        elif not UUID_RE.match(uuid.strip()):
            errors["uuid"] = "Invalid student identifier"
        if not isinstance(student_id, str) or not student_id.strip():
            errors["student_id"] = "This field is required"
        if errors:
            raise FieldValidationError(errors, "Invalid QR code")

        return cls(uuid=uuid.strip().lower(), student_id=student_id.strip())

    def to_json(self) -> str:
        return json.dumps({"uuid": self.uuid, "student_id": self.student_id}, separators=(",", ":"))
