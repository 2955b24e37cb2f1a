from __future__ import annotations

import io

import qrcode

from ..attendance.scan import ScanPayload
from .model import Student


def payload_for(student: Student) -> ScanPayload:
    return ScanPayload(uuid=student.uuid, student_id=student.student_number)


def render_qr_png(student: Student, *, box_size: int = 10, border: int = 2) -> bytes:
    """PNG bytes of the student's attendance QR code."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(payload_for(student).to_json())
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
