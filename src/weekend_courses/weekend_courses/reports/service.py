from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..classes.repository import ClassRepository
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import FieldValidationError, NotFoundError, ValidationError
from ..users.access import CourseAccess

MAX_REPORT_DAYS = 366


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


class AttendanceReportService:
    def __init__(self, attendance: AttendanceRepository, classes: ClassRepository, *, access: CourseAccess):
        self._attendance = attendance
        self._classes = classes
        self._access = access

    def build_attendance_report(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        start: date,
        end: date,
        course_id: Optional[int] = None,
        class_id: Optional[int] = None,
        session_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> ReportData:
        if end < start:
            raise ValidationError("End date must be on or after start date")
        if (end - start).days > MAX_REPORT_DAYS:
            raise ValidationError(f"Reports cover at most {MAX_REPORT_DAYS} days")

        if class_id is not None:
            klass = self._classes.get_by_id(int(class_id))
            if not klass:
                raise NotFoundError("Class not found")
            if course_id is not None and klass.course_id != int(course_id):
                raise NotFoundError("Class not found in this course")
            course_id = klass.course_id

        if current_role != Role.ADMIN:
            if course_id is None:
                raise FieldValidationError({"course_id": "This field is required"})
            self._access.require_staff(current_role=current_role, current_user_id=current_user_id, course_id=course_id)

        query_rows = self._attendance.get_export_rows(
            start_date=start,
            end_date=end,
            course_id=course_id,
            class_id=class_id,
            session_id=session_id,
            status=status,
        )

        summary_map: dict[int, dict] = {}
        out_rows: list[dict] = []

        for r in query_rows:
            out_rows.append(
                {
                    "attend_date": r.attend_date.strftime("%Y-%m-%d"),
                    "student_number": r.student_number,
                    "student_name": r.student_name,
                    "email": r.email,
                    "class_name": r.class_name,
                    "session_day": r.session_day.value,
                    "session_time": f"{r.start_time}-{r.end_time}",
                    "status": r.status.value,
                    "scan_time": r.scan_time.strftime("%H:%M:%S") if r.scan_time else "-",
                }
            )

            s = summary_map.get(r.student_id)
            if not s:
                s = {
                    "student_id": r.student_id,
                    "student_number": r.student_number,
                    "student_name": r.student_name,
                    "present": 0,
                    "absent": 0,
                    "wrong_session": 0,
                }
                summary_map[r.student_id] = s
            s[r.status.value.lower()] += 1

        summary = []
        for s in summary_map.values():
            total = s["present"] + s["absent"] + s["wrong_session"]
            s["total"] = total
            s["attendance_rate"] = round(s["present"] * 100.0 / total, 1) if total else 0.0
            summary.append(s)

        summary.sort(key=lambda x: (x["attendance_rate"], x["student_number"]))
        return ReportData(rows=out_rows, summary=summary)
