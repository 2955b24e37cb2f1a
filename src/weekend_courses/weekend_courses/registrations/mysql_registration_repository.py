from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import RegistrationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import NewRegistration, StudentRegistration
from .repository import RegistrationRepository

_COLUMNS = """
    registration_id, surname, first_name, last_name, email, phone_number,
    course_id, class_id, saturday_session_id, sunday_session_id,
    status, rejection_reason, reviewed_by, reviewed_at, created_at
"""


def _registration_from_row(r: dict) -> StudentRegistration:
    return StudentRegistration(
        registration_id=int(r["registration_id"]),
        surname=r["surname"],
        first_name=r["first_name"],
        last_name=r.get("last_name"),
        email=r["email"],
        phone_number=r["phone_number"],
        course_id=int(r["course_id"]),
        class_id=int(r["class_id"]),
        saturday_session_id=int(r["saturday_session_id"]),
        sunday_session_id=int(r["sunday_session_id"]),
        status=RegistrationStatus(r["status"]),
        rejection_reason=r.get("rejection_reason"),
        reviewed_by=int(r["reviewed_by"]) if r.get("reviewed_by") is not None else None,
        reviewed_at=r.get("reviewed_at"),
        created_at=r.get("created_at"),
    )


class MySQLRegistrationRepository(RegistrationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, registration_id: int) -> Optional[StudentRegistration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM student_registrations WHERE registration_id=%s", (int(registration_id),)
            )
            r = fetchone(cur)
            return _registration_from_row(r) if r else None

    def get_pending_by_email(self, email: str) -> Optional[StudentRegistration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM student_registrations WHERE email=%s AND status=%s LIMIT 1",
                (email, RegistrationStatus.PENDING.value),
            )
            r = fetchone(cur)
            return _registration_from_row(r) if r else None

    def create(self, data: NewRegistration) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO student_registrations(
                    surname, first_name, last_name, email, phone_number,
                    course_id, class_id, saturday_session_id, sunday_session_id, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    data.surname,
                    data.first_name,
                    data.last_name,
                    data.email,
                    data.phone_number,
                    int(data.course_id),
                    int(data.class_id),
                    int(data.saturday_session_id),
                    int(data.sunday_session_id),
                    RegistrationStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def list_for_course(
        self, course_id: int, *, status: Optional[RegistrationStatus] = None
    ) -> Sequence[StudentRegistration]:
        clauses = ["course_id=%s"]
        params: list[object] = [int(course_id)]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM student_registrations WHERE {where} ORDER BY created_at ASC",
                tuple(params),
            )
            return [_registration_from_row(r) for r in fetchall(cur)]

    def review(
        self,
        *,
        registration_id: int,
        status: RegistrationStatus,
        reviewed_by: Optional[int],
        reviewed_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE student_registrations
                SET status=%s, reviewed_by=%s, reviewed_at=%s, rejection_reason=%s
                WHERE registration_id=%s AND status=%s
                """,
                (
                    status.value,
                    reviewed_by,
                    reviewed_at,
                    rejection_reason,
                    int(registration_id),
                    RegistrationStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0
