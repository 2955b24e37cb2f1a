from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence, Set

from ..core.enums import AttendanceStatus, WeekDay
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import AttendanceExportRow, AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, student_id, session_id, attend_date, status, scan_time, teacher_id"


def _record_from_row(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        session_id=int(r["session_id"]),
        attend_date=r["attend_date"],
        status=AttendanceStatus(r["status"]),
        scan_time=r.get("scan_time"),
        teacher_id=int(r["teacher_id"]) if r.get("teacher_id") is not None else None,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student_session_date(
        self, *, student_id: int, session_id: int, attend_date: date
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE student_id=%s AND session_id=%s AND attend_date=%s
                """,
                (int(student_id), int(session_id), attend_date),
            )
            r = fetchone(cur)
            return _record_from_row(r) if r else None

    def upsert(
        self,
        *,
        student_id: int,
        session_id: int,
        attend_date: date,
        status: AttendanceStatus,
        scan_time: Optional[datetime],
        teacher_id: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # LAST_INSERT_ID(expr) makes lastrowid the existing id on update.
            cur.execute(
                """
                INSERT INTO attendances(student_id, session_id, attend_date, status, scan_time, teacher_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    attendance_id=LAST_INSERT_ID(attendance_id),
                    status=VALUES(status),
                    scan_time=VALUES(scan_time),
                    teacher_id=VALUES(teacher_id)
                """,
                (int(student_id), int(session_id), attend_date, status.value, scan_time, teacher_id),
            )
            return int(cur.lastrowid)

    def list_student_ids_for_session_date(self, *, session_id: int, attend_date: date) -> Set[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT student_id FROM attendances WHERE session_id=%s AND attend_date=%s",
                (int(session_id), attend_date),
            )
            return {int(r["student_id"]) for r in fetchall(cur)}

    def bulk_create_absent(
        self,
        *,
        session_id: int,
        attend_date: date,
        student_ids: Sequence[int],
        teacher_id: Optional[int] = None,
    ) -> int:
        if not student_ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT IGNORE INTO attendances(student_id, session_id, attend_date, status, scan_time, teacher_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                [
                    (int(sid), int(session_id), attend_date, AttendanceStatus.ABSENT.value, None, teacher_id)
                    for sid in student_ids
                ],
            )
            return int(cur.rowcount)

    def list_for_session_date(self, *, session_id: int, attend_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE session_id=%s AND attend_date=%s
                ORDER BY scan_time ASC
                """,
                (int(session_id), attend_date),
            )
            return [_record_from_row(r) for r in fetchall(cur)]

    def list_for_student(self, student_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE student_id=%s
                ORDER BY attend_date DESC, session_id ASC
                LIMIT %s
                """,
                (int(student_id), int(limit)),
            )
            return [_record_from_row(r) for r in fetchall(cur)]

    def get_export_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        course_id: Optional[int] = None,
        class_id: Optional[int] = None,
        session_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceExportRow]:
        clauses = ["a.attend_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if course_id is not None:
            clauses.append("c.course_id=%s")
            params.append(int(course_id))
        if class_id is not None:
            clauses.append("c.class_id=%s")
            params.append(int(class_id))
        if session_id is not None:
            clauses.append("a.session_id=%s")
            params.append(int(session_id))
        if status is not None:
            clauses.append("a.status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    a.attend_date, a.status, a.scan_time,
                    st.student_id, st.student_number, st.surname, st.first_name, st.last_name, st.email,
                    c.class_id, c.name AS class_name,
                    s.session_id, s.day, s.start_time, s.end_time
                FROM attendances a
                JOIN students st ON st.student_id = a.student_id
                JOIN sessions s ON s.session_id = a.session_id
                JOIN classes c ON c.class_id = s.class_id
                WHERE {where}
                ORDER BY a.attend_date DESC, s.start_time ASC, st.surname ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

            return [
                AttendanceExportRow(
                    attend_date=r["attend_date"],
                    status=AttendanceStatus(r["status"]),
                    scan_time=r.get("scan_time"),
                    student_id=int(r["student_id"]),
                    student_number=r["student_number"],
                    student_name=" ".join(p for p in (r["first_name"], r.get("last_name"), r["surname"]) if p),
                    email=r["email"],
                    class_id=int(r["class_id"]),
                    class_name=r["class_name"],
                    session_id=int(r["session_id"]),
                    session_day=WeekDay(r["day"]),
                    start_time=normalize_mysql_time(r["start_time"]),
                    end_time=normalize_mysql_time(r["end_time"]),
                )
                for r in rows
            ]
