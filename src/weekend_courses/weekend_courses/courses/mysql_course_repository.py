from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import CourseStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Course
from .repository import CourseRepository


def _course_from_row(r: dict) -> Course:
    return Course(
        course_id=int(r["course_id"]),
        name=r["name"],
        status=CourseStatus(r["status"]),
        head_teacher_id=int(r["head_teacher_id"]) if r.get("head_teacher_id") is not None else None,
        end_date=r.get("end_date"),
        created_at=r.get("created_at"),
    )


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, course_id: int) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT course_id, name, status, head_teacher_id, end_date, created_at
                FROM courses
                WHERE course_id=%s
                """,
                (int(course_id),),
            )
            r = fetchone(cur)
            return _course_from_row(r) if r else None

    def list_all(self, *, status: Optional[CourseStatus] = None) -> Sequence[Course]:
        clauses = ["1=1"]
        params: list[object] = []
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT course_id, name, status, head_teacher_id, end_date, created_at
                FROM courses
                WHERE {where}
                ORDER BY created_at DESC
                """,
                tuple(params),
            )
            return [_course_from_row(r) for r in fetchall(cur)]

    def create(self, *, name: str, end_date: Optional[date] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO courses(name, status, end_date) VALUES(%s,%s,%s)",
                (name, CourseStatus.ACTIVE.value, end_date),
            )
            return int(cur.lastrowid)

    def update(self, *, course_id: int, name: str, end_date: Optional[date]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE courses SET name=%s, end_date=%s WHERE course_id=%s",
                (name, end_date, int(course_id)),
            )
            return cur.rowcount > 0

    def set_head_teacher(self, *, course_id: int, teacher_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE courses SET head_teacher_id=%s WHERE course_id=%s",
                (teacher_id, int(course_id)),
            )
            return cur.rowcount > 0

    def set_status(self, *, course_id: int, status: CourseStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE courses SET status=%s WHERE course_id=%s",
                (status.value, int(course_id)),
            )
            return cur.rowcount > 0
