from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CourseClass
from .repository import ClassRepository


def _class_from_row(r: dict) -> CourseClass:
    return CourseClass(
        class_id=int(r["class_id"]),
        course_id=int(r["course_id"]),
        name=r["name"],
        capacity=int(r["capacity"]),
        created_at=r.get("created_at"),
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: int) -> Optional[CourseClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT class_id, course_id, name, capacity, created_at FROM classes WHERE class_id=%s",
                (int(class_id),),
            )
            r = fetchone(cur)
            return _class_from_row(r) if r else None

    def list_for_course(self, course_id: int) -> Sequence[CourseClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT class_id, course_id, name, capacity, created_at
                FROM classes
                WHERE course_id=%s
                ORDER BY name ASC
                """,
                (int(course_id),),
            )
            return [_class_from_row(r) for r in fetchall(cur)]

    def create(self, *, course_id: int, name: str, capacity: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO classes(course_id, name, capacity) VALUES(%s,%s,%s)",
                (int(course_id), name, int(capacity)),
            )
            return int(cur.lastrowid)

    def update(self, *, class_id: int, name: str, capacity: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE classes SET name=%s, capacity=%s WHERE class_id=%s",
                (name, int(capacity), int(class_id)),
            )
            return cur.rowcount > 0

    def delete(self, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM classes WHERE class_id=%s", (int(class_id),))
            return cur.rowcount > 0
