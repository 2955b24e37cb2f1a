from __future__ import annotations

from typing import Dict, Optional, Sequence

from ..core.enums import WeekDay
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time, placeholders
from .model import Session
from .repository import SessionRepository

_COLUMNS = "s.session_id, s.class_id, s.day, s.start_time, s.end_time, s.capacity"


def _session_from_row(r: dict) -> Session:
    return Session(
        session_id=int(r["session_id"]),
        class_id=int(r["class_id"]),
        day=WeekDay(r["day"]),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        capacity=int(r["capacity"]),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions s WHERE s.session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _session_from_row(r) if r else None

    def list_for_class(self, class_id: int, *, day: Optional[WeekDay] = None) -> Sequence[Session]:
        clauses = ["s.class_id=%s"]
        params: list[object] = [int(class_id)]
        if day is not None:
            clauses.append("s.day=%s")
            params.append(WeekDay(day).value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM sessions s
                WHERE {where}
                ORDER BY s.day ASC, s.start_time ASC
                """,
                tuple(params),
            )
            return [_session_from_row(r) for r in fetchall(cur)]

    def create(self, *, class_id: int, day: WeekDay, start_time: str, end_time: str, capacity: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sessions(class_id, day, start_time, end_time, capacity)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(class_id), WeekDay(day).value, start_time, end_time, int(capacity)),
            )
            return int(cur.lastrowid)

    def update(self, *, session_id: int, day: WeekDay, start_time: str, end_time: str, capacity: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sessions
                SET day=%s, start_time=%s, end_time=%s, capacity=%s
                WHERE session_id=%s
                """,
                (WeekDay(day).value, start_time, end_time, int(capacity), int(session_id)),
            )
            return cur.rowcount > 0

    def delete(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM sessions WHERE session_id=%s", (int(session_id),))
            return cur.rowcount > 0

    def count_students(self, session_id: int) -> int:
        return self.enrollment_counts([session_id]).get(int(session_id), 0)

    def enrollment_counts(self, session_ids: Sequence[int]) -> Dict[int, int]:
        ids = [int(i) for i in session_ids]
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ss.session_id, COUNT(*) AS enrolled
                FROM session_students ss
                JOIN students st ON st.student_id = ss.student_id
                WHERE st.is_deleted=0 AND ss.session_id IN ({placeholders(len(ids))})
                GROUP BY ss.session_id
                """,
                tuple(ids),
            )
            counts = {i: 0 for i in ids}
            for r in fetchall(cur):
                counts[int(r["session_id"])] = int(r["enrolled"])
            return counts

    def list_student_ids(self, session_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ss.student_id
                FROM session_students ss
                JOIN students st ON st.student_id = ss.student_id
                WHERE ss.session_id=%s AND st.is_deleted=0
                ORDER BY ss.student_id ASC
                """,
                (int(session_id),),
            )
            return [int(r["student_id"]) for r in fetchall(cur)]

    def is_enrolled(self, *, session_id: int, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM session_students WHERE session_id=%s AND student_id=%s",
                (int(session_id), int(student_id)),
            )
            return fetchone(cur) is not None

    def add_student(self, *, session_id: int, student_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO session_students(session_id, student_id) VALUES(%s,%s)",
                (int(session_id), int(student_id)),
            )

    def remove_student(self, *, session_id: int, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM session_students WHERE session_id=%s AND student_id=%s",
                (int(session_id), int(student_id)),
            )
            return cur.rowcount > 0

    def list_for_student(self, student_id: int) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM sessions s
                JOIN session_students ss ON ss.session_id = s.session_id
                WHERE ss.student_id=%s
                ORDER BY s.day ASC, s.start_time ASC
                """,
                (int(student_id),),
            )
            return [_session_from_row(r) for r in fetchall(cur)]
