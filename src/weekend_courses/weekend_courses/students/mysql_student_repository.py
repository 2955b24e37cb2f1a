from __future__ import annotations

from typing import Iterable, Optional, Sequence, Set

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import NewStudent, Student
from .repository import StudentRepository

_COLUMNS = """
    st.student_id, st.uuid, st.student_number, st.surname, st.first_name, st.last_name,
    st.email, st.phone_number, st.class_id, st.is_deleted, st.created_at
"""


def _student_from_row(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        uuid=r["uuid"],
        student_number=r["student_number"],
        surname=r["surname"],
        first_name=r["first_name"],
        last_name=r.get("last_name"),
        email=r["email"],
        phone_number=r.get("phone_number"),
        class_id=int(r["class_id"]),
        is_deleted=bool(r.get("is_deleted", False)),
        created_at=r.get("created_at"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, column: str, value) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students st WHERE st.{column}=%s AND st.is_deleted=0",
                (value,),
            )
            r = fetchone(cur)
            return _student_from_row(r) if r else None

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self._get_one("student_id", int(student_id))

    def get_by_uuid(self, uuid: str) -> Optional[Student]:
        return self._get_one("uuid", str(uuid).lower())

    def get_by_student_number(self, student_number: str) -> Optional[Student]:
        return self._get_one("student_number", student_number)

    def list_for_class(self, class_id: int) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students st
                WHERE st.class_id=%s AND st.is_deleted=0
                ORDER BY st.surname ASC, st.first_name ASC
                """,
                (int(class_id),),
            )
            return [_student_from_row(r) for r in fetchall(cur)]

    def list_unassigned(self, class_id: int) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students st
                LEFT JOIN session_students ss ON ss.student_id = st.student_id
                WHERE st.class_id=%s AND st.is_deleted=0 AND ss.student_id IS NULL
                ORDER BY st.student_id ASC
                """,
                (int(class_id),),
            )
            return [_student_from_row(r) for r in fetchall(cur)]

    def count_for_class(self, class_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS total FROM students WHERE class_id=%s AND is_deleted=0",
                (int(class_id),),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def _existing(self, column: str, values: Iterable[str]) -> Set[str]:
        values = list(dict.fromkeys(values))
        if not values:
            return set()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {column} AS value FROM students WHERE {column} IN ({placeholders(len(values))})",
                tuple(values),
            )
            return {r["value"] for r in fetchall(cur)}

    def existing_student_numbers(self, numbers: Iterable[str]) -> Set[str]:
        return self._existing("student_number", numbers)

    def existing_emails(self, emails: Iterable[str]) -> Set[str]:
        return self._existing("email", emails)

    def create(self, *, uuid: str, class_id: int, data: NewStudent) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(
                    uuid, student_number, surname, first_name, last_name, email, phone_number, class_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    uuid,
                    data.student_number,
                    data.surname,
                    data.first_name,
                    data.last_name,
                    data.email,
                    data.phone_number,
                    int(class_id),
                ),
            )
            return int(cur.lastrowid)

    def soft_delete(self, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET is_deleted=1 WHERE student_id=%s AND is_deleted=0",
                (int(student_id),),
            )
            return cur.rowcount > 0

    def latest_student_number(self, prefix: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_number
                FROM students
                WHERE student_number LIKE %s
                ORDER BY LENGTH(student_number) DESC, student_number DESC
                LIMIT 1
                """,
                (f"{prefix}%",),
            )
            r = fetchone(cur)
            return r["student_number"] if r else None
