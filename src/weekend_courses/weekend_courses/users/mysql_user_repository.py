from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import TeacherRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Admin, Teacher
from .repository import AdminRepository, TeacherRepository

_TEACHER_COLUMNS = "teacher_id, email, full_name, password_hash, course_id, role, is_active"


def _teacher_from_row(r: dict) -> Teacher:
    return Teacher(
        teacher_id=int(r["teacher_id"]),
        email=r["email"],
        full_name=r["full_name"],
        password_hash=r["password_hash"],
        course_id=int(r["course_id"]) if r.get("course_id") is not None else None,
        role=TeacherRole(r["role"]),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLAdminRepository(AdminRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get(self, where: str, value) -> Optional[Admin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT admin_id, email, full_name, password_hash FROM admins WHERE {where}=%s",
                (value,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Admin(
                admin_id=int(r["admin_id"]),
                email=r["email"],
                full_name=r["full_name"],
                password_hash=r["password_hash"],
            )

    def get_by_id(self, admin_id: int) -> Optional[Admin]:
        return self._get("admin_id", int(admin_id))

    def get_by_email(self, email: str) -> Optional[Admin]:
        return self._get("email", email)

    def update_password(self, admin_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE admins SET password_hash=%s WHERE admin_id=%s", (password_hash, int(admin_id)))
            return cur.rowcount > 0


class MySQLTeacherRepository(TeacherRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TEACHER_COLUMNS} FROM teachers WHERE teacher_id=%s", (int(teacher_id),))
            r = fetchone(cur)
            return _teacher_from_row(r) if r else None

    def get_by_email(self, email: str) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TEACHER_COLUMNS} FROM teachers WHERE email=%s", (email,))
            r = fetchone(cur)
            return _teacher_from_row(r) if r else None

    def create(
        self,
        *,
        email: str,
        full_name: str,
        password_hash: str,
        course_id: Optional[int],
        role: TeacherRole,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teachers(email, full_name, password_hash, course_id, role)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (email, full_name, password_hash, course_id, role.value),
            )
            return int(cur.lastrowid)

    def list_for_course(self, course_id: int) -> Sequence[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_TEACHER_COLUMNS}
                FROM teachers
                WHERE course_id=%s AND is_active=1
                ORDER BY role ASC, full_name ASC
                """,
                (int(course_id),),
            )
            return [_teacher_from_row(r) for r in fetchall(cur)]

    def update_assignment(
        self,
        *,
        teacher_id: int,
        course_id: Optional[int],
        role: TeacherRole,
        is_active: bool,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE teachers SET course_id=%s, role=%s, is_active=%s WHERE teacher_id=%s",
                (course_id, role.value, 1 if is_active else 0, int(teacher_id)),
            )
            return cur.rowcount > 0

    def update_password(self, teacher_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE teachers SET password_hash=%s WHERE teacher_id=%s",
                (password_hash, int(teacher_id)),
            )
            return cur.rowcount > 0
