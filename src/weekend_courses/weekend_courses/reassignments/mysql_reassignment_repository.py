from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ReassignmentRequest
from .repository import ReassignmentRepository

_COLUMNS = (
    "r.request_id, r.student_id, r.from_session_id, r.to_session_id, r.status, "
    "r.reason, r.requested_at, r.teacher_id, r.decided_at"
)


def _request_from_row(r: dict) -> ReassignmentRequest:
    return ReassignmentRequest(
        request_id=int(r["request_id"]),
        student_id=int(r["student_id"]),
        from_session_id=int(r["from_session_id"]),
        to_session_id=int(r["to_session_id"]),
        status=RequestStatus(r["status"]),
        reason=r.get("reason"),
        requested_at=r.get("requested_at"),
        teacher_id=int(r["teacher_id"]) if r.get("teacher_id") is not None else None,
        decided_at=r.get("decided_at"),
    )


class MySQLReassignmentRepository(ReassignmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, request_id: int) -> Optional[ReassignmentRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM reassignment_requests r WHERE r.request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _request_from_row(r) if r else None

    def create(
        self,
        *,
        student_id: int,
        from_session_id: int,
        to_session_id: int,
        reason: Optional[str],
        requested_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO reassignment_requests(student_id, from_session_id, to_session_id, status, reason, requested_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(student_id),
                    int(from_session_id),
                    int(to_session_id),
                    RequestStatus.PENDING.value,
                    reason,
                    requested_at,
                ),
            )
            return int(cur.lastrowid)

    def count_for_student(self, student_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM reassignment_requests WHERE student_id=%s", (int(student_id),))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def get_pending_for_student(self, student_id: int) -> Optional[ReassignmentRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM reassignment_requests r
                WHERE r.student_id=%s AND r.status=%s
                ORDER BY r.requested_at DESC
                LIMIT 1
                """,
                (int(student_id), RequestStatus.PENDING.value),
            )
            r = fetchone(cur)
            return _request_from_row(r) if r else None

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        teacher_id: Optional[int],
        decided_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE reassignment_requests
                SET status=%s, teacher_id=%s, decided_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, teacher_id, decided_at, int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def delete_pending(self, request_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM reassignment_requests WHERE request_id=%s AND status=%s",
                (int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def list_for_student(self, student_id: int) -> Sequence[ReassignmentRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM reassignment_requests r
                WHERE r.student_id=%s
                ORDER BY r.requested_at DESC
                """,
                (int(student_id),),
            )
            return [_request_from_row(r) for r in fetchall(cur)]

    def list_for_course(
        self, course_id: int, *, status: Optional[RequestStatus] = None
    ) -> Sequence[ReassignmentRequest]:
        clauses = ["c.course_id=%s"]
        params: list[object] = [int(course_id)]
        if status is not None:
            clauses.append("r.status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM reassignment_requests r
                JOIN sessions s ON s.session_id = r.from_session_id
                JOIN classes c ON c.class_id = s.class_id
                WHERE {where}
                ORDER BY r.requested_at ASC
                """,
                tuple(params),
            )
            return [_request_from_row(r) for r in fetchall(cur)]
