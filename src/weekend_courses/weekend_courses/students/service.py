from __future__ import annotations

import logging
import uuid as uuidlib
from typing import IO, Any, List, Mapping, Optional, Sequence

from ..classes.model import CourseClass
from ..classes.repository import ClassRepository
from ..common.validators import check_email, check_name, check_phone, check_student_number, raise_for_fields
from ..core.constants import IMPORT_BATCH_SIZE, IMPORT_MAX_ROWS
from ..core.enums import Role, WeekDay
from ..core.exceptions import (
    DomainError,
    FieldValidationError,
    NotFoundError,
    SessionFull,
    StudentNotFound,
    ValidationError,
)
from ..database.connection import TransactionManager
from ..sessions.model import Session
from ..sessions.repository import SessionRepository
from ..users.access import CourseAccess
from .assignment import AutoAssigner
from .importer import read_student_rows
from .model import AutoAssignResult, ImportResult, NewStudent, Student
from .qr import render_qr_png
from .repository import StudentRepository

logger = logging.getLogger(__name__)


def _clean(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


def build_new_student(data: Mapping[str, Any]) -> NewStudent:
    """Validate one student's fields, reporting every bad field at once."""
    student_number = (_clean(data.get("student_number")) or "").upper()
    email = (_clean(data.get("email")) or "").lower()
    phone = _clean(data.get("phone_number"))

    raise_for_fields(
        {
            "student_number": check_student_number(student_number),
            "surname": check_name(data.get("surname"), "Surname"),
            "first_name": check_name(data.get("first_name"), "First name"),
            "last_name": check_name(data.get("last_name"), "Last name", required=False),
            "email": check_email(email),
            "phone_number": check_phone(phone),
        }
    )
    return NewStudent(
        student_number=student_number,
        surname=_clean(data.get("surname")),
        first_name=_clean(data.get("first_name")),
        last_name=_clean(data.get("last_name")),
        email=email,
        phone_number=phone.replace(" ", "") if phone else None,
    )


class StudentService:
    def __init__(
        self,
        students: StudentRepository,
        classes: ClassRepository,
        sessions: SessionRepository,
        *,
        access: CourseAccess,
        tx: TransactionManager,
    ):
        self._students = students
        self._classes = classes
        self._sessions = sessions
        self._access = access
        self._tx = tx
        self._assigner = AutoAssigner(students, sessions, tx=tx)

    def _get_class(self, class_id: int) -> CourseClass:
        klass = self._classes.get_by_id(int(class_id))
        if not klass:
            raise NotFoundError("Class not found")
        return klass

    def _require_staff_for_class(self, *, current_role: Role, current_user_id: int, klass: CourseClass) -> None:
        self._access.require_staff(current_role=current_role, current_user_id=current_user_id, course_id=klass.course_id)

    def get_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise StudentNotFound()
        return student

    def list_for_class(self, *, current_role: Role, current_user_id: int, class_id: int) -> Sequence[Student]:
        klass = self._get_class(class_id)
        self._require_staff_for_class(current_role=current_role, current_user_id=current_user_id, klass=klass)
        return self._students.list_for_class(klass.class_id)

    def schedule(self, student_id: int) -> Sequence[Session]:
        student = self.get_student(student_id)
        return self._sessions.list_for_student(student.student_id)

    def qr_png(self, student_id: int) -> bytes:
        return render_qr_png(self.get_student(student_id))

    # -------- Import --------
    def import_file(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        class_id: int,
        stream: IO[bytes],
        filename: str,
    ) -> ImportResult:
        rows = read_student_rows(stream, filename)
        return self.bulk_import(
            current_role=current_role, current_user_id=current_user_id, class_id=class_id, rows=rows
        )

    def bulk_import(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        class_id: int,
        rows: Sequence[Mapping[str, Any]],
    ) -> ImportResult:
        """Create students from raw rows.

        Bad or duplicate rows are reported and skipped; the rest are written
        in batches, each batch in its own transaction.
        """
        klass = self._get_class(class_id)
        self._require_staff_for_class(current_role=current_role, current_user_id=current_user_id, klass=klass)
        if not rows:
            raise ValidationError("No students to import")
        if len(rows) > IMPORT_MAX_ROWS:
            raise ValidationError(f"File contains too many rows. Maximum allowed: {IMPORT_MAX_ROWS}")

        errors: List[str] = []
        valid: List[NewStudent] = []
        seen_numbers: set[str] = set()
        seen_emails: set[str] = set()

        for position, raw in enumerate(rows, start=1):
            label = f"Row {raw.get('row', position)}"
            try:
                item = build_new_student(raw)
            except FieldValidationError as exc:
                details = "; ".join(f"{k}: {v}" for k, v in exc.fields.items())
                errors.append(f"{label}: {details}")
                continue
            if item.student_number in seen_numbers:
                errors.append(f"{label}: duplicate student number {item.student_number} in file")
                continue
            if item.email in seen_emails:
                errors.append(f"{label}: duplicate email {item.email} in file")
                continue
            seen_numbers.add(item.student_number)
            seen_emails.add(item.email)
            valid.append(item)

        taken_numbers = self._students.existing_student_numbers(s.student_number for s in valid)
        taken_emails = self._students.existing_emails(s.email for s in valid)
        fresh: List[NewStudent] = []
        for item in valid:
            if item.student_number in taken_numbers:
                errors.append(f"Student {item.student_number} already exists")
            elif item.email in taken_emails:
                errors.append(f"Student {item.student_number}: email {item.email} is already registered")
            else:
                fresh.append(item)

        room = klass.capacity - self._students.count_for_class(klass.class_id)
        if len(fresh) > room:
            for item in fresh[max(room, 0):]:
                errors.append(f"Student {item.student_number}: class is at full capacity")
            fresh = fresh[: max(room, 0)]

        created: List[int] = []
        for start in range(0, len(fresh), IMPORT_BATCH_SIZE):
            batch = fresh[start : start + IMPORT_BATCH_SIZE]
            try:
                with self._tx.transaction():
                    ids = [
                        self._students.create(uuid=str(uuidlib.uuid4()), class_id=klass.class_id, data=item)
                        for item in batch
                    ]
            except DomainError as exc:
                errors.extend(f"Failed to import {item.student_number}: {exc.message}" for item in batch)
                continue
            created.extend(ids)

        result = ImportResult(
            imported=len(created),
            failed=len(rows) - len(created),
            errors=errors,
            student_ids=created,
        )
        if result.failed:
            logger.warning(
                "Import into class %s: %s imported, %s failed", klass.class_id, result.imported, result.failed
            )
        else:
            logger.info("Import into class %s: %s imported", klass.class_id, result.imported)
        return result

    # -------- Sessions --------
    def auto_assign(self, *, current_role: Role, current_user_id: int, class_id: int) -> AutoAssignResult:
        klass = self._get_class(class_id)
        self._require_staff_for_class(current_role=current_role, current_user_id=current_user_id, klass=klass)
        return self._assigner.auto_assign(klass.class_id)

    def _target_session(self, *, session_id: int, klass: CourseClass, day: WeekDay) -> Session:
        session = self._sessions.get_by_id(int(session_id))
        if not session or session.class_id != klass.class_id:
            raise FieldValidationError({f"{day.value.lower()}_session_id": "Session not found in this class"})
        if session.day != day:
            raise FieldValidationError({f"{day.value.lower()}_session_id": f"Session is not on {day.value.title()}"})
        return session

    def assign_sessions(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        student_id: int,
        saturday_session_id: int,
        sunday_session_id: int,
    ) -> Sequence[Session]:
        """Teacher places a student directly, replacing any current memberships."""
        student = self.get_student(student_id)
        klass = self._get_class(student.class_id)
        self._require_staff_for_class(current_role=current_role, current_user_id=current_user_id, klass=klass)

        targets = [
            self._target_session(session_id=saturday_session_id, klass=klass, day=WeekDay.SATURDAY),
            self._target_session(session_id=sunday_session_id, klass=klass, day=WeekDay.SUNDAY),
        ]

        with self._tx.transaction():
            current = {s.session_id for s in self._sessions.list_for_student(student.student_id)}
            for target in targets:
                if target.session_id in current:
                    continue
                if self._sessions.count_students(target.session_id) >= target.capacity:
                    raise SessionFull(f"{target.label} is at full capacity")
            for session_id in current:
                self._sessions.remove_student(session_id=session_id, student_id=student.student_id)
            for target in targets:
                self._sessions.add_student(session_id=target.session_id, student_id=student.student_id)

        logger.info("Student %s assigned to sessions %s", student.student_id, [t.session_id for t in targets])
        return self._sessions.list_for_student(student.student_id)

    def soft_delete(self, *, current_role: Role, current_user_id: int, student_id: int) -> None:
        student = self.get_student(student_id)
        klass = self._get_class(student.class_id)
        self._require_staff_for_class(current_role=current_role, current_user_id=current_user_id, klass=klass)

        with self._tx.transaction():
            for session in self._sessions.list_for_student(student.student_id):
                self._sessions.remove_student(session_id=session.session_id, student_id=student.student_id)
            self._students.soft_delete(student.student_id)

        logger.info("Student %s soft-deleted", student.student_id)

