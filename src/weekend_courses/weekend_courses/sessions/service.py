from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..classes.model import CourseClass
from ..classes.repository import ClassRepository
from ..common.datetime_utils import normalize_hhmm
from ..core.enums import Role, WeekDay
from ..core.exceptions import ConflictError, FieldValidationError, NotFoundError, SessionNotFound, ValidationError
from ..database.connection import TransactionManager
from ..users.access import CourseAccess
from .conflicts import SessionTimeValidation, validate_session_time
from .model import Session, SessionLoad
from .repository import SessionRepository

logger = logging.getLogger(__name__)


def parse_weekday(value) -> WeekDay:
    try:
        return WeekDay(str(value or "").strip().upper())
    except ValueError:
        raise FieldValidationError({"day": "Day must be SATURDAY or SUNDAY"})


class SessionService:
    """Use cases: schedule the weekend sessions of a class."""

    def __init__(
        self,
        sessions: SessionRepository,
        classes: ClassRepository,
        *,
        access: CourseAccess,
        tx: TransactionManager,
    ):
        self._sessions = sessions
        self._classes = classes
        self._access = access
        self._tx = tx

    def _get_class(self, class_id: int) -> CourseClass:
        klass = self._classes.get_by_id(int(class_id))
        if not klass:
            raise NotFoundError("Class not found")
        return klass

    def get_session(self, session_id: int) -> Session:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise SessionNotFound()
        return session

    def capacity_info(self, session_id: int) -> SessionLoad:
        session = self.get_session(session_id)
        return SessionLoad(session=session, enrolled=self._sessions.count_students(session.session_id))

    def list_for_class(self, class_id: int, *, day: Optional[WeekDay] = None) -> Sequence[SessionLoad]:
        self._get_class(class_id)
        sessions = self._sessions.list_for_class(int(class_id), day=day)
        counts = self._sessions.enrollment_counts([s.session_id for s in sessions])
        return [SessionLoad(session=s, enrolled=counts.get(s.session_id, 0)) for s in sessions]

    def check_time(
        self,
        *,
        class_id: int,
        day: WeekDay,
        start_time: str,
        end_time: str,
        exclude_session_id: Optional[int] = None,
    ) -> SessionTimeValidation:
        return validate_session_time(
            existing=self._sessions.list_for_class(int(class_id), day=WeekDay(day)),
            day=WeekDay(day),
            start_time=start_time,
            end_time=end_time,
            exclude_session_id=exclude_session_id,
        )

    def _validate_slot(
        self,
        *,
        klass: CourseClass,
        day: WeekDay,
        start_time: str,
        end_time: str,
        capacity,
        exclude_session_id: Optional[int] = None,
    ) -> int:
        try:
            capacity = int(capacity)
        except (TypeError, ValueError):
            raise FieldValidationError({"capacity": "Capacity must be a whole number"})
        if capacity < 1:
            raise FieldValidationError({"capacity": "Capacity must be at least 1"})
        if capacity > klass.capacity:
            raise FieldValidationError({"capacity": f"Capacity cannot exceed the class capacity ({klass.capacity})"})

        result = self.check_time(
            class_id=klass.class_id,
            day=day,
            start_time=start_time,
            end_time=end_time,
            exclude_session_id=exclude_session_id,
        )
        if result.conflicts:
            raise ConflictError("; ".join(result.errors))
        if not result.is_valid:
            raise ValidationError("; ".join(result.errors))
        return capacity

    def create_session(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        class_id: int,
        day,
        start_time: str,
        end_time: str,
        capacity,
    ) -> Session:
        klass = self._get_class(class_id)
        self._access.require_staff(current_role=current_role, current_user_id=current_user_id, course_id=klass.course_id)
        day = parse_weekday(day)

        with self._tx.transaction():
            capacity = self._validate_slot(
                klass=klass, day=day, start_time=start_time, end_time=end_time, capacity=capacity
            )
            session_id = self._sessions.create(
                class_id=klass.class_id,
                day=day,
                start_time=normalize_hhmm(start_time),
                end_time=normalize_hhmm(end_time),
                capacity=capacity,
            )

        logger.info("Session %s created for class %s (%s %s-%s)", session_id, klass.class_id, day.value, start_time, end_time)
        return self.get_session(session_id)

    def update_session(
        self,
        *,
        current_role: Role,
        current_user_id: int,
        session_id: int,
        day,
        start_time: str,
        end_time: str,
        capacity,
    ) -> Session:
        session = self.get_session(session_id)
        klass = self._get_class(session.class_id)
        self._access.require_staff(current_role=current_role, current_user_id=current_user_id, course_id=klass.course_id)
        day = parse_weekday(day)

        with self._tx.transaction():
            capacity = self._validate_slot(
                klass=klass,
                day=day,
                start_time=start_time,
                end_time=end_time,
                capacity=capacity,
                exclude_session_id=session.session_id,
            )
            enrolled = self._sessions.count_students(session.session_id)
            if day != session.day and enrolled:
                raise ConflictError("Cannot move a session with enrolled students to another day")
            if capacity < enrolled:
                raise ConflictError(f"Capacity cannot be lower than the {enrolled} enrolled students")

            self._sessions.update(
                session_id=session.session_id,
                day=day,
                start_time=normalize_hhmm(start_time),
                end_time=normalize_hhmm(end_time),
                capacity=capacity,
            )

        return self.get_session(session.session_id)

    def delete_session(self, *, current_role: Role, current_user_id: int, session_id: int) -> None:
        session = self.get_session(session_id)
        klass = self._get_class(session.class_id)
        self._access.require_staff(current_role=current_role, current_user_id=current_user_id, course_id=klass.course_id)

        with self._tx.transaction():
            if self._sessions.count_students(session.session_id):
                raise ConflictError("Cannot delete a session that still has students")
            self._sessions.delete(session.session_id)

        logger.info("Session %s deleted", session.session_id)
