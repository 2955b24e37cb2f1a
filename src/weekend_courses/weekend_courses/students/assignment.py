from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from ..core.enums import WeekDay
from ..core.exceptions import DomainError
from ..database.connection import TransactionManager
from ..sessions.model import Session
from ..sessions.repository import SessionRepository
from .model import AutoAssignResult
from .repository import StudentRepository

logger = logging.getLogger(__name__)


def pick_least_loaded(sessions: Sequence[Session], load: Dict[int, int]) -> Optional[Session]:
    """Session with the fewest tracked enrollees that still has room.

    Ties go to the earlier session in `sessions` order.
    """
    best: Optional[Session] = None
    for session in sessions:
        enrolled = load.get(session.session_id, 0)
        if enrolled >= session.capacity:
            continue
        if best is None or enrolled < load.get(best.session_id, 0):
            best = session
    return best


class AutoAssigner:
    """Spread a class's unassigned students over its Saturday and Sunday sessions."""

    def __init__(self, students: StudentRepository, sessions: SessionRepository, *, tx: TransactionManager):
        self._students = students
        self._sessions = sessions
        self._tx = tx

    def auto_assign(self, class_id: int) -> AutoAssignResult:
        pending = self._students.list_unassigned(int(class_id))
        saturday = list(self._sessions.list_for_class(int(class_id), day=WeekDay.SATURDAY))
        sunday = list(self._sessions.list_for_class(int(class_id), day=WeekDay.SUNDAY))

        if not saturday or not sunday:
            return AutoAssignResult(
                assigned=0,
                failed=0,
                errors=["The class needs at least one Saturday and one Sunday session before students can be assigned"],
                unassigned=[s.student_id for s in pending],
            )

        # Counted once, then tracked in memory so the batch spreads evenly.
        load = dict(self._sessions.enrollment_counts([s.session_id for s in saturday + sunday]))

        assigned = 0
        failed = 0
        errors: List[str] = []
        assignments: Dict[int, Dict[str, int]] = {}
        unassigned: List[int] = []

        for student in pending:
            sat = pick_least_loaded(saturday, load)
            sun = pick_least_loaded(sunday, load)
            if sat is None or sun is None:
                missing = " and ".join(
                    day for day, chosen in (("Saturday", sat), ("Sunday", sun)) if chosen is None
                )
                unassigned.append(student.student_id)
                errors.append(f"{student.student_number}: no {missing} session with free capacity")
                continue

            try:
                with self._tx.transaction():
                    self._sessions.add_student(session_id=sat.session_id, student_id=student.student_id)
                    self._sessions.add_student(session_id=sun.session_id, student_id=student.student_id)
            except DomainError as exc:
                failed += 1
                unassigned.append(student.student_id)
                errors.append(f"{student.student_number}: {exc.message}")
                continue

            load[sat.session_id] = load.get(sat.session_id, 0) + 1
            load[sun.session_id] = load.get(sun.session_id, 0) + 1
            assignments[student.student_id] = {
                WeekDay.SATURDAY.value: sat.session_id,
                WeekDay.SUNDAY.value: sun.session_id,
            }
            assigned += 1

        if unassigned:
            logger.warning("Auto-assign class %s: %s assigned, %s left unassigned", class_id, assigned, len(unassigned))
        else:
            logger.info("Auto-assign class %s: %s assigned", class_id, assigned)

        return AutoAssignResult(
            assigned=assigned,
            failed=failed,
            errors=errors,
            assignments=assignments,
            unassigned=unassigned,
        )
