import pytest

from src.weekend_courses.weekend_courses.attendance.factory import AttendanceStrategyFactory
from src.weekend_courses.weekend_courses.attendance.strategies.present_strategy import PresentStrategy
from src.weekend_courses.weekend_courses.attendance.strategies.wrong_session_strategy import WrongSessionStrategy
from src.weekend_courses.weekend_courses.core.enums import AttendanceStatus, WeekDay
from src.weekend_courses.weekend_courses.core.exceptions import NotEnrolled
from src.weekend_courses.weekend_courses.sessions.model import Session
from src.weekend_courses.weekend_courses.students.model import Student


def _student(class_id=1):
    return Student(
        student_id=7,
        uuid="0b7e6c8a-5d2f-4c1e-9a3b-1f2e3d4c5b6a",
        student_number="STU00007",
        surname="Okafor",
        first_name="Chidi",
        last_name=None,
        email="chidi@example.com",
        phone_number=None,
        class_id=class_id,
    )


def _session(session_id=10, class_id=1):
    return Session(
        session_id=session_id, class_id=class_id, day=WeekDay.SATURDAY, start_time="09:00", end_time="11:00", capacity=10
    )


def test_factory_assigned_session_is_present():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_scan(student=_student(), session=_session(), assigned_session_ids={10, 20})

    assert isinstance(strategy, PresentStrategy)
    assert strategy.decide(student=_student(), session=_session()).status == AttendanceStatus.PRESENT


def test_factory_other_session_of_same_class_is_wrong_session():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_scan(student=_student(), session=_session(session_id=11), assigned_session_ids={10, 20})

    assert isinstance(strategy, WrongSessionStrategy)
    decision = strategy.decide(student=_student(), session=_session(session_id=11))
    assert decision.status == AttendanceStatus.WRONG_SESSION
    assert decision.note == "Student scanned in wrong session"


def test_factory_session_of_another_class_is_rejected():
    factory = AttendanceStrategyFactory()

    with pytest.raises(NotEnrolled):
        factory.for_scan(student=_student(class_id=1), session=_session(class_id=2), assigned_session_ids={10})
