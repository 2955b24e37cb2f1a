from __future__ import annotations

import pytest

from src.weekend_courses.weekend_courses.core.enums import CourseStatus, RegistrationStatus, Role, WeekDay
from src.weekend_courses.weekend_courses.core.exceptions import (
    AlreadyProcessed,
    ConflictError,
    FieldValidationError,
    SessionFull,
)
from src.weekend_courses.weekend_courses.registrations.service import next_student_number


@pytest.fixture
def setup(world):
    course = world.add_course()
    teacher = world.add_teacher(course)
    klass = world.add_class(course)
    sat = world.add_session(klass, WeekDay.SATURDAY, "09:00", "11:00", capacity=2)
    sun = world.add_session(klass, WeekDay.SUNDAY, "09:00", "11:00", capacity=2)
    return {"course": course, "teacher": teacher, "class": klass, "sat": sat, "sun": sun}


def _form(s, **overrides):
    data = {
        "surname": "Bello",
        "first_name": "Amina",
        "email": "Amina@Example.com",
        "phone_number": "+234 801 234 5678",
        "course_id": s["course"].course_id,
        "class_id": s["class"].class_id,
        "saturday_session_id": s["sat"].session_id,
        "sunday_session_id": s["sun"].session_id,
    }
    data.update(overrides)
    return data


def _approve(container, s, registration_id):
    return container.registration_service.approve(
        current_role=Role.TEACHER, current_user_id=s["teacher"].teacher_id, registration_id=registration_id
    )


def test_next_student_number():
    assert next_student_number(None) == "STU00001"
    assert next_student_number("STU00041") == "STU00042"
    assert next_student_number("LEGACY7") == "STU00001"


def test_submit_creates_pending_registration(container, setup):
    reg = container.registration_service.submit_registration(_form(setup))

    assert reg.status == RegistrationStatus.PENDING
    assert reg.email == "amina@example.com"


def test_submit_reports_all_field_errors(container, setup):
    with pytest.raises(FieldValidationError) as exc:
        container.registration_service.submit_registration(_form(setup, surname="", email="x", phone_number=""))

    assert set(exc.value.fields) == {"surname", "email", "phone_number"}


def test_submit_checks_session_days(container, setup):
    with pytest.raises(FieldValidationError) as exc:
        container.registration_service.submit_registration(
            _form(setup, saturday_session_id=setup["sun"].session_id, sunday_session_id=setup["sat"].session_id)
        )

    assert set(exc.value.fields) == {"saturday_session_id", "sunday_session_id"}


def test_duplicate_pending_email_is_a_conflict(container, setup):
    svc = container.registration_service
    svc.submit_registration(_form(setup))

    with pytest.raises(ConflictError):
        svc.submit_registration(_form(setup, email="amina@example.com"))


def test_inactive_course_refuses_registrations(world, container, setup):
    world.courses.set_status(course_id=setup["course"].course_id, status=CourseStatus.INACTIVE)

    with pytest.raises(ConflictError):
        container.registration_service.submit_registration(_form(setup))


def test_approve_creates_student_with_both_sessions(world, container, setup):
    reg = container.registration_service.submit_registration(_form(setup))

    student = _approve(container, setup, reg.registration_id)

    assert student.student_number == "STU00001"
    assert [s.session_id for s in world.sessions.list_for_student(student.student_id)] == [
        setup["sat"].session_id,
        setup["sun"].session_id,
    ]
    assert world.registrations.get_by_id(reg.registration_id).status == RegistrationStatus.APPROVED
    kind, sent = world.notifier.sent[-1]
    assert kind == "registration_approved"
    assert sent["to"] == "amina@example.com"
    assert sent["qr_png"].startswith(b"\x89PNG")


def test_approve_rolls_back_when_session_filled(world, container, setup):
    reg = container.registration_service.submit_registration(_form(setup))
    for _ in range(setup["sun"].capacity):
        world.add_student(setup["class"], sessions=(setup["sun"],))
    students_before = len(world.db.students)

    with pytest.raises(SessionFull):
        _approve(container, setup, reg.registration_id)

    assert len(world.db.students) == students_before
    assert world.registrations.get_by_id(reg.registration_id).status == RegistrationStatus.PENDING
    assert world.notifier.sent == []


def test_approve_twice_is_already_processed(container, setup):
    reg = container.registration_service.submit_registration(_form(setup))
    _approve(container, setup, reg.registration_id)

    with pytest.raises(AlreadyProcessed):
        _approve(container, setup, reg.registration_id)


def test_reject_records_reason_and_notifies(world, container, setup):
    reg = container.registration_service.submit_registration(_form(setup))

    rejected = container.registration_service.reject(
        current_role=Role.TEACHER,
        current_user_id=setup["teacher"].teacher_id,
        registration_id=reg.registration_id,
        reason="Class is reserved for returning students",
    )

    assert rejected.status == RegistrationStatus.REJECTED
    assert rejected.rejection_reason == "Class is reserved for returning students"
    assert world.notifier.sent[-1][0] == "registration_rejected"


def test_bulk_approve_continues_past_failures(container, setup):
    svc = container.registration_service
    first = svc.submit_registration(_form(setup))
    second = svc.submit_registration(_form(setup, email="tunde@example.com", first_name="Tunde"))
    third = svc.submit_registration(_form(setup, email="kemi@example.com", first_name="Kemi"))

    result = svc.bulk_approve(
        current_role=Role.ADMIN,
        current_user_id=1,
        registration_ids=[first.registration_id, second.registration_id, third.registration_id],
    )

    # Sessions hold two students each.
    assert len(result.approved) == 2
    assert result.failed == 1
    assert result.errors[0].startswith(f"Registration {third.registration_id}:")
