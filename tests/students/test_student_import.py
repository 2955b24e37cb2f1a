from __future__ import annotations

import io

import pytest

from src.weekend_courses.weekend_courses.core.enums import Role, WeekDay
from src.weekend_courses.weekend_courses.core.exceptions import (
    AuthorizationError,
    FieldValidationError,
    SessionFull,
    ValidationError,
)
from src.weekend_courses.weekend_courses.students.importer import read_student_rows
from src.weekend_courses.weekend_courses.students.service import build_new_student

CSV = (
    "Student Number,Surname,First Name,Email,Phone\n"
    "stu10001,Okafor,Chidi,CHIDI@example.com,+2348012345678\n"
    "STU10002,Bello,Amina,amina@example.com,\n"
    ",Broken,Row,not-an-email,\n"
    "STU10001,Dup,Number,dup@example.com,\n"
)


@pytest.fixture
def setup(world):
    course = world.add_course()
    teacher = world.add_teacher(course)
    klass = world.add_class(course, capacity=30)
    return world, teacher, klass


def test_read_rows_maps_header_aliases():
    rows = read_student_rows(io.BytesIO(CSV.encode("utf-8")), "students.csv")

    assert len(rows) == 4
    assert rows[0]["row"] == 2
    assert rows[0]["student_number"] == "stu10001"
    assert rows[0]["phone_number"] == "+2348012345678"
    assert rows[1]["phone_number"] is None


def test_read_rows_rejects_other_extensions():
    with pytest.raises(ValidationError):
        read_student_rows(io.BytesIO(b"x"), "students.txt")


def test_read_rows_requires_columns():
    with pytest.raises(ValidationError) as exc:
        read_student_rows(io.BytesIO(b"Surname,Email\nOkafor,a@example.com\n"), "students.csv")

    assert "student_number" in exc.value.message


def test_build_new_student_collects_every_bad_field():
    with pytest.raises(FieldValidationError) as exc:
        build_new_student({"student_number": "", "surname": "X", "first_name": "Chidi", "email": "nope"})

    assert set(exc.value.fields) == {"student_number", "surname", "email"}


def test_import_reports_bad_rows_and_keeps_good_ones(world, container, setup):
    _, teacher, klass = setup

    result = container.student_service.import_file(
        current_role=Role.TEACHER,
        current_user_id=teacher.teacher_id,
        class_id=klass.class_id,
        stream=io.BytesIO(CSV.encode("utf-8")),
        filename="students.csv",
    )

    assert result.imported == 2
    assert result.failed == 2
    assert any(e.startswith("Row 4:") for e in result.errors)
    assert any("duplicate student number STU10001" in e for e in result.errors)
    numbers = sorted(s.student_number for s in world.students.list_for_class(klass.class_id))
    assert numbers == ["STU10001", "STU10002"]
    assert world.students.get_by_student_number("STU10001").email == "chidi@example.com"


def test_import_skips_existing_students(world, container, setup):
    _, teacher, klass = setup
    world.add_student(klass, number="STU10002")

    result = container.student_service.bulk_import(
        current_role=Role.TEACHER,
        current_user_id=teacher.teacher_id,
        class_id=klass.class_id,
        rows=[{"student_number": "STU10002", "surname": "Bello", "first_name": "Amina", "email": "new@example.com"}],
    )

    assert result.imported == 0
    assert result.errors == ["Student STU10002 already exists"]


def test_import_stops_at_class_capacity(world, container):
    course = world.add_course()
    teacher = world.add_teacher(course)
    klass = world.add_class(course, capacity=5)
    rows = [
        {"student_number": f"STU2000{i}", "surname": "Okafor", "first_name": "Chidi", "email": f"s{i}@example.com"}
        for i in range(7)
    ]

    result = container.student_service.bulk_import(
        current_role=Role.TEACHER, current_user_id=teacher.teacher_id, class_id=klass.class_id, rows=rows
    )

    assert result.imported == 5
    assert result.failed == 2


def test_import_requires_course_staff(world, container, setup):
    _, _, klass = setup
    stranger = world.add_teacher(world.add_course("Weekend Data"), email="stranger@example.com")

    with pytest.raises(AuthorizationError):
        container.student_service.bulk_import(
            current_role=Role.TEACHER, current_user_id=stranger.teacher_id, class_id=klass.class_id, rows=[{}]
        )


def test_assign_sessions_replaces_memberships(world, container, setup):
    _, teacher, klass = setup
    sat_a = world.add_session(klass, WeekDay.SATURDAY, "09:00", "11:00")
    sat_b = world.add_session(klass, WeekDay.SATURDAY, "13:00", "15:00")
    sun = world.add_session(klass, WeekDay.SUNDAY, "09:00", "11:00")
    student = world.add_student(klass, sessions=(sat_a, sun))

    schedule = container.student_service.assign_sessions(
        current_role=Role.TEACHER,
        current_user_id=teacher.teacher_id,
        student_id=student.student_id,
        saturday_session_id=sat_b.session_id,
        sunday_session_id=sun.session_id,
    )

    assert [s.session_id for s in schedule] == [sat_b.session_id, sun.session_id]


def test_assign_sessions_refuses_full_session(world, container, setup):
    _, teacher, klass = setup
    sat = world.add_session(klass, WeekDay.SATURDAY, "09:00", "11:00", capacity=1)
    sun = world.add_session(klass, WeekDay.SUNDAY, "09:00", "11:00")
    world.add_student(klass, sessions=(sat,))
    student = world.add_student(klass)

    with pytest.raises(SessionFull):
        container.student_service.assign_sessions(
            current_role=Role.TEACHER,
            current_user_id=teacher.teacher_id,
            student_id=student.student_id,
            saturday_session_id=sat.session_id,
            sunday_session_id=sun.session_id,
        )
    assert world.sessions.list_for_student(student.student_id) == []


def test_soft_delete_drops_memberships(world, container, setup):
    _, teacher, klass = setup
    sat = world.add_session(klass, WeekDay.SATURDAY, "09:00", "11:00")
    student = world.add_student(klass, sessions=(sat,))

    container.student_service.soft_delete(
        current_role=Role.TEACHER, current_user_id=teacher.teacher_id, student_id=student.student_id
    )

    assert world.students.get_by_id(student.student_id) is None
    assert world.sessions.count_students(sat.session_id) == 0
