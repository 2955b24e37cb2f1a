from __future__ import annotations

import pytest

from src.weekend_courses.weekend_courses.core.enums import CourseStatus, Role, TeacherRole
from src.weekend_courses.weekend_courses.core.exceptions import (
    AuthorizationError,
    ConflictError,
    FieldValidationError,
)


def _create(container, name="Weekend Python", email="head@example.com"):
    return container.course_service.create_course_with_head_teacher(
        current_role=Role.ADMIN,
        name=name,
        head_email=email,
        head_full_name="Grace Head",
        head_password="Weekend2026",
    )


def test_course_and_head_teacher_created_together(world, container):
    course = _create(container)

    head = world.teachers.get_by_id(course.head_teacher_id)
    assert course.status == CourseStatus.ACTIVE
    assert head.role == TeacherRole.HEAD
    assert head.course_id == course.course_id
    assert head.password_hash != "Weekend2026"


def test_only_admin_creates_courses(container):
    with pytest.raises(AuthorizationError):
        container.course_service.create_course_with_head_teacher(
            current_role=Role.TEACHER,
            name="Weekend Python",
            head_email="head@example.com",
            head_full_name="Grace Head",
            head_password="Weekend2026",
        )


def test_head_email_must_be_unique(container):
    _create(container)

    with pytest.raises(ConflictError):
        _create(container, name="Weekend Data")


def test_course_fields_validated_together(container):
    with pytest.raises(FieldValidationError) as exc:
        _create(container, name="X", email="nope")

    assert "name" in exc.value.fields


def test_replace_head_demotes_previous_head(world, container):
    course = _create(container)
    old_head_id = course.head_teacher_id
    extra = container.course_service.add_teacher(
        current_role=Role.TEACHER,
        current_user_id=old_head_id,
        course_id=course.course_id,
        email="extra@example.com",
        full_name="Alan Extra",
        password="Weekend2026",
    )

    updated = container.course_service.replace_head_teacher(
        current_role=Role.ADMIN, course_id=course.course_id, new_teacher_id=extra.teacher_id
    )

    assert updated.head_teacher_id == extra.teacher_id
    assert world.teachers.get_by_id(old_head_id).role == TeacherRole.ADDITIONAL
    assert world.teachers.get_by_id(extra.teacher_id).is_head


def test_additional_teacher_cannot_add_teachers(container):
    course = _create(container)
    extra = container.course_service.add_teacher(
        current_role=Role.ADMIN,
        current_user_id=1,
        course_id=course.course_id,
        email="extra@example.com",
        full_name="Alan Extra",
        password="Weekend2026",
    )

    with pytest.raises(AuthorizationError):
        container.course_service.add_teacher(
            current_role=Role.TEACHER,
            current_user_id=extra.teacher_id,
            course_id=course.course_id,
            email="third@example.com",
            full_name="Third Teacher",
            password="Weekend2026",
        )


def test_deactivate_releases_head(world, container):
    course = _create(container)

    deactivated = container.course_service.deactivate_course(current_role=Role.ADMIN, course_id=course.course_id)

    assert deactivated.status == CourseStatus.INACTIVE
    assert deactivated.head_teacher_id is None
    assert not world.teachers.get_by_id(course.head_teacher_id).is_active


def test_head_teacher_cannot_be_removed(container):
    course = _create(container)

    with pytest.raises(ConflictError):
        container.course_service.remove_teacher(
            current_role=Role.ADMIN, current_user_id=1, course_id=course.course_id, teacher_id=course.head_teacher_id
        )
