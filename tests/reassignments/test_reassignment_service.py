from __future__ import annotations

import pytest

from src.weekend_courses.weekend_courses.container import wire_services
from src.weekend_courses.weekend_courses.core.constants import AttendanceRules
from src.weekend_courses.weekend_courses.core.enums import RequestStatus, Role, WeekDay
from src.weekend_courses.weekend_courses.core.exceptions import (
    AlreadyProcessed,
    AuthorizationError,
    MaxRequestsReached,
    NotAssignedToSource,
    PendingRequestExists,
    SameClassOnly,
    SameDayOnly,
    SessionFull,
    ValidationError,
)


@pytest.fixture
def setup(world):
    course = world.add_course()
    teacher = world.add_teacher(course)
    klass = world.add_class(course)
    sat_am = world.add_session(klass, WeekDay.SATURDAY, "09:00", "11:00", capacity=5)
    sat_pm = world.add_session(klass, WeekDay.SATURDAY, "13:00", "15:00", capacity=5)
    sun_am = world.add_session(klass, WeekDay.SUNDAY, "09:00", "11:00", capacity=5)
    student = world.add_student(klass, sessions=(sat_am, sun_am))
    return {
        "world": world,
        "course": course,
        "teacher": teacher,
        "class": klass,
        "sat_am": sat_am,
        "sat_pm": sat_pm,
        "sun_am": sun_am,
        "student": student,
    }


def _request(svc, s, source="sat_am", target="sat_pm"):
    return svc.request_reassignment(
        student_id=s["student"].student_id,
        from_session_id=s[source].session_id,
        to_session_id=s[target].session_id,
        reason="Work shift on Saturday mornings",
    )


def _decide(svc, s, request_id, decision):
    return svc.process_request(
        current_role=Role.TEACHER,
        current_user_id=s["teacher"].teacher_id,
        request_id=request_id,
        decision=decision,
    )


def test_request_then_approve_moves_membership(world, container, setup):
    svc = container.reassignment_service
    req = _request(svc, setup)
    assert req.status == RequestStatus.PENDING

    decided = _decide(svc, setup, req.request_id, RequestStatus.APPROVED)

    assert decided.status == RequestStatus.APPROVED
    assert decided.teacher_id == setup["teacher"].teacher_id
    student_id = setup["student"].student_id
    assert world.sessions.is_enrolled(session_id=setup["sat_pm"].session_id, student_id=student_id)
    assert not world.sessions.is_enrolled(session_id=setup["sat_am"].session_id, student_id=student_id)
    assert world.sessions.is_enrolled(session_id=setup["sun_am"].session_id, student_id=student_id)


def test_deny_leaves_membership(world, container, setup):
    svc = container.reassignment_service
    req = _request(svc, setup)

    decided = _decide(svc, setup, req.request_id, RequestStatus.DENIED)

    assert decided.status == RequestStatus.DENIED
    assert world.sessions.is_enrolled(
        session_id=setup["sat_am"].session_id, student_id=setup["student"].student_id
    )


def test_second_pending_request_is_rejected(container, setup):
    svc = container.reassignment_service
    _request(svc, setup)

    with pytest.raises(PendingRequestExists):
        _request(svc, setup)


def test_pending_check_runs_before_day_check(container, setup):
    svc = container.reassignment_service
    _request(svc, setup)

    # Would also fail SameDayOnly; the pending check comes first.
    with pytest.raises(PendingRequestExists):
        _request(svc, setup, target="sun_am")


def test_lifetime_cap_counts_decided_requests(world, setup):
    container = wire_services(
        tx=world.tx,
        admins=world.admins,
        teachers=world.teachers,
        courses=world.courses,
        classes=world.classes,
        sessions=world.sessions,
        students=world.students,
        attendance=world.attendance,
        reassignments=world.reassignments,
        registrations=world.registrations,
        rules=AttendanceRules(max_reassignment_requests=2),
        notifier=world.notifier,
    )
    svc = container.reassignment_service
    for _ in range(2):
        req = _request(svc, setup)
        _decide(svc, setup, req.request_id, RequestStatus.DENIED)

    with pytest.raises(MaxRequestsReached):
        _request(svc, setup, target="sun_am")


def test_target_on_other_day(container, setup):
    with pytest.raises(SameDayOnly):
        _request(container.reassignment_service, setup, target="sun_am")


def test_target_in_other_class(world, container, setup):
    other = world.add_class(setup["course"], name="Group B")
    setup["foreign"] = world.add_session(other, WeekDay.SATURDAY, "13:00", "15:00")

    with pytest.raises(SameClassOnly):
        _request(container.reassignment_service, setup, target="foreign")


def test_source_not_assigned(container, setup):
    with pytest.raises(NotAssignedToSource):
        _request(container.reassignment_service, setup, source="sat_pm", target="sat_am")


def test_same_source_and_target(container, setup):
    with pytest.raises(ValidationError):
        _request(container.reassignment_service, setup, target="sat_am")


def test_full_target_is_rejected_at_request_time(world, container, setup):
    for _ in range(setup["sat_pm"].capacity):
        world.add_student(setup["class"], sessions=(setup["sat_pm"],))

    with pytest.raises(SessionFull):
        _request(container.reassignment_service, setup)


def test_approval_rolls_back_when_target_filled_meanwhile(world, container, setup):
    svc = container.reassignment_service
    req = _request(svc, setup)
    for _ in range(setup["sat_pm"].capacity):
        world.add_student(setup["class"], sessions=(setup["sat_pm"],))

    with pytest.raises(SessionFull):
        _decide(svc, setup, req.request_id, RequestStatus.APPROVED)

    assert world.reassignments.get_by_id(req.request_id).is_pending
    assert world.sessions.is_enrolled(
        session_id=setup["sat_am"].session_id, student_id=setup["student"].student_id
    )
    assert world.tx.rollbacks == 1


def test_decided_request_cannot_be_decided_again(container, setup):
    svc = container.reassignment_service
    req = _request(svc, setup)
    _decide(svc, setup, req.request_id, RequestStatus.DENIED)

    with pytest.raises(AlreadyProcessed):
        _decide(svc, setup, req.request_id, RequestStatus.APPROVED)


def test_pending_is_not_a_decision(container, setup):
    svc = container.reassignment_service
    req = _request(svc, setup)

    with pytest.raises(ValidationError):
        _decide(svc, setup, req.request_id, RequestStatus.PENDING)


def test_teacher_of_other_course_cannot_decide(world, container, setup):
    svc = container.reassignment_service
    req = _request(svc, setup)
    stranger = world.add_teacher(world.add_course("Weekend Data"), email="stranger@example.com")

    with pytest.raises(AuthorizationError):
        svc.process_request(
            current_role=Role.TEACHER,
            current_user_id=stranger.teacher_id,
            request_id=req.request_id,
            decision=RequestStatus.APPROVED,
        )


def test_cancel_removes_pending_request(world, container, setup):
    svc = container.reassignment_service
    req = _request(svc, setup)

    svc.cancel_request(student_id=setup["student"].student_id, request_id=req.request_id)

    assert world.reassignments.get_by_id(req.request_id) is None
    assert _request(svc, setup).is_pending


def test_options_list_same_day_sessions_with_room(container, setup):
    options = container.reassignment_service.reassignment_options(setup["student"].student_id)

    by_current = {o.current.session_id: [a.session.session_id for a in o.alternatives] for o in options}
    assert by_current == {
        setup["sat_am"].session_id: [setup["sat_pm"].session_id],
        setup["sun_am"].session_id: [],
    }


def test_list_for_course_filters_by_status(container, setup):
    svc = container.reassignment_service
    req = _request(svc, setup)

    pending = svc.list_for_course(
        current_role=Role.ADMIN, current_user_id=1, course_id=setup["course"].course_id, status=RequestStatus.PENDING
    )
    approved = svc.list_for_course(
        current_role=Role.ADMIN, current_user_id=1, course_id=setup["course"].course_id, status=RequestStatus.APPROVED
    )

    assert [r.request_id for r in pending] == [req.request_id]
    assert approved == []
