from __future__ import annotations

import copy
import uuid as uuidlib
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from src.weekend_courses.weekend_courses.attendance.model import AttendanceExportRow, AttendanceRecord
from src.weekend_courses.weekend_courses.classes.model import CourseClass
from src.weekend_courses.weekend_courses.container import wire_services
from src.weekend_courses.weekend_courses.core.constants import AttendanceRules
from src.weekend_courses.weekend_courses.core.enums import (
    AttendanceStatus,
    CourseStatus,
    RegistrationStatus,
    RequestStatus,
    TeacherRole,
    WeekDay,
)
from src.weekend_courses.weekend_courses.core.exceptions import StorageError
from src.weekend_courses.weekend_courses.courses.model import Course
from src.weekend_courses.weekend_courses.reassignments.model import ReassignmentRequest
from src.weekend_courses.weekend_courses.registrations.model import StudentRegistration
from src.weekend_courses.weekend_courses.sessions.model import Session
from src.weekend_courses.weekend_courses.students.model import NewStudent, Student
from src.weekend_courses.weekend_courses.users.model import Admin, Teacher


class FakeDB:
    """Every table as a dict keyed by id; memberships as (session_id, student_id) pairs."""

    def __init__(self):
        self.admins: dict[int, Admin] = {}
        self.teachers: dict[int, Teacher] = {}
        self.courses: dict[int, Course] = {}
        self.classes: dict[int, CourseClass] = {}
        self.sessions: dict[int, Session] = {}
        self.students: dict[int, Student] = {}
        self.memberships: set[tuple[int, int]] = set()
        self.attendance: dict[int, AttendanceRecord] = {}
        self.requests: dict[int, ReassignmentRequest] = {}
        self.registrations: dict[int, StudentRegistration] = {}
        self._ids: dict[str, int] = {}

    def next_id(self, table: str) -> int:
        self._ids[table] = self._ids.get(table, 0) + 1
        return self._ids[table]


class FakeTransactionManager:
    """Snapshot on enter, restore on error. Nested calls join the outer one."""

    def __init__(self, db: FakeDB):
        self._db = db
        self._depth = 0
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def transaction(self):
        if self._depth:
            yield
            return

        snapshot = copy.deepcopy(self._db.__dict__)
        self._depth += 1
        try:
            yield
        except Exception:
            self._db.__dict__.clear()
            self._db.__dict__.update(snapshot)
            self.rollbacks += 1
            raise
        else:
            self.commits += 1
        finally:
            self._depth -= 1


class FakeAdminRepo:
    def __init__(self, db: FakeDB):
        self._db = db

    def get_by_id(self, admin_id):
        return self._db.admins.get(int(admin_id))

    def get_by_email(self, email):
        return next((a for a in self._db.admins.values() if a.email == email), None)

    def update_password(self, admin_id, password_hash):
        admin = self._db.admins.get(int(admin_id))
        if not admin:
            return False
        self._db.admins[admin.admin_id] = replace(admin, password_hash=password_hash)
        return True


class FakeTeacherRepo:
    def __init__(self, db: FakeDB):
        self._db = db

    def get_by_id(self, teacher_id):
        return self._db.teachers.get(int(teacher_id))

    def get_by_email(self, email):
        return next((t for t in self._db.teachers.values() if t.email == email), None)

    def create(self, *, email, full_name, password_hash, course_id, role):
        if self.get_by_email(email):
            raise StorageError("A record with this information already exists")
        teacher_id = self._db.next_id("teachers")
        self._db.teachers[teacher_id] = Teacher(
            teacher_id=teacher_id,
            email=email,
            full_name=full_name,
            password_hash=password_hash,
            course_id=course_id,
            role=role,
        )
        return teacher_id

    def list_for_course(self, course_id):
        return [t for t in self._db.teachers.values() if t.course_id == int(course_id) and t.is_active]

    def update_assignment(self, *, teacher_id, course_id, role, is_active):
        teacher = self._db.teachers.get(int(teacher_id))
        if not teacher:
            return False
        self._db.teachers[teacher.teacher_id] = replace(teacher, course_id=course_id, role=role, is_active=is_active)
        return True

    def update_password(self, teacher_id, password_hash):
        teacher = self._db.teachers.get(int(teacher_id))
        if not teacher:
            return False
        self._db.teachers[teacher.teacher_id] = replace(teacher, password_hash=password_hash)
        return True


class FakeCourseRepo:
    def __init__(self, db: FakeDB):
        self._db = db

    def get_by_id(self, course_id):
        return self._db.courses.get(int(course_id))

    def list_all(self, *, status=None):
        return [c for c in self._db.courses.values() if status is None or c.status == status]

    def create(self, *, name, end_date=None):
        course_id = self._db.next_id("courses")
        self._db.courses[course_id] = Course(
            course_id=course_id, name=name, status=CourseStatus.ACTIVE, head_teacher_id=None, end_date=end_date
        )
        return course_id

    def update(self, *, course_id, name, end_date):
        course = self._db.courses[int(course_id)]
        self._db.courses[course.course_id] = replace(course, name=name, end_date=end_date)
        return True

    def set_head_teacher(self, *, course_id, teacher_id):
        if teacher_id is not None and any(
            c.head_teacher_id == teacher_id and c.course_id != int(course_id) for c in self._db.courses.values()
        ):
            raise StorageError("A record with this information already exists")
        course = self._db.courses[int(course_id)]
        self._db.courses[course.course_id] = replace(course, head_teacher_id=teacher_id)
        return True

    def set_status(self, *, course_id, status):
        course = self._db.courses[int(course_id)]
        self._db.courses[course.course_id] = replace(course, status=status)
        return True


class FakeClassRepo:
    def __init__(self, db: FakeDB):
        self._db = db

    def get_by_id(self, class_id):
        return self._db.classes.get(int(class_id))

    def list_for_course(self, course_id):
        return [c for c in self._db.classes.values() if c.course_id == int(course_id)]

    def create(self, *, course_id, name, capacity):
        class_id = self._db.next_id("classes")
        self._db.classes[class_id] = CourseClass(class_id=class_id, course_id=course_id, name=name, capacity=capacity)
        return class_id

    def update(self, *, class_id, name, capacity):
        klass = self._db.classes[int(class_id)]
        self._db.classes[klass.class_id] = replace(klass, name=name, capacity=capacity)
        return True

    def delete(self, class_id):
        return self._db.classes.pop(int(class_id), None) is not None


class FakeSessionRepo:
    def __init__(self, db: FakeDB):
        self._db = db

    def _active(self, student_id: int) -> bool:
        student = self._db.students.get(student_id)
        return bool(student) and not student.is_deleted

    def get_by_id(self, session_id):
        return self._db.sessions.get(int(session_id))

    def list_for_class(self, class_id, *, day=None):
        found = [
            s
            for s in self._db.sessions.values()
            if s.class_id == int(class_id) and (day is None or s.day == WeekDay(day))
        ]
        return sorted(found, key=lambda s: (s.day != WeekDay.SATURDAY, s.start_time, s.session_id))

    def create(self, *, class_id, day, start_time, end_time, capacity):
        session_id = self._db.next_id("sessions")
        self._db.sessions[session_id] = Session(
            session_id=session_id,
            class_id=class_id,
            day=WeekDay(day),
            start_time=start_time,
            end_time=end_time,
            capacity=capacity,
        )
        return session_id

    def update(self, *, session_id, day, start_time, end_time, capacity):
        session = self._db.sessions[int(session_id)]
        self._db.sessions[session.session_id] = replace(
            session, day=WeekDay(day), start_time=start_time, end_time=end_time, capacity=capacity
        )
        return True

    def delete(self, session_id):
        return self._db.sessions.pop(int(session_id), None) is not None

    def list_student_ids(self, session_id):
        return sorted(st for se, st in self._db.memberships if se == int(session_id) and self._active(st))

    def count_students(self, session_id):
        return len(self.list_student_ids(session_id))

    def enrollment_counts(self, session_ids):
        return {int(sid): self.count_students(sid) for sid in session_ids}

    def is_enrolled(self, *, session_id, student_id):
        return (int(session_id), int(student_id)) in self._db.memberships

    def add_student(self, *, session_id, student_id):
        key = (int(session_id), int(student_id))
        if key in self._db.memberships:
            raise StorageError("A record with this information already exists")
        self._db.memberships.add(key)

    def remove_student(self, *, session_id, student_id):
        key = (int(session_id), int(student_id))
        if key not in self._db.memberships:
            return False
        self._db.memberships.discard(key)
        return True

    def list_for_student(self, student_id):
        ids = [se for se, st in self._db.memberships if st == int(student_id)]
        return sorted(
            (self._db.sessions[i] for i in ids if i in self._db.sessions),
            key=lambda s: (s.day != WeekDay.SATURDAY, s.start_time),
        )


class FakeStudentRepo:
    def __init__(self, db: FakeDB):
        self._db = db

    def _live(self):
        return [s for s in self._db.students.values() if not s.is_deleted]

    def get_by_id(self, student_id):
        student = self._db.students.get(int(student_id))
        return student if student and not student.is_deleted else None

    def get_by_uuid(self, uuid):
        return next((s for s in self._live() if s.uuid == uuid), None)

    def get_by_student_number(self, student_number):
        return next((s for s in self._live() if s.student_number == student_number), None)

    def list_for_class(self, class_id):
        return [s for s in self._live() if s.class_id == int(class_id)]

    def list_unassigned(self, class_id):
        assigned = {st for _, st in self._db.memberships}
        return [s for s in self.list_for_class(class_id) if s.student_id not in assigned]

    def count_for_class(self, class_id):
        return len(self.list_for_class(class_id))

    def existing_student_numbers(self, numbers):
        wanted = set(numbers)
        return {s.student_number for s in self._db.students.values() if s.student_number in wanted}

    def existing_emails(self, emails):
        wanted = set(emails)
        return {s.email for s in self._db.students.values() if s.email in wanted}

    def create(self, *, uuid, class_id, data: NewStudent):
        if data.student_number in self.existing_student_numbers([data.student_number]):
            raise StorageError("A record with this information already exists")
        student_id = self._db.next_id("students")
        self._db.students[student_id] = Student(
            student_id=student_id,
            uuid=uuid,
            student_number=data.student_number,
            surname=data.surname,
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            phone_number=data.phone_number,
            class_id=class_id,
        )
        return student_id

    def soft_delete(self, student_id):
        student = self._db.students.get(int(student_id))
        if not student:
            return False
        self._db.students[student.student_id] = replace(student, is_deleted=True)
        return True

    def latest_student_number(self, prefix):
        numbers = [s.student_number for s in self._db.students.values() if s.student_number.startswith(prefix)]
        return max(numbers, key=lambda n: (len(n), n)) if numbers else None


class FakeAttendanceRepo:
    def __init__(self, db: FakeDB):
        self._db = db

    def get_for_student_session_date(self, *, student_id, session_id, attend_date):
        return next(
            (
                r
                for r in self._db.attendance.values()
                if (r.student_id, r.session_id, r.attend_date) == (int(student_id), int(session_id), attend_date)
            ),
            None,
        )

    def upsert(self, *, student_id, session_id, attend_date, status, scan_time, teacher_id):
        existing = self.get_for_student_session_date(
            student_id=student_id, session_id=session_id, attend_date=attend_date
        )
        attendance_id = existing.attendance_id if existing else self._db.next_id("attendance")
        self._db.attendance[attendance_id] = AttendanceRecord(
            attendance_id=attendance_id,
            student_id=int(student_id),
            session_id=int(session_id),
            attend_date=attend_date,
            status=status,
            scan_time=scan_time,
            teacher_id=teacher_id,
        )
        return attendance_id

    def list_student_ids_for_session_date(self, *, session_id, attend_date):
        return {r.student_id for r in self.list_for_session_date(session_id=session_id, attend_date=attend_date)}

    def bulk_create_absent(self, *, session_id, attend_date, student_ids, teacher_id=None):
        created = 0
        for student_id in student_ids:
            if self.get_for_student_session_date(student_id=student_id, session_id=session_id, attend_date=attend_date):
                continue
            self.upsert(
                student_id=student_id,
                session_id=session_id,
                attend_date=attend_date,
                status=AttendanceStatus.ABSENT,
                scan_time=None,
                teacher_id=teacher_id,
            )
            created += 1
        return created

    def list_for_session_date(self, *, session_id, attend_date):
        return [
            r for r in self._db.attendance.values() if r.session_id == int(session_id) and r.attend_date == attend_date
        ]

    def list_for_student(self, student_id, limit):
        rows = [r for r in self._db.attendance.values() if r.student_id == int(student_id)]
        return sorted(rows, key=lambda r: (r.attend_date, r.attendance_id), reverse=True)[:limit]

    def get_export_rows(self, *, start_date, end_date, course_id=None, class_id=None, session_id=None, status=None):
        out = []
        for r in sorted(self._db.attendance.values(), key=lambda r: (r.attend_date, r.attendance_id)):
            student = self._db.students[r.student_id]
            session = self._db.sessions[r.session_id]
            klass = self._db.classes[session.class_id]
            if not (start_date <= r.attend_date <= end_date):
                continue
            if course_id is not None and klass.course_id != course_id:
                continue
            if class_id is not None and klass.class_id != class_id:
                continue
            if session_id is not None and session.session_id != session_id:
                continue
            if status is not None and r.status != status:
                continue
            out.append(
                AttendanceExportRow(
                    attend_date=r.attend_date,
                    status=r.status,
                    scan_time=r.scan_time,
                    student_id=student.student_id,
                    student_number=student.student_number,
                    student_name=student.full_name,
                    email=student.email,
                    class_id=klass.class_id,
                    class_name=klass.name,
                    session_id=session.session_id,
                    session_day=session.day,
                    start_time=session.start_time,
                    end_time=session.end_time,
                )
            )
        return out


class FakeReassignmentRepo:
    def __init__(self, db: FakeDB):
        self._db = db

    def get_by_id(self, request_id):
        return self._db.requests.get(int(request_id))

    def create(self, *, student_id, from_session_id, to_session_id, reason, requested_at):
        request_id = self._db.next_id("requests")
        self._db.requests[request_id] = ReassignmentRequest(
            request_id=request_id,
            student_id=student_id,
            from_session_id=from_session_id,
            to_session_id=to_session_id,
            status=RequestStatus.PENDING,
            reason=reason,
            requested_at=requested_at,
        )
        return request_id

    def count_for_student(self, student_id):
        return sum(1 for r in self._db.requests.values() if r.student_id == int(student_id))

    def get_pending_for_student(self, student_id):
        return next(
            (r for r in self._db.requests.values() if r.student_id == int(student_id) and r.is_pending), None
        )

    def decide(self, *, request_id, status, teacher_id, decided_at):
        req = self._db.requests.get(int(request_id))
        if not req or not req.is_pending:
            return False
        self._db.requests[req.request_id] = replace(req, status=status, teacher_id=teacher_id, decided_at=decided_at)
        return True

    def delete_pending(self, request_id):
        req = self._db.requests.get(int(request_id))
        if not req or not req.is_pending:
            return False
        del self._db.requests[req.request_id]
        return True

    def list_for_student(self, student_id):
        return [r for r in self._db.requests.values() if r.student_id == int(student_id)]

    def list_for_course(self, course_id, *, status=None):
        out = []
        for r in self._db.requests.values():
            klass = self._db.classes[self._db.sessions[r.from_session_id].class_id]
            if klass.course_id == int(course_id) and (status is None or r.status == status):
                out.append(r)
        return out


class FakeRegistrationRepo:
    def __init__(self, db: FakeDB):
        self._db = db

    def get_by_id(self, registration_id):
        return self._db.registrations.get(int(registration_id))

    def get_pending_by_email(self, email):
        return next(
            (
                r
                for r in self._db.registrations.values()
                if r.email == email and r.status == RegistrationStatus.PENDING
            ),
            None,
        )

    def create(self, data):
        registration_id = self._db.next_id("registrations")
        self._db.registrations[registration_id] = StudentRegistration(
            registration_id=registration_id,
            surname=data.surname,
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            phone_number=data.phone_number,
            course_id=data.course_id,
            class_id=data.class_id,
            saturday_session_id=data.saturday_session_id,
            sunday_session_id=data.sunday_session_id,
            status=RegistrationStatus.PENDING,
        )
        return registration_id

    def list_for_course(self, course_id, *, status=None):
        return [
            r
            for r in self._db.registrations.values()
            if r.course_id == int(course_id) and (status is None or r.status == status)
        ]

    def review(self, *, registration_id, status, reviewed_by, reviewed_at, rejection_reason=None):
        reg = self._db.registrations.get(int(registration_id))
        if not reg or reg.status != RegistrationStatus.PENDING:
            return False
        self._db.registrations[reg.registration_id] = replace(
            reg, status=status, reviewed_by=reviewed_by, reviewed_at=reviewed_at, rejection_reason=rejection_reason
        )
        return True


class RecordingNotifier:
    def __init__(self):
        self.sent: list[tuple[str, dict]] = []

    def registration_approved(self, **kwargs):
        self.sent.append(("registration_approved", kwargs))

    def registration_rejected(self, **kwargs):
        self.sent.append(("registration_rejected", kwargs))

    def password_reset(self, **kwargs):
        self.sent.append(("password_reset", kwargs))


class World:
    """In-memory backend plus builders for the usual fixtures."""

    def __init__(self, rules: Optional[AttendanceRules] = None):
        self.db = FakeDB()
        self.tx = FakeTransactionManager(self.db)
        self.notifier = RecordingNotifier()
        self.admins = FakeAdminRepo(self.db)
        self.teachers = FakeTeacherRepo(self.db)
        self.courses = FakeCourseRepo(self.db)
        self.classes = FakeClassRepo(self.db)
        self.sessions = FakeSessionRepo(self.db)
        self.students = FakeStudentRepo(self.db)
        self.attendance = FakeAttendanceRepo(self.db)
        self.reassignments = FakeReassignmentRepo(self.db)
        self.registrations = FakeRegistrationRepo(self.db)
        self.container = wire_services(
            tx=self.tx,
            admins=self.admins,
            teachers=self.teachers,
            courses=self.courses,
            classes=self.classes,
            sessions=self.sessions,
            students=self.students,
            attendance=self.attendance,
            reassignments=self.reassignments,
            registrations=self.registrations,
            rules=rules or AttendanceRules(),
            notifier=self.notifier,
        )

    def add_admin(self, email="admin@example.com", password_hash="x"):
        admin_id = self.db.next_id("admins")
        self.db.admins[admin_id] = Admin(admin_id=admin_id, email=email, full_name="Site Admin", password_hash=password_hash)
        return self.db.admins[admin_id]

    def add_course(self, name="Weekend Python"):
        course_id = self.courses.create(name=name)
        return self.courses.get_by_id(course_id)

    def add_teacher(self, course, *, head=True, email=None, password_hash="x"):
        teacher_id = self.teachers.create(
            email=email or f"teacher{len(self.db.teachers) + 1}@example.com",
            full_name="Ada Teacher",
            password_hash=password_hash,
            course_id=course.course_id,
            role=TeacherRole.HEAD if head else TeacherRole.ADDITIONAL,
        )
        if head:
            self.courses.set_head_teacher(course_id=course.course_id, teacher_id=teacher_id)
        return self.teachers.get_by_id(teacher_id)

    def add_class(self, course, name="Group A", capacity=40):
        class_id = self.classes.create(course_id=course.course_id, name=name, capacity=capacity)
        return self.classes.get_by_id(class_id)

    def add_session(self, klass, day=WeekDay.SATURDAY, start="09:00", end="11:00", capacity=10):
        session_id = self.sessions.create(
            class_id=klass.class_id, day=day, start_time=start, end_time=end, capacity=capacity
        )
        return self.sessions.get_by_id(session_id)

    def add_student(self, klass, number=None, sessions=()):
        n = len(self.db.students) + 1
        student_id = self.students.create(
            uuid=str(uuidlib.uuid4()),
            class_id=klass.class_id,
            data=NewStudent(
                student_number=number or f"STU{n:05d}",
                surname="Okafor",
                first_name="Chidi",
                last_name=None,
                email=f"student{n}@example.com",
            ),
        )
        for session in sessions:
            self.sessions.add_student(session_id=session.session_id, student_id=student_id)
        return self.students.get_by_id(student_id)


@pytest.fixture
def world():
    return World()


@pytest.fixture
def container(world):
    return world.container


@pytest.fixture
def saturday():
    # 2026-10-17 is a Saturday
    return datetime(2026, 10, 17, 10, 0, 0)
