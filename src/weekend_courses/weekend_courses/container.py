from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .classes.service import ClassService
from .core.constants import AttendanceRules
from .courses.mysql_course_repository import MySQLCourseRepository
from .courses.repository import CourseRepository
from .courses.service import CourseService
from .database.connection import DatabaseConnection, DBConfig, TransactionManager
from .notifications.notifier import Notifier, NullNotifier
from .reassignments.mysql_reassignment_repository import MySQLReassignmentRepository
from .reassignments.repository import ReassignmentRepository
from .reassignments.service import ReassignmentService
from .registrations.mysql_registration_repository import MySQLRegistrationRepository
from .registrations.repository import RegistrationRepository
from .registrations.service import RegistrationService
from .reports.service import AttendanceReportService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService
from .users.access import CourseAccess
from .users.mysql_user_repository import MySQLAdminRepository, MySQLTeacherRepository
from .users.repository import AdminRepository, TeacherRepository
from .users.service import AccountService, AuthService


@dataclass(frozen=True)
class Container:
    tx: TransactionManager

    auth_service: AuthService
    account_service: AccountService
    course_service: CourseService
    class_service: ClassService
    session_service: SessionService
    student_service: StudentService
    attendance_service: AttendanceService
    reassignment_service: ReassignmentService
    registration_service: RegistrationService
    report_service: AttendanceReportService

    conn: Optional[DatabaseConnection] = None


def wire_services(
    *,
    tx: TransactionManager,
    admins: AdminRepository,
    teachers: TeacherRepository,
    courses: CourseRepository,
    classes: ClassRepository,
    sessions: SessionRepository,
    students: StudentRepository,
    attendance: AttendanceRepository,
    reassignments: ReassignmentRepository,
    registrations: RegistrationRepository,
    rules: AttendanceRules,
    notifier: Notifier,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build every service from already-constructed repositories."""
    access = CourseAccess(teachers)

    return Container(
        tx=tx,
        conn=conn,
        auth_service=AuthService(admins, teachers, students),
        account_service=AccountService(admins, teachers, notifier=notifier),
        course_service=CourseService(courses, teachers, admins, tx=tx, access=access),
        class_service=ClassService(classes, courses, students, sessions, access=access, tx=tx),
        session_service=SessionService(sessions, classes, access=access, tx=tx),
        student_service=StudentService(students, classes, sessions, access=access, tx=tx),
        attendance_service=AttendanceService(
            attendance,
            students,
            sessions,
            classes,
            rules=rules,
            tx=tx,
            access=access,
            strategy_factory=AttendanceStrategyFactory(),
        ),
        reassignment_service=ReassignmentService(
            reassignments, students, sessions, classes, rules=rules, tx=tx, access=access
        ),
        registration_service=RegistrationService(
            registrations, students, courses, classes, sessions, tx=tx, access=access, notifier=notifier
        ),
        report_service=AttendanceReportService(attendance, classes, access=access),
    )


def build_container(
    *,
    db_config: dict,
    rules: Optional[AttendanceRules] = None,
    notifier: Optional[Notifier] = None,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return wire_services(
        tx=conn,
        conn=conn,
        admins=MySQLAdminRepository(conn),
        teachers=MySQLTeacherRepository(conn),
        courses=MySQLCourseRepository(conn),
        classes=MySQLClassRepository(conn),
        sessions=MySQLSessionRepository(conn),
        students=MySQLStudentRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        reassignments=MySQLReassignmentRepository(conn),
        registrations=MySQLRegistrationRepository(conn),
        rules=rules or AttendanceRules(),
        notifier=notifier or NullNotifier(),
    )
