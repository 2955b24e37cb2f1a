"""Weekend Courses package.

This package is organized by feature modules (courses, sessions, students,
attendance, reassignments, ...) with a thin Flask controller layer and
service/repository layers underneath.
"""
