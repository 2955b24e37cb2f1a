from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class CourseClass:
    """A class (group of students) inside a course."""

    class_id: int
    course_id: int
    name: str
    capacity: int
    created_at: Optional[datetime] = None
