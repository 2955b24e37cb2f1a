from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import CourseStatus


@dataclass(frozen=True)
class Course:
    course_id: int
    name: str
    status: CourseStatus
    head_teacher_id: Optional[int]
    end_date: Optional[date] = None
    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == CourseStatus.ACTIVE
