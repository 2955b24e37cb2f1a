from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import WeekDay


@dataclass(frozen=True)
class Session:
    """A weekly weekend slot of a class. Times are "HH:MM" strings."""

    session_id: int
    class_id: int
    day: WeekDay
    start_time: str
    end_time: str
    capacity: int

    @property
    def label(self) -> str:
        return f"{self.day.value.title()} {self.start_time}-{self.end_time}"


@dataclass(frozen=True)
class SessionLoad:
    session: Session
    enrolled: int

    @property
    def available(self) -> int:
        return max(self.session.capacity - self.enrolled, 0)

    @property
    def is_full(self) -> bool:
        return self.enrolled >= self.session.capacity
