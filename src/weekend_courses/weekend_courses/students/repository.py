from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence, Set

from .model import NewStudent, Student


class StudentRepository(Protocol):
    """Lookups ignore soft-deleted students."""

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_uuid(self, uuid: str) -> Optional[Student]:
        raise NotImplementedError

    def get_by_student_number(self, student_number: str) -> Optional[Student]:
        raise NotImplementedError

    def list_for_class(self, class_id: int) -> Sequence[Student]:
        raise NotImplementedError

    def list_unassigned(self, class_id: int) -> Sequence[Student]:
        """Students of the class with no session membership at all."""

        raise NotImplementedError

    def count_for_class(self, class_id: int) -> int:
        raise NotImplementedError

    def existing_student_numbers(self, numbers: Iterable[str]) -> Set[str]:
        """Numbers already taken, soft-deleted students included."""

        raise NotImplementedError

    def existing_emails(self, emails: Iterable[str]) -> Set[str]:
        raise NotImplementedError

    def create(self, *, uuid: str, class_id: int, data: NewStudent) -> int:
        raise NotImplementedError

    def soft_delete(self, student_id: int) -> bool:
        raise NotImplementedError

    def latest_student_number(self, prefix: str) -> Optional[str]:
        """Highest generated number with `prefix`, soft-deleted students included."""

        raise NotImplementedError
