from __future__ import annotations

import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Outgoing messages. Implementations must not raise into the caller."""

    def registration_approved(
        self, *, to: str, full_name: str, course_name: str, class_name: str, sessions: list[str], qr_png: Optional[bytes]
    ) -> None:
        raise NotImplementedError

    def registration_rejected(self, *, to: str, full_name: str, course_name: str, reason: Optional[str]) -> None:
        raise NotImplementedError

    def password_reset(self, *, to: str, full_name: str, temporary_password: str) -> None:
        raise NotImplementedError


class NullNotifier(Notifier):
    """Used when mail is not configured; messages are only logged."""

    def registration_approved(
        self, *, to: str, full_name: str, course_name: str, class_name: str, sessions: list[str], qr_png: Optional[bytes]
    ) -> None:
        logger.info("Mail disabled; skipping approval email to %s", to)

    def registration_rejected(self, *, to: str, full_name: str, course_name: str, reason: Optional[str]) -> None:
        logger.info("Mail disabled; skipping rejection email to %s", to)

    def password_reset(self, *, to: str, full_name: str, temporary_password: str) -> None:
        logger.info("Mail disabled; skipping password reset email to %s", to)
