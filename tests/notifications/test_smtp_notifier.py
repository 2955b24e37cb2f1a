from __future__ import annotations

import pytest

from src.weekend_courses.weekend_courses.notifications.smtp_notifier import MailConfig, SmtpNotifier


@pytest.fixture
def outbox(monkeypatch):
    sent = []
    notifier = SmtpNotifier(
        MailConfig(host="smtp.example.com", port=587, username="", password="", sender="noreply@example.com"),
        background=False,
    )
    monkeypatch.setattr(notifier, "_send", sent.append)
    return notifier, sent


def _html(msg) -> str:
    return msg.get_payload()[0].get_payload(decode=True).decode("utf-8")


def test_rejection_reason_is_escaped(outbox):
    notifier, sent = outbox

    notifier.registration_rejected(
        to="amina@example.com",
        full_name="Amina Bello",
        course_name="Weekend Python",
        reason='<a href="http://evil.example">click</a>',
    )

    body = _html(sent[0])
    assert "<a href" not in body
    assert "&lt;a href=&#34;http://evil.example&#34;&gt;click&lt;/a&gt;" in body


def test_subject_is_not_html_escaped(outbox):
    notifier, sent = outbox

    notifier.registration_rejected(
        to="amina@example.com", full_name="Amina Bello", course_name="Data & AI", reason=None
    )

    assert "Data & AI" in sent[0]["Subject"]
    assert "Data &amp; AI" in _html(sent[0])
