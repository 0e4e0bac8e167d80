"""Behaviour of the notification and bilingual text entities."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from notification_engine.domain.entities import (
    STATUS_ACTIVE,
    STATUS_EXPIRED,
    STATUS_SCHEDULED,
    BilingualText,
    Notification,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _notification(**overrides) -> Notification:
    values = {
        "id": 1,
        "recipient_id": 7,
        "title": BilingualText("Hi", "வணக்கம்"),
        "message": BilingualText("Welcome", ""),
        "type": "success",
        "start_at": NOW - timedelta(hours=1),
    }
    values.update(overrides)
    return Notification(**values)


def test_status_follows_the_visibility_window():
    assert _notification().status(NOW) == STATUS_ACTIVE
    assert _notification(start_at=NOW + timedelta(minutes=1)).status(NOW) == STATUS_SCHEDULED
    assert _notification(end_at=NOW).status(NOW) == STATUS_EXPIRED


def test_expiry_wins_over_a_future_start():
    notification = _notification(start_at=NOW + timedelta(days=1), end_at=NOW - timedelta(days=1))

    assert notification.status(NOW) == STATUS_EXPIRED
    assert not notification.is_visible(NOW)


def test_email_is_owed_only_once_and_only_while_visible():
    assert _notification(send_email=True).should_send_email(NOW)
    assert not _notification(send_email=True, email_sent_at=NOW).should_send_email(NOW)
    assert not _notification(send_email=False).should_send_email(NOW)
    assert not _notification(
        send_email=True, start_at=NOW + timedelta(hours=1)
    ).should_send_email(NOW)


def test_empty_language_falls_back_to_the_other():
    text = BilingualText("Welcome", "")

    assert text.resolve("ta") == "Welcome"
    assert text.resolve("both") == "Welcome"
    assert BilingualText("", "வரவேற்பு").resolve("en") == "வரவேற்பு"
    assert text.with_fallback() == BilingualText("Welcome", "Welcome")


def test_from_dict_trims_and_treats_empty_as_missing():
    assert BilingualText.from_dict(None) is None
    assert BilingualText.from_dict({}) is None
    assert BilingualText.from_dict({"en": "  Hi ", "ta": None}) == BilingualText("Hi", "")
    assert BilingualText("", "").is_blank()
