"""Sweeping records whose email is still owed."""

from __future__ import annotations

import logging
import threading
import time
from datetime import timedelta

from notification_engine.application.use_cases.notifications import (
    NotificationDraft,
    build_delivery_worker,
    create_notification,
    deliver_notifications,
    deliver_pending_emails,
)
from notification_engine.domain.entities import BilingualText, Notification
from notification_engine.infrastructure import database
from notification_engine.infrastructure.repositories import NotificationRepository
from notification_engine.utils import now_in_app_timezone


def _store(session, **overrides) -> Notification:
    values = {
        "id": None,
        "recipient_id": None,
        "title": BilingualText("Library open", "நூலகம் திறந்துள்ளது"),
        "message": BilingualText("Come and read", "வந்து படியுங்கள்"),
        "type": "info",
        "send_email": True,
        "start_at": now_in_app_timezone() - timedelta(minutes=5),
    }
    values.update(overrides)
    return NotificationRepository(session).create(Notification(**values))


def test_only_started_unsent_records_are_delivered(db_session, make_user, transport):
    reader = make_user(email="reader@example.com")
    due = _store(db_session, recipient_id=reader.id)
    future = _store(
        db_session,
        recipient_id=reader.id,
        start_at=now_in_app_timezone() + timedelta(days=1),
    )
    expired = _store(
        db_session,
        recipient_id=reader.id,
        start_at=now_in_app_timezone() - timedelta(days=2),
        end_at=now_in_app_timezone() - timedelta(days=1),
    )
    in_app_only = _store(db_session, recipient_id=reader.id, send_email=False)
    worker = build_delivery_worker(db_session, transport=transport)

    reports = deliver_pending_emails(db_session, worker=worker)

    assert [report.notification_id for report in reports] == [due.id]
    assert transport.recipients == ["reader@example.com"]
    repository = NotificationRepository(db_session)
    assert repository.get(due.id).email_sent_at is not None
    for untouched in (future, expired, in_app_only):
        assert repository.get(untouched.id).email_sent_at is None


def test_second_sweep_sends_nothing(db_session, make_user, transport):
    reader = make_user()
    _store(db_session, recipient_id=reader.id)
    worker = build_delivery_worker(db_session, transport=transport)

    deliver_pending_emails(db_session, worker=worker)
    second = deliver_pending_emails(db_session, worker=worker)

    assert second == []
    assert len(transport.sent) == 1


def test_broadcast_records_reach_their_audience(db_session, make_user, transport):
    make_user(role="admin", email="admin@example.com")
    make_user(email="member@example.com")
    make_user(email="quiet@example.com", email_notifications=False)
    _store(db_session, target_audience="members")
    worker = build_delivery_worker(db_session, transport=transport)

    (report,) = deliver_pending_emails(db_session, worker=worker)

    assert transport.recipients == ["member@example.com"]
    assert report.sent == 1
    assert report.skipped == 1


def test_detached_delivery_opens_its_own_session(db_session, make_user, transport):
    reader = make_user(email="reader@example.com")
    notification = _store(db_session, recipient_id=reader.id)

    deliver_notifications(
        [notification.id, 9999],
        session_factory=database.SessionLocal,
        transport=transport,
    )

    assert transport.recipients == ["reader@example.com"]
    db_session.expire_all()
    assert NotificationRepository(db_session).get(notification.id).email_sent_at is not None


def test_fan_out_emails_are_sent_in_parallel(db_session, make_user):
    for _ in range(6):
        make_user()
    lock = threading.Lock()
    state = {"active": 0, "peak": 0, "sent": 0}

    class SlowTransport:
        def send(self, to_address, subject, template_name, payload):
            with lock:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            time.sleep(0.1)
            with lock:
                state["active"] -= 1
                state["sent"] += 1
            return True

    result = create_notification(
        db_session,
        NotificationDraft(
            title=BilingualText("Reading circle", "வாசிப்பு வட்டம்"),
            message=BilingualText("Join us on Friday", "வெள்ளிக்கிழமை சேருங்கள்"),
            type="event",
            target_audience="members",
            send_email=True,
        ),
        schedule=None,
    )

    reports = deliver_notifications(
        [notification.id for notification in result.notifications], transport=SlowTransport()
    )

    assert result.created == 6
    assert state["sent"] == 6
    assert state["peak"] > 1
    assert all(report.marked_sent for report in reports)


def test_sweep_skips_a_broken_record_and_delivers_the_rest(
    db_session, make_user, transport, caplog
):
    reader = make_user(email="reader@example.com")
    broken = _store(
        db_session,
        target_audience="specific",
        start_at=now_in_app_timezone() - timedelta(hours=1),
    )
    good = _store(db_session, recipient_id=reader.id)
    worker = build_delivery_worker(db_session, transport=transport)

    with caplog.at_level(logging.ERROR):
        reports = deliver_pending_emails(db_session, worker=worker)

    assert [report.notification_id for report in reports] == [broken.id, good.id]
    assert transport.recipients == ["reader@example.com"]
    repository = NotificationRepository(db_session)
    assert repository.get(good.id).email_sent_at is not None
    assert repository.get(broken.id).email_sent_at is None
    assert f"Cannot resolve recipients for notification {broken.id}" in caplog.text
