"""Email delivery against in-memory collaborators."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from conftest import InMemoryDirectory, RecordingMarker, RecordingTransport, domain_user
from notification_engine.application.use_cases.notifications import DeliveryWorker
from notification_engine.domain.entities import BilingualText, Notification

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _notification(**overrides) -> Notification:
    values = {
        "id": 10,
        "recipient_id": None,
        "title": BilingualText("Title", "தலைப்பு"),
        "message": BilingualText("Message", "செய்தி"),
        "type": "info",
        "target_audience": "all",
        "start_at": NOW - timedelta(minutes=5),
        "send_email": True,
    }
    values.update(overrides)
    return Notification(**values)


def _worker(directory, transport, marker=None, **kwargs) -> DeliveryWorker:
    return DeliveryWorker(
        directory=directory,
        transport=transport,
        marker=marker or RecordingMarker(),
        clock=lambda: NOW,
        **kwargs,
    )


def test_recipient_bound_record_only_emails_its_recipient():
    directory = InMemoryDirectory([domain_user(1), domain_user(2), domain_user(3)])
    transport = RecordingTransport()
    marker = RecordingMarker()

    report = _worker(directory, transport, marker).deliver(_notification(recipient_id=2))

    assert transport.recipients == ["user2@example.com"]
    assert report.sent == 1
    assert report.marked_sent is True
    assert marker.marked == [10]


def test_broadcast_record_resolves_its_audience():
    directory = InMemoryDirectory(
        [domain_user(1, role="admin"), domain_user(2), domain_user(3)]
    )
    transport = RecordingTransport()

    _worker(directory, transport).deliver(
        _notification(target_audience="members")
    )

    assert sorted(transport.recipients) == ["user2@example.com", "user3@example.com"]


def test_opted_out_and_addressless_users_are_skipped():
    directory = InMemoryDirectory(
        [
            domain_user(1, email_notifications=False),
            domain_user(2, email=""),
            domain_user(3),
        ]
    )
    transport = RecordingTransport()

    report = _worker(directory, transport).deliver(_notification())

    assert transport.recipients == ["user3@example.com"]
    assert (report.sent, report.skipped, report.failed) == (1, 2, 0)
    reasons = {outcome.user_id: outcome.reason for outcome in report.outcomes}
    assert reasons[1] == "opted_out"
    assert reasons[2] == "no_address"


def test_one_failing_recipient_does_not_stop_the_others(caplog):
    directory = InMemoryDirectory([domain_user(1), domain_user(2), domain_user(3)])
    transport = RecordingTransport(fail_for={"user2@example.com"})
    marker = RecordingMarker()

    with caplog.at_level("ERROR"):
        report = _worker(directory, transport, marker).deliver(_notification())

    assert sorted(transport.recipients) == ["user1@example.com", "user3@example.com"]
    assert report.failed == 1
    assert "mailbox user2@example.com unavailable" in caplog.text
    assert marker.marked == [10]


def test_rejected_messages_count_as_failures():
    directory = InMemoryDirectory([domain_user(1)])

    report = _worker(directory, RecordingTransport(accept=False)).deliver(_notification())

    assert report.failed == 1
    assert report.sent == 0


def test_already_sent_record_is_not_emailed_again():
    directory = InMemoryDirectory([domain_user(1)])
    transport = RecordingTransport()
    marker = RecordingMarker()

    report = _worker(directory, transport, marker).deliver(
        _notification(email_sent_at=NOW - timedelta(minutes=1))
    )

    assert report.already_sent is True
    assert transport.sent == []
    assert marker.marked == []


def test_scheduled_record_is_deferred():
    directory = InMemoryDirectory([domain_user(1)])
    transport = RecordingTransport()
    marker = RecordingMarker()

    report = _worker(directory, transport, marker).deliver(
        _notification(start_at=NOW + timedelta(hours=1))
    )

    assert report.deferred is True
    assert transport.sent == []
    assert marker.marked == []


def test_expired_record_is_not_emailed():
    directory = InMemoryDirectory([domain_user(1)])
    transport = RecordingTransport()

    report = _worker(directory, transport).deliver(
        _notification(end_at=NOW - timedelta(minutes=1))
    )

    assert report.deferred is False
    assert transport.sent == []


def test_records_without_email_request_are_ignored():
    transport = RecordingTransport()

    report = _worker(InMemoryDirectory([domain_user(1)]), transport).deliver(
        _notification(send_email=False)
    )

    assert report.outcomes == []
    assert transport.sent == []


def test_each_recipient_gets_their_own_language():
    directory = InMemoryDirectory([domain_user(1, language="ta"), domain_user(2, language="en")])
    transport = RecordingTransport()

    _worker(directory, transport).deliver(_notification())

    subjects = {message.to: message.subject for message in transport.sent}
    assert subjects == {"user1@example.com": "தலைப்பு", "user2@example.com": "Title"}


def test_sends_are_bounded_by_max_workers():
    directory = InMemoryDirectory([domain_user(index) for index in range(1, 9)])
    lock = threading.Lock()
    state = {"active": 0, "peak": 0}

    class SlowTransport:
        def send(self, to_address, subject, template_name, payload):
            with lock:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            time.sleep(0.02)
            with lock:
                state["active"] -= 1
            return True

    report = _worker(directory, SlowTransport(), max_workers=3).deliver(_notification())

    assert report.sent == 8
    assert 1 < state["peak"] <= 3


def test_hung_send_is_reported_as_timed_out():
    release = threading.Event()
    directory = InMemoryDirectory([domain_user(1), domain_user(2)])

    class HangingTransport:
        def send(self, to_address, subject, template_name, payload):
            if to_address == "user2@example.com":
                release.wait(5)
            return True

    try:
        report = _worker(
            directory, HangingTransport(), max_workers=2, send_timeout=0.05
        ).deliver(_notification())
    finally:
        release.set()

    statuses = {outcome.user_id: outcome.status for outcome in report.outcomes}
    assert statuses == {1: "sent", 2: "failed"}
    assert report.marked_sent is True


@pytest.mark.parametrize("max_workers", [0, 1])
def test_single_worker_sends_in_order(max_workers):
    directory = InMemoryDirectory([domain_user(1), domain_user(2)])
    transport = RecordingTransport()

    report = _worker(directory, transport, max_workers=max_workers).deliver(_notification())

    assert transport.recipients == ["user1@example.com", "user2@example.com"]
    assert report.sent == 2


def test_hung_send_to_a_single_recipient_is_cut_off():
    release = threading.Event()
    directory = InMemoryDirectory([domain_user(1)])
    marker = RecordingMarker()

    class HangingTransport:
        def send(self, to_address, subject, template_name, payload):
            release.wait(5)
            return True

    started = time.monotonic()
    try:
        report = _worker(
            directory, HangingTransport(), marker, max_workers=4, send_timeout=0.05
        ).deliver(_notification(recipient_id=1))
    finally:
        release.set()

    assert time.monotonic() - started < 1.0
    assert [(outcome.user_id, outcome.reason) for outcome in report.outcomes] == [
        (1, "timed out")
    ]
    assert marker.marked == [10]


def test_recipient_bound_records_share_one_pool():
    directory = InMemoryDirectory([domain_user(index) for index in range(1, 7)])
    marker = RecordingMarker()
    lock = threading.Lock()
    state = {"active": 0, "peak": 0}

    class SlowTransport:
        def send(self, to_address, subject, template_name, payload):
            with lock:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            time.sleep(0.05)
            with lock:
                state["active"] -= 1
            return True

    records = [
        _notification(id=100 + index, recipient_id=index, target_audience="members")
        for index in range(1, 7)
    ]
    reports = _worker(directory, SlowTransport(), marker, max_workers=3).deliver_many(records)

    assert [report.sent for report in reports] == [1] * 6
    assert 1 < state["peak"] <= 3
    assert sorted(marker.marked) == [101, 102, 103, 104, 105, 106]


def test_unresolvable_record_does_not_stop_the_batch(caplog):
    directory = InMemoryDirectory([domain_user(1)])
    transport = RecordingTransport()
    marker = RecordingMarker()
    broken = _notification(id=1, recipient_id=None, target_audience="specific")
    good = _notification(id=2, recipient_id=1)

    with caplog.at_level(logging.ERROR):
        reports = _worker(directory, transport, marker).deliver_many([broken, good])

    assert [report.notification_id for report in reports] == [1, 2]
    assert reports[0].outcomes == [] and reports[0].marked_sent is False
    assert transport.recipients == ["user1@example.com"]
    assert marker.marked == [2]
    assert "Cannot resolve recipients for notification 1" in caplog.text
