"""Platform activity turned into notifications."""

from __future__ import annotations

import logging

import pytest

from notification_engine.application.use_cases.notifications import events
from notification_engine.domain.exceptions import NotificationValidationError


class ScheduleRecorder:
    def __init__(self) -> None:
        self.calls: list[list[int]] = []

    def __call__(self, ids) -> None:
        self.calls.append(list(ids))


@pytest.fixture()
def recorder() -> ScheduleRecorder:
    return ScheduleRecorder()


def test_project_launch_reaches_everyone_and_asks_for_email(db_session, make_user, recorder):
    admin = make_user(role="admin")
    members = [make_user(), make_user()]

    result = events.notify_project_change(
        db_session,
        events.ACTION_CREATED,
        project_id=12,
        title={"en": "Heritage Walk", "ta": "பாரம்பரிய நடை"},
        project_type="cultural",
        image_url="/uploads/projects/12.png",
        created_by=admin.id,
        schedule=recorder,
    )

    assert result is not None
    assert {n.recipient_id for n in result.notifications} == {admin.id, *(m.id for m in members)}
    first = result.notifications[0]
    assert first.tags == ["project", "created", "cultural"]
    assert first.priority == "high"
    assert first.send_email is True
    assert first.title.ta == "புதிய திட்டம் தொடங்கப்பட்டது"
    assert '"Heritage Walk"' in first.message.en
    assert recorder.calls == [[n.id for n in result.notifications]]


def test_project_update_stays_in_app(db_session, make_user, recorder):
    make_user()

    result = events.notify_project_change(
        db_session, events.ACTION_UPDATED, project_id=3, title="Archive", schedule=recorder
    )

    assert result is not None
    assert result.notifications[0].send_email is False
    assert recorder.calls == []


def test_unknown_action_is_rejected(db_session):
    with pytest.raises(NotificationValidationError):
        events.notify_poster_change(db_session, "archived", poster_id=1, title="Poster")


def test_ebook_download_is_personal(db_session, make_user, recorder):
    reader = make_user()
    make_user()

    result = events.notify_ebook_downloaded(
        db_session, user=reader, ebook_id=5, title="Thirukkural", schedule=recorder
    )

    assert result is not None
    assert [n.recipient_id for n in result.notifications] == [reader.id]
    notification = result.notifications[0]
    assert notification.tags == ["ebook", "download"]
    assert notification.payload["book_title"] == {"en": "Thirukkural", "ta": "Thirukkural"}
    assert recorder.calls == [[notification.id]]


def test_component_changes_only_reach_members(db_session, make_user, recorder):
    make_user(role="admin")
    member = make_user()

    result = events.notify_component_change(
        db_session,
        events.ACTION_UPDATED,
        component_type="banner",
        page="home",
        schedule=recorder,
    )

    assert result is not None
    assert [n.recipient_id for n in result.notifications] == [member.id]


def test_recruitment_applications_go_to_admins(db_session, make_user, recorder):
    admin = make_user(role="admin")
    make_user()

    result = events.notify_recruitment_application(
        db_session,
        project_id=8,
        project_title="Translation Drive",
        applicant_name="Kavin",
        schedule=recorder,
    )

    assert result is not None
    assert [n.recipient_id for n in result.notifications] == [admin.id]
    assert "Kavin" in result.notifications[0].message.en
    assert result.notifications[0].send_email is True


def test_user_registration_creates_welcome_and_admin_notice(db_session, make_user, recorder):
    admin = make_user(role="admin")
    newcomer = make_user(name="Nila")

    welcome, notice = events.notify_user_registered(db_session, user=newcomer, schedule=recorder)

    assert [n.recipient_id for n in welcome.notifications] == [newcomer.id]
    assert welcome.notifications[0].send_email is True
    assert [n.recipient_id for n in notice.notifications] == [admin.id]
    assert "Nila" in notice.notifications[0].message.en
    assert notice.notifications[0].send_email is False
    assert recorder.calls == [[welcome.notifications[0].id]]


@pytest.mark.parametrize(
    ("event_type", "emails"),
    [("maintenance_scheduled", True), ("system_update", False), ("backup_completed", False)],
)
def test_system_events_email_only_when_high_priority(
    db_session, make_user, recorder, event_type, emails
):
    make_user(role="admin")

    result = events.notify_system_event(db_session, event_type, schedule=recorder)

    assert result is not None
    assert result.notifications[0].tags == ["system", event_type]
    assert result.notifications[0].send_email is emails
    assert bool(recorder.calls) is emails


def test_unknown_system_event_is_ignored(db_session, make_user, caplog):
    make_user(role="admin")

    with caplog.at_level(logging.INFO, logger=events.__name__):
        assert events.notify_system_event(db_session, "disk_full", schedule=None) is None

    assert "disk_full" in caplog.text


def test_failures_are_logged_and_swallowed(db_session, monkeypatch, caplog):
    def broken(*args, **kwargs):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(events, "create_notification", broken)

    with caplog.at_level(logging.ERROR, logger=events.__name__):
        result = events.notify_book_change(
            db_session, events.ACTION_CREATED, book_id=1, title="Silappathikaram", schedule=None
        )

    assert result is None
    assert "database unavailable" in caplog.text
