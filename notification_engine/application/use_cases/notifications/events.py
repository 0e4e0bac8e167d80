"""Helpers that turn platform activity into bilingual notifications.

Every helper builds a :class:`NotificationDraft` and hands it to
:func:`create_notification`. A failure while notifying must not break the
action that triggered it, so errors are logged and ``None`` is returned.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from notification_engine.domain.entities import (
    AUDIENCE_ADMINS,
    AUDIENCE_ALL,
    AUDIENCE_MEMBERS,
    AUDIENCE_SPECIFIC,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    BilingualText,
    FanOutResult,
    User,
)
from notification_engine.domain.exceptions import NotificationValidationError

from .dispatcher import DeliveryScheduler, NotificationDraft, create_notification
from .delivery import schedule_delivery

logger = logging.getLogger(__name__)

ACTION_CREATED = "created"
ACTION_UPDATED = "updated"
ACTION_DELETED = "deleted"
ACTIONS: tuple[str, ...] = (ACTION_CREATED, ACTION_UPDATED, ACTION_DELETED)

SYSTEM_EVENTS: dict[str, dict[str, Any]] = {
    "maintenance_scheduled": {
        "title": BilingualText("Maintenance Scheduled", "பராமரிப்பு திட்டமிடப்பட்டுள்ளது"),
        "message": BilingualText(
            "System maintenance is scheduled. Some features may be unavailable.",
            "கணினி பராமரிப்பு திட்டமிடப்பட்டுள்ளது. சில அம்சங்கள் கிடைக்காமல் போகலாம்.",
        ),
        "type": "warning",
        "priority": PRIORITY_HIGH,
    },
    "system_update": {
        "title": BilingualText("System Updated", "கணினி புதுப்பிக்கப்பட்டது"),
        "message": BilingualText(
            "The system has been updated with new features and improvements.",
            "கணினி புதிய அம்சங்கள் மற்றும் மேம்பாடுகளுடன் புதுப்பிக்கப்பட்டுள்ளது.",
        ),
        "type": "success",
        "priority": PRIORITY_MEDIUM,
    },
    "backup_completed": {
        "title": BilingualText("Backup Completed", "காப்புப்பிரதி முடிந்தது"),
        "message": BilingualText(
            "System backup has been completed successfully.",
            "கணினி காப்புப்பிரதி வெற்றிகரமாக முடிந்துள்ளது.",
        ),
        "type": "info",
        "priority": PRIORITY_LOW,
    },
}


def _text(value: Any) -> BilingualText:
    """Accept a plain string, an ``{en, ta}`` mapping or a :class:`BilingualText`."""

    if isinstance(value, BilingualText):
        return value.with_fallback()
    if isinstance(value, dict):
        return (BilingualText.from_dict(value) or BilingualText()).with_fallback()
    text = str(value or "").strip()
    return BilingualText(text, text)


def _check_action(action: str) -> None:
    if action not in ACTIONS:
        raise NotificationValidationError(f"Unknown action '{action}'")


def _emit(
    session: Session,
    draft: NotificationDraft,
    *,
    created_by: int | None,
    schedule: DeliveryScheduler | None,
) -> FanOutResult | None:
    try:
        return create_notification(
            session, draft, created_by=created_by, schedule=schedule
        )
    except Exception as exc:
        session.rollback()
        logger.exception("Error creating '%s' notification: %s", ",".join(draft.tags), exc)
        return None


def notify_project_change(
    session: Session,
    action: str,
    *,
    project_id: int | str,
    title: Any,
    project_type: str | None = None,
    image_url: str | None = None,
    status: Any = None,
    created_by: int | None = None,
    schedule: DeliveryScheduler | None = schedule_delivery,
) -> FanOutResult | None:
    _check_action(action)
    name = _text(title)
    headings = {
        ACTION_CREATED: BilingualText("New project launched", "புதிய திட்டம் தொடங்கப்பட்டது"),
        ACTION_UPDATED: BilingualText("Project updated", "திட்டம் புதுப்பிக்கப்பட்டது"),
        ACTION_DELETED: BilingualText("Project ended", "திட்டம் முடிவுற்றது"),
    }
    messages = {
        ACTION_CREATED: BilingualText(
            f'A new project "{name.en}" has been launched. Join us!',
            f'"{name.ta}" என்ற புதிய திட்டம் தொடங்கப்பட்டுள்ளது. எங்களுடன் சேருங்கள்!',
        ),
        ACTION_UPDATED: BilingualText(
            f'The project "{name.en}" has been updated.',
            f'"{name.ta}" திட்டம் புதுப்பிக்கப்பட்டுள்ளது.',
        ),
        ACTION_DELETED: BilingualText(
            f'The project "{name.en}" has ended.',
            f'"{name.ta}" திட்டம் முடிவுற்றுள்ளது.',
        ),
    }
    keep_link = action != ACTION_DELETED
    payload: dict[str, Any] = {"project_id": project_id}
    if status is not None:
        payload["status"] = status.to_dict() if isinstance(status, BilingualText) else status
    draft = NotificationDraft(
        title=headings[action],
        message=messages[action],
        type="event",
        priority=PRIORITY_HIGH if action == ACTION_CREATED else PRIORITY_MEDIUM,
        target_audience=AUDIENCE_ALL,
        action_url=f"/projects/{project_id}" if keep_link else None,
        action_text=BilingualText("View Project", "திட்டத்தைப் பார்க்க") if keep_link else None,
        image_url=image_url,
        tags=["project", action, project_type or "general"],
        payload=payload,
        send_email=action == ACTION_CREATED,
    )
    return _emit(session, draft, created_by=created_by, schedule=schedule)


def notify_ebook_change(
    session: Session,
    action: str,
    *,
    ebook_id: int | str,
    title: Any,
    category: str | None = None,
    created_by: int | None = None,
    schedule: DeliveryScheduler | None = schedule_delivery,
) -> FanOutResult | None:
    _check_action(action)
    name = _text(title)
    headings = {
        ACTION_CREATED: BilingualText("New eBook available", "புதிய மின்புத்தகம் கிடைக்கிறது"),
        ACTION_UPDATED: BilingualText("eBook updated", "மின்புத்தகம் புதுப்பிக்கப்பட்டது"),
        ACTION_DELETED: BilingualText("eBook removed", "மின்புத்தகம் நீக்கப்பட்டது"),
    }
    messages = {
        ACTION_CREATED: BilingualText(
            f'A new eBook "{name.en}" is now available for download.',
            f'"{name.ta}" என்ற புதிய மின்புத்தகம் இப்போது பதிவிறக்கத்திற்கு கிடைக்கிறது.',
        ),
        ACTION_UPDATED: BilingualText(
            f'The eBook "{name.en}" has been updated.',
            f'"{name.ta}" மின்புத்தகம் புதுப்பிக்கப்பட்டுள்ளது.',
        ),
        ACTION_DELETED: BilingualText(
            f'The eBook "{name.en}" is no longer available.',
            f'"{name.ta}" மின்புத்தகம் இனி கிடைக்காது.',
        ),
    }
    keep_link = action != ACTION_DELETED
    draft = NotificationDraft(
        title=headings[action],
        message=messages[action],
        type="event",
        priority=PRIORITY_MEDIUM if action == ACTION_CREATED else PRIORITY_LOW,
        target_audience=AUDIENCE_ALL,
        action_url=f"/ebooks/{ebook_id}" if keep_link else None,
        action_text=BilingualText("Download", "பதிவிறக்கம்") if keep_link else None,
        tags=["ebook", action, category or "general"],
        payload={"ebook_id": ebook_id},
        send_email=action == ACTION_CREATED,
    )
    return _emit(session, draft, created_by=created_by, schedule=schedule)


def notify_ebook_downloaded(
    session: Session,
    *,
    user: User,
    ebook_id: int | str,
    title: Any,
    schedule: DeliveryScheduler | None = schedule_delivery,
) -> FanOutResult | None:
    """Personal confirmation sent to the user who downloaded the ebook."""

    name = _text(title)
    draft = NotificationDraft(
        title=BilingualText(
            "Ebook Downloaded Successfully!", "மின்புத்தகம் வெற்றிகரமாக பதிவிறக்கப்பட்டது!"
        ),
        message=BilingualText(
            f'You downloaded "{name.en}". Happy reading!',
            f'நீங்கள் "{name.ta}" ஐ பதிவிறக்கம் செய்தீர்கள். மகிழ்ச்சியான வாசிப்பு!',
        ),
        type="success",
        priority=PRIORITY_LOW,
        target_audience=AUDIENCE_SPECIFIC,
        recipient_id=user.id,
        action_url=f"/ebooks/{ebook_id}",
        action_text=BilingualText("Read Again", "மீண்டும் படிக்க"),
        tags=["ebook", "download"],
        payload={"ebook_id": ebook_id, "book_title": name.to_dict()},
        send_email=True,
    )
    return _emit(session, draft, created_by=user.id, schedule=schedule)


def notify_poster_change(
    session: Session,
    action: str,
    *,
    poster_id: int | str,
    title: Any,
    category: str | None = None,
    image_url: str | None = None,
    created_by: int | None = None,
    schedule: DeliveryScheduler | None = schedule_delivery,
) -> FanOutResult | None:
    _check_action(action)
    name = _text(title)
    headings = {
        ACTION_CREATED: BilingualText("New poster added", "புதிய சுவரொட்டி சேர்க்கப்பட்டது"),
        ACTION_UPDATED: BilingualText("Poster updated", "சுவரொட்டி புதுப்பிக்கப்பட்டது"),
        ACTION_DELETED: BilingualText("Poster removed", "சுவரொட்டி நீக்கப்பட்டது"),
    }
    messages = {
        ACTION_CREATED: BilingualText(
            f'A new poster "{name.en}" has been added to our gallery.',
            f'எங்கள் காட்சியகத்தில் "{name.ta}" என்ற புதிய சுவரொட்டி சேர்க்கப்பட்டுள்ளது.',
        ),
        ACTION_UPDATED: BilingualText(
            f'The poster "{name.en}" has been updated.',
            f'"{name.ta}" சுவரொட்டி புதுப்பிக்கப்பட்டுள்ளது.',
        ),
        ACTION_DELETED: BilingualText(
            f'The poster "{name.en}" has been removed.',
            f'"{name.ta}" சுவரொட்டி நீக்கப்பட்டுள்ளது.',
        ),
    }
    keep_link = action != ACTION_DELETED
    draft = NotificationDraft(
        title=headings[action],
        message=messages[action],
        type="event",
        priority=PRIORITY_LOW,
        target_audience=AUDIENCE_ALL,
        action_url=f"/posters/{poster_id}" if keep_link else None,
        action_text=BilingualText("View Poster", "சுவரொட்டியைப் பார்க்க") if keep_link else None,
        image_url=image_url if keep_link else None,
        tags=["poster", action, category or "general"],
        payload={"poster_id": poster_id},
        send_email=False,
    )
    return _emit(session, draft, created_by=created_by, schedule=schedule)


def notify_team_change(
    session: Session,
    action: str,
    *,
    name: str,
    position: Any,
    image_url: str | None = None,
    created_by: int | None = None,
    send_email: bool = False,
    schedule: DeliveryScheduler | None = schedule_delivery,
) -> FanOutResult | None:
    """Team announcements carry ``name`` and ``position`` in the payload."""

    _check_action(action)
    role = _text(position)
    headings = {
        ACTION_CREATED: BilingualText("New Team Member", "புதிய குழு உறுப்பினர்"),
        ACTION_UPDATED: BilingualText(
            "Team Member Updated", "குழு உறுப்பினர் புதுப்பிக்கப்பட்டார்"
        ),
        ACTION_DELETED: BilingualText("Team Member Removed", "குழு உறுப்பினர் நீக்கப்பட்டார்"),
    }
    messages = {
        ACTION_CREATED: BilingualText(
            f"We are happy to welcome {name} to our team as {role.en}.",
            f"{name} ஐ {role.ta} ஆக எங்கள் குழுவில் வரவேற்பதில் மகிழ்ச்சி அடைகிறோம்.",
        ),
        ACTION_UPDATED: BilingualText(
            f"Details for team member {name} have been updated.",
            f"குழு உறுப்பினர் {name} இன் விவரங்கள் புதுப்பிக்கப்பட்டுள்ளன.",
        ),
        ACTION_DELETED: BilingualText(
            f"Team member {name} has been removed.",
            f"குழு உறுப்பினர் {name} நீக்கப்பட்டார்.",
        ),
    }
    draft = NotificationDraft(
        title=headings[action],
        message=messages[action],
        type="news",
        priority=PRIORITY_MEDIUM if action == ACTION_CREATED else PRIORITY_LOW,
        target_audience=AUDIENCE_ALL,
        action_url="/about",
        action_text=BilingualText("View Team", "குழுவைப் பார்க்க"),
        image_url=image_url,
        tags=["team", action],
        payload={"name": name, "position": role.to_dict()},
        send_email=send_email,
    )
    return _emit(session, draft, created_by=created_by, schedule=schedule)


def notify_book_change(
    session: Session,
    action: str,
    *,
    book_id: int | str,
    title: Any,
    category: str | None = None,
    created_by: int | None = None,
    schedule: DeliveryScheduler | None = schedule_delivery,
) -> FanOutResult | None:
    _check_action(action)
    name = _text(title)
    headings = {
        ACTION_CREATED: BilingualText("New book added", "புதிய புத்தகம் சேர்க்கப்பட்டது"),
        ACTION_UPDATED: BilingualText("Book updated", "புத்தகம் புதுப்பிக்கப்பட்டது"),
        ACTION_DELETED: BilingualText("Book removed", "புத்தகம் நீக்கப்பட்டது"),
    }
    messages = {
        ACTION_CREATED: BilingualText(
            f'A new book "{name.en}" has been added to our collection.',
            f'எங்கள் தொகுப்பில் "{name.ta}" என்ற புதிய புத்தகம் சேர்க்கப்பட்டுள்ளது.',
        ),
        ACTION_UPDATED: BilingualText(
            f'The book "{name.en}" has been updated.',
            f'"{name.ta}" புத்தகம் புதுப்பிக்கப்பட்டுள்ளது.',
        ),
        ACTION_DELETED: BilingualText(
            f'The book "{name.en}" has been removed from our collection.',
            f'"{name.ta}" புத்தகம் எங்கள் தொகுப்பிலிருந்து நீக்கப்பட்டுள்ளது.',
        ),
    }
    keep_link = action != ACTION_DELETED
    draft = NotificationDraft(
        title=headings[action],
        message=messages[action],
        type="event",
        priority=PRIORITY_MEDIUM if action == ACTION_CREATED else PRIORITY_LOW,
        target_audience=AUDIENCE_ALL,
        action_url=f"/books/{book_id}" if keep_link else None,
        action_text=BilingualText("View Book", "புத்தகத்தைப் பார்க்க") if keep_link else None,
        tags=["book", action, category or "general"],
        payload={"book_id": book_id},
        send_email=False,
    )
    return _emit(session, draft, created_by=created_by, schedule=schedule)


def notify_component_change(
    session: Session,
    action: str,
    *,
    component_type: str,
    page: str | None = None,
    created_by: int | None = None,
    schedule: DeliveryScheduler | None = schedule_delivery,
) -> FanOutResult | None:
    _check_action(action)
    headings = {
        ACTION_CREATED: BilingualText("New content added", "புதிய உள்ளடக்கம் சேர்க்கப்பட்டது"),
        ACTION_UPDATED: BilingualText("Content updated", "உள்ளடக்கம் புதுப்பிக்கப்பட்டது"),
        ACTION_DELETED: BilingualText("Content removed", "உள்ளடக்கம் நீக்கப்பட்டது"),
    }
    messages = {
        ACTION_CREATED: BilingualText(
            f"New {component_type} content has been added to the website.",
            f"வலைத்தளத்தில் புதிய {component_type} உள்ளடக்கம் சேர்க்கப்பட்டுள்ளது.",
        ),
        ACTION_UPDATED: BilingualText(
            f"{component_type} content has been updated.",
            f"{component_type} உள்ளடக்கம் புதுப்பிக்கப்பட்டுள்ளது.",
        ),
        ACTION_DELETED: BilingualText(
            f"{component_type} content has been removed.",
            f"{component_type} உள்ளடக்கம் நீக்கப்பட்டுள்ளது.",
        ),
    }
    draft = NotificationDraft(
        title=headings[action],
        message=messages[action],
        type="event",
        priority=PRIORITY_LOW,
        target_audience=AUDIENCE_MEMBERS,
        action_url=f"/{page}" if page else None,
        action_text=BilingualText("View Changes", "மாற்றங்களைப் பார்க்க"),
        tags=["component", action, component_type, page or "general"],
        payload={"component_type": component_type, "page": page},
        send_email=False,
    )
    return _emit(session, draft, created_by=created_by, schedule=schedule)


def notify_recruitment_application(
    session: Session,
    *,
    project_id: int | str,
    project_title: Any,
    applicant_name: str,
    project_type: str | None = None,
    created_by: int | None = None,
    schedule: DeliveryScheduler | None = schedule_delivery,
) -> FanOutResult | None:
    name = _text(project_title)
    draft = NotificationDraft(
        title=BilingualText("New Recruitment Application", "புதிய ஆட்சேர்ப்பு விண்ணப்பம்"),
        message=BilingualText(
            f'A new application has been submitted for "{name.en}" by {applicant_name}.',
            f'"{name.ta}" க்கு {applicant_name} என்பவரால் புதிய விண்ணப்பம் சமர்ப்பிக்கப்பட்டுள்ளது.',
        ),
        type="event",
        priority=PRIORITY_HIGH,
        target_audience=AUDIENCE_ADMINS,
        action_url=f"/projects/{project_id}",
        action_text=BilingualText("View Applications", "விண்ணப்பங்களைப் பார்க்க"),
        tags=["recruitment", "application", "project", project_type or "general"],
        payload={"project_id": project_id, "applicant_name": applicant_name},
        send_email=True,
    )
    return _emit(session, draft, created_by=created_by, schedule=schedule)


def notify_user_registered(
    session: Session,
    *,
    user: User,
    schedule: DeliveryScheduler | None = schedule_delivery,
) -> tuple[FanOutResult | None, FanOutResult | None]:
    """Welcome the new user personally and tell the admins who joined."""

    welcome = NotificationDraft(
        title=BilingualText(
            "Welcome to Tamil Language Society!",
            "தமிழ் மொழி சங்கத்திற்கு வரவேற்கிறோம்!",
        ),
        message=BilingualText(
            "Thank you for joining our community. Explore our digital library and "
            "participate in our cultural activities.",
            "எங்கள் சமூகத்தில் சேர்ந்ததற்கு நன்றி. எங்கள் டிஜிட்டல் நூலகத்தை ஆராய்ந்து, "
            "எங்கள் கலாச்சார நடவடிக்கைகளில் பங்கேற்கவும்.",
        ),
        type="success",
        priority=PRIORITY_MEDIUM,
        target_audience=AUDIENCE_SPECIFIC,
        recipient_id=user.id,
        action_url="/dashboard",
        action_text=BilingualText("Explore Dashboard", "டாஷ்போர்டை ஆராயுங்கள்"),
        tags=["welcome", "registration"],
        send_email=True,
    )
    admin_notice = NotificationDraft(
        title=BilingualText("New Member Joined", "புதிய உறுப்பினர் சேர்ந்துள்ளார்"),
        message=BilingualText(
            f"{user.name} has joined the Tamil Language Society.",
            f"{user.name} தமிழ் மொழி சங்கத்தில் சேர்ந்துள்ளார்.",
        ),
        type="info",
        priority=PRIORITY_LOW,
        target_audience=AUDIENCE_ADMINS,
        action_url=f"/admin/users/{user.id}",
        action_text=BilingualText("View Profile", "சுயவிவரத்தைப் பார்க்க"),
        tags=["user", "registration", "admin"],
        payload={"user_id": user.id},
        send_email=False,
    )
    return (
        _emit(session, welcome, created_by=user.id, schedule=schedule),
        _emit(session, admin_notice, created_by=user.id, schedule=schedule),
    )


def notify_system_event(
    session: Session,
    event_type: str,
    *,
    created_by: int | None = None,
    schedule: DeliveryScheduler | None = schedule_delivery,
) -> FanOutResult | None:
    """Unknown event types are ignored."""

    config = SYSTEM_EVENTS.get(event_type)
    if config is None:
        logger.info("Ignoring unknown system event '%s'", event_type)
        return None
    draft = NotificationDraft(
        title=config["title"],
        message=config["message"],
        type=config["type"],
        priority=config["priority"],
        target_audience=AUDIENCE_ADMINS,
        tags=["system", event_type],
        send_email=config["priority"] == PRIORITY_HIGH,
    )
    return _emit(session, draft, created_by=created_by, schedule=schedule)


__all__ = [
    "ACTIONS",
    "ACTION_CREATED",
    "ACTION_DELETED",
    "ACTION_UPDATED",
    "SYSTEM_EVENTS",
    "notify_book_change",
    "notify_component_change",
    "notify_ebook_change",
    "notify_ebook_downloaded",
    "notify_poster_change",
    "notify_project_change",
    "notify_recruitment_application",
    "notify_system_event",
    "notify_team_change",
    "notify_user_registered",
]
