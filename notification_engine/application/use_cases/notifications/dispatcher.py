"""Create notifications and fan them out to one record per recipient."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from notification_engine.config import get_settings
from notification_engine.domain.entities import (
    AUDIENCE_ALL,
    AUDIENCE_SPECIFIC,
    AUDIENCES,
    NOTIFICATION_TYPES,
    PRIORITIES,
    PRIORITY_MEDIUM,
    BilingualText,
    FanOutFailure,
    FanOutResult,
    Notification,
)
from notification_engine.domain.exceptions import NotificationValidationError
from notification_engine.domain.ports import UserDirectory
from notification_engine.infrastructure.repositories import (
    NotificationRepository,
    UserRepository,
)
from notification_engine.utils import bounded_map, now_in_app_timezone, to_app_time

from .delivery import schedule_delivery
from .recipients import resolve_recipients

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200
MESSAGE_MAX_LENGTH = 1000
ACTION_TEXT_MAX_LENGTH = 50

DeliveryScheduler = Callable[[Sequence[int]], None]


@dataclass
class NotificationDraft:
    """Everything needed to create the records for one logical event.

    ``recipient_id`` addresses a single user directly and skips audience
    resolution; ``recipients`` lists the users of a ``specific`` audience.
    """

    title: BilingualText
    message: BilingualText
    type: str
    priority: str = PRIORITY_MEDIUM
    target_audience: str = AUDIENCE_ALL
    recipients: list[int] = field(default_factory=list)
    recipient_id: int | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    send_email: bool = False
    action_url: str | None = None
    action_text: BilingualText | None = None
    image_url: str | None = None
    tags: list[str] = field(default_factory=list)
    payload: dict[str, Any] = field(default_factory=dict)


def normalize_tags(tags: Sequence[str] | None) -> list[str]:
    normalized: list[str] = []
    for tag in tags or []:
        value = str(tag).strip().lower()
        if value and value not in normalized:
            normalized.append(value)
    return normalized


def _check_text(label: str, value: BilingualText | None, limit: int, *, required: bool) -> None:
    if value is None or value.is_blank():
        if required:
            raise NotificationValidationError(f"{label} is required in English or Tamil")
        return
    if len(value.en) > limit or len(value.ta) > limit:
        raise NotificationValidationError(f"{label} cannot exceed {limit} characters")


def validate_draft(draft: NotificationDraft) -> None:
    """Raise :class:`NotificationValidationError` when ``draft`` cannot be stored."""

    _check_text("Title", draft.title, TITLE_MAX_LENGTH, required=True)
    _check_text("Message", draft.message, MESSAGE_MAX_LENGTH, required=True)
    _check_text("Action text", draft.action_text, ACTION_TEXT_MAX_LENGTH, required=False)

    if draft.type not in NOTIFICATION_TYPES:
        raise NotificationValidationError(f"Unknown notification type '{draft.type}'")
    if draft.priority not in PRIORITIES:
        raise NotificationValidationError(f"Unknown priority '{draft.priority}'")
    if draft.target_audience not in AUDIENCES:
        raise NotificationValidationError(
            f"Unknown target audience '{draft.target_audience}'"
        )
    if (
        draft.target_audience == AUDIENCE_SPECIFIC
        and not draft.recipients
        and draft.recipient_id is None
    ):
        raise NotificationValidationError("Recipients list is required for specific audience")

    start_at = to_app_time(draft.start_at) or now_in_app_timezone()
    end_at = to_app_time(draft.end_at)
    if end_at is not None and end_at <= start_at:
        raise NotificationValidationError("End date must be after start date")


def create_notification(
    session: Session,
    draft: NotificationDraft,
    *,
    created_by: int | None = None,
    directory: UserDirectory | None = None,
    schedule: DeliveryScheduler | None = schedule_delivery,
    max_workers: int | None = None,
) -> FanOutResult:
    """Persist one record per resolved recipient and queue their emails.

    Records are inserted concurrently, each through a short-lived session of
    its own, so one failed insert only costs that recipient its record. An
    audience that resolves to nobody produces an empty result.
    """

    validate_draft(draft)
    recipient_ids = _recipient_ids(session, draft, directory)
    prototype = _prototype(draft, created_by=created_by)

    workers = max_workers or get_settings().notification_fanout_workers
    bind = session.get_bind()

    def _insert(recipient_id: int) -> Notification:
        worker_session = Session(bind=bind, autoflush=False)
        try:
            return NotificationRepository(worker_session).create(
                replace(prototype, recipient_id=recipient_id, tags=list(prototype.tags))
            )
        except Exception:
            worker_session.rollback()
            raise
        finally:
            worker_session.close()

    result = FanOutResult()
    for task in bounded_map(_insert, recipient_ids, max_workers=workers):
        if task.ok and task.value is not None:
            result.notifications.append(task.value)
            continue
        error = "timed out" if task.timed_out else str(task.error)
        logger.error("Failed to create notification for user %s: %s", task.item, error)
        result.failures.append(FanOutFailure(recipient_id=task.item, error=error))

    logger.info(
        "Created %s notification(s) for audience '%s' (%s failed)",
        result.created,
        draft.target_audience,
        len(result.failures),
    )

    if draft.send_email and schedule is not None and result.notifications:
        schedule([notification.id for notification in result.notifications])
    return result


def _recipient_ids(
    session: Session,
    draft: NotificationDraft,
    directory: UserDirectory | None,
) -> list[int]:
    if draft.recipient_id is not None and not draft.recipients:
        return [draft.recipient_id]
    directory = directory or UserRepository(session)
    users = resolve_recipients(directory, draft.target_audience, draft.recipients)
    return [user.id for user in users if user.id is not None]


def _prototype(draft: NotificationDraft, *, created_by: int | None) -> Notification:
    now = now_in_app_timezone()
    return Notification(
        id=None,
        recipient_id=None,
        title=draft.title,
        message=draft.message,
        type=draft.type,
        priority=draft.priority,
        target_audience=draft.target_audience,
        start_at=to_app_time(draft.start_at) or now,
        end_at=to_app_time(draft.end_at),
        send_email=draft.send_email,
        action_url=draft.action_url,
        action_text=draft.action_text,
        image_url=draft.image_url,
        tags=normalize_tags(draft.tags),
        payload=dict(draft.payload),
        created_by=created_by,
        created_at=now,
    )


__all__ = [
    "ACTION_TEXT_MAX_LENGTH",
    "MESSAGE_MAX_LENGTH",
    "NotificationDraft",
    "TITLE_MAX_LENGTH",
    "create_notification",
    "normalize_tags",
    "validate_draft",
]
