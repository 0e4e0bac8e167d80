"""Read-side use cases: the notification feed and read state."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.orm import Session

from notification_engine.domain.entities import (
    NOTIFICATION_TYPES,
    PRIORITIES,
    Notification,
    User,
)
from notification_engine.domain.exceptions import (
    NotificationNotFoundError,
    NotificationValidationError,
)
from notification_engine.infrastructure.repositories import (
    NotificationFilters,
    NotificationRepository,
)
from notification_engine.infrastructure.storage import delete_notification_assets

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass
class FeedPage:
    items: list[Notification]
    page: int
    limit: int
    total: int
    unread_count: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def list_feed(
    session: Session,
    viewer: User | None,
    *,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    type: str | None = None,
    priority: str | None = None,
    unread_only: bool = False,
    audit: bool = False,
) -> FeedPage:
    """Return one page of what ``viewer`` can see plus their unread count.

    ``audit`` lists every stored record regardless of window or owner and is
    reserved for administrators.
    """

    if type is not None and type not in NOTIFICATION_TYPES:
        raise NotificationValidationError(f"Unknown notification type '{type}'")
    if priority is not None and priority not in PRIORITIES:
        raise NotificationValidationError(f"Unknown priority '{priority}'")

    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)
    skip = (page - 1) * limit
    filters = NotificationFilters(type=type, priority=priority, unread_only=unread_only)
    repository = NotificationRepository(session)

    if audit:
        if viewer is None or not viewer.is_admin():
            raise PermissionError("Only administrators can audit notifications")
        items = repository.list_all(filters, skip=skip, limit=limit)
        total = repository.count_all(filters)
    else:
        items = repository.find_visible(viewer, filters, skip=skip, limit=limit)
        total = repository.count_visible(viewer, filters)

    unread = repository.count_unread(viewer) if viewer is not None else 0
    return FeedPage(
        items=list(items), page=page, limit=limit, total=total, unread_count=unread
    )


def mark_notification_read(session: Session, notification_id: int, viewer: User) -> Notification:
    """Marking an already read record again is a no-op that still succeeds."""

    notification = NotificationRepository(session).mark_read(notification_id, viewer)
    if notification is None:
        raise NotificationNotFoundError(f"Notification {notification_id} not found")
    return notification


def mark_notifications_read(
    session: Session, notification_ids: Sequence[int], viewer: User
) -> int:
    return NotificationRepository(session).mark_many_read(notification_ids, viewer)


def mark_all_notifications_read(session: Session, viewer: User) -> int:
    updated = NotificationRepository(session).mark_all_read(viewer)
    logger.info("User %s marked %s notification(s) read", viewer.id, updated)
    return updated


def delete_notification(session: Session, notification_id: int, *, deleted_by: User) -> None:
    if not deleted_by.is_admin():
        raise PermissionError("Only administrators can delete notifications")
    if not NotificationRepository(session).delete(notification_id):
        raise NotificationNotFoundError(f"Notification {notification_id} not found")
    logger.info("User %s deleted notification %s", deleted_by.id, notification_id)
    delete_notification_assets(notification_id)


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "FeedPage",
    "MAX_PAGE_SIZE",
    "delete_notification",
    "list_feed",
    "mark_all_notifications_read",
    "mark_notification_read",
    "mark_notifications_read",
]
