"""Use cases for creating, delivering and reading notifications."""

from .delivery import (
    DeliveryWorker,
    build_delivery_worker,
    deliver_notifications,
    deliver_pending_emails,
    schedule_delivery,
    shutdown_delivery_executor,
)
from .dispatcher import NotificationDraft, create_notification, normalize_tags, validate_draft
from .events import (
    notify_book_change,
    notify_component_change,
    notify_ebook_change,
    notify_ebook_downloaded,
    notify_poster_change,
    notify_project_change,
    notify_recruitment_application,
    notify_system_event,
    notify_team_change,
    notify_user_registered,
)
from .feed import (
    FeedPage,
    delete_notification,
    list_feed,
    mark_all_notifications_read,
    mark_notification_read,
    mark_notifications_read,
)
from .recipients import resolve_recipients
from .templates import build_email, select_template

__all__ = [
    "DeliveryWorker",
    "FeedPage",
    "NotificationDraft",
    "build_delivery_worker",
    "build_email",
    "create_notification",
    "delete_notification",
    "deliver_notifications",
    "deliver_pending_emails",
    "list_feed",
    "mark_all_notifications_read",
    "mark_notification_read",
    "mark_notifications_read",
    "normalize_tags",
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
    "resolve_recipients",
    "schedule_delivery",
    "select_template",
    "shutdown_delivery_executor",
    "validate_draft",
]
