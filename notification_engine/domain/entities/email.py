"""Email rendering request produced for one notification recipient."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

TEMPLATE_NOTIFICATION = "notification"
TEMPLATE_PROJECT_ALERT = "project_alert"
TEMPLATE_EBOOK_DOWNLOAD = "ebook_download"
TEMPLATE_TEAM_ALERT = "team_alert"
TEMPLATE_POSTER_ALERT = "poster_alert"

EMAIL_TEMPLATES: tuple[str, ...] = (
    TEMPLATE_NOTIFICATION,
    TEMPLATE_PROJECT_ALERT,
    TEMPLATE_EBOOK_DOWNLOAD,
    TEMPLATE_TEAM_ALERT,
    TEMPLATE_POSTER_ALERT,
)


@dataclass(frozen=True)
class EmailMessage:
    """Template name, subject and data handed to the mail transport."""

    template: str
    subject: str
    payload: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "EMAIL_TEMPLATES",
    "EmailMessage",
    "TEMPLATE_EBOOK_DOWNLOAD",
    "TEMPLATE_NOTIFICATION",
    "TEMPLATE_POSTER_ALERT",
    "TEMPLATE_PROJECT_ALERT",
    "TEMPLATE_TEAM_ALERT",
]
