"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class BilingualTextSchema(BaseModel):
    """English/Tamil pair; either side may be empty."""

    en: str = ""
    ta: str = ""


class NotificationCreate(BaseModel):
    """Payload accepted when an administrator creates a notification."""

    title: BilingualTextSchema
    message: BilingualTextSchema
    type: str = Field(..., description="One of the supported notification types")
    priority: str = "medium"
    target_audience: str = "all"
    recipients: list[int] = Field(
        default_factory=list, description="User identifiers for the 'specific' audience"
    )
    recipient_id: int | None = Field(
        default=None, description="Address a single user directly"
    )
    start_at: datetime | None = None
    end_at: datetime | None = None
    send_email: bool = False
    action_url: str | None = None
    action_text: BilingualTextSchema | None = None
    image_url: str | None = None
    tags: list[str] = Field(default_factory=list)
    payload: dict[str, Any] = Field(default_factory=dict)


class NotificationMarkReadRequest(BaseModel):
    """Payload used to mark a batch of notifications as read."""

    ids: list[int] = Field(..., min_length=1, description="Notification identifiers")

    def unique_ids(self) -> list[int]:
        """Return the list of identifiers without duplicates preserving order."""

        unique: list[int] = []
        seen: set[int] = set()
        for notification_id in self.ids:
            if notification_id in seen:
                continue
            seen.add(notification_id)
            unique.append(notification_id)
        return unique


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client.

    ``display_title``, ``display_message`` and ``display_action_text`` are
    resolved for the viewer's language preference.
    """

    id: int
    recipient_id: int | None = None
    title: BilingualTextSchema
    message: BilingualTextSchema
    display_title: str
    display_message: str
    type: str
    priority: str
    target_audience: str
    status: str
    start_at: datetime | None = None
    end_at: datetime | None = None
    is_read: bool = False
    read_at: datetime | None = None
    send_email: bool = False
    email_sent_at: datetime | None = None
    action_url: str | None = None
    action_text: BilingualTextSchema | None = None
    display_action_text: str | None = None
    image_url: str | None = None
    tags: list[str] = Field(default_factory=list)
    payload: dict[str, Any] = Field(default_factory=dict)
    created_by: int | None = None
    created_at: datetime | None = None


class PaginationRead(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class NotificationFeedRead(BaseModel):
    items: list[NotificationRead]
    pagination: PaginationRead
    unread_count: int


class FanOutFailureRead(BaseModel):
    recipient_id: int
    error: str


class NotificationCreateResponse(BaseModel):
    """Records created for one request.

    ``notification`` is only set when the request addressed a single user
    through ``recipient_id``.
    """

    notifications: list[NotificationRead]
    created: int
    failed: list[FanOutFailureRead] = Field(default_factory=list)
    notification: NotificationRead | None = None


class NotificationReadCountResponse(BaseModel):
    updated: int


__all__ = [
    "BilingualTextSchema",
    "FanOutFailureRead",
    "NotificationCreate",
    "NotificationCreateResponse",
    "NotificationFeedRead",
    "NotificationMarkReadRequest",
    "NotificationRead",
    "NotificationReadCountResponse",
    "PaginationRead",
]
