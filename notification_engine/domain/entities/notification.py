"""Domain entity representing a notification addressed to one recipient."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

NOTIFICATION_TYPES: tuple[str, ...] = (
    "info",
    "warning",
    "success",
    "error",
    "announcement",
    "event",
    "news",
    "update",
    "urgent",
    "general",
)

PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"
PRIORITY_URGENT = "urgent"
PRIORITIES: tuple[str, ...] = (
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    PRIORITY_HIGH,
    PRIORITY_URGENT,
)
PRIORITY_RANK: dict[str, int] = {name: rank for rank, name in enumerate(PRIORITIES)}

AUDIENCE_ALL = "all"
AUDIENCE_MEMBERS = "members"
AUDIENCE_ADMINS = "admins"
AUDIENCE_SPECIFIC = "specific"
AUDIENCES: tuple[str, ...] = (
    AUDIENCE_ALL,
    AUDIENCE_MEMBERS,
    AUDIENCE_ADMINS,
    AUDIENCE_SPECIFIC,
)
# Broadcast documents (no recipient) with these audiences match any signed-in viewer.
BROADCAST_MEMBER_AUDIENCES: tuple[str, ...] = (AUDIENCE_ALL, AUDIENCE_MEMBERS)

STATUS_SCHEDULED = "scheduled"
STATUS_ACTIVE = "active"
STATUS_EXPIRED = "expired"

LANGUAGE_EN = "en"
LANGUAGE_TA = "ta"
LANGUAGE_BOTH = "both"
LANGUAGES: tuple[str, ...] = (LANGUAGE_EN, LANGUAGE_TA, LANGUAGE_BOTH)


@dataclass(frozen=True)
class BilingualText:
    """English/Tamil value pair where either side may stand in for the other."""

    en: str = ""
    ta: str = ""

    @classmethod
    def from_dict(cls, value: dict[str, Any] | None) -> "BilingualText | None":
        if not value:
            return None
        return cls(
            en=str(value.get("en") or "").strip(),
            ta=str(value.get("ta") or "").strip(),
        )

    def to_dict(self) -> dict[str, str]:
        return {"en": self.en, "ta": self.ta}

    def is_blank(self) -> bool:
        return not (self.en or self.ta)

    def with_fallback(self) -> "BilingualText":
        """Return a copy where an empty language is filled from the other one."""

        return BilingualText(en=self.en or self.ta, ta=self.ta or self.en)

    def resolve(self, language: str | None) -> str:
        """Return the text for ``language``, preferring English for ``both``.

        Falls back to English when the requested language is empty, and to
        Tamil when English is empty too.
        """

        if language == LANGUAGE_TA and self.ta:
            return self.ta
        return self.en or self.ta


@dataclass
class Notification:
    """Notification materialized for a single recipient (or a legacy broadcast)."""

    id: int | None
    recipient_id: int | None
    title: BilingualText
    message: BilingualText
    type: str
    priority: str = PRIORITY_MEDIUM
    target_audience: str = AUDIENCE_ALL
    start_at: datetime | None = None
    end_at: datetime | None = None
    is_read: bool = False
    read_at: datetime | None = None
    send_email: bool = False
    email_sent_at: datetime | None = None
    action_url: str | None = None
    action_text: BilingualText | None = None
    image_url: str | None = None
    tags: list[str] = field(default_factory=list)
    payload: dict[str, Any] = field(default_factory=dict)
    created_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def status(self, now: datetime) -> str:
        if self.end_at is not None and self.end_at <= now:
            return STATUS_EXPIRED
        if self.start_at is not None and now < self.start_at:
            return STATUS_SCHEDULED
        return STATUS_ACTIVE

    def is_visible(self, now: datetime) -> bool:
        return self.status(now) == STATUS_ACTIVE

    def is_broadcast(self) -> bool:
        return self.recipient_id is None

    def should_send_email(self, now: datetime) -> bool:
        return self.send_email and self.email_sent_at is None and self.is_visible(now)

    def has_tags(self, *names: str) -> bool:
        return all(name in self.tags for name in names)


__all__ = [
    "AUDIENCES",
    "AUDIENCE_ADMINS",
    "AUDIENCE_ALL",
    "AUDIENCE_MEMBERS",
    "AUDIENCE_SPECIFIC",
    "BROADCAST_MEMBER_AUDIENCES",
    "BilingualText",
    "LANGUAGES",
    "LANGUAGE_BOTH",
    "LANGUAGE_EN",
    "LANGUAGE_TA",
    "NOTIFICATION_TYPES",
    "Notification",
    "PRIORITIES",
    "PRIORITY_HIGH",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "PRIORITY_RANK",
    "PRIORITY_URGENT",
    "STATUS_ACTIVE",
    "STATUS_EXPIRED",
    "STATUS_SCHEDULED",
]
