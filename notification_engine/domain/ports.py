"""Capabilities the notification engine consumes from its collaborators."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from .entities import User


class UserDirectory(Protocol):
    """Read access to the users a notification can be addressed to."""

    def all(self) -> Sequence[User]: ...

    def list_by_role(self, alias: str) -> Sequence[User]: ...

    def list_by_ids(self, user_ids: Sequence[int]) -> Sequence[User]: ...


class MailTransport(Protocol):
    """Sends one rendered email; returns ``True`` when the message was accepted."""

    def send(
        self,
        to_address: str,
        subject: str,
        template_name: str,
        payload: dict[str, Any],
    ) -> bool: ...


class EmailSentMarker(Protocol):
    """Persists the one-time "email sent" mark for a notification."""

    def mark_email_sent(self, notification_id: int) -> bool: ...


__all__ = ["EmailSentMarker", "MailTransport", "UserDirectory"]
