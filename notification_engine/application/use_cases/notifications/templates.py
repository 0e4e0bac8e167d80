"""Choose the email template for a notification and build its data.

Selection is an ordered table of (predicate, template) rules evaluated top to
bottom; the first match wins and the generic template closes the table.
Nothing here performs I/O.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from notification_engine.domain.entities import (
    LANGUAGE_EN,
    LANGUAGE_TA,
    TEMPLATE_EBOOK_DOWNLOAD,
    TEMPLATE_NOTIFICATION,
    TEMPLATE_POSTER_ALERT,
    TEMPLATE_PROJECT_ALERT,
    TEMPLATE_TEAM_ALERT,
    BilingualText,
    EmailMessage,
    Notification,
    User,
)

FieldBuilder = Callable[[Notification, str], dict[str, Any]]


@dataclass(frozen=True)
class TemplateRule:
    """One row of the dispatch table."""

    template: str
    matches: Callable[[Notification], bool]
    fields: FieldBuilder


def _tagged(*names: str) -> Callable[[Notification], bool]:
    return lambda notification: notification.has_tags(*names)


def _localize(value: Any, language: str) -> str:
    if isinstance(value, dict):
        text = BilingualText.from_dict(value)
        return text.resolve(language) if text else ""
    if isinstance(value, BilingualText):
        return value.resolve(language)
    return str(value) if value not in (None, "") else ""


def _project_fields(notification: Notification, language: str) -> dict[str, Any]:
    return {
        "image_url": notification.image_url,
        "status": _localize(notification.payload.get("status"), language) or "Active",
    }


def _ebook_fields(notification: Notification, language: str) -> dict[str, Any]:
    book_title = _localize(notification.payload.get("book_title"), language)
    return {"book_title": book_title or "Ebook"}


def _team_fields(notification: Notification, language: str) -> dict[str, Any]:
    return {
        "image_url": notification.image_url,
        "name": _localize(notification.payload.get("name"), language) or "New Member",
        "position": _localize(notification.payload.get("position"), language)
        or "Team Member",
    }


def _poster_fields(notification: Notification, language: str) -> dict[str, Any]:
    return {"image_url": notification.image_url}


def _generic_fields(notification: Notification, language: str) -> dict[str, Any]:
    return {"image_url": notification.image_url}


TEMPLATE_RULES: tuple[TemplateRule, ...] = (
    TemplateRule(TEMPLATE_PROJECT_ALERT, _tagged("project", "created"), _project_fields),
    TemplateRule(TEMPLATE_EBOOK_DOWNLOAD, _tagged("ebook", "download"), _ebook_fields),
    TemplateRule(TEMPLATE_TEAM_ALERT, _tagged("team", "created"), _team_fields),
    TemplateRule(TEMPLATE_POSTER_ALERT, _tagged("poster", "created"), _poster_fields),
    TemplateRule(TEMPLATE_NOTIFICATION, lambda notification: True, _generic_fields),
)


def select_template(notification: Notification) -> TemplateRule:
    for rule in TEMPLATE_RULES:
        if rule.matches(notification):
            return rule
    return TEMPLATE_RULES[-1]  # pragma: no cover - the last rule always matches


def resolve_language(preference: str | None) -> str:
    """Map a stored preference to a rendering language; ``both`` renders English."""

    return LANGUAGE_TA if preference == LANGUAGE_TA else LANGUAGE_EN


def absolute_url(url: str | None, base_url: str | None) -> str | None:
    if not url or not base_url or not url.startswith("/"):
        return url
    return base_url.rstrip("/") + url


def build_email(
    notification: Notification,
    recipient: User,
    *,
    base_url: str | None = None,
) -> EmailMessage:
    """Return the template, subject and payload for ``recipient``."""

    language = resolve_language(recipient.language_preference)
    rule = select_template(notification)
    title = notification.title.resolve(language)
    payload: dict[str, Any] = {
        "user_name": recipient.name or "Member",
        "title": title,
        "message": notification.message.resolve(language),
        "type": notification.type,
        "priority": notification.priority,
        "language": language,
        "action_url": absolute_url(notification.action_url, base_url),
        "action_text": notification.action_text.resolve(language)
        if notification.action_text
        else None,
    }
    payload.update(rule.fields(notification, language))
    if payload.get("image_url"):
        payload["image_url"] = absolute_url(payload["image_url"], base_url)
    return EmailMessage(template=rule.template, subject=title, payload=payload)


__all__ = [
    "TEMPLATE_RULES",
    "TemplateRule",
    "absolute_url",
    "build_email",
    "resolve_language",
    "select_template",
]
