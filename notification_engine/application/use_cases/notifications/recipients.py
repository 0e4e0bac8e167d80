"""Resolve a notification audience into concrete users."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from notification_engine.domain.entities import (
    AUDIENCE_ADMINS,
    AUDIENCE_ALL,
    AUDIENCE_MEMBERS,
    AUDIENCE_SPECIFIC,
    ROLE_ADMIN,
    ROLE_MEMBER,
    User,
)
from notification_engine.domain.exceptions import NotificationValidationError
from notification_engine.domain.ports import UserDirectory

logger = logging.getLogger(__name__)


def resolve_recipients(
    directory: UserDirectory,
    target_audience: str,
    recipient_ids: Sequence[int] | None = None,
) -> list[User]:
    """Return the users ``target_audience`` expands to, without duplicates.

    An empty result is valid. For ``specific`` audiences the order of
    ``recipient_ids`` is kept and unknown identifiers are dropped.
    """

    if target_audience == AUDIENCE_ALL:
        users = directory.all()
    elif target_audience == AUDIENCE_MEMBERS:
        users = directory.list_by_role(ROLE_MEMBER)
    elif target_audience == AUDIENCE_ADMINS:
        users = directory.list_by_role(ROLE_ADMIN)
    elif target_audience == AUDIENCE_SPECIFIC:
        if not recipient_ids:
            raise NotificationValidationError(
                "Recipients list is required for specific audience"
            )
        return _resolve_specific(directory, recipient_ids)
    else:
        raise NotificationValidationError(f"Unknown target audience '{target_audience}'")

    return _unique(users)


def _resolve_specific(directory: UserDirectory, recipient_ids: Sequence[int]) -> list[User]:
    requested = list(dict.fromkeys(recipient_ids))
    found = {user.id: user for user in directory.list_by_ids(requested)}
    missing = [user_id for user_id in requested if user_id not in found]
    if missing:
        logger.info("Skipping unknown notification recipients: %s", missing)
    return [found[user_id] for user_id in requested if user_id in found]


def _unique(users: Sequence[User]) -> list[User]:
    seen: set[int | None] = set()
    unique: list[User] = []
    for user in users:
        if user.id in seen:
            continue
        seen.add(user.id)
        unique.append(user)
    return unique


__all__ = ["resolve_recipients"]
