"""Use case for reading and changing a user's notification preferences."""

from dataclasses import replace

from sqlalchemy.orm import Session

from notification_engine.domain.entities import User
from notification_engine.infrastructure.repositories import UserRepository

from .validators import ensure_language


def update_notification_preferences(
    session: Session,
    *,
    user_id: int,
    email_notifications: bool | None = None,
    language_preference: str | None = None,
) -> User:
    """Apply the provided preference changes; omitted values are kept."""

    repository = UserRepository(session)
    user = repository.get(user_id)
    if user is None:
        raise ValueError("User not found")

    updated = replace(
        user,
        email_notifications=(
            email_notifications if email_notifications is not None else user.email_notifications
        ),
        language_preference=(
            ensure_language(language_preference)
            if language_preference is not None
            else user.language_preference
        ),
    )
    return repository.update(updated)
