"""Use case for registering the last login of a user."""

from sqlalchemy.orm import Session

from notification_engine.infrastructure.repositories import UserRepository
from notification_engine.utils import storage_now


def record_login(session: Session, user_id: int) -> None:
    """Persist the last login timestamp for the given user."""

    repository = UserRepository(session)
    user = repository.get(user_id)
    if not user:
        return

    user.last_login = storage_now()
    repository.update(user)
