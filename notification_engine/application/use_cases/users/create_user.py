"""Use case for creating users."""

from sqlalchemy.orm import Session

from notification_engine.domain.entities import LANGUAGE_BOTH, ROLE_MEMBER, User
from notification_engine.infrastructure.repositories import RoleRepository, UserRepository
from notification_engine.infrastructure.security import get_password_hash
from notification_engine.utils import storage_now

from .validators import ensure_language, normalize_email


def create_user(
    session: Session,
    *,
    name: str,
    email: str,
    password: str,
    role_alias: str = ROLE_MEMBER,
    language_preference: str = LANGUAGE_BOTH,
    email_notifications: bool = True,
    created_by: int | None = None,
) -> User:
    """Create a new user ensuring unique email addresses."""

    repository = UserRepository(session)
    role_repository = RoleRepository(session)

    email = normalize_email(email)
    if repository.get_by_email(email):
        raise ValueError("Email address is already registered")

    role = role_repository.get_by_alias(role_alias)
    if role is None:
        raise ValueError("Role not found")

    user = User(
        id=None,
        role=role,
        name=name.strip(),
        email=email,
        password=get_password_hash(password),
        language_preference=ensure_language(language_preference),
        email_notifications=email_notifications,
        created_by=created_by,
        created_at=storage_now(),
    )

    return repository.create(user)
