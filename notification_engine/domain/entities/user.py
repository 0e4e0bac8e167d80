"""Domain entity representing a platform user."""

from dataclasses import dataclass
from datetime import datetime

from .notification import LANGUAGE_BOTH
from .role import ROLE_ADMIN, Role


@dataclass
class User:
    """Core attributes describing a user and their notification preferences."""

    id: int | None
    role: Role
    name: str
    email: str
    password: str
    is_active: bool = True
    deleted: bool = False
    language_preference: str = LANGUAGE_BOTH
    email_notifications: bool = True
    last_login: datetime | None = None
    created_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def has_role(self, alias: str) -> bool:
        """Return ``True`` when the user's role alias matches ``alias``."""

        return self.role.alias.lower() == alias.lower()

    def is_admin(self) -> bool:
        """Return ``True`` when the user is an administrator."""

        return self.has_role(ROLE_ADMIN)

    def has_opted_out_of_email(self) -> bool:
        return not self.email_notifications
