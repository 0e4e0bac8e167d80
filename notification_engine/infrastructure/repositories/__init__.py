"""Repository implementations for infrastructure layer."""

from .notification_repository import NotificationFilters, NotificationRepository
from .role_repository import DEFAULT_ROLES, RoleRepository
from .user_repository import UserRepository

__all__ = [
    "DEFAULT_ROLES",
    "NotificationFilters",
    "NotificationRepository",
    "RoleRepository",
    "UserRepository",
]
