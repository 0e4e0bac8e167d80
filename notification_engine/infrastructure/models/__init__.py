"""ORM models used by the application infrastructure."""

from .notification import NotificationModel
from .user import RoleModel, UserModel

__all__ = [
    "NotificationModel",
    "RoleModel",
    "UserModel",
]
