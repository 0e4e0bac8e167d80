"""Use cases for managing users."""

from .authenticate_user import AuthenticationStatus, authenticate_user
from .create_user import create_user
from .get_user import get_user
from .notification_preferences import update_notification_preferences
from .record_login import record_login

__all__ = [
    "AuthenticationStatus",
    "authenticate_user",
    "create_user",
    "get_user",
    "record_login",
    "update_notification_preferences",
]
