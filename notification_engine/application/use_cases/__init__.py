"""Aggregate application use cases."""

from .notifications import create_notification, list_feed
from .users import authenticate_user, create_user, record_login

__all__ = [
    "authenticate_user",
    "create_notification",
    "create_user",
    "list_feed",
    "record_login",
]
