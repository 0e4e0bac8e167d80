"""Errors raised by the notification use cases."""


class NotificationValidationError(ValueError):
    """Raised when a notification request is rejected before anything is stored."""


class NotificationNotFoundError(LookupError):
    """Raised for unknown notifications and for records the viewer cannot see."""


__all__ = ["NotificationNotFoundError", "NotificationValidationError"]
