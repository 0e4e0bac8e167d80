from .auth import Token
from .notification import (
    BilingualTextSchema,
    FanOutFailureRead,
    NotificationCreate,
    NotificationCreateResponse,
    NotificationFeedRead,
    NotificationMarkReadRequest,
    NotificationRead,
    NotificationReadCountResponse,
    PaginationRead,
)
from .user import (
    NotificationPreferencesRead,
    NotificationPreferencesUpdate,
    RoleRead,
    UserCreate,
    UserRead,
)

__all__ = [
    "BilingualTextSchema",
    "FanOutFailureRead",
    "NotificationCreate",
    "NotificationCreateResponse",
    "NotificationFeedRead",
    "NotificationMarkReadRequest",
    "NotificationPreferencesRead",
    "NotificationPreferencesUpdate",
    "NotificationRead",
    "NotificationReadCountResponse",
    "PaginationRead",
    "RoleRead",
    "Token",
    "UserCreate",
    "UserRead",
]
