"""Domain entities exposed by the application."""

from .delivery import (
    DELIVERY_FAILED,
    DELIVERY_SENT,
    DELIVERY_SKIPPED,
    SKIP_NO_ADDRESS,
    SKIP_OPTED_OUT,
    DeliveryOutcome,
    DeliveryReport,
    FanOutFailure,
    FanOutResult,
)
from .email import (
    EMAIL_TEMPLATES,
    TEMPLATE_EBOOK_DOWNLOAD,
    TEMPLATE_NOTIFICATION,
    TEMPLATE_POSTER_ALERT,
    TEMPLATE_PROJECT_ALERT,
    TEMPLATE_TEAM_ALERT,
    EmailMessage,
)
from .notification import (
    AUDIENCE_ADMINS,
    AUDIENCE_ALL,
    AUDIENCE_MEMBERS,
    AUDIENCE_SPECIFIC,
    AUDIENCES,
    BROADCAST_MEMBER_AUDIENCES,
    LANGUAGE_BOTH,
    LANGUAGE_EN,
    LANGUAGE_TA,
    LANGUAGES,
    NOTIFICATION_TYPES,
    PRIORITIES,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    PRIORITY_RANK,
    PRIORITY_URGENT,
    STATUS_ACTIVE,
    STATUS_EXPIRED,
    STATUS_SCHEDULED,
    BilingualText,
    Notification,
)
from .role import ROLE_ADMIN, ROLE_MEMBER, Role
from .user import User

__all__ = [
    "AUDIENCES",
    "AUDIENCE_ADMINS",
    "AUDIENCE_ALL",
    "AUDIENCE_MEMBERS",
    "AUDIENCE_SPECIFIC",
    "BROADCAST_MEMBER_AUDIENCES",
    "BilingualText",
    "DELIVERY_FAILED",
    "DELIVERY_SENT",
    "DELIVERY_SKIPPED",
    "DeliveryOutcome",
    "DeliveryReport",
    "EMAIL_TEMPLATES",
    "EmailMessage",
    "FanOutFailure",
    "FanOutResult",
    "LANGUAGES",
    "LANGUAGE_BOTH",
    "LANGUAGE_EN",
    "LANGUAGE_TA",
    "NOTIFICATION_TYPES",
    "Notification",
    "PRIORITIES",
    "PRIORITY_HIGH",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "PRIORITY_RANK",
    "PRIORITY_URGENT",
    "ROLE_ADMIN",
    "ROLE_MEMBER",
    "Role",
    "SKIP_NO_ADDRESS",
    "SKIP_OPTED_OUT",
    "STATUS_ACTIVE",
    "STATUS_EXPIRED",
    "STATUS_SCHEDULED",
    "TEMPLATE_EBOOK_DOWNLOAD",
    "TEMPLATE_NOTIFICATION",
    "TEMPLATE_POSTER_ALERT",
    "TEMPLATE_PROJECT_ALERT",
    "TEMPLATE_TEAM_ALERT",
    "User",
]
