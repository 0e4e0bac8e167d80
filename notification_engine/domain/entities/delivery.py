"""Value objects describing the outcome of fan-out and email delivery."""

from __future__ import annotations

from dataclasses import dataclass, field

from .notification import Notification

DELIVERY_SENT = "sent"
DELIVERY_SKIPPED = "skipped"
DELIVERY_FAILED = "failed"

SKIP_OPTED_OUT = "opted_out"
SKIP_NO_ADDRESS = "no_address"


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of attempting to email one recipient."""

    user_id: int | None
    status: str
    reason: str | None = None

    @classmethod
    def sent(cls, user_id: int | None) -> "DeliveryOutcome":
        return cls(user_id=user_id, status=DELIVERY_SENT)

    @classmethod
    def skipped(cls, user_id: int | None, reason: str) -> "DeliveryOutcome":
        return cls(user_id=user_id, status=DELIVERY_SKIPPED, reason=reason)

    @classmethod
    def failed(cls, user_id: int | None, error: str) -> "DeliveryOutcome":
        return cls(user_id=user_id, status=DELIVERY_FAILED, reason=error)


@dataclass
class DeliveryReport:
    """Aggregated outcomes for one notification record."""

    notification_id: int | None
    outcomes: list[DeliveryOutcome] = field(default_factory=list)
    marked_sent: bool = False
    deferred: bool = False
    already_sent: bool = False

    def _count(self, status: str) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def sent(self) -> int:
        return self._count(DELIVERY_SENT)

    @property
    def skipped(self) -> int:
        return self._count(DELIVERY_SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(DELIVERY_FAILED)


@dataclass(frozen=True)
class FanOutFailure:
    """A recipient whose record could not be created during fan-out."""

    recipient_id: int
    error: str


@dataclass
class FanOutResult:
    """Records created for a logical event plus the recipients that failed."""

    notifications: list[Notification] = field(default_factory=list)
    failures: list[FanOutFailure] = field(default_factory=list)

    @property
    def created(self) -> int:
        return len(self.notifications)


__all__ = [
    "DELIVERY_FAILED",
    "DELIVERY_SENT",
    "DELIVERY_SKIPPED",
    "DeliveryOutcome",
    "DeliveryReport",
    "FanOutFailure",
    "FanOutResult",
    "SKIP_NO_ADDRESS",
    "SKIP_OPTED_OUT",
]
