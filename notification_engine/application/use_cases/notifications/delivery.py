"""Email delivery for persisted notifications.

``DeliveryWorker`` sends a batch of notifications to their addressees through
a mail transport with bounded concurrency, then records ``email_sent_at`` once
per record.
Callers never wait on it: the HTTP layer hands record identifiers to
``BackgroundTasks`` and every other trigger goes through
:func:`schedule_delivery`.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from sqlalchemy.orm import Session

from notification_engine.config import get_settings
from notification_engine.domain.entities import (
    DELIVERY_FAILED,
    SKIP_NO_ADDRESS,
    SKIP_OPTED_OUT,
    STATUS_ACTIVE,
    STATUS_SCHEDULED,
    DeliveryOutcome,
    DeliveryReport,
    Notification,
    User,
)
from notification_engine.domain.ports import EmailSentMarker, MailTransport, UserDirectory
from notification_engine.infrastructure.database import SessionLocal
from notification_engine.infrastructure.email import get_mail_transport
from notification_engine.infrastructure.repositories import (
    NotificationRepository,
    UserRepository,
)
from notification_engine.utils import bounded_map, now_in_app_timezone

from .recipients import resolve_recipients
from .templates import build_email

logger = logging.getLogger(__name__)


class DeliveryWorker:
    """Email every addressee of a notification and mark it sent."""

    def __init__(
        self,
        *,
        directory: UserDirectory,
        transport: MailTransport,
        marker: EmailSentMarker,
        max_workers: int = 4,
        send_timeout: float | None = 10.0,
        base_url: str | None = None,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self.directory = directory
        self.transport = transport
        self.marker = marker
        self.max_workers = max(1, max_workers)
        self.send_timeout = send_timeout
        self.base_url = base_url
        self.clock = clock

    def deliver(self, notification: Notification) -> DeliveryReport:
        return self.deliver_many([notification])[0]

    def deliver_many(self, notifications: Sequence[Notification]) -> list[DeliveryReport]:
        """Deliver several records through one bounded pool of sends.

        Every (record, recipient) pair shares the pool, so a large fan-out is
        emailed in parallel rather than one record at a time. A record whose
        recipients cannot be resolved is logged and left unmarked without
        affecting the others.
        """

        reports: list[DeliveryReport] = []
        jobs: list[tuple[Notification, DeliveryReport, User]] = []
        due: list[tuple[Notification, DeliveryReport]] = []
        for notification in notifications:
            report = DeliveryReport(notification_id=notification.id)
            reports.append(report)
            if not self._is_due(notification, report):
                continue
            try:
                recipients = self.recipients_for(notification)
            except Exception as exc:
                logger.exception(
                    "Cannot resolve recipients for notification %s: %s", notification.id, exc
                )
                continue
            due.append((notification, report))
            jobs.extend((notification, report, user) for user in recipients)

        results = bounded_map(
            lambda job: self._deliver_one(job[0], job[2]),
            jobs,
            max_workers=self.max_workers,
            timeout=self._batch_timeout(len(jobs)),
        )
        for result in results:
            notification, report, user = result.item
            if result.ok and result.value is not None:
                outcome = result.value
            elif result.timed_out:
                outcome = DeliveryOutcome.failed(user.id, "timed out")
            else:
                outcome = DeliveryOutcome.failed(user.id, str(result.error))
            if outcome.status == DELIVERY_FAILED:
                logger.error(
                    "Email for notification %s to user %s failed: %s",
                    notification.id,
                    outcome.user_id,
                    outcome.reason,
                )
            report.outcomes.append(outcome)

        for notification, report in due:
            if notification.id is not None:
                try:
                    report.marked_sent = self.marker.mark_email_sent(notification.id)
                except Exception as exc:
                    logger.exception(
                        "Cannot mark notification %s as emailed: %s", notification.id, exc
                    )
            logger.info(
                "Notification %s emails: %s sent, %s skipped, %s failed",
                notification.id,
                report.sent,
                report.skipped,
                report.failed,
            )
        return reports

    def _is_due(self, notification: Notification, report: DeliveryReport) -> bool:
        if not notification.send_email:
            return False
        if notification.email_sent_at is not None:
            report.already_sent = True
            return False
        status = notification.status(self.clock())
        if status != STATUS_ACTIVE:
            # Scheduled records are picked up by the pending sweep once visible.
            report.deferred = status == STATUS_SCHEDULED
            logger.info(
                "Email for notification %s not sent: record is %s",
                notification.id,
                status,
            )
            return False
        return True

    def recipients_for(self, notification: Notification) -> list[User]:
        """A recipient-bound record is only ever emailed to its own recipient."""

        if notification.is_broadcast():
            return resolve_recipients(self.directory, notification.target_audience)
        return list(self.directory.list_by_ids([notification.recipient_id]))

    def _deliver_one(self, notification: Notification, user: User) -> DeliveryOutcome:
        if user.has_opted_out_of_email():
            return DeliveryOutcome.skipped(user.id, SKIP_OPTED_OUT)
        if not user.email:
            return DeliveryOutcome.skipped(user.id, SKIP_NO_ADDRESS)

        message = build_email(notification, user, base_url=self.base_url)
        accepted = self.transport.send(
            user.email, message.subject, message.template, message.payload
        )
        if accepted:
            return DeliveryOutcome.sent(user.id)
        return DeliveryOutcome.failed(user.id, "transport rejected the message")

    def _batch_timeout(self, count: int) -> float | None:
        if self.send_timeout is None or count == 0:
            return None
        rounds = math.ceil(count / self.max_workers)
        return self.send_timeout * (rounds + 1)


def build_delivery_worker(
    session: Session,
    *,
    transport: MailTransport | None = None,
) -> DeliveryWorker:
    """Wire a worker to the database behind ``session`` and the configured mailer."""

    settings = get_settings()
    return DeliveryWorker(
        directory=UserRepository(session),
        transport=transport or get_mail_transport(settings),
        marker=NotificationRepository(session),
        max_workers=settings.notification_email_workers,
        send_timeout=settings.email_send_timeout_seconds,
        base_url=settings.public_base_url,
    )


def deliver_notifications(
    notification_ids: Iterable[int],
    *,
    session_factory: Callable[[], Session] = SessionLocal,
    transport: MailTransport | None = None,
) -> list[DeliveryReport]:
    """Deliver the stored notifications using a session of its own.

    All recipients of all records share one bounded pool of sends. Failures are
    logged and never raised, so this is safe to run detached.
    """

    session = session_factory()
    try:
        repository = NotificationRepository(session)
        notifications: list[Notification] = []
        for notification_id in notification_ids:
            notification = repository.get(notification_id)
            if notification is None:
                logger.warning("Notification %s vanished before delivery", notification_id)
                continue
            notifications.append(notification)
        worker = build_delivery_worker(session, transport=transport)
        return worker.deliver_many(notifications)
    except Exception as exc:
        session.rollback()
        logger.exception("Error delivering notifications: %s", exc)
        return []
    finally:
        session.close()


def deliver_pending_emails(
    session: Session,
    *,
    limit: int | None = 100,
    worker: DeliveryWorker | None = None,
    now: datetime | None = None,
) -> list[DeliveryReport]:
    """Deliver records whose email is still owed and which are now visible."""

    worker = worker or build_delivery_worker(session)
    pending = NotificationRepository(session).list_pending_email(now=now, limit=limit)
    if pending:
        logger.info("Delivering %s pending notification email(s)", len(pending))
    return worker.deliver_many(pending)


_executor: ThreadPoolExecutor | None = None


def _get_executor() -> ThreadPoolExecutor:
    global _executor
    if _executor is None:
        _executor = ThreadPoolExecutor(
            max_workers=get_settings().notification_email_workers,
            thread_name_prefix="notification-delivery",
        )
    return _executor


def schedule_delivery(notification_ids: Sequence[int]) -> None:
    """Queue delivery for ``notification_ids`` without waiting for it."""

    ids = list(notification_ids)
    if ids:
        _get_executor().submit(deliver_notifications, ids)


def shutdown_delivery_executor(wait: bool = True) -> None:
    global _executor
    if _executor is not None:
        _executor.shutdown(wait=wait)
        _executor = None


__all__ = [
    "DeliveryWorker",
    "build_delivery_worker",
    "deliver_notifications",
    "deliver_pending_emails",
    "schedule_delivery",
    "shutdown_delivery_executor",
]
