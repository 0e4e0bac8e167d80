"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from sqlalchemy import and_, case, or_
from sqlalchemy.orm import Query, Session

from notification_engine.domain.entities import (
    AUDIENCE_ALL,
    BROADCAST_MEMBER_AUDIENCES,
    PRIORITY_RANK,
    BilingualText,
    Notification,
    User,
)
from notification_engine.infrastructure.models import NotificationModel
from notification_engine.utils import (
    storage_now,
    to_app_time,
    to_storage_time,
)


@dataclass(frozen=True)
class NotificationFilters:
    """Optional narrowing applied on top of the visibility rules."""

    type: str | None = None
    priority: str | None = None
    unread_only: bool = False


_PRIORITY_ORDER = case(PRIORITY_RANK, value=NotificationModel.priority, else_=0)


class NotificationRepository:
    """Provide CRUD and visibility-aware queries for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: int) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def delete(self, notification_id: int) -> bool:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            return False
        self.session.delete(model)
        self.session.commit()
        return True

    # Feed queries -------------------------------------------------------

    def find_visible(
        self,
        viewer: User | None,
        filters: NotificationFilters | None = None,
        *,
        skip: int = 0,
        limit: int | None = 20,
        now: datetime | None = None,
    ) -> Sequence[Notification]:
        """Return what ``viewer`` may see, highest priority and newest first."""

        query = self._visible_query(viewer, filters, now=now)
        query = query.order_by(
            _PRIORITY_ORDER.desc(),
            NotificationModel.start_at.desc(),
            NotificationModel.id.desc(),
        )
        return self._page(query, skip=skip, limit=limit)

    def count_visible(
        self,
        viewer: User | None,
        filters: NotificationFilters | None = None,
        *,
        now: datetime | None = None,
    ) -> int:
        return self._visible_query(viewer, filters, now=now).count()

    def count_unread(self, viewer: User, *, now: datetime | None = None) -> int:
        """Unread records visible to ``viewer``; always evaluated per viewer."""

        return self.count_visible(viewer, NotificationFilters(unread_only=True), now=now)

    def list_all(
        self,
        filters: NotificationFilters | None = None,
        *,
        skip: int = 0,
        limit: int | None = 20,
    ) -> Sequence[Notification]:
        """Audit listing: every record, newest created first."""

        query = self._apply_filters(self.session.query(NotificationModel), filters)
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        return self._page(query, skip=skip, limit=limit)

    def count_all(self, filters: NotificationFilters | None = None) -> int:
        return self._apply_filters(self.session.query(NotificationModel), filters).count()

    # Read state ---------------------------------------------------------

    def mark_read(self, notification_id: int, viewer: User) -> Notification | None:
        """Mark one record read for ``viewer``; ``None`` when it is not theirs."""

        scope = self._owned_by(viewer)
        self.session.query(NotificationModel).filter(
            NotificationModel.id == notification_id,
            NotificationModel.is_read.is_(False),
            scope,
        ).update(self._read_values(), synchronize_session=False)
        self.session.commit()

        model = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id == notification_id, scope)
            .populate_existing()
            .first()
        )
        return self._to_entity(model) if model else None

    def mark_many_read(self, notification_ids: Iterable[int], viewer: User) -> int:
        ids = [notification_id for notification_id in notification_ids if notification_id is not None]
        if not ids:
            return 0
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id.in_(ids),
                NotificationModel.is_read.is_(False),
                self._owned_by(viewer),
            )
            .update(self._read_values(), synchronize_session=False)
        )
        self.session.commit()
        return updated

    def mark_all_read(self, viewer: User) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.is_read.is_(False), self._owned_by(viewer))
            .update(self._read_values(), synchronize_session=False)
        )
        self.session.commit()
        return updated

    # Email state --------------------------------------------------------

    def mark_email_sent(self, notification_id: int) -> bool:
        """Set ``email_sent_at`` if it is still empty; ``True`` when this call set it."""

        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id == notification_id,
                NotificationModel.email_sent_at.is_(None),
            )
            .update(
                {NotificationModel.email_sent_at: self._now_naive()},
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated == 1

    def list_pending_email(
        self, *, now: datetime | None = None, limit: int | None = 100
    ) -> Sequence[Notification]:
        """Records that asked for email, were never marked sent and have started."""

        current = self._naive(now)
        query = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.send_email.is_(True),
                NotificationModel.email_sent_at.is_(None),
                NotificationModel.start_at <= current,
                or_(
                    NotificationModel.end_at.is_(None),
                    NotificationModel.end_at > current,
                ),
            )
            .order_by(NotificationModel.start_at.asc(), NotificationModel.id.asc())
        )
        return self._page(query, skip=0, limit=limit)

    # Internals ----------------------------------------------------------

    def _visible_query(
        self,
        viewer: User | None,
        filters: NotificationFilters | None,
        *,
        now: datetime | None,
    ) -> Query:
        current = self._naive(now)
        query = self.session.query(NotificationModel).filter(
            NotificationModel.start_at <= current,
            or_(
                NotificationModel.end_at.is_(None),
                NotificationModel.end_at > current,
            ),
        )
        if viewer is None:
            query = query.filter(
                NotificationModel.recipient_id.is_(None),
                NotificationModel.target_audience == AUDIENCE_ALL,
            )
        else:
            query = query.filter(self._owned_by(viewer))
        if filters is not None and filters.unread_only and viewer is None:
            # Anonymous viewers have no read state.
            filters = NotificationFilters(type=filters.type, priority=filters.priority)
        return self._apply_filters(query, filters)

    @staticmethod
    def _owned_by(viewer: User):
        return or_(
            NotificationModel.recipient_id == viewer.id,
            and_(
                NotificationModel.recipient_id.is_(None),
                NotificationModel.target_audience.in_(BROADCAST_MEMBER_AUDIENCES),
            ),
        )

    @staticmethod
    def _apply_filters(query: Query, filters: NotificationFilters | None) -> Query:
        if filters is None:
            return query
        if filters.type:
            query = query.filter(NotificationModel.type == filters.type)
        if filters.priority:
            query = query.filter(NotificationModel.priority == filters.priority)
        if filters.unread_only:
            query = query.filter(NotificationModel.is_read.is_(False))
        return query

    def _page(self, query: Query, *, skip: int, limit: int | None) -> list[Notification]:
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def _read_values(self) -> dict:
        return {
            NotificationModel.is_read: True,
            NotificationModel.read_at: self._now_naive(),
        }

    @staticmethod
    def _now_naive() -> datetime:
        return storage_now()

    @classmethod
    def _naive(cls, value: datetime | None) -> datetime:
        return to_storage_time(value) if value is not None else cls._now_naive()

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        now = storage_now()
        model.recipient_id = notification.recipient_id
        model.title = notification.title.to_dict()
        model.message = notification.message.to_dict()
        model.type = notification.type
        model.priority = notification.priority
        model.target_audience = notification.target_audience
        model.start_at = to_storage_time(notification.start_at) or now
        model.end_at = to_storage_time(notification.end_at)
        model.is_read = notification.is_read
        model.read_at = to_storage_time(notification.read_at)
        model.send_email = notification.send_email
        model.email_sent_at = to_storage_time(notification.email_sent_at)
        model.action_url = notification.action_url
        model.action_text = (
            notification.action_text.to_dict() if notification.action_text else None
        )
        model.image_url = notification.image_url
        model.tags = list(notification.tags or [])
        model.payload = dict(notification.payload or {})
        model.created_by = notification.created_by
        model.created_at = to_storage_time(notification.created_at) or now

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            recipient_id=model.recipient_id,
            title=BilingualText.from_dict(model.title) or BilingualText(),
            message=BilingualText.from_dict(model.message) or BilingualText(),
            type=model.type,
            priority=model.priority,
            target_audience=model.target_audience,
            start_at=to_app_time(model.start_at),
            end_at=to_app_time(model.end_at),
            is_read=bool(model.is_read),
            read_at=to_app_time(model.read_at),
            send_email=bool(model.send_email),
            email_sent_at=to_app_time(model.email_sent_at),
            action_url=model.action_url,
            action_text=BilingualText.from_dict(model.action_text),
            image_url=model.image_url,
            tags=list(model.tags or []),
            payload=dict(model.payload or {}),
            created_by=model.created_by,
            created_at=to_app_time(model.created_at),
            updated_at=to_app_time(model.updated_at),
        )


__all__ = ["NotificationFilters", "NotificationRepository"]
