"""Endpoints for creating, listing and reading notifications."""

from __future__ import annotations

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Response,
    status,
)
from sqlalchemy.orm import Session

from notification_engine.application.use_cases.notifications import (
    NotificationDraft,
    create_notification as create_notification_uc,
    delete_notification as delete_notification_uc,
    list_feed as list_feed_uc,
    mark_all_notifications_read as mark_all_notifications_read_uc,
    mark_notification_read as mark_notification_read_uc,
    mark_notifications_read as mark_notifications_read_uc,
)
from notification_engine.application.use_cases.notifications.dispatcher import (
    DeliveryScheduler,
)
from notification_engine.application.use_cases.notifications.templates import (
    resolve_language,
)
from notification_engine.domain.entities import BilingualText, Notification, User
from notification_engine.domain.exceptions import (
    NotificationNotFoundError,
    NotificationValidationError,
)
from notification_engine.infrastructure.database import get_db
from notification_engine.interfaces.api.dependencies import (
    get_current_active_user,
    get_delivery_scheduler,
    get_optional_user,
    require_admin,
)
from notification_engine.interfaces.api.schemas import (
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
from notification_engine.utils import now_in_app_timezone

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _text_schema(value: BilingualText | None) -> BilingualTextSchema | None:
    if value is None:
        return None
    filled = value.with_fallback()
    return BilingualTextSchema(en=filled.en, ta=filled.ta)


def _text_value(value: BilingualTextSchema | None) -> BilingualText | None:
    if value is None:
        return None
    return BilingualText.from_dict(value.model_dump())


def _notification_to_schema(notification: Notification, viewer: User | None) -> NotificationRead:
    language = resolve_language(viewer.language_preference if viewer else None)
    return NotificationRead(
        id=notification.id or 0,
        recipient_id=notification.recipient_id,
        title=_text_schema(notification.title),
        message=_text_schema(notification.message),
        display_title=notification.title.resolve(language),
        display_message=notification.message.resolve(language),
        type=notification.type,
        priority=notification.priority,
        target_audience=notification.target_audience,
        status=notification.status(now_in_app_timezone()),
        start_at=notification.start_at,
        end_at=notification.end_at,
        is_read=notification.is_read,
        read_at=notification.read_at,
        send_email=notification.send_email,
        email_sent_at=notification.email_sent_at,
        action_url=notification.action_url,
        action_text=_text_schema(notification.action_text),
        display_action_text=(
            notification.action_text.resolve(language) if notification.action_text else None
        ),
        image_url=notification.image_url,
        tags=list(notification.tags),
        payload=dict(notification.payload),
        created_by=notification.created_by,
        created_at=notification.created_at,
    )


def _draft_from_payload(payload: NotificationCreate) -> NotificationDraft:
    return NotificationDraft(
        title=_text_value(payload.title) or BilingualText(),
        message=_text_value(payload.message) or BilingualText(),
        type=payload.type,
        priority=payload.priority,
        target_audience=payload.target_audience,
        recipients=list(payload.recipients),
        recipient_id=payload.recipient_id,
        start_at=payload.start_at,
        end_at=payload.end_at,
        send_email=payload.send_email,
        action_url=payload.action_url,
        action_text=_text_value(payload.action_text),
        image_url=payload.image_url,
        tags=list(payload.tags),
        payload=dict(payload.payload),
    )


def _bad_request(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _not_found(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _forbidden(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))


@router.get("/", response_model=NotificationFeedRead)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    type: str | None = Query(default=None),
    priority: str | None = Query(default=None),
    unread_only: bool = Query(False),
    audit: bool = Query(False, description="List every stored record (administrators only)"),
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
) -> NotificationFeedRead:
    """Return the caller's feed, highest priority and newest first.

    Anonymous callers only see active public broadcasts.
    """

    try:
        feed = list_feed_uc(
            db,
            current_user,
            page=page,
            limit=limit,
            type=type,
            priority=priority,
            unread_only=unread_only,
            audit=audit,
        )
    except NotificationValidationError as exc:
        raise _bad_request(exc) from exc
    except PermissionError as exc:
        raise _forbidden(exc) from exc

    return NotificationFeedRead(
        items=[_notification_to_schema(item, current_user) for item in feed.items],
        pagination=PaginationRead(
            page=feed.page, limit=feed.limit, total=feed.total, pages=feed.pages
        ),
        unread_count=feed.unread_count,
    )


@router.post(
    "/",
    response_model=NotificationCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_notification(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
    schedule: DeliveryScheduler = Depends(get_delivery_scheduler),
) -> NotificationCreateResponse:
    """Create one record per addressee; emails are sent after the response."""

    try:
        result = create_notification_uc(
            db,
            _draft_from_payload(payload),
            created_by=current_user.id,
            schedule=schedule,
        )
    except NotificationValidationError as exc:
        raise _bad_request(exc) from exc

    items = [_notification_to_schema(item, current_user) for item in result.notifications]
    addressed_directly = payload.recipient_id is not None and not payload.recipients
    single = items[0] if addressed_directly and items else None
    return NotificationCreateResponse(
        notifications=items,
        created=result.created,
        failed=[
            FanOutFailureRead(recipient_id=failure.recipient_id, error=failure.error)
            for failure in result.failures
        ],
        notification=single,
    )


@router.put("/read-all", response_model=NotificationReadCountResponse)
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationReadCountResponse:
    updated = mark_all_notifications_read_uc(db, current_user)
    return NotificationReadCountResponse(updated=updated)


@router.put("/read", response_model=NotificationReadCountResponse)
def mark_notifications_read(
    payload: NotificationMarkReadRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationReadCountResponse:
    """Mark the listed records read; ids the caller does not own are ignored."""

    updated = mark_notifications_read_uc(db, payload.unique_ids(), current_user)
    return NotificationReadCountResponse(updated=updated)


@router.put("/{notification_id}/read", response_model=NotificationRead)
@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationRead:
    try:
        notification = mark_notification_read_uc(db, notification_id, current_user)
    except NotificationNotFoundError as exc:
        raise _not_found(exc) from exc
    return _notification_to_schema(notification, current_user)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Response:
    try:
        delete_notification_uc(db, notification_id, deleted_by=current_user)
    except NotificationNotFoundError as exc:
        raise _not_found(exc) from exc
    except PermissionError as exc:  # pragma: no cover - require_admin already guards
        raise _forbidden(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
