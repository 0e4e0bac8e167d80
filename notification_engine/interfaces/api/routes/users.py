"""Routes for managing users and their notification preferences."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from notification_engine.application.use_cases.notifications import notify_user_registered
from notification_engine.application.use_cases.notifications.dispatcher import (
    DeliveryScheduler,
)
from notification_engine.application.use_cases.users import (
    create_user as create_user_uc,
    get_user as get_user_uc,
    update_notification_preferences as update_notification_preferences_uc,
)
from notification_engine.domain.entities import User
from notification_engine.infrastructure.database import get_db
from notification_engine.interfaces.api.dependencies import (
    get_current_active_user,
    get_delivery_scheduler,
    require_admin,
)
from notification_engine.interfaces.api.schemas import (
    NotificationPreferencesRead,
    NotificationPreferencesUpdate,
    UserCreate,
    UserRead,
)

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


def _to_read_model(user: User) -> UserRead:
    return UserRead.model_validate(user)


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
    schedule: DeliveryScheduler = Depends(get_delivery_scheduler),
):
    """Create a user, welcome them and let the administrators know."""

    try:
        user = create_user_uc(
            db,
            name=user_in.name,
            email=user_in.email,
            password=user_in.password,
            role_alias=user_in.role,
            language_preference=user_in.language_preference,
            email_notifications=user_in.email_notifications,
            created_by=current_user.id,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    notify_user_registered(db, user=user, schedule=schedule)
    logger.info("User %s registered by %s", user.id, current_user.id)
    return _to_read_model(user)


@router.get("/me", response_model=UserRead)
def read_current_user(current_user: User = Depends(get_current_active_user)):
    """Return the authenticated user's profile."""

    return _to_read_model(current_user)


@router.get("/me/notification-preferences", response_model=NotificationPreferencesRead)
def read_notification_preferences(
    current_user: User = Depends(get_current_active_user),
):
    return NotificationPreferencesRead.model_validate(current_user)


@router.put("/me/notification-preferences", response_model=NotificationPreferencesRead)
def update_notification_preferences(
    payload: NotificationPreferencesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    try:
        user = update_notification_preferences_uc(
            db,
            user_id=current_user.id,
            email_notifications=payload.email_notifications,
            language_preference=payload.language_preference,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return NotificationPreferencesRead.model_validate(user)


@router.get("/{user_id}", response_model=UserRead)
def read_user(
    user_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    try:
        user = get_user_uc(db, user_id, include_inactive=True)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _to_read_model(user)
