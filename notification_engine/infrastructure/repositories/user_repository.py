"""Persistence layer for user data.

:class:`UserRepository` doubles as the user directory consumed by the
notification engine: deleted and inactive users are never returned by the
directory methods.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from notification_engine.domain.entities import Role, User
from notification_engine.infrastructure.models import RoleModel, UserModel


class UserRepository:
    """Provide CRUD operations and directory lookups for user entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        model = self._get_model(id=user_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> User | None:
        model = self._get_model(email=email)
        return self._to_entity(model) if model else None

    def create(self, user: User) -> User:
        model = UserModel()
        self._apply_entity_to_model(model, user, include_creation_fields=True)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        if model.role is None:
            self.session.refresh(model, attribute_names=["role"])
        return self._to_entity(model)

    def update(self, user: User) -> User:
        model = self._get_model(id=user.id)
        if not model:
            msg = f"User with id {user.id} not found"
            raise ValueError(msg)
        self._apply_entity_to_model(model, user, include_creation_fields=False)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    # Directory ----------------------------------------------------------

    def all(self) -> Sequence[User]:
        return [self._to_entity(model) for model in self._active_query().all()]

    def list_by_role(self, alias: str) -> Sequence[User]:
        query = self._active_query().join(RoleModel, UserModel.role_id == RoleModel.id)
        query = query.filter(func.lower(RoleModel.alias) == alias.lower())
        return [self._to_entity(model) for model in query.all()]

    def list_by_ids(self, user_ids: Sequence[int]) -> Sequence[User]:
        if not user_ids:
            return []
        unique_ids = {int(user_id) for user_id in user_ids}
        query = self._active_query().filter(UserModel.id.in_(unique_ids))
        return [self._to_entity(model) for model in query.all()]

    def _active_query(self):
        return (
            self.session.query(UserModel)
            .options(joinedload(UserModel.role))
            .filter(UserModel.deleted.is_(False))
            .filter(UserModel.is_active.is_(True))
            .order_by(UserModel.id.asc())
        )

    # Mapping ------------------------------------------------------------

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            role=UserRepository._role_to_entity(model.role),
            name=model.name,
            email=model.email,
            password=model.password,
            is_active=model.is_active,
            deleted=model.deleted,
            language_preference=model.language_preference,
            email_notifications=model.email_notifications,
            last_login=model.last_login,
            created_by=model.created_by,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _get_model(self, include_deleted: bool = False, **filters) -> UserModel | None:
        query = self.session.query(UserModel).options(joinedload(UserModel.role))
        if not include_deleted:
            query = query.filter(UserModel.deleted.is_(False))
        return query.filter_by(**filters).first()

    @staticmethod
    def _apply_entity_to_model(
        model: UserModel, user: User, *, include_creation_fields: bool
    ) -> None:
        if include_creation_fields:
            model.created_by = user.created_by
            if user.created_at is not None:
                model.created_at = user.created_at
        model.role_id = user.role.id
        model.name = user.name
        model.email = user.email
        model.password = user.password
        model.is_active = user.is_active
        model.deleted = user.deleted
        model.language_preference = user.language_preference
        model.email_notifications = user.email_notifications
        model.last_login = user.last_login

    @staticmethod
    def _role_to_entity(model_role) -> Role:
        if model_role is None:
            msg = "User role is not set"
            raise ValueError(msg)
        return Role(id=model_role.id, name=model_role.name, alias=model_role.alias)


__all__ = ["UserRepository"]
