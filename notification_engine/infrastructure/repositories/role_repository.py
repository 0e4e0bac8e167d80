"""Persistence layer for roles data."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from notification_engine.domain.entities import ROLE_ADMIN, ROLE_MEMBER, Role
from notification_engine.infrastructure.models import RoleModel

DEFAULT_ROLES: dict[str, str] = {
    ROLE_ADMIN: "Administrator",
    ROLE_MEMBER: "Member",
}


class RoleRepository:
    """Provide access to the administrator and member roles."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, role_id: int) -> Role | None:
        model = self.session.query(RoleModel).filter_by(id=role_id).first()
        return self._to_entity(model) if model else None

    def get_by_alias(self, alias: str) -> Role | None:
        model = (
            self.session.query(RoleModel)
            .filter(func.lower(RoleModel.alias) == alias.lower())
            .first()
        )
        return self._to_entity(model) if model else None

    def ensure_defaults(self) -> dict[str, Role]:
        """Create any missing default role and return all of them keyed by alias."""

        roles: dict[str, Role] = {}
        for alias, name in DEFAULT_ROLES.items():
            role = self.get_by_alias(alias)
            if role is None:
                model = RoleModel(name=name, alias=alias)
                self.session.add(model)
                self.session.commit()
                self.session.refresh(model)
                role = self._to_entity(model)
            roles[alias] = role
        return roles

    @staticmethod
    def _to_entity(model: RoleModel) -> Role:
        return Role(id=model.id, name=model.name, alias=model.alias)


__all__ = ["DEFAULT_ROLES", "RoleRepository"]
