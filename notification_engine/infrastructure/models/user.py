"""SQLAlchemy models for users and the roles that split them into audiences."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    func,
)
from sqlalchemy.sql import expression
from sqlalchemy.orm import relationship

from notification_engine.domain.entities import LANGUAGE_BOTH, ROLE_ADMIN, ROLE_MEMBER
from notification_engine.infrastructure.database import Base


class RoleModel(Base):
    """One of the two roles that the ``admins`` and ``members`` audiences select on."""

    __tablename__ = "role"
    __table_args__ = (
        CheckConstraint(
            f"alias IN ('{ROLE_ADMIN}', '{ROLE_MEMBER}')", name="ck_role_audience_alias"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True)
    alias = Column(String(20), nullable=False, unique=True)


class UserModel(Base):
    """Database representation of a notification recipient."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    role_id = Column(Integer, ForeignKey("role.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(120), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    deleted = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    language_preference = Column(String(4), nullable=False, default=LANGUAGE_BOTH)
    email_notifications = Column(
        Boolean,
        nullable=False,
        default=True,
        server_default=expression.true(),
    )
    last_login = Column(DateTime, nullable=True)
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())
    role = relationship(RoleModel, lazy="joined")


__all__ = ["RoleModel", "UserModel"]
