"""Shared fixtures: a throwaway SQLite database and in-memory collaborators."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

_WORKDIR = Path(tempfile.mkdtemp(prefix="notification-engine-tests-"))

# Settings are read once, so the environment must be ready before any import.
os.environ["DATABASE_URL"] = f"sqlite:///{_WORKDIR / 'test.db'}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ["MAIL_SANDBOX_DIR"] = str(_WORKDIR / "mail")
os.environ["UPLOADS_ROOT"] = str(_WORKDIR / "uploads")
os.environ["NOTIFICATION_FANOUT_WORKERS"] = "4"
os.environ["NOTIFICATION_EMAIL_WORKERS"] = "4"
for _name in (
    "SENDGRID_API_KEY",
    "SENDGRID_SENDER",
    "AZURE_STORAGE_CONNECTION_STRING",
    "AZURE_STORAGE_CONTAINER_NAME",
    "PUBLIC_BASE_URL",
):
    os.environ.pop(_name, None)

from notification_engine.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from notification_engine.domain.entities import (  # noqa: E402
    LANGUAGE_BOTH,
    ROLE_MEMBER,
    Role,
    User,
)
from notification_engine.infrastructure import database  # noqa: E402
from notification_engine.infrastructure.repositories import (  # noqa: E402
    RoleRepository,
    UserRepository,
)
from notification_engine.infrastructure.security import (  # noqa: E402
    create_access_token,
    get_password_hash,
)

TEST_PASSWORD = "Secret123"
# Hashing is deliberately slow, so every fixture user shares one hash.
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest.fixture(autouse=True)
def reset_database():
    """Give every test empty tables with the default roles."""

    from notification_engine.infrastructure import models  # noqa: F401

    database.Base.metadata.drop_all(bind=database.engine)
    database.Base.metadata.create_all(bind=database.engine)
    session = database.SessionLocal()
    try:
        RoleRepository(session).ensure_defaults()
    finally:
        session.close()
    yield


@pytest.fixture()
def db_session():
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_user(db_session) -> Callable[..., User]:
    """Factory persisting users with sensible defaults."""

    counter = {"value": 0}

    def _make_user(
        *,
        role: str = ROLE_MEMBER,
        name: str | None = None,
        email: str | None = None,
        language: str = LANGUAGE_BOTH,
        email_notifications: bool = True,
        is_active: bool = True,
    ) -> User:
        counter["value"] += 1
        index = counter["value"]
        role_entity = RoleRepository(db_session).get_by_alias(role)
        assert role_entity is not None
        return UserRepository(db_session).create(
            User(
                id=None,
                role=role_entity,
                name=name or f"User {index}",
                email=email or f"user{index}@example.com",
                password=TEST_PASSWORD_HASH,
                is_active=is_active,
                language_preference=language,
                email_notifications=email_notifications,
            )
        )

    return _make_user


def auth_headers(user: User) -> dict[str, str]:
    from notification_engine.interfaces.api.dependencies import password_signature

    token = create_access_token(
        {"sub": user.email, "role": user.role.alias, "pwd_sig": password_signature(user)}
    )
    return {"Authorization": f"Bearer {token}"}


@dataclass
class SentEmail:
    to: str
    subject: str
    template: str
    payload: dict[str, Any]


@dataclass
class RecordingTransport:
    """Mail transport double that remembers every message it was given."""

    accept: bool = True
    fail_for: set[str] = field(default_factory=set)
    sent: list[SentEmail] = field(default_factory=list)

    def send(self, to_address: str, subject: str, template_name: str, payload: dict[str, Any]) -> bool:
        if to_address in self.fail_for:
            raise RuntimeError(f"mailbox {to_address} unavailable")
        self.sent.append(SentEmail(to_address, subject, template_name, dict(payload)))
        return self.accept

    @property
    def recipients(self) -> list[str]:
        return [message.to for message in self.sent]


@dataclass
class InMemoryDirectory:
    """User directory double backed by a plain list."""

    users: list[User] = field(default_factory=list)

    def all(self) -> Sequence[User]:
        return list(self.users)

    def list_by_role(self, alias: str) -> Sequence[User]:
        return [user for user in self.users if user.has_role(alias)]

    def list_by_ids(self, user_ids: Sequence[int]) -> Sequence[User]:
        wanted = set(user_ids)
        return [user for user in self.users if user.id in wanted]


@dataclass
class RecordingMarker:
    marked: list[int] = field(default_factory=list)

    def mark_email_sent(self, notification_id: int) -> bool:
        if notification_id in self.marked:
            return False
        self.marked.append(notification_id)
        return True


def domain_user(
    user_id: int,
    *,
    role: str = ROLE_MEMBER,
    email: str | None = None,
    language: str = LANGUAGE_BOTH,
    email_notifications: bool = True,
    name: str | None = None,
) -> User:
    """Build a detached user entity for tests that never touch the database."""

    return User(
        id=user_id,
        role=Role(id=1 if role == "admin" else 2, name=role.title(), alias=role),
        name=name or f"User {user_id}",
        email=f"user{user_id}@example.com" if email is None else email,
        password="not-used",
        language_preference=language,
        email_notifications=email_notifications,
    )


@pytest.fixture()
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture()
def client(transport, monkeypatch):
    """Test client whose background email delivery goes to ``transport``."""

    from fastapi.testclient import TestClient

    from main import create_app
    from notification_engine.application.use_cases.notifications import delivery

    monkeypatch.setattr(delivery, "get_mail_transport", lambda settings=None: transport)

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
