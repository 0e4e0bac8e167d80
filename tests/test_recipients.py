"""Audience resolution against an in-memory directory."""

from __future__ import annotations

import pytest

from conftest import InMemoryDirectory, domain_user
from notification_engine.application.use_cases.notifications import resolve_recipients
from notification_engine.domain.exceptions import NotificationValidationError


@pytest.fixture()
def directory() -> InMemoryDirectory:
    return InMemoryDirectory(
        users=[
            domain_user(1, role="admin"),
            domain_user(2),
            domain_user(3),
            domain_user(4, role="admin"),
        ]
    )


@pytest.mark.parametrize(
    ("audience", "expected"),
    [
        ("all", [1, 2, 3, 4]),
        ("members", [2, 3]),
        ("admins", [1, 4]),
    ],
)
def test_role_audiences(directory, audience, expected):
    users = resolve_recipients(directory, audience)

    assert [user.id for user in users] == expected


def test_specific_audience_keeps_request_order_and_skips_unknown(directory, caplog):
    with caplog.at_level("INFO"):
        users = resolve_recipients(directory, "specific", [3, 99, 1, 3])

    assert [user.id for user in users] == [3, 1]
    assert "99" in caplog.text


def test_specific_audience_requires_recipients(directory):
    with pytest.raises(NotificationValidationError):
        resolve_recipients(directory, "specific", [])


def test_empty_directory_resolves_to_nobody():
    assert resolve_recipients(InMemoryDirectory(), "all") == []


def test_unknown_audience_is_rejected(directory):
    with pytest.raises(NotificationValidationError):
        resolve_recipients(directory, "everyone")
