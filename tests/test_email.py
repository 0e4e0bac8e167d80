"""Mail transports: SendGrid delivery, the on-disk sandbox and selection."""

from __future__ import annotations

import json
import logging
from types import SimpleNamespace

import pytest

from notification_engine.config import get_settings
from notification_engine.infrastructure import email as email_module
from notification_engine.infrastructure.email import (
    SandboxMailTransport,
    SendGridMailTransport,
    get_mail_transport,
    send_email,
)


@pytest.fixture()
def sendgrid_settings():
    return get_settings().model_copy(
        update={"sendgrid_api_key": "SG.test", "sendgrid_sender": "noreply@example.com"}
    )


class FakeSendGridClient:
    instances: list["FakeSendGridClient"] = []

    def __init__(self, api_key, response=None, error=None):
        self.api_key = api_key
        self.client = SimpleNamespace(timeout=None)
        self.messages = []
        self._response = response
        self._error = error
        FakeSendGridClient.instances.append(self)

    def send(self, message):
        self.messages.append(message)
        if self._error is not None:
            raise self._error
        return self._response


def _install_client(monkeypatch, *, response=None, error=None):
    FakeSendGridClient.instances = []
    monkeypatch.setattr(
        email_module,
        "SendGridAPIClient",
        lambda api_key: FakeSendGridClient(api_key, response=response, error=error),
    )


def test_send_email_skips_when_sendgrid_is_not_configured(monkeypatch, caplog):
    _install_client(monkeypatch, response=SimpleNamespace(status_code=202, body=""))

    with caplog.at_level(logging.INFO, logger=email_module.__name__):
        assert send_email("Subject", "<p>Hi</p>", "user@example.com") is False

    assert FakeSendGridClient.instances == []
    assert "skipping email delivery" in caplog.text


def test_send_email_accepts_2xx_responses(monkeypatch, sendgrid_settings):
    _install_client(monkeypatch, response=SimpleNamespace(status_code=202, body=""))

    assert send_email("Subject", "<p>Hi</p>", "user@example.com", settings=sendgrid_settings)

    client = FakeSendGridClient.instances[0]
    assert client.api_key == "SG.test"
    assert client.client.timeout == sendgrid_settings.email_send_timeout_seconds
    assert len(client.messages) == 1


def test_send_email_logs_error_details_from_rejected_response(
    monkeypatch, sendgrid_settings, caplog
):
    body = json.dumps({"errors": [{"message": "Invalid sender", "help": "docs"}]})
    _install_client(monkeypatch, response=SimpleNamespace(status_code=400, body=body))

    with caplog.at_level(logging.ERROR, logger=email_module.__name__):
        result = send_email(
            "Subject", "<p>Hi</p>", "user@example.com", settings=sendgrid_settings
        )

    assert result is False
    assert "Invalid sender (help: docs)" in caplog.text
    assert "400" in caplog.text


def test_send_email_reports_api_exceptions(monkeypatch, sendgrid_settings, caplog):
    error = RuntimeError("forbidden")
    error.status_code = 403
    error.body = b'{"errors": [{"message": "Access denied"}]}'
    _install_client(monkeypatch, error=error)

    with caplog.at_level(logging.ERROR, logger=email_module.__name__):
        result = send_email(
            "Subject", "<p>Hi</p>", "user@example.com", settings=sendgrid_settings
        )

    assert result is False
    assert "failed with status 403: Access denied" in caplog.text


def test_sendgrid_transport_renders_the_template(monkeypatch, sendgrid_settings):
    captured = {}

    def fake_send_email(subject, html_content, recipient, *, settings=None):
        captured.update(subject=subject, html=html_content, recipient=recipient)
        return True

    monkeypatch.setattr(email_module, "send_email", fake_send_email)
    transport = SendGridMailTransport(sendgrid_settings)

    assert transport.send(
        "reader@example.com",
        "New Project",
        "project_alert",
        {"title": "New Project", "message": "Join us", "status": "Active"},
    )
    assert captured["recipient"] == "reader@example.com"
    assert "Join us" in captured["html"]


def test_sandbox_transport_writes_html_and_envelope(tmp_path):
    transport = SandboxMailTransport(tmp_path / "mail")

    assert transport.send(
        "reader@example.com", "Hello", "notification", {"title": "Hello", "message": "Body"}
    )

    envelopes = list((tmp_path / "mail").glob("*.json"))
    assert len(envelopes) == 1
    envelope = json.loads(envelopes[0].read_text(encoding="utf-8"))
    assert envelope["to"] == "reader@example.com"
    assert envelope["template"] == "notification"
    html = (tmp_path / "mail" / envelope["html"]).read_text(encoding="utf-8")
    assert "Body" in html


def test_transport_selection_follows_configuration(sendgrid_settings):
    assert isinstance(get_mail_transport(sendgrid_settings), SendGridMailTransport)
    assert isinstance(get_mail_transport(get_settings()), SandboxMailTransport)
