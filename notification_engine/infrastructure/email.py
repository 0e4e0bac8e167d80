"""Mail transports used to deliver notification emails.

``SendGridMailTransport`` sends through the SendGrid REST API. When SendGrid
is not configured, ``SandboxMailTransport`` writes every rendered message to a
local directory so it can be inspected during development.
"""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, MailSettings, SandBoxMode

from notification_engine.config import Settings, get_settings
from notification_engine.domain.ports import MailTransport
from notification_engine.infrastructure.email_templates import render_email
from notification_engine.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        messages: list[str] = []
        for item in parsed.get("errors") or []:
            if not isinstance(item, dict) or not item.get("message"):
                continue
            if item.get("help"):
                messages.append(f"{item['message']} (help: {item['help']})")
            else:
                messages.append(str(item["message"]))
        if messages:
            return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _log_sendgrid_exception(exc: Exception, recipient: str) -> None:
    """Log a SendGrid API error with helpful troubleshooting details."""

    status_code = getattr(exc, "status_code", None)
    details = _extract_sendgrid_error_details(getattr(exc, "body", None))

    if status_code and details:
        logger.error(
            "SendGrid API request for %s failed with status %s: %s",
            recipient,
            status_code,
            details,
        )
    elif status_code:
        logger.error(
            "SendGrid API request for %s failed with status %s", recipient, status_code
        )
    elif details:
        logger.error("SendGrid API request for %s failed: %s", recipient, details)
    else:
        logger.exception("Error sending email to %s via SendGrid: %s", recipient, exc)


def _log_unsuccessful_response(response: Any, recipient: str) -> None:
    status_code = getattr(response, "status_code", None)
    details = _extract_sendgrid_error_details(getattr(response, "body", None))

    if details:
        logger.error(
            "SendGrid API responded with status %s for %s: %s",
            status_code,
            recipient,
            details,
        )
    else:
        logger.error("SendGrid API responded with status %s for %s", status_code, recipient)


def send_email(
    subject: str,
    html_content: str,
    recipient: str,
    *,
    settings: Settings | None = None,
) -> bool:
    """Send an email using the configured SendGrid credentials."""

    settings = settings or get_settings()
    if not settings.sendgrid_enabled:
        logger.info("SendGrid configuration incomplete; skipping email delivery")
        return False

    message = Mail(
        from_email=settings.sendgrid_sender,
        to_emails=recipient,
        subject=subject,
        html_content=html_content,
    )
    if settings.sendgrid_sandbox_mode:
        message.mail_settings = MailSettings(sandbox_mode=SandBoxMode(True))

    try:
        client = SendGridAPIClient(settings.sendgrid_api_key)
        # Propagates to every request built from this HTTP client.
        client.client.timeout = settings.email_send_timeout_seconds
        response = client.send(message)
    except Exception as exc:
        _log_sendgrid_exception(exc, recipient)
        return False

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        _log_unsuccessful_response(response, recipient)
        return False

    return True


class SendGridMailTransport:
    """Render notification templates and send them through SendGrid."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def send(
        self,
        to_address: str,
        subject: str,
        template_name: str,
        payload: dict[str, Any],
    ) -> bool:
        html_content = render_email(template_name, payload)
        return send_email(subject, html_content, to_address, settings=self._settings)


class SandboxMailTransport:
    """Development fallback that stores messages on disk instead of sending them."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def send(
        self,
        to_address: str,
        subject: str,
        template_name: str,
        payload: dict[str, Any],
    ) -> bool:
        self.directory.mkdir(parents=True, exist_ok=True)
        stem = f"{now_in_app_timezone():%Y%m%dT%H%M%S}-{uuid.uuid4().hex[:8]}"
        html_path = self.directory / f"{stem}.html"
        html_path.write_text(render_email(template_name, payload), encoding="utf-8")
        envelope = {
            "to": to_address,
            "subject": subject,
            "template": template_name,
            "payload": payload,
            "html": html_path.name,
        }
        (self.directory / f"{stem}.json").write_text(
            json.dumps(envelope, ensure_ascii=False, indent=2, default=str),
            encoding="utf-8",
        )
        logger.info("Sandbox email for %s stored at %s", to_address, html_path)
        return True


def get_mail_transport(settings: Settings | None = None) -> MailTransport:
    """Return the SendGrid transport when configured, otherwise the sandbox one."""

    settings = settings or get_settings()
    if settings.sendgrid_enabled:
        return SendGridMailTransport(settings)
    return SandboxMailTransport(settings.mail_sandbox_dir)


__all__ = [
    "SandboxMailTransport",
    "SendGridMailTransport",
    "get_mail_transport",
    "send_email",
]
