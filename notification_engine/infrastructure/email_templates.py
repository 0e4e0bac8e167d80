"""HTML rendering for notification emails.

Every template shares one layout. Values coming from notifications are
escaped before being interpolated.
"""

from __future__ import annotations

from html import escape
from typing import Any, Callable

from notification_engine.domain.entities import (
    TEMPLATE_EBOOK_DOWNLOAD,
    TEMPLATE_NOTIFICATION,
    TEMPLATE_POSTER_ALERT,
    TEMPLATE_PROJECT_ALERT,
    TEMPLATE_TEAM_ALERT,
)

_STYLES = (
    "body{margin:0;background:#f4f5f7;font-family:system-ui,-apple-system,Segoe UI,Roboto,Arial,sans-serif}"
    ".wrap{padding:24px}"
    ".card{max-width:640px;margin:0 auto;background:#ffffff;border-radius:12px;overflow:hidden;border:1px solid #e2e8f0}"
    ".bar{height:6px;background:linear-gradient(90deg,#4f46e5,#06b6d4,#22c55e,#f59e0b)}"
    ".header{padding:24px 24px 8px 24px}"
    ".title{margin:0;font-size:22px;line-height:1.25;color:#0f172a}"
    ".muted{color:#64748b}"
    ".content{padding:8px 24px 24px 24px;color:#1e293b}"
    ".hero{max-width:100%;border-radius:8px;margin:12px 0}"
    ".badge{display:inline-block;padding:2px 10px;border-radius:999px;background:#dcfce7;color:#166534;font-size:12px}"
    ".cta{display:inline-block;padding:10px 16px;border-radius:8px;background:#4f46e5;color:#ffffff;text-decoration:none}"
    ".footer{padding:16px 24px;border-top:1px solid #e2e8f0;color:#64748b;font-size:12px}"
)


def _text(payload: dict[str, Any], key: str, default: str = "") -> str:
    value = payload.get(key)
    if value in (None, ""):
        return escape(default)
    return escape(str(value))


def _layout(title: str, subtitle: str, inner: str) -> str:
    return (
        "<html><head><meta charset=\"utf-8\">"
        "<meta name=\"viewport\" content=\"width=device-width, initial-scale=1\">"
        f"<style>{_STYLES}</style></head>"
        "<body><div class=\"wrap\"><div class=\"card\"><div class=\"bar\"></div>"
        f"<div class=\"header\"><h1 class=\"title\">{title}</h1>"
        f"<div class=\"muted\">{subtitle}</div></div>"
        f"<div class=\"content\">{inner}</div>"
        "<div class=\"footer\">Tamil Language Society &bull; This is an automated message</div>"
        "</div></div></body></html>"
    )


def _greeting(payload: dict[str, Any]) -> str:
    return f"<p>Hello {_text(payload, 'user_name', 'Member')},</p>"


def _image(payload: dict[str, Any]) -> str:
    if not payload.get("image_url"):
        return ""
    return f"<img class=\"hero\" src=\"{_text(payload, 'image_url')}\" alt=\"\">"


def _action(payload: dict[str, Any], default_text: str = "") -> str:
    if not payload.get("action_url"):
        return ""
    label = _text(payload, "action_text", default_text)
    if not label:
        return ""
    return f"<p><a class=\"cta\" href=\"{_text(payload, 'action_url')}\">{label}</a></p>"


def _render_notification(payload: dict[str, Any]) -> str:
    inner = (
        _greeting(payload)
        + _image(payload)
        + f"<p>{_text(payload, 'message')}</p>"
        + _action(payload)
    )
    return _layout(_text(payload, "title"), "Society Update", inner)


def _render_project_alert(payload: dict[str, Any]) -> str:
    inner = (
        _greeting(payload)
        + _image(payload)
        + f"<p><span class=\"badge\">{_text(payload, 'status', 'Active')}</span></p>"
        + f"<p>{_text(payload, 'message')}</p>"
        + _action(payload, "View Project")
    )
    return _layout(_text(payload, "title"), "New Project", inner)


def _render_ebook_download(payload: dict[str, Any]) -> str:
    inner = (
        _greeting(payload)
        + f"<p>Your copy of <strong>{_text(payload, 'book_title', 'Ebook')}</strong> is ready.</p>"
        + f"<p>{_text(payload, 'message')}</p>"
        + _action(payload, "Download")
    )
    return _layout(_text(payload, "title"), "Ebook Download", inner)


def _render_team_alert(payload: dict[str, Any]) -> str:
    inner = (
        _greeting(payload)
        + _image(payload)
        + f"<h2>{_text(payload, 'name', 'New Member')}</h2>"
        + f"<p class=\"muted\">{_text(payload, 'position', 'Team Member')}</p>"
        + f"<p>{_text(payload, 'message')}</p>"
        + _action(payload, "View Team")
    )
    return _layout(_text(payload, "title"), "Team Update", inner)


def _render_poster_alert(payload: dict[str, Any]) -> str:
    inner = (
        _greeting(payload)
        + _image(payload)
        + f"<p>{_text(payload, 'message')}</p>"
        + _action(payload, "View Poster")
    )
    return _layout(_text(payload, "title"), "New Poster", inner)


_RENDERERS: dict[str, Callable[[dict[str, Any]], str]] = {
    TEMPLATE_NOTIFICATION: _render_notification,
    TEMPLATE_PROJECT_ALERT: _render_project_alert,
    TEMPLATE_EBOOK_DOWNLOAD: _render_ebook_download,
    TEMPLATE_TEAM_ALERT: _render_team_alert,
    TEMPLATE_POSTER_ALERT: _render_poster_alert,
}


def render_email(template_name: str, payload: dict[str, Any]) -> str:
    """Return the HTML body for ``template_name``; unknown names use the generic one."""

    renderer = _RENDERERS.get(template_name, _render_notification)
    return renderer(payload)


__all__ = ["render_email"]
