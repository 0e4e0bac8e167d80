"""HTML rendering of the notification email templates."""

from __future__ import annotations

import pytest

from notification_engine.infrastructure.email_templates import render_email


@pytest.mark.parametrize(
    ("template", "expected"),
    [
        ("notification", "Society Update"),
        ("project_alert", "New Project"),
        ("ebook_download", "Ebook Download"),
        ("team_alert", "Team Update"),
        ("poster_alert", "New Poster"),
    ],
)
def test_each_template_has_its_own_heading(template, expected):
    html = render_email(template, {"title": "Title", "message": "Message"})

    assert expected in html
    assert "Message" in html


def test_values_are_html_escaped():
    html = render_email(
        "notification",
        {"title": "<script>alert(1)</script>", "message": "Tom & Jerry", "user_name": "<b>"},
    )

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "Tom &amp; Jerry" in html
    assert "Hello &lt;b&gt;," in html


def test_missing_values_fall_back_to_defaults():
    html = render_email("team_alert", {"title": "Team", "message": "Welcome"})

    assert "Hello Member," in html
    assert "New Member" in html
    assert "Team Member" in html


def test_action_button_needs_a_url():
    without_url = render_email("poster_alert", {"title": "Poster", "action_text": "Open"})
    with_url = render_email(
        "poster_alert", {"title": "Poster", "action_url": "https://example.com/p/1"}
    )

    assert "class=\"cta\"" not in without_url
    assert "href=\"https://example.com/p/1\">View Poster</a>" in with_url


def test_unknown_template_uses_generic_layout():
    html = render_email("does_not_exist", {"title": "T", "message": "M"})

    assert "Society Update" in html
