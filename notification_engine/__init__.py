"""Notification dispatch engine: fan-out, bilingual feeds and email delivery."""
