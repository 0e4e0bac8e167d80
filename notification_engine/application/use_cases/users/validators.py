"""Common validation helpers for user use cases."""

from notification_engine.domain.entities import LANGUAGES


def normalize_email(email: str) -> str:
    """Return a trimmed, lower-cased address or raise ``ValueError``."""

    normalized = email.strip()
    if normalized.count("@") != 1:
        raise ValueError("Email address is not valid")

    local_part, domain = normalized.split("@", 1)
    if not local_part or "." not in domain:
        raise ValueError("Email address is not valid")

    return f"{local_part}@{domain.lower()}"


def ensure_language(language: str) -> str:
    normalized = language.strip().lower()
    if normalized not in LANGUAGES:
        raise ValueError(f"Unsupported language preference '{language}'")
    return normalized
