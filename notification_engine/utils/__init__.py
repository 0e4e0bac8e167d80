"""Utility helpers for reusable functionality."""

from .concurrency import TaskResult, bounded_map
from .datetime import (
    app_timezone,
    now_in_app_timezone,
    storage_now,
    to_app_time,
    to_storage_time,
)

__all__ = [
    "TaskResult",
    "app_timezone",
    "bounded_map",
    "now_in_app_timezone",
    "storage_now",
    "to_app_time",
    "to_storage_time",
]
