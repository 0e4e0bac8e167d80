"""File storage helpers for per-notification uploaded assets.

Assets live under ``notifications/<id>/``. When Azure Blob Storage is
configured the prefix is removed from the container; otherwise the local
directory below ``uploads_root`` is removed.
"""

from __future__ import annotations

import logging
import shutil
from functools import lru_cache
from pathlib import Path

from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import BlobServiceClient, ContainerClient

from notification_engine.config import get_settings

logger = logging.getLogger(__name__)

NOTIFICATION_ASSETS_PREFIX = "notifications"


@lru_cache
def _get_blob_service_client() -> BlobServiceClient:
    settings = get_settings()
    if not settings.azure_storage_connection_string:
        msg = "Azure storage connection string is not configured"
        raise RuntimeError(msg)
    return BlobServiceClient.from_connection_string(
        settings.azure_storage_connection_string
    )


@lru_cache
def _get_container_client() -> ContainerClient:
    settings = get_settings()
    if not settings.azure_storage_container_name:
        msg = "Azure storage container name is not configured"
        raise RuntimeError(msg)
    return _get_blob_service_client().get_container_client(
        settings.azure_storage_container_name
    )


def notification_assets_path(notification_id: int) -> str:
    return f"{NOTIFICATION_ASSETS_PREFIX}/{notification_id}"


def delete_blob_prefix(prefix: str) -> int:
    """Delete every blob whose name starts with ``prefix``; return how many went."""

    container_client = _get_container_client()
    normalized = prefix.rstrip("/") + "/"
    try:
        blobs = list(container_client.list_blobs(name_starts_with=normalized))
    except ResourceNotFoundError:
        logger.info("Blob container is missing; nothing to delete under %s", normalized)
        return 0
    deleted = 0
    for blob in blobs:
        try:
            container_client.delete_blob(blob.name)
        except ResourceNotFoundError:
            continue
        deleted += 1
    return deleted


def delete_local_directory(relative_path: str) -> bool:
    """Remove ``relative_path`` below the uploads root; ``False`` if it was absent."""

    root = Path(get_settings().uploads_root).resolve()
    target = (root / relative_path).resolve()
    if root not in target.parents:
        msg = f"Refusing to delete {target}: outside of {root}"
        raise ValueError(msg)
    if not target.exists():
        return False
    shutil.rmtree(target)
    return True


def delete_notification_assets(notification_id: int) -> None:
    """Discard uploaded assets for ``notification_id``; failures are only logged."""

    path = notification_assets_path(notification_id)
    try:
        if get_settings().azure_storage_enabled:
            removed = delete_blob_prefix(path)
            logger.info("Removed %s blob(s) under %s", removed, path)
        elif delete_local_directory(path):
            logger.info("Removed asset directory %s", path)
    except Exception as exc:
        logger.warning("Failed to clean up assets for notification %s: %s", notification_id, exc)


__all__ = [
    "delete_blob_prefix",
    "delete_local_directory",
    "delete_notification_assets",
    "notification_assets_path",
]
