"""Helpers used before and around the migration."""

import logging
from typing import Any, Iterable
from urllib.parse import urlparse

from .clients.storage import StorageClient
from .config import (
    PROJECT_BACKUP_COMPONENT,
    PROJECT_RESTORE_COMPONENT,
    ORCHESTRATOR_MIGRATE_COMPONENT,
    SNOWFLAKE_WRITER_MIGRATE_COMPONENT,
)
from .exceptions import UserException

logger = logging.getLogger(__name__)

REDACTED = "*****"


def get_stack_from_project_url(url: str) -> str:
    """
    Get the stack hostname from a project URL.

    Raises:
        UserException: If the URL is not an absolute http(s) URL
    """
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise UserException(f'Invalid destination project URL: "{url}".')
    return parsed.hostname


def redact_secrets(data: Any) -> Any:
    """Copy of a payload with the values of ``#``-prefixed keys hidden."""
    if isinstance(data, dict):
        return {
            k: REDACTED if isinstance(k, str) and k.startswith("#") else redact_secrets(v)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [redact_secrets(item) for item in data]
    return data


def _check_apps(client: StorageClient, required: Iterable[str], project: str) -> None:
    available = set(client.list_available_components())
    missing = [app for app in required if app not in available]
    if missing:
        raise UserException(
            f'Missing "{", ".join(missing)}" application in the {project} project.'
        )


def check_migration_apps(source_client: StorageClient, destination_client: StorageClient) -> None:
    """
    Check that the apps driving the migration are available in both projects.

    Raises:
        UserException: If an app is missing
    """
    _check_apps(source_client, [PROJECT_BACKUP_COMPONENT], "source")
    _check_apps(
        destination_client,
        [
            PROJECT_RESTORE_COMPONENT,
            ORCHESTRATOR_MIGRATE_COMPONENT,
            SNOWFLAKE_WRITER_MIGRATE_COMPONENT,
        ],
        "destination",
    )


def check_if_project_empty(client: StorageClient) -> bool:
    """A project is empty when it has no configured components and no buckets."""
    if client.list_components():
        return False
    if client.list_buckets():
        return False
    return True
