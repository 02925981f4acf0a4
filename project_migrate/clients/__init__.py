"""HTTP clients for the platform APIs."""

from .base import ApiClient
from .storage import StorageClient
from .encryption import MigrationsClient

__all__ = [
    "ApiClient",
    "StorageClient",
    "MigrationsClient",
]
