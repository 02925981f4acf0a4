"""Services used by the migration orchestrator."""

from .workspaces import WorkspaceDeduplicator, SNOWFLAKE_WRITER_COMPONENTS
from .checker import AfterMigrationChecker

__all__ = [
    "WorkspaceDeduplicator",
    "SNOWFLAKE_WRITER_COMPONENTS",
    "AfterMigrationChecker",
]
