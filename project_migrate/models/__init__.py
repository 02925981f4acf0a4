"""Data models for the migration application."""

from .migration import (
    MigrationConfig,
    MigrationRun,
    MigrationStep,
    MigrationStatus,
    DataMode,
    DatabaseParameters,
    ExecutionTags,
)
from .credentials import (
    BackupCredentials,
    S3Credentials,
    AbsCredentials,
    GcsCredentials,
    parse_backup_credentials,
)
from .job import JobHandle, JobResult
from .component import ComponentConfiguration, WorkspaceCredentials

__all__ = [
    "MigrationConfig",
    "MigrationRun",
    "MigrationStep",
    "MigrationStatus",
    "DataMode",
    "DatabaseParameters",
    "ExecutionTags",
    "BackupCredentials",
    "S3Credentials",
    "AbsCredentials",
    "GcsCredentials",
    "parse_backup_credentials",
    "JobHandle",
    "JobResult",
    "ComponentConfiguration",
    "WorkspaceCredentials",
]
