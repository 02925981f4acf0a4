"""Migration execution models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from enum import Enum
from datetime import datetime
import uuid


class MigrationStatus(str, Enum):
    """Status of a migration run or of one of its steps."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


class DataMode(str, Enum):
    """How table data is copied by the direct data migration."""
    SAPI = "sapi"  # Through the Storage API
    DATABASE = "database"  # Directly between the backend databases


@dataclass(frozen=True)
class DatabaseParameters:
    """Connection to the source backend database (database mode only)."""
    host: str
    username: str
    password: str = field(repr=False)
    warehouse: str = ""

    def to_parameters(self) -> Dict[str, Any]:
        """Convert to the job parameter block."""
        return {
            "host": self.host,
            "username": self.username,
            "#password": self.password,
            "warehouse": self.warehouse,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DatabaseParameters":
        """Create from the ``db`` configuration block."""
        return cls(
            host=data.get("host", ""),
            username=data.get("username", ""),
            password=data.get("#password", ""),
            warehouse=data.get("warehouse", ""),
        )


@dataclass(frozen=True)
class ExecutionTags:
    """Optional image tags used when running the individual migration jobs."""
    backup: Optional[str] = None
    restore: Optional[str] = None
    tables_data: Optional[str] = None
    snowflake_writers: Optional[str] = None
    orchestrations: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExecutionTags":
        return cls(
            backup=data.get("backup"),
            restore=data.get("restore"),
            tables_data=data.get("tablesData"),
            snowflake_writers=data.get("snowflakeWriters"),
            orchestrations=data.get("orchestrations"),
        )


@dataclass
class MigrationStep:
    """A single step of a migration run."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    status: MigrationStatus = MigrationStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    errors: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "errors": self.errors,
            "warnings": self.warnings,
        }

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None


@dataclass
class MigrationRun:
    """A complete migration run."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: MigrationStatus = MigrationStatus.PENDING
    dry_run: bool = False

    # Timing
    created_at: datetime = field(default_factory=datetime.utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    # Progress
    steps: List[MigrationStep] = field(default_factory=list)
    current_step: Optional[str] = None

    errors: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "status": self.status.value,
            "dry_run": self.dry_run,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "steps": [s.to_dict() for s in self.steps],
            "current_step": self.current_step,
            "errors": self.errors,
        }

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def add_step(self, name: str) -> MigrationStep:
        """Add a new step to the migration."""
        step = MigrationStep(name=name)
        self.steps.append(step)
        return step

    def get_step(self, name: str) -> Optional[MigrationStep]:
        """Get a step by name."""
        for step in self.steps:
            if step.name == name:
                return step
        return None

    @property
    def executed_steps(self) -> List[str]:
        """Names of steps that were not skipped, in execution order."""
        return [s.name for s in self.steps if s.status != MigrationStatus.SKIPPED]


@dataclass(frozen=True)
class MigrationConfig:
    """
    Validated configuration of one migration.

    Built once by the config layer and never mutated afterwards.
    """
    source_url: str
    source_token: str = field(repr=False)
    destination_url: str = ""
    destination_token: str = field(default="", repr=False)
    source_manage_token: Optional[str] = field(default=None, repr=False)

    # What to migrate
    direct_data_migration: bool = True
    migrate_secrets: bool = False
    migrate_permanent_files: bool = True
    migrate_triggers: bool = True
    migrate_notifications: bool = True
    migrate_structure_only: bool = False
    migrate_buckets: bool = True
    migrate_tables: bool = True
    migrate_project_metadata: bool = True

    # Execution options
    skip_region_validation: bool = False
    check_empty_project: bool = True
    dry_run: bool = False
    preserve_timestamp: bool = False

    # Direct data migration
    data_mode: DataMode = DataMode.SAPI
    db: Optional[DatabaseParameters] = None
    is_source_byodb: bool = False
    source_byodb: str = ""
    include_workspace_schemas: Tuple[str, ...] = ()

    tags: ExecutionTags = field(default_factory=ExecutionTags)

    @property
    def export_structure_only(self) -> bool:
        """Table data is not needed in the snapshot when it is copied directly."""
        return self.direct_data_migration or self.migrate_structure_only

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation (without secrets)."""
        return {
            "source_url": self.source_url,
            "destination_url": self.destination_url,
            "direct_data_migration": self.direct_data_migration,
            "migrate_secrets": self.migrate_secrets,
            "migrate_permanent_files": self.migrate_permanent_files,
            "migrate_triggers": self.migrate_triggers,
            "migrate_notifications": self.migrate_notifications,
            "migrate_structure_only": self.migrate_structure_only,
            "migrate_buckets": self.migrate_buckets,
            "migrate_tables": self.migrate_tables,
            "migrate_project_metadata": self.migrate_project_metadata,
            "skip_region_validation": self.skip_region_validation,
            "check_empty_project": self.check_empty_project,
            "dry_run": self.dry_run,
            "preserve_timestamp": self.preserve_timestamp,
            "data_mode": self.data_mode.value,
            "is_source_byodb": self.is_source_byodb,
            "source_byodb": self.source_byodb,
            "include_workspace_schemas": list(self.include_workspace_schemas),
        }

    @classmethod
    def from_dict(
        cls,
        parameters: Dict[str, Any],
        destination_url: str = "",
        destination_token: str = ""
    ) -> "MigrationConfig":
        """
        Create from the ``parameters`` section of the configuration file.

        Args:
            parameters: Configuration parameters (already validated)
            destination_url: URL of the destination project
            destination_token: Storage token of the destination project
        """
        db = parameters.get("db")
        return cls(
            source_url=parameters.get("sourceKbcUrl", ""),
            source_token=parameters.get("#sourceKbcToken", ""),
            destination_url=destination_url,
            destination_token=destination_token,
            source_manage_token=parameters.get("#sourceManageToken"),
            direct_data_migration=parameters.get("directDataMigration", True),
            migrate_secrets=parameters.get("migrateSecrets", False),
            migrate_permanent_files=parameters.get("migratePermanentFiles", True),
            migrate_triggers=parameters.get("migrateTriggers", True),
            migrate_notifications=parameters.get("migrateNotifications", True),
            migrate_structure_only=parameters.get("migrateStructureOnly", False),
            migrate_buckets=parameters.get("migrateBuckets", True),
            migrate_tables=parameters.get("migrateTables", True),
            migrate_project_metadata=parameters.get("migrateProjectMetadata", True),
            skip_region_validation=parameters.get("skipRegionValidation", False),
            check_empty_project=parameters.get("checkEmptyProject", True),
            dry_run=parameters.get("dryRun", False),
            preserve_timestamp=parameters.get("preserveTimestamp", False),
            data_mode=DataMode(parameters.get("dataMode", DataMode.SAPI.value)),
            db=DatabaseParameters.from_dict(db) if db else None,
            is_source_byodb=parameters.get("isSourceByodb", False),
            source_byodb=parameters.get("sourceByodb", ""),
            include_workspace_schemas=tuple(parameters.get("includeWorkspaceSchemas", [])),
            tags=ExecutionTags.from_dict(parameters.get("tags") or {}),
        )
