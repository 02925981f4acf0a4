"""Configuration loading and validation."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .exceptions import UserException
from .models.migration import DataMode, MigrationConfig

logger = logging.getLogger(__name__)

PROJECT_BACKUP_COMPONENT = "keboola.project-backup"
PROJECT_RESTORE_COMPONENT = "keboola.project-restore"
ORCHESTRATOR_MIGRATE_COMPONENT = "keboola.app-orchestrator-migrate"
SNOWFLAKE_WRITER_MIGRATE_COMPONENT = "keboola.app-snowflake-writer-migrate"
DATA_OF_TABLES_MIGRATE_COMPONENT = "keboola.app-project-migrate-large-tables"

DEFAULT_SOURCE_URL = "https://connection.keboola.com"
DEFAULT_DATA_DIR = "/data"


class DatabaseDefinition(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    host: str = Field(min_length=1)
    username: str = Field(min_length=1)
    password: str = Field(alias="#password", min_length=1)
    warehouse: str = ""


class TagsDefinition(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    backup: Optional[str] = None
    restore: Optional[str] = None
    tables_data: Optional[str] = Field(default=None, alias="tablesData")
    snowflake_writers: Optional[str] = Field(default=None, alias="snowflakeWriters")
    orchestrations: Optional[str] = None


class ParametersDefinition(BaseModel):
    """Schema of the ``parameters`` section of the configuration file."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    source_kbc_url: str = Field(default=DEFAULT_SOURCE_URL, alias="sourceKbcUrl", min_length=1)
    source_kbc_token: str = Field(alias="#sourceKbcToken", min_length=1)
    source_manage_token: Optional[str] = Field(default=None, alias="#sourceManageToken")

    direct_data_migration: bool = Field(default=True, alias="directDataMigration")
    migrate_secrets: bool = Field(default=False, alias="migrateSecrets")
    migrate_permanent_files: bool = Field(default=True, alias="migratePermanentFiles")
    migrate_triggers: bool = Field(default=True, alias="migrateTriggers")
    migrate_notifications: bool = Field(default=True, alias="migrateNotifications")
    migrate_structure_only: bool = Field(default=False, alias="migrateStructureOnly")
    migrate_buckets: bool = Field(default=True, alias="migrateBuckets")
    migrate_tables: bool = Field(default=True, alias="migrateTables")
    migrate_project_metadata: bool = Field(default=True, alias="migrateProjectMetadata")

    skip_region_validation: bool = Field(default=False, alias="skipRegionValidation")
    check_empty_project: bool = Field(default=True, alias="checkEmptyProject")
    dry_run: bool = Field(default=False, alias="dryRun")
    preserve_timestamp: bool = Field(default=False, alias="preserveTimestamp")

    data_mode: DataMode = Field(default=DataMode.SAPI, alias="dataMode")
    db: Optional[DatabaseDefinition] = None
    is_source_byodb: bool = Field(default=False, alias="isSourceByodb")
    source_byodb: str = Field(default="", alias="sourceByodb")
    include_workspace_schemas: List[str] = Field(default_factory=list, alias="includeWorkspaceSchemas")

    tags: Optional[TagsDefinition] = None

    @model_validator(mode="after")
    def check_data_mode(self) -> "ParametersDefinition":
        if self.db is not None and self.data_mode != DataMode.DATABASE:
            raise ValueError('Parameter "db" is allowed only when "dataMode" is set to "database".')
        if self.db is None and self.data_mode == DataMode.DATABASE:
            raise ValueError('Parameter "db" is required when "dataMode" is set to "database".')
        return self


@dataclass(frozen=True)
class Environment:
    """Values the platform passes to the application through the environment."""
    url: str
    token: str
    run_id: Optional[str] = None
    data_dir: str = DEFAULT_DATA_DIR

    @classmethod
    def from_environ(cls, environ: Optional[Dict[str, str]] = None) -> "Environment":
        """
        Read the destination project and run context.

        Raises:
            UserException: If the destination project URL or token is missing
        """
        environ = os.environ if environ is None else environ
        url = environ.get("KBC_URL", "")
        token = environ.get("KBC_TOKEN", "")
        if not url or not token:
            raise UserException("Environment variables KBC_URL and KBC_TOKEN must be set.")
        return cls(
            url=url,
            token=token,
            run_id=environ.get("KBC_RUNID") or None,
            data_dir=environ.get("KBC_DATADIR", DEFAULT_DATA_DIR),
        )


def _format_validation_error(error: ValidationError) -> str:
    messages = []
    for err in error.errors():
        msg = err["msg"]
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        location = ".".join(str(part) for part in err["loc"])
        messages.append(f'Invalid parameter "{location}": {msg}' if location else msg)
    return " ".join(messages)


def parse_parameters(
    parameters: Dict[str, Any],
    destination_url: str = "",
    destination_token: str = ""
) -> MigrationConfig:
    """
    Validate configuration parameters and build the migration config.

    Args:
        parameters: The ``parameters`` section of the configuration file
        destination_url: URL of the destination project
        destination_token: Storage token of the destination project

    Raises:
        UserException: If the parameters are invalid
    """
    try:
        definition = ParametersDefinition.model_validate(parameters)
    except ValidationError as e:
        raise UserException(_format_validation_error(e)) from e

    validated = definition.model_dump(by_alias=True, exclude_none=True)
    return MigrationConfig.from_dict(validated, destination_url, destination_token)


def load_config(path: Path, environment: Environment) -> MigrationConfig:
    """
    Load the configuration file of the migration.

    Args:
        path: Path to config.json
        environment: Destination project and run context
    """
    try:
        with open(path) as f:
            config_data = json.load(f)
    except FileNotFoundError as e:
        raise UserException(f"Configuration file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise UserException(f"Configuration file is not valid JSON: {e}") from e

    logger.debug(f"Loaded configuration from {path}")
    return parse_parameters(
        config_data.get("parameters", {}),
        destination_url=environment.url,
        destination_token=environment.token,
    )
