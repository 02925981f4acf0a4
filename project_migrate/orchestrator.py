"""Migration orchestrator - drives the complete project migration."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple

from .clients.encryption import MigrationsClient
from .clients.storage import StorageClient
from .config import (
    PROJECT_BACKUP_COMPONENT,
    PROJECT_RESTORE_COMPONENT,
    ORCHESTRATOR_MIGRATE_COMPONENT,
    SNOWFLAKE_WRITER_MIGRATE_COMPONENT,
    DATA_OF_TABLES_MIGRATE_COMPONENT,
)
from .exceptions import ClientError, UserException
from .models.credentials import BackupCredentials, parse_backup_credentials
from .models.job import JobResult
from .models.migration import DataMode, MigrationConfig, MigrationRun, MigrationStatus, MigrationStep
from .runners.base import JobRunner
from .services.workspaces import WorkspaceDeduplicator
from .utils import get_stack_from_project_url, redact_secrets

logger = logging.getLogger(__name__)

OBSOLETE_COMPONENTS = (
    "gooddata-writer",
    "keboola.wr-gooddata",
    "orchestrator",
    "keboola.orchestrator",
    "pipeline",
    "transformation",
)

SECRETS_LOG_EXTRA = {"step": "secrets"}


def should_migrate_secrets(config: MigrationConfig) -> bool:
    return config.migrate_secrets


def should_migrate_tables_data(config: MigrationConfig) -> bool:
    """Table data is copied directly only when the snapshot carries buckets and tables without data."""
    return (
        config.direct_data_migration
        and not config.migrate_structure_only
        and config.migrate_buckets
        and config.migrate_tables
    )


def should_migrate_snowflake_writers(config: MigrationConfig) -> bool:
    """Writers travel with their configurations when secrets are migrated."""
    return not config.migrate_secrets


@dataclass(frozen=True)
class PipelineStep:
    """A named step of the migration and the condition under which it runs."""
    name: str
    run: Callable[["MigrationOrchestrator"], None]
    enabled: Callable[["MigrationOrchestrator"], bool] = lambda orchestrator: True


class MigrationOrchestrator:
    """
    Orchestrates the migration of a project.

    Steps, executed strictly one after another:
    - Generate read credentials for a new backup of the source project
    - Back up the source project
    - Restore the backup into the destination project
    - Migrate configurations with secrets (optional)
    - Migrate data of tables directly (optional)
    - Migrate Snowflake writers (unless secrets were migrated)
    - Migrate orchestrations (legacy execution surface only)

    A failed job stops the migration. A failed migration of a single
    configuration with secrets is logged and the migration continues.
    """

    PIPELINE: Tuple[PipelineStep, ...] = (
        PipelineStep("generate_credentials", lambda o: o._generate_backup_credentials()),
        PipelineStep("backup", lambda o: o._backup_source_project()),
        PipelineStep("restore", lambda o: o._restore_destination_project()),
        PipelineStep(
            "migrate_secrets",
            lambda o: o._migrate_secrets(),
            lambda o: should_migrate_secrets(o.config),
        ),
        PipelineStep(
            "migrate_tables_data",
            lambda o: o._migrate_data_of_tables_directly(),
            lambda o: should_migrate_tables_data(o.config),
        ),
        PipelineStep(
            "migrate_snowflake_writers",
            lambda o: o._migrate_snowflake_writers(),
            lambda o: should_migrate_snowflake_writers(o.config),
        ),
        PipelineStep(
            "migrate_orchestrations",
            lambda o: o._migrate_orchestrations(),
            lambda o: o.source_runner.supports_orchestration_migration,
        ),
    )

    def __init__(
        self,
        config: MigrationConfig,
        source_runner: JobRunner,
        destination_runner: JobRunner,
        source_client: StorageClient,
        destination_client: StorageClient,
        migrations_client: Optional[MigrationsClient] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Validated migration configuration
            source_runner: Job runner of the source project
            destination_runner: Job runner of the destination project
            source_client: Storage API client of the source project
            destination_client: Storage API client of the destination project
            migrations_client: Encryption API client; created from the source
                stack when secrets are migrated and none is given
        """
        self.config = config
        self.source_runner = source_runner
        self.destination_runner = destination_runner
        self.source_client = source_client
        self.destination_client = destination_client
        self._migrations_client = migrations_client

        # Run-scoped state
        self.current_run: Optional[MigrationRun] = None
        self._credentials: Optional[BackupCredentials] = None
        self._workspaces: Optional[WorkspaceDeduplicator] = None

    def run(self) -> MigrationRun:
        """
        Run the complete migration.

        Returns:
            MigrationRun with the status of every step

        Raises:
            UserException: On failed jobs and rejected (4xx) API requests
            ClientError: On unexpected API failures
        """
        self.current_run = MigrationRun(dry_run=self.config.dry_run)
        self.current_run.started_at = datetime.utcnow()
        self.current_run.status = MigrationStatus.RUNNING
        self._credentials = None
        self._workspaces = WorkspaceDeduplicator(
            self.source_client,
            self.destination_client,
            dry_run=self.config.dry_run,
        )

        try:
            for step in self.PIPELINE:
                self._run_step(step)

            self.current_run.status = MigrationStatus.COMPLETED
            logger.info("Migration completed")

        except ClientError as e:
            self._fail(e)
            if e.is_client_error:
                raise UserException(e.message, e.status_code) from e
            raise

        except Exception as e:
            self._fail(e)
            raise

        finally:
            self.current_run.completed_at = datetime.utcnow()
            self._workspaces = None

        return self.current_run

    def _run_step(self, pipeline_step: PipelineStep) -> None:
        step = self.current_run.add_step(pipeline_step.name)

        if not pipeline_step.enabled(self):
            step.status = MigrationStatus.SKIPPED
            logger.debug(f"Skipping step {pipeline_step.name}")
            return

        step.status = MigrationStatus.RUNNING
        step.started_at = datetime.utcnow()
        self.current_run.current_step = step.name

        try:
            pipeline_step.run(self)
            step.status = MigrationStatus.COMPLETED
        except Exception as e:
            step.status = MigrationStatus.FAILED
            step.errors.append({"error": str(e)})
            raise
        finally:
            step.completed_at = datetime.utcnow()

    def _fail(self, error: Exception) -> None:
        logger.error(f"Migration failed: {error}")
        self.current_run.status = MigrationStatus.FAILED
        self.current_run.errors.append({
            "step": self.current_run.current_step,
            "error": str(error),
            "timestamp": datetime.utcnow().isoformat(),
        })

    def _run_job(
        self,
        runner: JobRunner,
        component_id: str,
        parameters: Dict[str, Any],
        tag: Optional[str],
        error_prefix: str
    ) -> JobResult:
        """Run a job and fail the migration when it does not succeed."""
        data = {"parameters": parameters}
        logger.debug(f"Running {component_id} with {redact_secrets(data)}")

        job = JobResult.from_dict(runner.run_job(component_id, data, tag))
        if not job.is_success:
            raise UserException(f"{error_prefix}: {job.message}")
        return job

    def _generate_backup_credentials(self) -> None:
        logger.info("Creating backup credentials")

        response = self.source_runner.run_sync_action(
            PROJECT_BACKUP_COMPONENT,
            "generate-read-credentials",
            {
                "parameters": {
                    "backupId": self.source_client.generate_id(),
                    "skipRegionValidation": self.config.skip_region_validation,
                },
            },
        )
        self._credentials = parse_backup_credentials(response)

    def _backup_source_project(self) -> None:
        logger.info("Creating source project snapshot")

        self._run_job(
            self.source_runner,
            PROJECT_BACKUP_COMPONENT,
            {
                "backupId": self._credentials.backup_id,
                "exportStructureOnly": self.config.export_structure_only,
                "skipRegionValidation": self.config.skip_region_validation,
            },
            self.config.tags.backup,
            "Project snapshot create error",
        )
        logger.info("Source project snapshot created")

    def build_restore_parameters(self, credentials: BackupCredentials) -> Dict[str, Any]:
        """Parameters of the restore job for the given backup."""
        parameters = credentials.to_restore_parameters()
        parameters.update({
            "useDefaultBackend": True,
            "restoreConfigs": not self.config.migrate_secrets,
            "dryRun": self.config.dry_run,
            "restorePermanentFiles": self.config.migrate_permanent_files,
            "restoreTriggers": self.config.migrate_triggers,
            "restoreNotifications": self.config.migrate_notifications,
            "restoreBuckets": self.config.migrate_buckets,
            "restoreTables": self.config.migrate_tables,
            "restoreProjectMetadata": self.config.migrate_project_metadata,
            "checkEmptyProject": self.config.check_empty_project,
        })
        return parameters

    def _restore_destination_project(self) -> None:
        logger.info("Restoring current project from snapshot")

        self._run_job(
            self.destination_runner,
            PROJECT_RESTORE_COMPONENT,
            self.build_restore_parameters(self._credentials),
            self.config.tags.restore,
            "Project restore error",
        )
        logger.info("Current project restored")

    def _get_migrations_client(self) -> MigrationsClient:
        if self._migrations_client is None:
            if not self.config.source_manage_token:
                raise UserException("#sourceManageToken must be set.", 422)
            self._migrations_client = MigrationsClient(
                self.source_client.get_service_url("encryption"),
                self.config.source_manage_token,
            )
        return self._migrations_client

    def _migrate_secrets(self) -> None:
        logger.info("Migrating configurations with secrets", extra=SECRETS_LOG_EXTRA)

        default_branch = self.source_client.get_default_branch()
        components = self.source_client.list_components()
        if not components:
            logger.info("There are no components to migrate.", extra=SECRETS_LOG_EXTRA)
            return

        migrations = self._get_migrations_client()
        destination_stack = get_stack_from_project_url(self.config.destination_url)

        for component in components:
            component_id = component["id"]
            if component_id in OBSOLETE_COMPONENTS:
                logger.info(
                    f'Components "{component_id}" is obsolete, skipping migration...',
                    extra=SECRETS_LOG_EXTRA,
                )
                continue

            for configuration in component.get("configurations", []):
                self._migrate_configuration(
                    migrations,
                    destination_stack,
                    component_id,
                    str(configuration["id"]),
                    str(default_branch["id"]),
                )

        logger.info("Secrets in configurations have been migrated.")

    def _migrate_configuration(
        self,
        migrations: MigrationsClient,
        destination_stack: str,
        component_id: str,
        config_id: str,
        branch_id: str
    ) -> None:
        """Migrate one configuration with its secrets; failures are logged, not raised."""
        logger.info(
            f'Migrating configuration "{config_id}" of component "{component_id}"',
            extra=SECRETS_LOG_EXTRA,
        )

        try:
            response = migrations.migrate_configuration(
                self.config.source_token,
                destination_stack,
                self.config.destination_token,
                component_id,
                config_id,
                branch_id,
                self.config.dry_run,
            )
        except ClientError as e:
            self._configuration_failed(component_id, config_id, e)
            return

        if self._workspaces.applies_to(component_id):
            try:
                self._workspaces.process(component_id, config_id)
            except ClientError as e:
                logger.error(
                    f'Sharing Snowflake workspace of configuration "{config_id}" '
                    f'of component "{component_id}" failed: {e.message}',
                    extra={**SECRETS_LOG_EXTRA, "exception": e},
                )
                self._secrets_step().errors.append({
                    "component_id": component_id,
                    "config_id": config_id,
                    "error": e.message,
                })

        message = response.get("message", "")
        if self.config.dry_run:
            message = f"[dry-run] {message}"
        logger.info(message, extra=SECRETS_LOG_EXTRA)

        for warning in response.get("warnings") or []:
            logger.warning(warning, extra=SECRETS_LOG_EXTRA)
            self._secrets_step().warnings.append(warning)

    def _secrets_step(self) -> MigrationStep:
        return self.current_run.get_step("migrate_secrets")

    def _configuration_failed(self, component_id: str, config_id: str, error: ClientError) -> None:
        logger.error(
            f'Migrating configuration "{config_id}" of component "{component_id}" failed: {error.message}',
            extra={**SECRETS_LOG_EXTRA, "exception": error},
        )
        self._secrets_step().errors.append({
            "component_id": component_id,
            "config_id": config_id,
            "error": error.message,
        })

    def build_tables_data_parameters(self) -> Dict[str, Any]:
        """Parameters of the direct table data migration job."""
        parameters: Dict[str, Any] = {"mode": self.config.data_mode.value}
        if self.config.data_mode == DataMode.DATABASE and self.config.db is not None:
            parameters["db"] = self.config.db.to_parameters()

        parameters.update({
            "sourceKbcUrl": self.config.source_url,
            "#sourceKbcToken": self.config.source_token,
            "dryRun": self.config.dry_run,
            "isSourceByodb": self.config.is_source_byodb,
            "sourceByodb": self.config.source_byodb,
            "includeWorkspaceSchemas": list(self.config.include_workspace_schemas),
            "preserveTimestamp": self.config.preserve_timestamp,
        })
        return parameters

    def _migrate_data_of_tables_directly(self) -> None:
        logger.info("Migrate data of tables directly.")

        data = {"parameters": self.build_tables_data_parameters()}
        logger.debug(f"Running {DATA_OF_TABLES_MIGRATE_COMPONENT} with {redact_secrets(data)}")

        # Completion of this job is not awaited
        handle = self.destination_runner.submit_job(
            DATA_OF_TABLES_MIGRATE_COMPONENT,
            data,
            self.config.tags.tables_data,
        )
        logger.info(f"Data of tables migration started in job {handle.id}.")

    def _migrate_snowflake_writers(self) -> None:
        logger.info("Migrating Snowflake writers")

        self._run_job(
            self.destination_runner,
            SNOWFLAKE_WRITER_MIGRATE_COMPONENT,
            {
                "sourceKbcUrl": self.config.source_url,
                "#sourceKbcToken": self.config.source_token,
                "dryRun": self.config.dry_run,
            },
            self.config.tags.snowflake_writers,
            "Snowflake writers migration error",
        )
        logger.info("Snowflake writers migrated")

    def _migrate_orchestrations(self) -> None:
        logger.info("Migrating orchestrations")

        self._run_job(
            self.destination_runner,
            ORCHESTRATOR_MIGRATE_COMPONENT,
            {
                "sourceKbcUrl": self.config.source_url,
                "#sourceKbcToken": self.config.source_token,
            },
            self.config.tags.orchestrations,
            "Orchestrations migration error",
        )
        logger.info("Orchestrations migrated")
