"""Command line entry point of the project migration."""

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .clients.storage import StorageClient
from .config import Environment, load_config
from .exceptions import ClientError, UserException
from .models.migration import MigrationConfig, MigrationRun
from .orchestrator import MigrationOrchestrator, should_migrate_tables_data
from .runners.factory import create_job_runner
from .services.checker import AfterMigrationChecker
from .utils import check_if_project_empty, check_migration_apps

logger = logging.getLogger(__name__)


def verify_token(client: StorageClient, project: str) -> dict:
    """Verify a project token, reporting a rejected token as a user error."""
    try:
        return client.verify_token()
    except ClientError as e:
        raise UserException(f"Cannot authorize {project} project: {e.message}", e.status_code) from e


def should_check_after_migration(config: MigrationConfig) -> bool:
    """Row counts can be compared only when table data was restored synchronously."""
    if config.dry_run or config.migrate_structure_only:
        return False
    if not (config.migrate_buckets and config.migrate_tables):
        return False
    return not should_migrate_tables_data(config)


def run_migration(config: MigrationConfig, environment: Environment) -> MigrationRun:
    """
    Prepare both projects and run the migration.

    Args:
        config: Validated migration configuration
        environment: Destination project and run context

    Returns:
        The finished migration run
    """
    source_client = StorageClient(config.source_url, config.source_token, run_id=environment.run_id)
    destination_client = StorageClient(config.destination_url, config.destination_token, run_id=environment.run_id)

    source_token_info = verify_token(source_client, "source")
    destination_token_info = verify_token(destination_client, "destination")

    if config.migrate_secrets and not config.source_manage_token:
        raise UserException("#sourceManageToken must be set.", 422)

    try:
        check_migration_apps(source_client, destination_client)
        destination_empty = not config.check_empty_project or check_if_project_empty(destination_client)
    except ClientError as e:
        if not e.is_client_error:
            raise
        raise UserException(e.message, e.status_code) from e

    destination_owner = destination_token_info.get("owner", {})
    if not destination_empty:
        raise UserException(f'Destination project "{destination_owner.get("name")}" is not empty.')

    source_owner = source_token_info.get("owner", {})
    logger.info(
        "Restoring current project from project %s (%d) at %s",
        source_owner.get("name"),
        source_owner.get("id", 0),
        config.source_url,
    )

    orchestrator = MigrationOrchestrator(
        config,
        source_runner=create_job_runner(source_client, source_token_info),
        destination_runner=create_job_runner(destination_client, destination_token_info),
        source_client=source_client,
        destination_client=destination_client,
    )
    result = orchestrator.run()

    if should_check_after_migration(config):
        AfterMigrationChecker(source_client, destination_client).check()
    else:
        logger.info("Post migration check skipped")

    return result


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Project Migration - Restore a project from another project"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    run_parser = subparsers.add_parser("run", help="Run a migration")
    run_parser.add_argument("--config", help="Path to config file (default: $KBC_DATADIR/config.json)")
    run_parser.add_argument("--dry-run", action="store_true", help="Simulate without changes")
    run_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    args = parser.parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if getattr(args, "verbose", False) else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if args.command != "run":
        parser.print_help()
        return 0

    try:
        environment = Environment.from_environ()
        config_path = Path(args.config) if args.config else Path(environment.data_dir) / "config.json"
        config = load_config(config_path, environment)
        if args.dry_run:
            config = dataclasses.replace(config, dry_run=True)

        logger.debug(f"Migration configuration: {json.dumps(config.to_dict())}")
        result = run_migration(config, environment)

    except UserException as e:
        logger.error(e.message)
        return 1
    except Exception:
        logger.exception("Migration failed with an application error")
        return 2

    logger.debug(f"Migration run: {json.dumps(result.to_dict())}")
    logger.info(f"Migration finished: {result.status.value}, steps: {', '.join(result.executed_steps)}")
    if result.duration_seconds:
        logger.info(f"Duration: {result.duration_seconds:.2f} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())
