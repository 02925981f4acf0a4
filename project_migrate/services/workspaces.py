"""Sharing of Snowflake workspaces between migrated writer configurations."""

import copy
import logging
from typing import Any, Dict, Optional

from ..clients.storage import StorageClient

logger = logging.getLogger(__name__)

SNOWFLAKE_WRITER_COMPONENTS = (
    "keboola.wr-db-snowflake",
    "keboola.wr-db-snowflake-gcs",
    "keboola.wr-db-snowflake-gcs-s3",
    "keboola.wr-snowflake-blob-storage",
)

LOG_EXTRA = {"step": "secrets"}


class WorkspaceDeduplicator:
    """
    Keeps writer configurations that share a source workspace sharing one
    destination workspace.

    Each configuration migrated with its secrets gets a new workspace in the
    destination project. The first configuration seen for a source workspace
    user keeps its new workspace; all later ones are rewritten to use it.

    One instance belongs to one migration run.
    """

    def __init__(
        self,
        source_client: StorageClient,
        destination_client: StorageClient,
        dry_run: bool = False
    ):
        """
        Initialize the deduplicator.

        Args:
            source_client: Storage API client of the source project
            destination_client: Storage API client of the destination project
            dry_run: If True, nothing is read or written
        """
        self.source_client = source_client
        self.destination_client = destination_client
        self.dry_run = dry_run
        self._workspaces: Dict[str, Dict[str, Any]] = {}

    @staticmethod
    def applies_to(component_id: str) -> bool:
        return component_id in SNOWFLAKE_WRITER_COMPONENTS

    @property
    def workspaces(self) -> Dict[str, Dict[str, Any]]:
        """Destination ``db`` blocks by source workspace user."""
        return dict(self._workspaces)

    def process(self, component_id: str, config_id: str) -> Optional[str]:
        """
        Apply the sharing rule to a freshly migrated configuration.

        Args:
            component_id: Snowflake writer component
            config_id: ID of the configuration (same in both projects)

        Returns:
            The source workspace user the configuration was matched on, or
            None when the configuration has no workspace
        """
        if self.dry_run:
            return None

        source_config = self.source_client.get_configuration(component_id, config_id)
        source_credentials = source_config.db_credentials if source_config else None
        if source_credentials is None or not source_credentials.user:
            logger.info(
                f"Configuration with ID '{config_id}' ({component_id}) does not have a Snowflake workspace.",
                extra=LOG_EXTRA,
            )
            return None

        user = source_credentials.user
        destination_config = self.destination_client.get_configuration(component_id, config_id)
        if destination_config is None:
            logger.warning(
                f"Configuration with ID '{config_id}' ({component_id}) not found in the destination project.",
                extra=LOG_EXTRA,
            )
            return None

        if user in self._workspaces:
            updated = destination_config.with_db_block(self._workspaces[user])
            self.destination_client.update_configuration(updated)
            logger.info(
                f"Used existing Snowflake workspace '{user}' for configuration "
                f"with ID '{config_id}' ({component_id}).",
                extra=LOG_EXTRA,
            )
            return user

        destination_db = destination_config.db_block
        if destination_db is not None:
            self._workspaces[user] = copy.deepcopy(destination_db)
        return user
