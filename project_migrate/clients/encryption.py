"""Encryption API client for migrating configurations with secrets."""

from typing import Any, Dict

from .base import ApiClient


class MigrationsClient(ApiClient):
    """
    Client for the configuration migration endpoint of the Encryption API.

    The API decrypts the secrets of a source configuration, re-encrypts them
    for the destination stack and project and creates the configuration there.
    Requires a manage token with access to the source project.
    """

    def __init__(self, url: str, manage_token: str, **kwargs):
        super().__init__(url, manage_token, auth_header="X-KBC-ManageApiToken", **kwargs)

    def migrate_configuration(
        self,
        source_token: str,
        destination_stack: str,
        destination_token: str,
        component_id: str,
        config_id: str,
        branch_id: str,
        dry_run: bool = False
    ) -> Dict[str, Any]:
        """
        Migrate one configuration to the destination project.

        Args:
            source_token: Storage token of the source project
            destination_stack: Hostname of the destination stack
            destination_token: Storage token of the destination project
            component_id: Component of the configuration
            config_id: Configuration ID
            branch_id: Source branch the configuration is read from
            dry_run: If True, only report what would be migrated

        Returns:
            Response with ``message``, optional ``warnings`` and ``data``

        Raises:
            ClientError: If the API rejects the migration
        """
        return self.post("migrate-configuration", json={
            "sourceToken": source_token,
            "destinationStack": destination_stack,
            "destinationToken": destination_token,
            "componentId": component_id,
            "configId": config_id,
            "branchId": branch_id,
            "dryRun": dry_run,
        })
