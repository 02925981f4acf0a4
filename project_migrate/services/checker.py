"""Checks run after the migration finished."""

import logging
from typing import List

from ..clients.storage import StorageClient
from ..exceptions import ClientError, UserException

logger = logging.getLogger(__name__)


class AfterMigrationChecker:
    """Compares the migrated tables with their source tables."""

    def __init__(self, source_client: StorageClient, destination_client: StorageClient):
        self.source_client = source_client
        self.destination_client = destination_client

    def check(self) -> None:
        """
        Run all checks.

        Raises:
            UserException: If any check found a problem
        """
        problems = self.check_tables()
        if problems:
            raise UserException("Failed post migration check.")
        logger.info("Post migration check passed")

    def check_tables(self) -> List[str]:
        """Row counts of destination tables must match the source tables."""
        problems = []

        for bucket in self.destination_client.list_buckets():
            for table in self.destination_client.list_tables(bucket["id"]):
                try:
                    source_table = self.source_client.get_table(table["id"])
                except ClientError as e:
                    logger.warning(e.message)
                    problems.append(e.message)
                    continue

                if source_table.get("rowsCount") != table.get("rowsCount"):
                    message = f'Bad row count: Bucket "{bucket["name"]}", Table "{table["name"]}".'
                    logger.warning(message)
                    problems.append(message)

        return problems
