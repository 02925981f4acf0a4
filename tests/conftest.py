from typing import Any, Dict, List, Optional

import pytest

from project_migrate.exceptions import ClientError
from project_migrate.models.component import ComponentConfiguration
from project_migrate.models.job import JobHandle
from project_migrate.models.migration import MigrationConfig

S3_CREDENTIALS_RESPONSE = {
    "backupId": "123",
    "backupUri": "https://kbc.s3.amazonaws.com/data-takeout/us-east-1/4788/395904684/",
    "region": "us-east-1",
    "credentials": {
        "accessKeyId": "xxx",
        "secretAccessKey": "yyy",
        "sessionToken": "zzz",
        "expiration": "2018-05-23T10:49:02+00:00",
    },
}


class DummyRunner:
    """Records jobs instead of running them."""

    def __init__(
        self,
        supports_orchestration_migration: bool = True,
        statuses: Optional[Dict[str, Dict[str, Any]]] = None,
        sync_response: Optional[Dict[str, Any]] = None,
        errors: Optional[Dict[str, Exception]] = None,
    ) -> None:
        self.supports_orchestration_migration = supports_orchestration_migration
        self.statuses = statuses or {}
        self.sync_response = sync_response if sync_response is not None else S3_CREDENTIALS_RESPONSE
        self.errors = errors or {}
        self.jobs: List[tuple] = []
        self.submitted: List[tuple] = []
        self.sync_actions: List[tuple] = []

    def run_job(self, component_id: str, data: Dict[str, Any], tag: Optional[str] = None):
        self.jobs.append((component_id, data, tag))
        if component_id in self.errors:
            raise self.errors[component_id]
        return self.statuses.get(component_id, {"id": "1", "status": "success"})

    def submit_job(self, component_id: str, data: Dict[str, Any], tag: Optional[str] = None):
        self.submitted.append((component_id, data, tag))
        return JobHandle(id=str(len(self.submitted)), component_id=component_id)

    def run_sync_action(self, component_id: str, action: str, data: Dict[str, Any]):
        self.sync_actions.append((component_id, action, data))
        return self.sync_response

    @property
    def component_ids(self) -> List[str]:
        return [job[0] for job in self.jobs]


class DummyStorage:
    """In-memory stand-in for the Storage API client."""

    def __init__(
        self,
        components: Optional[List[Dict[str, Any]]] = None,
        configurations: Optional[Dict[tuple, Dict[str, Any]]] = None,
        buckets: Optional[List[Dict[str, Any]]] = None,
        tables: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        available_components: Optional[List[str]] = None,
    ) -> None:
        self.components = components or []
        self.configurations = configurations or {}
        self.buckets = buckets or []
        self.tables = tables or {}
        self.available_components = available_components or []
        self.updated: List[ComponentConfiguration] = []
        self.config_reads: List[tuple] = []

    def generate_id(self) -> str:
        return "123"

    def get_default_branch(self) -> Dict[str, Any]:
        return {"id": 456, "isDefault": True}

    def get_service_url(self, service_id: str) -> str:
        return f"https://{service_id}.keboola.com"

    def list_components(self) -> List[Dict[str, Any]]:
        return self.components

    def list_available_components(self) -> List[str]:
        return self.available_components

    def get_configuration(self, component_id: str, config_id: str) -> Optional[ComponentConfiguration]:
        self.config_reads.append((component_id, config_id))
        data = self.configurations.get((component_id, config_id))
        if data is None:
            return None
        return ComponentConfiguration.from_dict(component_id, data)

    def update_configuration(self, configuration: ComponentConfiguration) -> Dict[str, Any]:
        self.updated.append(configuration)
        self.configurations[(configuration.component_id, configuration.id)] = {
            "id": configuration.id,
            "name": configuration.name,
            "configuration": configuration.configuration,
        }
        return {}

    def list_buckets(self) -> List[Dict[str, Any]]:
        return self.buckets

    def list_tables(self, bucket_id: str) -> List[Dict[str, Any]]:
        return self.tables.get(bucket_id, [])

    def get_table(self, table_id: str) -> Dict[str, Any]:
        for tables in self.tables.values():
            for table in tables:
                if table["id"] == table_id:
                    return table
        raise ClientError(f"The table {table_id} was not found", status_code=404)


class DummyMigrations:
    """Records configuration migrations; raises for configured config IDs."""

    def __init__(self, failures: Optional[Dict[str, ClientError]] = None, warnings=None) -> None:
        self.failures = failures or {}
        self.warnings = warnings or []
        self.calls: List[Dict[str, Any]] = []

    def migrate_configuration(
        self,
        source_token,
        destination_stack,
        destination_token,
        component_id,
        config_id,
        branch_id,
        dry_run=False,
    ):
        self.calls.append({
            "source_token": source_token,
            "destination_stack": destination_stack,
            "destination_token": destination_token,
            "component_id": component_id,
            "config_id": config_id,
            "branch_id": branch_id,
            "dry_run": dry_run,
        })
        if config_id in self.failures:
            raise self.failures[config_id]
        return {
            "message": f'Configuration with ID "{config_id}" successfully migrated to stack "{destination_stack}".',
            "warnings": self.warnings,
            "data": {"configId": config_id},
        }


def make_config(**overrides) -> MigrationConfig:
    values = {
        "source_url": "https://connection.keboola.com",
        "source_token": "source-token",
        "destination_url": "https://connection.eu-central-1.keboola.com",
        "destination_token": "destination-token",
    }
    values.update(overrides)
    return MigrationConfig(**values)


@pytest.fixture
def source_storage() -> DummyStorage:
    return DummyStorage()


@pytest.fixture
def destination_storage() -> DummyStorage:
    return DummyStorage()
