import json
import logging
from unittest.mock import MagicMock, patch

import pytest

from conftest import make_config
from project_migrate import cli
from project_migrate.exceptions import ClientError, UserException
from project_migrate.models.migration import MigrationRun, MigrationStatus


@pytest.fixture
def environment(monkeypatch, tmp_path):
    monkeypatch.setenv("KBC_URL", "https://connection.eu-central-1.keboola.com")
    monkeypatch.setenv("KBC_TOKEN", "destination-token")
    monkeypatch.setenv("KBC_DATADIR", str(tmp_path))
    (tmp_path / "config.json").write_text(json.dumps({
        "parameters": {"#sourceKbcToken": "source-token"},
    }))
    return tmp_path


def finished_run():
    run = MigrationRun()
    run.status = MigrationStatus.COMPLETED
    return run


@patch("project_migrate.cli.run_migration")
def test_main_runs_migration(run_migration, environment):
    run_migration.return_value = finished_run()

    assert cli.main(["run", "--dry-run"]) == 0

    config, env = run_migration.call_args[0]
    assert config.dry_run is True
    assert config.destination_token == "destination-token"
    assert env.data_dir == str(environment)


@patch("project_migrate.cli.run_migration")
def test_main_user_error_exit_code(run_migration, environment):
    run_migration.side_effect = UserException("Destination project is not empty.")

    assert cli.main(["run"]) == 1


@patch("project_migrate.cli.run_migration")
def test_main_application_error_exit_code(run_migration, environment):
    run_migration.side_effect = ClientError("Internal Server Error", status_code=500)

    assert cli.main(["run"]) == 2


def test_main_without_environment(monkeypatch):
    monkeypatch.delenv("KBC_URL", raising=False)
    monkeypatch.delenv("KBC_TOKEN", raising=False)

    assert cli.main(["run"]) == 1


def test_verify_token_reports_rejected_token():
    client = MagicMock()
    client.verify_token.side_effect = ClientError("Invalid access token", status_code=401)

    with pytest.raises(UserException, match="Cannot authorize source project: Invalid access token"):
        cli.verify_token(client, "source")


@pytest.mark.parametrize("overrides,expected", [
    ({"direct_data_migration": False}, True),
    ({"direct_data_migration": False, "dry_run": True}, False),
    ({"direct_data_migration": False, "migrate_tables": False}, False),
    ({"direct_data_migration": False, "migrate_structure_only": True}, False),
    ({}, False),
])
def test_should_check_after_migration(overrides, expected):
    assert cli.should_check_after_migration(make_config(**overrides)) is expected


def test_run_migration_requires_manage_token_for_secrets():
    config = make_config(migrate_secrets=True)
    storage = MagicMock()
    storage.verify_token.return_value = {"owner": {"id": 1, "name": "Project", "features": []}}

    with patch("project_migrate.cli.StorageClient", return_value=storage):
        with pytest.raises(UserException, match="#sourceManageToken must be set.") as exc_info:
            cli.run_migration(config, MagicMock(run_id=None))

    assert exc_info.value.code == 422


def test_run_migration_rejects_non_empty_destination():
    config = make_config(direct_data_migration=False)
    storage = MagicMock()
    storage.verify_token.return_value = {"owner": {"id": 1, "name": "My Project", "features": []}}

    with patch("project_migrate.cli.StorageClient", return_value=storage), \
            patch("project_migrate.cli.check_migration_apps"), \
            patch("project_migrate.cli.check_if_project_empty", return_value=False):
        with pytest.raises(UserException, match='Destination project "My Project" is not empty.'):
            cli.run_migration(config, MagicMock(run_id=None))


def test_run_migration_runs_orchestrator_and_checker():
    config = make_config(direct_data_migration=False)
    storage = MagicMock()
    storage.verify_token.return_value = {"owner": {"id": 1, "name": "My Project", "features": []}}
    run = finished_run()

    with patch("project_migrate.cli.StorageClient", return_value=storage), \
            patch("project_migrate.cli.check_migration_apps"), \
            patch("project_migrate.cli.check_if_project_empty", return_value=True), \
            patch("project_migrate.cli.MigrationOrchestrator") as orchestrator, \
            patch("project_migrate.cli.AfterMigrationChecker") as checker:
        orchestrator.return_value.run.return_value = run

        assert cli.run_migration(config, MagicMock(run_id=None)) is run

    checker.return_value.check.assert_called_once_with()


@pytest.mark.parametrize("failing_check", ["check_migration_apps", "check_if_project_empty"])
def test_run_migration_reports_rejected_preflight_request_as_user_error(failing_check):
    config = make_config()
    storage = MagicMock()
    storage.verify_token.return_value = {"owner": {"id": 1, "name": "My Project", "features": []}}
    error = ClientError("Access denied", status_code=403)

    with patch("project_migrate.cli.StorageClient", return_value=storage), \
            patch("project_migrate.cli.check_migration_apps"), \
            patch("project_migrate.cli.check_if_project_empty", return_value=True), \
            patch(f"project_migrate.cli.{failing_check}", side_effect=error):
        with pytest.raises(UserException) as exc_info:
            cli.run_migration(config, MagicMock(run_id=None))

    assert exc_info.value.message == "Access denied"
    assert exc_info.value.code == 403
    assert exc_info.value.__cause__ is error


def test_run_migration_propagates_preflight_server_error():
    storage = MagicMock()
    storage.verify_token.return_value = {"owner": {"id": 1, "name": "My Project", "features": []}}
    error = ClientError("Internal Server Error", status_code=500)

    with patch("project_migrate.cli.StorageClient", return_value=storage), \
            patch("project_migrate.cli.check_migration_apps", side_effect=error):
        with pytest.raises(ClientError):
            cli.run_migration(make_config(), MagicMock(run_id=None))


@patch("project_migrate.cli.run_migration")
def test_main_logs_run_summary(run_migration, environment, caplog):
    caplog.set_level(logging.DEBUG)
    run = finished_run()
    step = run.add_step("restore")
    step.status = MigrationStatus.COMPLETED
    run_migration.return_value = run

    assert cli.main(["run", "--verbose"]) == 0

    summaries = [m for m in caplog.messages if m.startswith("Migration run: ")]
    assert len(summaries) == 1
    summary = json.loads(summaries[0][len("Migration run: "):])
    assert summary["status"] == "completed"
    assert summary["steps"][0]["name"] == "restore"
    assert any(m.startswith("Migration configuration: ") for m in caplog.messages)
    assert not any("source-token" in m for m in caplog.messages)
