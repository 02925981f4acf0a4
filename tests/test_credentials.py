import pytest

from conftest import S3_CREDENTIALS_RESPONSE
from project_migrate.exceptions import UnrecognizedCredentialsError
from project_migrate.models.credentials import (
    AbsCredentials,
    GcsCredentials,
    S3Credentials,
    parse_backup_credentials,
)


def test_parse_s3_credentials():
    credentials = parse_backup_credentials(S3_CREDENTIALS_RESPONSE)

    assert isinstance(credentials, S3Credentials)
    assert credentials.backup_id == "123"
    assert credentials.to_restore_parameters() == {
        "s3": {
            "backupUri": "https://kbc.s3.amazonaws.com/data-takeout/us-east-1/4788/395904684/",
            "accessKeyId": "xxx",
            "#secretAccessKey": "yyy",
            "#sessionToken": "zzz",
        },
    }


def test_parse_abs_credentials():
    credentials = parse_backup_credentials({
        "backupId": "123",
        "container": "abcdefgh",
        "credentials": {"connectionString": "BlobEndpoint=https://example.blob.core.windows.net"},
    })

    assert isinstance(credentials, AbsCredentials)
    assert credentials.to_restore_parameters() == {
        "abs": {
            "container": "abcdefgh",
            "#connectionString": "BlobEndpoint=https://example.blob.core.windows.net",
        },
    }


def test_parse_gcs_credentials():
    credentials = parse_backup_credentials({
        "backupId": "123",
        "projectId": "gcp-project",
        "bucket": "backups",
        "backupUri": "gs://backups/123/",
        "credentials": {
            "accessToken": "ya29.token",
            "expiresIn": 3599,
            "tokenType": "Bearer",
        },
    })

    assert isinstance(credentials, GcsCredentials)
    assert credentials.to_restore_parameters() == {
        "gcs": {
            "projectId": "gcp-project",
            "bucket": "backups",
            "backupUri": "gs://backups/123/",
            "credentials": {
                "#accessToken": "ya29.token",
                "expiresIn": 3599,
                "tokenType": "Bearer",
            },
        },
    }


@pytest.mark.parametrize("payload", [
    {"backupId": "123", "credentials": {}},
    {"backupId": "123"},
    {"backupId": "123", "credentials": {"accessToken": "token"}},
])
def test_unrecognized_credentials(payload):
    with pytest.raises(UnrecognizedCredentialsError, match="Unrecognized restore credentials."):
        parse_backup_credentials(payload)


def test_secrets_are_hidden_from_repr():
    credentials = parse_backup_credentials(S3_CREDENTIALS_RESPONSE)

    assert "yyy" not in repr(credentials)
    assert "zzz" not in repr(credentials)
