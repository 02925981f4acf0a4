"""Read credentials of a project backup, one variant per storage backend."""

from dataclasses import dataclass, field
from typing import Any, Dict, Union

from ..exceptions import UnrecognizedCredentialsError


@dataclass(frozen=True)
class S3Credentials:
    """Backup stored in AWS S3."""
    backup_id: str
    backup_uri: str
    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: str = field(repr=False)

    def to_restore_parameters(self) -> Dict[str, Any]:
        return {
            "s3": {
                "backupUri": self.backup_uri,
                "accessKeyId": self.access_key_id,
                "#secretAccessKey": self.secret_access_key,
                "#sessionToken": self.session_token,
            },
        }


@dataclass(frozen=True)
class AbsCredentials:
    """Backup stored in Azure Blob Storage."""
    backup_id: str
    container: str
    connection_string: str = field(repr=False)

    def to_restore_parameters(self) -> Dict[str, Any]:
        return {
            "abs": {
                "container": self.container,
                "#connectionString": self.connection_string,
            },
        }


@dataclass(frozen=True)
class GcsCredentials:
    """Backup stored in Google Cloud Storage."""
    backup_id: str
    project_id: str
    bucket: str
    backup_uri: str
    access_token: str = field(repr=False)
    expires_in: Any = None
    token_type: str = "Bearer"

    def to_restore_parameters(self) -> Dict[str, Any]:
        return {
            "gcs": {
                "projectId": self.project_id,
                "bucket": self.bucket,
                "backupUri": self.backup_uri,
                "credentials": {
                    "#accessToken": self.access_token,
                    "expiresIn": self.expires_in,
                    "tokenType": self.token_type,
                },
            },
        }


BackupCredentials = Union[S3Credentials, AbsCredentials, GcsCredentials]


def parse_backup_credentials(payload: Dict[str, Any]) -> BackupCredentials:
    """
    Parse the response of the ``generate-read-credentials`` action.

    The backend is recognized by the credential fields it returns.

    Args:
        payload: Sync action response

    Returns:
        One of the backup credentials variants

    Raises:
        UnrecognizedCredentialsError: If no variant matches the payload
    """
    credentials = payload.get("credentials") or {}
    backup_id = str(payload.get("backupId", ""))

    if "secretAccessKey" in credentials:
        return S3Credentials(
            backup_id=backup_id,
            backup_uri=payload.get("backupUri", ""),
            access_key_id=credentials.get("accessKeyId", ""),
            secret_access_key=credentials["secretAccessKey"],
            session_token=credentials.get("sessionToken", ""),
        )

    if "connectionString" in credentials:
        return AbsCredentials(
            backup_id=backup_id,
            container=payload.get("container", ""),
            connection_string=credentials["connectionString"],
        )

    if "accessToken" in credentials and "projectId" in payload and "bucket" in payload:
        return GcsCredentials(
            backup_id=backup_id,
            project_id=payload["projectId"],
            bucket=payload["bucket"],
            backup_uri=payload.get("backupUri", ""),
            access_token=credentials["accessToken"],
            expires_in=credentials.get("expiresIn"),
            token_type=credentials.get("tokenType", "Bearer"),
        )

    raise UnrecognizedCredentialsError()
