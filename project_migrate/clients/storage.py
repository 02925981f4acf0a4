"""Storage API client."""

import json
import logging
from typing import Any, Dict, List, Optional

from .base import ApiClient
from ..exceptions import ClientError
from ..models.component import ComponentConfiguration

logger = logging.getLogger(__name__)


class StorageClient(ApiClient):
    """
    Client for the project Storage API.

    Only the endpoints needed by the migration are implemented.
    """

    API_PREFIX = "/v2/storage"

    def __init__(self, url: str, token: str, run_id: Optional[str] = None, **kwargs):
        """
        Initialize the Storage API client.

        Args:
            url: Project URL (stack connection URL)
            token: Storage API token
            run_id: Run ID propagated to the platform
            **kwargs: Additional arguments for ApiClient
        """
        super().__init__(url, token, auth_header="X-StorageApi-Token", run_id=run_id, **kwargs)
        self.url = url
        self._index: Optional[Dict[str, Any]] = None

    def api_path(self, path: str) -> str:
        return f"{self.API_PREFIX}/{path.lstrip('/')}" if path else self.API_PREFIX

    def verify_token(self) -> Dict[str, Any]:
        """Verify the token and return its detail including the project owner."""
        return self.get(self.api_path("tokens/verify"))

    def index_action(self) -> Dict[str, Any]:
        """Stack index with the available services and components (cached)."""
        if self._index is None:
            self._index = self.get(self.api_path(""))
        return self._index

    def get_service_url(self, service_id: str) -> str:
        """
        Get the URL of a platform service from the stack index.

        Raises:
            LookupError: If the stack does not provide the service
        """
        for service in self.index_action().get("services", []):
            if service.get("id") == service_id:
                return service["url"]
        raise LookupError(f"{service_id} service not found")

    def list_available_components(self) -> List[str]:
        """IDs of components available on the stack."""
        return [c["id"] for c in self.index_action().get("components", [])]

    def generate_id(self) -> str:
        """Generate a unique ID."""
        return str(self.post(self.api_path("tickets"))["id"])

    def list_branches(self) -> List[Dict[str, Any]]:
        return self.get(self.api_path("dev-branches/"))

    def get_default_branch(self) -> Dict[str, Any]:
        """The default (production) branch of the project."""
        for branch in self.list_branches():
            if branch.get("isDefault") is True:
                return branch
        raise LookupError("Default branch not found")

    def list_components(self) -> List[Dict[str, Any]]:
        """Components of the project including their configurations."""
        return self.get(self.api_path("components"), params={"include": "configuration"})

    def get_configuration(self, component_id: str, config_id: str) -> Optional[ComponentConfiguration]:
        """The configuration, or None if the project does not have it."""
        try:
            data = self.get(self.api_path(f"components/{component_id}/configs/{config_id}"))
        except ClientError as e:
            if e.status_code == 404:
                return None
            raise
        if not data:
            return None
        return ComponentConfiguration.from_dict(component_id, data)

    def update_configuration(self, configuration: ComponentConfiguration) -> Dict[str, Any]:
        """Update a configuration; name, description and state are sent unchanged."""
        path = self.api_path(f"components/{configuration.component_id}/configs/{configuration.id}")
        return self.put(path, data={
            "name": configuration.name,
            "description": configuration.description,
            "isDisabled": "true" if configuration.is_disabled else "false",
            "configuration": json.dumps(configuration.configuration),
        })

    def list_buckets(self) -> List[Dict[str, Any]]:
        return self.get(self.api_path("buckets"))

    def list_tables(self, bucket_id: str) -> List[Dict[str, Any]]:
        return self.get(self.api_path(f"buckets/{bucket_id}/tables"))

    def get_table(self, table_id: str) -> Dict[str, Any]:
        return self.get(self.api_path(f"tables/{table_id}"))
