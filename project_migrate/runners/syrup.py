"""Job runner for the legacy Syrup (docker-runner) execution surface."""

from typing import Any, Dict, Optional

from ..clients.base import ApiClient
from ..models.job import JobHandle
from .base import JobRunner

FINISHED_STATUSES = ("success", "error", "cancelled", "terminated")


class SyrupJobRunner(JobRunner):
    """
    Runs jobs through the legacy Syrup queue.

    Orchestrations live outside of configurations on this surface, so they
    have to be migrated by a dedicated job.
    """

    supports_orchestration_migration = True

    def _client(self, service_id: str = "syrup") -> ApiClient:
        return ApiClient(
            self.get_service_url(service_id),
            self.storage_client.token,
            run_id=self.storage_client.run_id,
        )

    def submit_job(self, component_id: str, data: Dict[str, Any], tag: Optional[str] = None) -> JobHandle:
        options: Dict[str, Any] = {"configData": data}
        if tag:
            options["tag"] = tag

        response = self._client().post(f"docker/{component_id}/run", json=options)
        return JobHandle(id=str(response["id"]), component_id=component_id, url=response.get("url"))

    def get_job(self, handle: JobHandle) -> Dict[str, Any]:
        return self._client().get(handle.url or f"queue/job/{handle.id}")

    def is_finished(self, job: Dict[str, Any]) -> bool:
        return bool(job.get("isFinished")) or job.get("status") in FINISHED_STATUSES

    def run_sync_action(self, component_id: str, action: str, data: Dict[str, Any]) -> Dict[str, Any]:
        client = ApiClient(
            self.get_service_url("docker-runner"),
            self.storage_client.token,
            run_id=self.storage_client.run_id,
            max_retries=1,
        )
        return client.post(f"docker/{component_id}/action/{action}", json={"configData": data})
