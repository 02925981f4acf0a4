"""Job runner for the Job Queue (queue v2) execution surface."""

from typing import Any, Dict, Optional

from ..clients.base import ApiClient
from ..models.job import JobHandle
from .base import JobRunner


class QueueV2JobRunner(JobRunner):
    """
    Runs jobs through the Job Queue API and actions through the Sync Actions API.

    Orchestrations are regular configurations on this surface and are
    migrated together with the rest of the project.
    """

    supports_orchestration_migration = False

    def _queue_client(self) -> ApiClient:
        return ApiClient(
            self.get_service_url("queue"),
            self.storage_client.token,
            run_id=self.storage_client.run_id,
        )

    def submit_job(self, component_id: str, data: Dict[str, Any], tag: Optional[str] = None) -> JobHandle:
        job_data: Dict[str, Any] = {
            "component": component_id,
            "mode": "run",
            "configData": data,
        }
        if tag:
            job_data["tag"] = tag

        response = self._queue_client().post("jobs", json=job_data)
        return JobHandle(id=str(response["id"]), component_id=component_id)

    def get_job(self, handle: JobHandle) -> Dict[str, Any]:
        return self._queue_client().get(f"jobs/{handle.id}")

    def is_finished(self, job: Dict[str, Any]) -> bool:
        return bool(job.get("isFinished"))

    def run_sync_action(self, component_id: str, action: str, data: Dict[str, Any]) -> Dict[str, Any]:
        client = ApiClient(
            self.get_service_url("sync-actions"),
            self.storage_client.token,
            run_id=self.storage_client.run_id,
        )
        return client.post("actions", json={
            "componentId": component_id,
            "action": action,
            "configData": data,
        })
