"""Base job runner interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import logging

from ..clients.storage import StorageClient
from ..models.job import JobHandle
from .poller import JobPoller

logger = logging.getLogger(__name__)


class JobRunner(ABC):
    """
    Base class for job runners.

    A job runner executes components of a project either as asynchronous
    jobs (submitted and polled until finished) or as synchronous actions.
    """

    supports_orchestration_migration: bool = False

    def __init__(self, storage_client: StorageClient, poller: Optional[JobPoller] = None):
        """
        Initialize the runner.

        Args:
            storage_client: Storage API client of the project the jobs run in
            poller: Poller used to wait for submitted jobs
        """
        self.storage_client = storage_client
        self.poller = poller or JobPoller()

    def get_service_url(self, service_id: str) -> str:
        return self.storage_client.get_service_url(service_id)

    @abstractmethod
    def submit_job(self, component_id: str, data: Dict[str, Any], tag: Optional[str] = None) -> JobHandle:
        """
        Submit a job without waiting for it.

        Args:
            component_id: Component to run
            data: Configuration data of the job (``{"parameters": {...}}``)
            tag: Optional image tag of the component

        Returns:
            Handle of the submitted job
        """
        pass

    @abstractmethod
    def get_job(self, handle: JobHandle) -> Dict[str, Any]:
        """Fetch the current state of a job."""
        pass

    @abstractmethod
    def is_finished(self, job: Dict[str, Any]) -> bool:
        """Tell whether a job payload is in a terminal state."""
        pass

    @abstractmethod
    def run_sync_action(self, component_id: str, action: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run a synchronous action of a component.

        Args:
            component_id: Component providing the action
            action: Name of the action
            data: Configuration data of the action

        Returns:
            The action response
        """
        pass

    def run_job(self, component_id: str, data: Dict[str, Any], tag: Optional[str] = None) -> Dict[str, Any]:
        """
        Submit a job and wait until it finishes.

        Returns:
            The final job payload; its status is not checked here
        """
        handle = self.submit_job(component_id, data, tag)
        logger.info(f"Job {handle.id} ({component_id}) created")
        return self.poller.wait(
            lambda job_id: self.get_job(handle),
            handle.id,
            is_finished=self.is_finished,
        )
