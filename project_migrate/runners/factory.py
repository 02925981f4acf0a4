"""Selection of the job runner matching a project's execution surface."""

import logging
from typing import Any, Dict, Optional

from ..clients.storage import StorageClient
from .base import JobRunner
from .poller import JobPoller
from .queue import QueueV2JobRunner
from .syrup import SyrupJobRunner

logger = logging.getLogger(__name__)

QUEUE_V2_FEATURE = "queuev2"


def create_job_runner(
    storage_client: StorageClient,
    token_info: Optional[Dict[str, Any]] = None,
    poller: Optional[JobPoller] = None
) -> JobRunner:
    """
    Create the job runner for a project.

    Projects with the queue v2 feature run jobs on the Job Queue, all other
    projects on the legacy Syrup queue.

    Args:
        storage_client: Storage API client of the project
        token_info: Result of token verification (fetched when not given)
        poller: Poller shared by the runner's jobs
    """
    if token_info is None:
        token_info = storage_client.verify_token()

    features = token_info.get("owner", {}).get("features", [])
    if QUEUE_V2_FEATURE in features:
        logger.debug(f"Using Job Queue runner for {storage_client.url}")
        return QueueV2JobRunner(storage_client, poller)

    logger.debug(f"Using Syrup runner for {storage_client.url}")
    return SyrupJobRunner(storage_client, poller)
