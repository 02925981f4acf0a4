"""Polling of asynchronous jobs until they finish."""

import logging
import time
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)

MAX_DELAY = 10


def delay_for_attempt(attempt: int, base: int = 2, cap: int = MAX_DELAY) -> int:
    """Seconds to wait after the given (1-based) status check."""
    return min(base ** attempt, cap)


class JobPoller:
    """
    Waits for a job to reach a terminal state.

    The delay between status checks grows exponentially and is capped at
    MAX_DELAY seconds. There is no limit on the number of checks; callers
    that need a timeout have to enforce it themselves.
    """

    def __init__(self, sleep: Callable[[float], None] = time.sleep, max_delay: int = MAX_DELAY):
        """
        Initialize the poller.

        Args:
            sleep: Function used to wait between checks
            max_delay: Maximum delay between two checks
        """
        self._sleep = sleep
        self.max_delay = max_delay

    def wait(
        self,
        fetch_job: Callable[[str], Dict[str, Any]],
        job_id: str,
        is_finished: Callable[[Dict[str, Any]], bool] = lambda job: bool(job.get("isFinished"))
    ) -> Dict[str, Any]:
        """
        Poll a job until it is finished.

        Args:
            fetch_job: Returns the current job payload for a job ID
            job_id: ID of the submitted job
            is_finished: Tells whether a job payload is terminal

        Returns:
            The final job payload
        """
        attempt = 1
        while True:
            job = fetch_job(job_id)
            if is_finished(job):
                logger.debug(f"Job {job_id} finished with status {job.get('status')}")
                return job

            delay = delay_for_attempt(attempt, cap=self.max_delay)
            logger.debug(f"Job {job_id} is {job.get('status')}, checking again in {delay}s")
            self._sleep(delay)
            attempt += 1
