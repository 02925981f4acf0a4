"""Job runners for the platform execution surfaces."""

from .base import JobRunner
from .poller import JobPoller, delay_for_attempt, MAX_DELAY
from .queue import QueueV2JobRunner
from .syrup import SyrupJobRunner
from .factory import create_job_runner

__all__ = [
    "JobRunner",
    "JobPoller",
    "delay_for_attempt",
    "MAX_DELAY",
    "QueueV2JobRunner",
    "SyrupJobRunner",
    "create_job_runner",
]
