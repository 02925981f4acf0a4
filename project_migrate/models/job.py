"""Job models shared by the job runners."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

JOB_STATUS_SUCCESS = "success"


@dataclass(frozen=True)
class JobHandle:
    """A submitted job, valid until its terminal status is observed."""
    id: str
    component_id: str
    url: Optional[str] = None


@dataclass(frozen=True)
class JobResult:
    """Terminal state of a finished job."""
    id: str
    status: str
    message: str = ""

    @property
    def is_success(self) -> bool:
        return self.status == JOB_STATUS_SUCCESS

    @classmethod
    def from_dict(cls, job: Dict[str, Any]) -> "JobResult":
        """Create from a job payload; jobs without a result message report their status."""
        result = job.get("result") or {}
        message = result.get("message") if isinstance(result, dict) else None
        status = job.get("status") or ""
        return cls(
            id=str(job.get("id", "")),
            status=status,
            message=message or f"job finished with status \"{status or 'unknown'}\"",
        )
