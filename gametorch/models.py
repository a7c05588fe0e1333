#!/usr/bin/env python3
"""
Value types for animation jobs.

The service owns job state; the client only builds requests and reads
snapshots of jobs returned by polling.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .config import ALLOWED_DURATIONS, DEFAULT_DURATION
from .exceptions import ValidationError

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED)


# Numeric status codes used by /api/animation_results
STATUS_CODES = {
    0: JobStatus.PENDING,
    1: JobStatus.RUNNING,
    2: JobStatus.SUCCEEDED,
    3: JobStatus.FAILED,
}

FAILURE_REASON_KEYS = ("error", "failure_reason", "reason", "message")
DEFAULT_FAILURE_REASON = "animation failed and refunded"


@dataclass(frozen=True)
class GenerationRequest:
    """Parameters of a single animation generation."""
    prompt: str
    duration: int = DEFAULT_DURATION
    input_image: Optional[str] = None
    model_id: Optional[int] = None
    model_name: Optional[str] = None

    def validation_errors(self):
        """Return a list of problems that can be detected without the network."""
        errors = []
        if not self.prompt or not self.prompt.strip():
            errors.append("prompt must not be empty")
        if self.duration not in ALLOWED_DURATIONS:
            allowed = " or ".join(str(d) for d in ALLOWED_DURATIONS)
            errors.append(f"duration must be either {allowed} seconds (got {self.duration})")
        if self.model_id is not None and self.model_name is not None:
            errors.append("specify either model_id or model_name, not both")
        return errors

    def validate(self):
        """Raise ValidationError listing every local problem with the request."""
        errors = self.validation_errors()
        if errors:
            raise ValidationError("; ".join(errors))


@dataclass(frozen=True)
class Job:
    """
    A snapshot of a server-side animation job.

    Identifiers are kept exactly as the service sent them.
    """
    id: Any
    status: JobStatus = JobStatus.PENDING
    result_id: Any = None
    failure_reason: Optional[str] = None
    # Body of the create request, only set on the job returned by submit()
    response: Optional[Dict[str, Any]] = field(default=None, compare=False, repr=False)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @classmethod
    def from_results(cls, job_id, payload: Any) -> "Job":
        """
        Build a job snapshot from an /api/animation_results response.

        The endpoint returns either a list of result entries (newest first)
        or a single object, depending on the backend version.

        Args:
            job_id: The animation identifier that was polled
            payload: Decoded JSON body

        Returns:
            Job: Snapshot with status, and result_id/failure_reason when terminal
        """
        entry = _first_entry(payload)
        if entry is None:
            return cls(id=job_id, status=JobStatus.PENDING)

        code = entry.get("status")
        if code is None:
            status = JobStatus.PENDING
        else:
            try:
                status = STATUS_CODES[int(code)]
            except (KeyError, TypeError, ValueError):
                logger.warning(f"Unknown status {code!r} for animation {job_id}, assuming still running")
                status = JobStatus.RUNNING

        if status is JobStatus.SUCCEEDED:
            return cls(id=job_id, status=status, result_id=entry.get("id"))
        if status is JobStatus.FAILED:
            reason = next(
                (str(entry[key]) for key in FAILURE_REASON_KEYS if entry.get(key)),
                DEFAULT_FAILURE_REASON,
            )
            return cls(id=job_id, status=status, failure_reason=reason)
        return cls(id=job_id, status=status)


@dataclass(frozen=True)
class ResultArtifact:
    """Reference to the downloadable ZIP of a succeeded job."""
    job_id: Any
    result_id: Any

    def default_filename(self) -> str:
        return f"animation_{self.job_id}_{self.result_id}.zip"


def _first_entry(payload: Any) -> Optional[Dict[str, Any]]:
    if isinstance(payload, list):
        return payload[0] if payload and isinstance(payload[0], dict) else None
    if isinstance(payload, dict):
        return payload
    return None
