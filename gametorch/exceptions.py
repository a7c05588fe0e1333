#!/usr/bin/env python3
"""
Error taxonomy for the GameTorch client.

Every error carries an ``exit_code`` so the CLI can map a failure category
to a distinct process exit status.
"""
from typing import Optional


class GameTorchError(Exception):
    """Base class for all client errors."""

    exit_code = 1


class ConfigurationError(GameTorchError):
    """Missing or invalid local configuration, e.g. no API key."""

    exit_code = 1


class ValidationError(GameTorchError, ValueError):
    """Bad local input: missing image, empty prompt, invalid duration."""

    exit_code = 2


class TransportError(GameTorchError):
    """A network request could not be completed after all retries."""

    exit_code = 3


class APIError(GameTorchError):
    """The service answered with an error status or an unusable body."""

    exit_code = 4

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class JobFailedError(GameTorchError):
    """The service reported the job as failed. Never retried."""

    exit_code = 5

    def __init__(self, job_id: str, reason: str):
        super().__init__(f"animation {job_id} failed: {reason}")
        self.job_id = job_id
        self.reason = reason


class JobTimeoutError(GameTorchError, TimeoutError):
    """A blocking wait exceeded its timeout."""

    exit_code = 6

    def __init__(self, job_id: str, last_status, elapsed: float, message: Optional[str] = None):
        status_name = getattr(last_status, "value", last_status)
        super().__init__(
            message
            or f"timed out after {elapsed:.1f}s waiting for animation {job_id} (last status: {status_name})"
        )
        self.job_id = job_id
        self.last_status = last_status
        self.elapsed = elapsed


class ArtifactWriteError(GameTorchError, OSError):
    """The result archive could not be written to the local filesystem."""

    exit_code = 7

    def __init__(self, path: str, reason: str):
        super().__init__(f"could not write {path}: {reason}")
        self.path = path
        self.reason = reason
