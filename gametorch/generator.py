#!/usr/bin/env python3
import os
import stat
import time
import logging
import tempfile
from typing import Any, Dict, Optional

import requests

from .clients.base import BaseClient
from .config import (
    DEFAULT_MODEL_ID,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_ZIP_TIMEOUT,
    MIN_POLL_INTERVAL,
    PROGRESS_LOG_INTERVAL,
)
from .exceptions import (
    APIError,
    ArtifactWriteError,
    JobFailedError,
    JobTimeoutError,
    TransportError,
)
from .image_utils import encode_image_base64, load_input_image
from .models import GenerationRequest, Job, JobStatus, ResultArtifact

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def build_request_body(request: GenerationRequest, image_data: Optional[bytes] = None) -> Dict[str, Any]:
    """
    Build the JSON body for POST /api/animation.

    Args:
        request: The generation parameters
        image_data: Raw bytes of the input image, if any

    Returns:
        dict: Request body with exactly one animation model selector
    """
    body: Dict[str, Any] = {
        "prompt": request.prompt,
        "duration_seconds": request.duration,
        "input_image_base64": encode_image_base64(image_data),
    }
    if request.model_name is not None:
        body["animation_model_name"] = request.model_name
    else:
        body["animation_model_id"] = request.model_id if request.model_id is not None else DEFAULT_MODEL_ID
    return body


class AnimationGenerator:
    """Submits animation jobs, waits for them to finish and fetches the results."""

    def __init__(self,
                 client: BaseClient,
                 poll_interval: float = DEFAULT_POLL_INTERVAL,
                 zip_timeout: float = DEFAULT_ZIP_TIMEOUT,
                 sleep=time.sleep,
                 clock=time.monotonic):
        """
        Initialize the generator.

        Args:
            client: Transport used to talk to the service
            poll_interval: Default seconds between status checks (at least MIN_POLL_INTERVAL)
            zip_timeout: Seconds to wait for the archive once the job succeeded
            sleep: Sleep function, replaceable in tests
            clock: Monotonic clock, replaceable in tests
        """
        self.client = client
        self.poll_interval = poll_interval
        self.zip_timeout = zip_timeout
        self._sleep = sleep
        self._clock = clock

    def submit(self, request: GenerationRequest) -> Job:
        """
        Send a generation request to the service.

        Everything that can be checked locally is checked before the first
        network call.

        Args:
            request: The generation parameters

        Returns:
            Job: A pending job carrying the server-assigned identifier

        Raises:
            ValidationError: Bad duration, empty prompt, conflicting model
                selectors, or an unreadable input image
            TransportError: The request could not be delivered
            APIError: The service rejected the request
        """
        request.validate()

        image_data = load_input_image(request.input_image) if request.input_image else None
        body = build_request_body(request, image_data)

        logger.info("Starting animation generation request...")
        response = self.client.create_animation(body)

        animation_id = response.get("animation_id") if isinstance(response, dict) else None
        if animation_id is None:
            raise APIError("animation_id missing from response", body=str(response)[:500])

        logger.info(f"Animation created successfully (ID: {animation_id}).")
        return Job(id=animation_id, status=JobStatus.PENDING, response=response)

    def await_completion(self,
                         job: Job,
                         poll_interval: Optional[float] = None,
                         timeout: Optional[float] = None) -> ResultArtifact:
        """
        Poll a job until it reaches a terminal status.

        Args:
            job: The job returned by submit()
            poll_interval: Seconds between polls (defaults to the generator's setting)
            timeout: Maximum seconds to wait, or None to wait indefinitely

        Returns:
            ResultArtifact: Reference to the archive of the succeeded job

        Raises:
            JobFailedError: The service reported the job as failed
            JobTimeoutError: The timeout elapsed before a terminal status
            TransportError: Polling failed after all retries
        """
        interval = max(poll_interval if poll_interval is not None else self.poll_interval, MIN_POLL_INTERVAL)
        start = self._clock()
        next_progress_log = PROGRESS_LOG_INTERVAL

        logger.info(f"Polling for results every {interval:g} seconds...")

        while True:
            snapshot = Job.from_results(job.id, self.client.get_animation_results(job.id))
            logger.debug(f"Animation {job.id} status: {snapshot.status.value}")

            if snapshot.is_terminal:
                if snapshot.status is JobStatus.FAILED:
                    raise JobFailedError(job.id, snapshot.failure_reason)
                if snapshot.result_id is None:
                    raise APIError(f"result id missing from completed animation {job.id}")
                return ResultArtifact(job_id=job.id, result_id=snapshot.result_id)

            elapsed = self._clock() - start
            if timeout is not None:
                remaining = timeout - elapsed
                if remaining <= 0:
                    raise JobTimeoutError(job.id, snapshot.status, elapsed)
                self._sleep(min(interval, remaining))
            else:
                self._sleep(interval)

            elapsed = self._clock() - start
            if elapsed >= next_progress_log:
                logger.info(f"Still polling ({int(elapsed)} total seconds elapsed)")
                next_progress_log += PROGRESS_LOG_INTERVAL

    def download(self,
                 artifact: ResultArtifact,
                 destination_path: Optional[str] = None,
                 zip_timeout: Optional[float] = None) -> str:
        """
        Download the result archive to a local file.

        An existing file at the destination is overwritten. The archive is
        written to a temporary file next to the destination and moved into
        place only once complete, so a failed download leaves no partial file.

        Args:
            artifact: The artifact returned by await_completion()
            destination_path: Output path (defaults to animation_<id>_<result>.zip)
            zip_timeout: Seconds to wait for the archive to become available

        Returns:
            str: The path that was written

        Raises:
            ArtifactWriteError: The destination is not writable
            TransportError: The transfer failed or was incomplete
            JobTimeoutError: The archive never became available
        """
        path = destination_path or artifact.default_filename()

        logger.info("Render complete, downloading ZIP...")
        response = self._wait_for_archive(artifact, zip_timeout)
        try:
            size = self._write_stream(response, path, artifact)
        finally:
            response.close()

        logger.info(f"ZIP saved to {path} ({size} bytes)")
        return path

    def _wait_for_archive(self, artifact: ResultArtifact, zip_timeout: Optional[float]):
        limit = zip_timeout if zip_timeout is not None else self.zip_timeout
        interval = max(self.poll_interval, MIN_POLL_INTERVAL)
        start = self._clock()
        announced = False

        while True:
            response = self.client.open_result_zip(artifact.result_id)
            if response is not None:
                return response

            if not announced:
                logger.info("Animation rendered successfully, waiting on .zip file...")
                announced = True

            waited = self._clock() - start
            if waited >= limit:
                raise JobTimeoutError(
                    artifact.job_id,
                    JobStatus.SUCCEEDED,
                    waited,
                    message=f"timed out waiting for .zip file of animation {artifact.job_id}",
                )
            self._sleep(min(interval, limit - waited))

    def _write_stream(self, response, path: str, artifact: ResultArtifact) -> int:
        expected = _content_length(response)
        directory = os.path.dirname(os.path.abspath(path))

        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".gametorch-", suffix=".part", dir=directory)
        except OSError as e:
            raise ArtifactWriteError(path, e.strerror or str(e)) from e

        written = 0
        try:
            try:
                with os.fdopen(fd, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
                            written += len(chunk)

                if expected is not None and written != expected:
                    raise TransportError(
                        f"incomplete download of result {artifact.result_id}: "
                        f"got {written} of {expected} bytes"
                    )
                os.chmod(tmp_path, _target_mode(path))
                os.replace(tmp_path, path)
            except requests.exceptions.RequestException as e:
                raise TransportError(f"download of result {artifact.result_id} interrupted: {e}") from e
            except OSError as e:
                raise ArtifactWriteError(path, e.strerror or str(e)) from e
        except BaseException:
            _discard(tmp_path)
            raise

        return written


def _content_length(response) -> Optional[int]:
    value = response.headers.get("Content-Length")
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def _target_mode(path: str) -> int:
    """Mode for the downloaded file: keep an existing file's mode, else 0666 minus the umask."""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        pass
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _discard(path: str):
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
