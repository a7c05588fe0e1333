#!/usr/bin/env python3
from abc import ABC, abstractmethod


class BaseClient(ABC):
    """Base class for GameTorch service transports."""

    @abstractmethod
    def create_animation(self, body):
        """
        Create a new animation job.

        Args:
            body: JSON-serializable request body (prompt, duration_seconds,
                input_image_base64 and the animation model selector)

        Returns:
            Decoded JSON response containing at least ``animation_id``
        """
        pass

    @abstractmethod
    def get_animation_results(self, animation_id):
        """Return the decoded /api/animation_results response for a job."""
        pass

    @abstractmethod
    def list_animations(self):
        """Return all animations belonging to the current user."""
        pass

    @abstractmethod
    def regenerate_animation(self, animation_id):
        """Start a new animation with the same parameters as an existing one."""
        pass

    @abstractmethod
    def open_result_zip(self, result_id):
        """
        Open a streaming download of a result archive.

        Args:
            result_id: Identifier of the animation result

        Returns:
            A response object with ``iter_content``, ``headers`` and ``close``,
            or None while the service is still packaging the archive
        """
        pass

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
