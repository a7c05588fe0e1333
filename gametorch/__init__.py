#!/usr/bin/env python3
import logging
from typing import Optional

__version__ = "0.1.0"

from .clients.base import BaseClient
from .clients.rest_client import RestClient
from .exceptions import (
    GameTorchError,
    ConfigurationError,
    ValidationError,
    TransportError,
    APIError,
    JobFailedError,
    JobTimeoutError,
    ArtifactWriteError,
)
from .models import GenerationRequest, Job, JobStatus, ResultArtifact

logger = logging.getLogger(__name__)


def create_client(api_key: Optional[str] = None, local: bool = False, **kwargs) -> BaseClient:
    """
    Factory function to create a client for the GameTorch service.

    Args:
        api_key: Optional API key (if not provided, it will be loaded from environment or file)
        local: Talk to the local development server instead of production
        **kwargs: Extra options passed to RestClient (retries, timeouts, session)

    Returns:
        BaseClient: A ready-to-use client
    """
    client = RestClient(api_key=api_key, local=local, **kwargs)
    logger.debug(f"Created {type(client).__name__} for {client.base_url}")
    return client


__all__ = [
    "__version__",
    "create_client",
    "BaseClient",
    "RestClient",
    "GameTorchError",
    "ConfigurationError",
    "ValidationError",
    "TransportError",
    "APIError",
    "JobFailedError",
    "JobTimeoutError",
    "ArtifactWriteError",
    "GenerationRequest",
    "Job",
    "JobStatus",
    "ResultArtifact",
]
