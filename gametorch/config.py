#!/usr/bin/env python3
import os
import logging
from typing import Dict, Optional

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

API_KEY_NAME = "GAMETORCH_API_KEY"
BASE_URL_ENV = "GAMETORCH_BASE_URL"

PRODUCTION_BASE_URL = "https://gametorch.app"
LOCAL_BASE_URL = "http://localhost:8000"

# Generation parameters accepted by the service
ALLOWED_DURATIONS = (5, 10)
DEFAULT_DURATION = 5
DEFAULT_MODEL_ID = 6

# Timing (seconds)
DEFAULT_POLL_INTERVAL = 5.0
MIN_POLL_INTERVAL = 1.0
DEFAULT_ZIP_TIMEOUT = 120.0
DEFAULT_REQUEST_TIMEOUT = 60.0
PROGRESS_LOG_INTERVAL = 30.0

DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 1.0


def load_api_keys(file_path="apikeys.txt"):
    """
    Load API keys from the environment and a file with KEY=VALUE format.

    Environment variables win over entries in the file.

    Args:
        file_path: Path to the API keys file

    Returns:
        dict: Dictionary with API keys
    """
    api_keys: Dict[str, str] = {}

    try:
        with open(file_path, "r") as file:
            for line in file:
                line = line.strip()
                if line and not line.startswith("#"):
                    try:
                        key, value = line.split("=", 1)
                        api_keys[key.strip()] = value.strip()
                    except ValueError:
                        logger.warning(f"Invalid line in {file_path}: {line}")
    except FileNotFoundError:
        logger.debug(f"API keys file not found: {file_path}")

    env_key = os.environ.get(API_KEY_NAME)
    if env_key:
        api_keys[API_KEY_NAME] = env_key

    return api_keys


def get_api_key(api_keys: Optional[Dict[str, str]] = None) -> str:
    """
    Get the GameTorch API key.

    Args:
        api_keys: Optional dictionary with API keys

    Returns:
        str: The API key

    Raises:
        ConfigurationError: If no key is configured
    """
    if api_keys is None:
        api_keys = load_api_keys()

    api_key = api_keys.get(API_KEY_NAME)
    if not api_key:
        raise ConfigurationError(
            f"environment variable {API_KEY_NAME} not set. "
            "Please set it (or add it to apikeys.txt) before using this CLI."
        )
    return api_key


def get_base_url(local: bool = False) -> str:
    """Resolve the service base URL. GAMETORCH_BASE_URL overrides --local."""
    override = os.environ.get(BASE_URL_ENV)
    if override:
        return override.rstrip("/")
    return LOCAL_BASE_URL if local else PRODUCTION_BASE_URL
