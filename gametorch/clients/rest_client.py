#!/usr/bin/env python3
import time
import logging
from typing import Any, Dict, Optional

import requests

from .base import BaseClient
from .. import __version__
from ..config import (
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_MAX_RETRIES,
    DEFAULT_REQUEST_TIMEOUT,
    get_api_key,
    get_base_url,
)
from ..exceptions import APIError, TransportError

logger = logging.getLogger(__name__)

# Status the ZIP endpoint answers with while the archive is still being built
ZIP_NOT_READY_STATUS = 500
RATE_LIMIT_STATUS = 429


class RestClient(BaseClient):
    """Client for the GameTorch REST API over HTTP(S)."""

    def __init__(self,
                 api_key: Optional[str] = None,
                 base_url: Optional[str] = None,
                 local: bool = False,
                 max_retries: int = DEFAULT_MAX_RETRIES,
                 backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
                 request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 session: Optional[requests.Session] = None,
                 sleep=time.sleep):
        """
        Initialize the client with credentials.

        Args:
            api_key: API key (loaded from the environment or apikeys.txt if omitted)
            base_url: Service root URL (resolved from ``local`` if omitted)
            local: Use the local development server
            max_retries: Retries after the first attempt for transport failures
            backoff_factor: Base of the exponential backoff between retries, in seconds
            request_timeout: Per-request timeout in seconds
            session: Optional pre-configured requests session
            sleep: Sleep function, replaceable in tests
        """
        self.api_key = api_key or get_api_key()
        self.base_url = (base_url or get_base_url(local)).rstrip("/")
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.request_timeout = request_timeout
        self._sleep = sleep

        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {self.api_key}",
            "User-Agent": f"gametorch-python/{__version__}",
        })

    def create_animation(self, body: Dict[str, Any]) -> Any:
        return self._request_json("POST", "/api/animation", json=body)

    def get_animation_results(self, animation_id) -> Any:
        return self._request_json("GET", f"/api/animation_results/{animation_id}")

    def list_animations(self) -> Any:
        return self._request_json("GET", "/api/animations")

    def regenerate_animation(self, animation_id) -> Any:
        return self._request_json("POST", f"/api/animation/regenerate/{animation_id}")

    def open_result_zip(self, result_id) -> Optional[requests.Response]:
        path = f"/api/animation_result_zip/{result_id}"
        response = self._request("GET", path, stream=True)

        if response.status_code == ZIP_NOT_READY_STATUS:
            response.close()
            return None

        try:
            self._raise_for_status(response, "GET", path)
        except APIError:
            response.close()
            raise
        return response

    def close(self):
        self.session.close()

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """
        Send a request, retrying transport failures and rate limiting with backoff.

        Connection errors, timeouts and HTTP 429 are retried up to
        ``max_retries`` times. Any other response is returned to the caller
        as-is; application-level errors are never retried here.

        Raises:
            TransportError: If the request could not be completed
            APIError: If the service kept rate limiting the client
        """
        url = f"{self.base_url}{path}"
        kwargs.setdefault("timeout", self.request_timeout)
        attempt = 0

        while True:
            try:
                response = self.session.request(method, url, **kwargs)
            except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
                attempt += 1
                if attempt > self.max_retries:
                    raise TransportError(
                        f"{method} {url} failed after {attempt} attempts: {e}"
                    ) from e
                wait_time = self._backoff(attempt)
                logger.warning(f"Request failed ({e}). Retrying in {wait_time:.1f}s ({attempt}/{self.max_retries})")
                self._sleep(wait_time)
                continue
            except requests.exceptions.RequestException as e:
                raise TransportError(f"{method} {url} failed: {e}") from e

            if response.status_code == RATE_LIMIT_STATUS:
                attempt += 1
                response.close()
                if attempt > self.max_retries:
                    raise APIError(
                        f"rate limit exceeded for {method} {path} after {attempt} attempts",
                        status_code=RATE_LIMIT_STATUS,
                    )
                wait_time = self._backoff(attempt)
                logger.warning(f"Rate limit exceeded (429). Backing off for {wait_time:.1f}s before retry {attempt}/{self.max_retries}")
                self._sleep(wait_time)
                continue

            return response

    def _request_json(self, method: str, path: str, **kwargs) -> Any:
        response = self._request(method, path, **kwargs)
        self._raise_for_status(response, method, path)
        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                f"invalid JSON in response to {method} {path}",
                status_code=response.status_code,
                body=response.text[:500],
            ) from e

    def _backoff(self, attempt: int) -> float:
        return self.backoff_factor * 2 ** (attempt - 1)

    @staticmethod
    def _raise_for_status(response: requests.Response, method: str, path: str):
        if response.ok:
            return
        body = response.text[:500]
        raise APIError(
            f"HTTP {response.status_code} from {method} {path}: {body or response.reason}",
            status_code=response.status_code,
            body=body,
        )
