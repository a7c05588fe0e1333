"""
Shared fixtures: an in-memory service client, a fake clock and sample images.
"""
import json
import logging

import pytest
import requests
from PIL import Image

from gametorch.clients.base import BaseClient


class FakeZipResponse:
    """Stands in for a streaming requests.Response of the ZIP endpoint."""

    def __init__(self, payload: bytes, content_length=None, chunk_size=4):
        self.payload = payload
        self.headers = {}
        if content_length is not None:
            self.headers["Content-Length"] = str(content_length)
        self.chunk_size = chunk_size
        self.closed = False

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self.payload), self.chunk_size):
            yield self.payload[start:start + self.chunk_size]

    def close(self):
        self.closed = True


class FakeClient(BaseClient):
    """
    In-memory GameTorch service.

    ``results`` is the sequence of /api/animation_results payloads returned
    by successive polls; the last one repeats. ``zip_responses`` works the
    same way for the ZIP endpoint (None means "not ready yet").
    """

    def __init__(self, create_response=None, results=None, zip_responses=None):
        self.create_response = create_response if create_response is not None else {"animation_id": 42}
        self.results = list(results or [])
        self.zip_responses = list(zip_responses or [])
        self.calls = []
        self.closed = False

    def create_animation(self, body):
        self.calls.append(("create_animation", body))
        return self.create_response

    def get_animation_results(self, animation_id):
        self.calls.append(("get_animation_results", animation_id))
        if len(self.results) > 1:
            item = self.results.pop(0)
        else:
            item = self.results[0]
        if isinstance(item, BaseException):
            raise item
        return item

    def list_animations(self):
        self.calls.append(("list_animations", None))
        return [{"id": 1}, {"id": 2}]

    def regenerate_animation(self, animation_id):
        self.calls.append(("regenerate_animation", animation_id))
        return {"animation_id": 99}

    def open_result_zip(self, result_id):
        self.calls.append(("open_result_zip", result_id))
        if len(self.zip_responses) > 1:
            return self.zip_responses.pop(0)
        return self.zip_responses[0]

    def close(self):
        self.closed = True

    def call_names(self):
        return [name for name, _ in self.calls]


class FakeClock:
    """Monotonic clock advanced only by sleep()."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def make_response(status_code=200, json_body=None, content=None, headers=None):
    """Build a fully-read requests.Response without a network connection."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = "OK" if status_code < 400 else "Error"
    if json_body is not None:
        content = json.dumps(json_body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    response._content = content if content is not None else b""
    response._content_consumed = True
    response.encoding = "utf-8"
    response.headers.update(headers or {})
    return response


class FakeSession:
    """Replays queued responses (or raises queued exceptions) for requests.Session."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.headers = {}
        self.requests = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def reset_package_log_level():
    yield
    logging.getLogger("gametorch").setLevel(logging.NOTSET)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def png_file(tmp_path):
    path = tmp_path / "input.png"
    Image.new("RGBA", (8, 8), (255, 0, 0, 255)).save(path)
    return path


@pytest.fixture
def api_key_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GAMETORCH_API_KEY", "test-key")
    monkeypatch.delenv("GAMETORCH_BASE_URL", raising=False)
    return "test-key"
