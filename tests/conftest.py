import json

import pytest
import requests


class FakeResponse:
    """Just enough of requests.Response for the pipeline stages."""

    def __init__(self, status_code=200, payload=None, text=None, content_type="application/json"):
        self.status_code = status_code
        self.headers = {"Content-Type": content_type} if content_type else {}
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text


class FakeSession:
    """Records posts and replays a canned response or error."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def make_session():
    def _make(status_code=200, payload=None, **kwargs):
        return FakeSession(response=FakeResponse(status_code, payload, **kwargs))
    return _make


@pytest.fixture
def broken_session():
    return FakeSession(error=requests.ConnectionError("connection refused"))


@pytest.fixture(autouse=True)
def clear_credential_env(monkeypatch):
    for key in ("BNET_SESSION_TOKEN", "BNET_SERIAL", "BNET_RESTORE_CODE"):
        monkeypatch.delenv(key, raising=False)
