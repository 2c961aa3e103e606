from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest


class DummyResponse:
    def __init__(
        self,
        payload: Any = None,
        *,
        status_code: int = 200,
        headers: Optional[Dict[str, str]] = None,
        content: bytes = b"",
    ) -> None:
        self._payload = payload
        self.status_code = status_code
        self.headers = headers or {}
        self.content = content
        self.text = json.dumps(payload) if payload is not None else content.decode(errors="ignore")

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class DummySession:
    """Replays queued responses and records every outbound request."""

    def __init__(self, responses: List[Any] | None = None) -> None:
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *responses: Any) -> "DummySession":
        self.responses.extend(responses)
        return self

    def request(self, method: str, url: str, **kwargs: Any) -> DummyResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def last(self) -> Dict[str, Any]:
        return self.calls[-1]


@pytest.fixture
def session() -> DummySession:
    return DummySession()


@pytest.fixture
def ok():
    """Build a 2xx response: ``ok({"id": 1})``."""

    def _ok(payload: Any = None, **kwargs: Any) -> DummyResponse:
        return DummyResponse(payload, **kwargs)

    return _ok


@pytest.fixture
def fail():
    """Build an error response: ``fail(404, "Not found")``."""

    def _fail(status_code: int, message: str = "Unknown error", **payload: Any) -> DummyResponse:
        return DummyResponse({"message": message, **payload}, status_code=status_code)

    return _fail
