"""
Thin HTTP helper shared by the action tools.

Wraps a ``requests.Session`` so every tool gets the same timeout handling,
bearer-token header, and mapping from non-success responses to
``ToolExecutionError``.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol

import requests  # type: ignore[import-untyped]

from action_tools.tools.exceptions import ToolExecutionError, ToolResponseError
from utils.logger import get_logger

logger = get_logger(__name__)


class _SupportsRequest(Protocol):
    """Subset of the ``requests.Session`` API used by ``RestClient``."""

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        ...


def remote_message(response: requests.Response) -> str:
    """Best-effort extraction of the error message a remote API sent back."""
    try:
        data = response.json()
    except ValueError:
        return (getattr(response, "text", "") or "").strip()[:200] or "Unknown error"
    if isinstance(data, dict):
        for key in ("message", "error", "detail"):
            if data.get(key):
                return str(data[key])
    return "Unknown error"


class RestClient:
    """Issue JSON requests against one base URL."""

    def __init__(
        self,
        base_url: str,
        *,
        session: _SupportsRequest | None = None,
        timeout: float = 30.0,
        headers: Optional[Mapping[str, str]] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = dict(headers or {})
        self._session: _SupportsRequest = session or requests.Session()

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def send(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        data: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        failure: str = "Request failed",
    ) -> requests.Response:
        """Send a request and return the response if its status is 2xx.

        ``failure`` prefixes the error message raised for any other status.
        """
        request_headers = {**self.headers, **(headers or {})}
        if token:
            request_headers["Authorization"] = f"Bearer {token}"
        url = self.url(path)

        logger.debug("http_request", method=method, url=url, params=_redact(params))
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json,
                data=data,
                headers=request_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ToolExecutionError(f"{failure}: {exc}") from exc

        logger.debug("http_response", method=method, url=url, status_code=response.status_code)
        if not 200 <= response.status_code < 300:
            raise ToolExecutionError(
                f"{failure} with status {response.status_code}: {remote_message(response)}",
                status_code=response.status_code,
            )
        return response

    def send_json(self, method: str, path: str, **kwargs: Any) -> Any:
        """Like ``send`` but decode and return the JSON body."""
        response = self.send(method, path, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise ToolResponseError(f"Expected a JSON response from {self.url(path)}") from exc


_SECRET_PARAMS = {"appid", "auth_token", "api_key", "key", "password"}


def _redact(params: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    if params is None:
        return None
    return {key: ("***" if key in _SECRET_PARAMS else value) for key, value in params.items()}


def require(data: Any, *keys: str, context: str = "response") -> Any:
    """Walk ``keys`` into ``data``; a missing step is a ``ToolResponseError``."""
    current = data
    for key in keys:
        if not isinstance(current, Mapping) or current.get(key) is None:
            path = ".".join(keys)
            raise ToolResponseError(f"Missing '{path}' in {context}")
        current = current[key]
    return current
