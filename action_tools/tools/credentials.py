"""Credential providers used by action tools to obtain an auth token."""
from __future__ import annotations

from abc import ABC, abstractmethod

from action_tools.tools.exceptions import (
    ToolAuthenticationError,
    ToolExecutionError,
    ToolResponseError,
)
from action_tools.tools.http import RestClient
from utils.logger import get_logger

logger = get_logger(__name__)


class CredentialProvider(ABC):
    """Produces the token attached to an authenticated call."""

    @abstractmethod
    def acquire(self) -> str:
        raise NotImplementedError


class StaticKey(CredentialProvider):
    """A configured API key used as-is; acquiring it makes no network call."""

    def __init__(self, key: str):
        self._key = key

    def acquire(self) -> str:
        return self._key


class PasswordTokenExchange(CredentialProvider):
    """Exchange a username/password pair for a bearer token.

    A fresh token is requested every time ``acquire`` is called; nothing is
    cached between invocations.
    """

    def __init__(self, client: RestClient, path: str, username: str, password: str, *, token_field: str = "token"):
        self._client = client
        self._path = path
        self._username = username
        self._password = password
        self._token_field = token_field

    def acquire(self) -> str:
        logger.debug("token_exchange", url=self._client.url(self._path), username=self._username)
        try:
            data = self._client.send_json(
                "POST",
                self._path,
                json={"username": self._username, "password": self._password},
                failure="Authentication failed",
            )
        except ToolExecutionError as exc:
            raise ToolAuthenticationError(exc.message) from exc
        except ToolResponseError as exc:
            raise ToolAuthenticationError(f"Authentication failed: {exc.message}") from exc

        token = data.get(self._token_field) if isinstance(data, dict) else None
        if not token:
            raise ToolAuthenticationError("Authentication failed: no token in response")
        return token
