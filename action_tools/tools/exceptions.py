"""
Tool-related exceptions shared by every action tool.

Everything raised while a tool handles a request derives from ``ToolError`` so
the adapter boundary can turn it into an error envelope.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from action_tools.tools.base import ToolBase


class ToolError(Exception):
    """Base class for errors raised by a tool."""

    def __init__(self, message: str, tool: Optional["ToolBase"] = None):
        self.message = message
        self.tool = tool
        super().__init__(message)


class ToolValidationError(ToolError):
    """The action request did not match the tool's schema."""


class ToolAuthenticationError(ToolError):
    """Exchanging the configured credentials for a token failed."""


class ToolExecutionError(ToolError):
    """The remote API rejected the call or could not be reached."""

    def __init__(self, message: str, tool: Optional["ToolBase"] = None, *, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message, tool)


class ToolResponseError(ToolError):
    """The remote API answered, but not with the data the action needs."""


class ToolNotFoundError(ToolError):
    """A provider was asked for a tool it does not know."""


class ToolCredentialsMissingError(ToolError):
    """Raised at construction time when a required credential is not configured."""

    def __init__(self, env_var: str, tool: Optional["ToolBase"] = None, *, message: Optional[str] = None):
        self.env_var = env_var
        super().__init__(message or f"Environment variable '{env_var}' is not set.", tool)
