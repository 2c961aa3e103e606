"""
The action tool adapter.

An ``ActionTool`` turns a typed action request into one authenticated remote
call (or a short fixed sequence of calls) and answers with a single JSON
envelope string. Concrete tools only declare their request model, their
credential provider and one handler per action::

    class MyTool(ActionTool):
        request_model = MyRequest

        @action("listThings")
        def _list_things(self, request, context):
            ...
"""
from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, FrozenSet, Mapping, Optional

from action_tools.tools import envelope
from action_tools.tools.base import ToolBase
from action_tools.tools.credentials import CredentialProvider
from action_tools.tools.exceptions import ToolError
from action_tools.tools.schema import ActionRequest, parse_request
from utils.logger import get_logger

logger = get_logger(__name__)

Handler = Callable[["ActionTool", Any, "InvocationContext"], Any]


def action(name: str) -> Callable[[Handler], Handler]:
    """Mark a method as the handler of the action called ``name``."""

    def decorator(func: Handler) -> Handler:
        func._handles_action = name  # type: ignore[attr-defined]
        return func

    return decorator


@dataclass
class InvocationContext:
    """State that lives for exactly one ``invoke`` call."""

    token: Optional[str] = None
    cancel: threading.Event = field(default_factory=threading.Event)


class ActionTool(ToolBase):
    """Base class of every tool the agent can call."""

    TOOL_ID: ClassVar[str] = ""
    request_model: ClassVar[type[ActionRequest]]
    # Actions that run without acquiring a token.
    public_actions: ClassVar[FrozenSet[str]] = frozenset()
    keywords: ClassVar[tuple[str, ...]] = ()

    _handlers: ClassVar[Dict[str, Handler]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        handlers: Dict[str, Handler] = {}
        for klass in reversed(cls.__mro__):
            for attribute in vars(klass).values():
                name = getattr(attribute, "_handles_action", None)
                if name:
                    handlers[name] = attribute
        cls._handlers = handlers

    def __init__(self, credentials: Optional[CredentialProvider] = None):
        super().__init__(id=self.TOOL_ID)
        self.credentials = credentials
        self.name = self.TOOL_ID
        self.description = ""

    def get_summary(self) -> str:
        return f"{self.id}: {self.name} - {self.description}"

    def get_details(self) -> str:
        return json.dumps(
            {"id": self.id, "description": self.description, "parameters": self.get_parameters()},
            indent=4,
        )

    def get_parameters(self) -> Dict[str, Any]:
        return self.request_model.model_json_schema()

    @property
    def actions(self) -> list[str]:
        return sorted(self._handlers)

    def invoke(self, action_request: Mapping[str, Any] | str, *, cancel: Optional[threading.Event] = None) -> str:
        """Validate, authenticate, dispatch and wrap the result in an envelope.

        Never raises: every failure becomes ``{"error": message}``.
        """
        try:
            request = parse_request(self.request_model, action_request)
            logger.info("tool_invoke", tool_id=self.id, action=request.action)

            context = InvocationContext(cancel=cancel or threading.Event())
            if request.action not in self.public_actions and self.credentials is not None:
                context.token = self.credentials.acquire()

            handler = self._handlers[request.action]
            result = handler(self, request, context)
        except ToolError as exc:
            if exc.tool is None:
                exc.tool = self
            logger.warning(
                "tool_invoke_failed",
                tool_id=self.id,
                error_type=exc.__class__.__name__,
                error=exc.message,
            )
            return envelope.failure(exc.message)
        except Exception as exc:
            logger.exception("tool_invoke_crashed", tool_id=self.id, error=str(exc))
            return envelope.failure(f"Unexpected error: {exc}")

        logger.debug("tool_invoke_succeeded", tool_id=self.id, action=request.action)
        return envelope.success(result)
