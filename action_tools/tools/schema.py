"""Declarative request schemas for action tools.

Each tool describes its accepted input as a pydantic model: the ``action``
literal, typed optional fields, and per-action rules naming which fields must
be present. Validation runs before any network call.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator
from pydantic_core import PydanticCustomError

from action_tools.tools.exceptions import ToolValidationError


@dataclass(frozen=True)
class AllOf:
    """Every listed field must be supplied."""

    fields: Tuple[str, ...]
    message: str

    def satisfied_by(self, request: BaseModel) -> bool:
        return all(getattr(request, name) is not None for name in self.fields)


@dataclass(frozen=True)
class AnyOf:
    """At least one of the listed fields must be supplied."""

    fields: Tuple[str, ...]
    message: str

    def satisfied_by(self, request: BaseModel) -> bool:
        return any(getattr(request, name) is not None for name in self.fields)


class ActionRequest(BaseModel):
    """Base model for a tool's action request.

    Subclasses declare an ``action`` field (a ``Literal`` of the supported
    action names) and fill ``ACTION_RULES`` with the field rules of each
    action. Unknown fields and mistyped values are rejected.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    ACTION_RULES: ClassVar[Dict[str, List[AllOf | AnyOf]]] = {}

    @model_validator(mode="after")
    def _check_action_rules(self):
        for rule in self.ACTION_RULES.get(getattr(self, "action", None), []):
            if not rule.satisfied_by(self):
                # The message is passed as context so braces in it are never
                # treated as format placeholders.
                raise PydanticCustomError("action_rule", "{message}", {"message": rule.message})
        return self

    def supplied(self, *names: str) -> Dict[str, Any]:
        """The subset of ``names`` that the caller actually provided."""
        return {name: getattr(self, name) for name in names if getattr(self, name) is not None}


def format_validation_error(exc: ValidationError) -> str:
    """Describe the first validation issue of ``exc``."""
    first = exc.errors(include_url=False)[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    if not location:
        return first["msg"]
    return f"Validation error: {location}: {first['msg']}"


def parse_request(model: type[ActionRequest], action_request: Mapping[str, Any] | str) -> ActionRequest:
    """Validate a raw action request against ``model``.

    ``action_request`` may be a mapping or a JSON object encoded as a string.
    """
    if isinstance(action_request, str):
        try:
            action_request = json.loads(action_request)
        except json.JSONDecodeError as exc:
            raise ToolValidationError(f"Validation error: request is not valid JSON ({exc.msg})") from exc
    if not isinstance(action_request, Mapping):
        raise ToolValidationError("Validation error: request must be an object")
    try:
        return model.model_validate(dict(action_request))
    except ValidationError as exc:
        raise ToolValidationError(format_validation_error(exc)) from exc
