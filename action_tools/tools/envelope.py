"""Result envelopes returned to the invoking agent.

A tool always answers with a single JSON string: the reshaped payload on
success, ``{"error": message}`` otherwise.
"""
from __future__ import annotations

import json
from typing import Any


def success(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, default=str)


def failure(message: str) -> str:
    return json.dumps({"error": message}, ensure_ascii=False)


def is_failure(envelope: str) -> bool:
    try:
        decoded = json.loads(envelope)
    except json.JSONDecodeError:
        return False
    return isinstance(decoded, dict) and set(decoded) == {"error"}
