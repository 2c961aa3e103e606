from typing import ClassVar, List, Literal, Optional

import pytest
from pydantic import Field

from action_tools.tools.exceptions import ToolValidationError
from action_tools.tools.schema import ActionRequest, AllOf, AnyOf, parse_request


class NoteRequest(ActionRequest):
    action: Literal["create", "update", "list"]
    noteId: Optional[int] = None
    title: Optional[str] = Field(None, min_length=1)
    body: Optional[str] = None
    labels: Optional[List[int]] = None

    ACTION_RULES: ClassVar = {
        "create": [AllOf(("title", "body"), "title and body are required.")],
        "update": [
            AllOf(("noteId",), "noteId is required."),
            AnyOf(("title", "body", "labels"), "Nothing to update."),
        ],
    }


def test_rules_pass():
    request = parse_request(NoteRequest, {"action": "update", "noteId": 3, "labels": [1]})

    assert request.noteId == 3
    assert request.supplied("title", "body", "labels") == {"labels": [1]}


def test_action_without_rules_accepts_bare_request():
    assert parse_request(NoteRequest, {"action": "list"}).action == "list"


@pytest.mark.parametrize(
    "raw, message",
    [
        ({"action": "create", "title": "T"}, "title and body are required."),
        ({"action": "update", "title": "T"}, "noteId is required."),
        ({"action": "update", "noteId": 1}, "Nothing to update."),
    ],
)
def test_rule_messages_are_reported_verbatim(raw, message):
    with pytest.raises(ToolValidationError) as info:
        parse_request(NoteRequest, raw)

    assert info.value.message == message


def test_rule_message_with_braces_is_not_formatted():
    class BraceRequest(ActionRequest):
        action: Literal["go"]
        value: Optional[str] = None

        ACTION_RULES: ClassVar = {"go": [AllOf(("value",), "value is required, e.g. {value}.")]}

    with pytest.raises(ToolValidationError, match=r"value is required, e\.g\. \{value\}\."):
        parse_request(BraceRequest, {"action": "go"})


@pytest.mark.parametrize(
    "raw, prefix",
    [
        ({"action": "create", "title": "", "body": "b"}, "Validation error: title:"),
        ({"action": "create", "title": "t", "body": "b", "labels": ["x"]}, "Validation error: labels.0:"),
        ({"action": "update", "noteId": "3", "title": "t"}, "Validation error: noteId:"),
        ({"action": "archive"}, "Validation error: action:"),
        ({"title": "t"}, "Validation error: action:"),
    ],
)
def test_field_errors_name_the_field(raw, prefix):
    with pytest.raises(ToolValidationError) as info:
        parse_request(NoteRequest, raw)

    assert info.value.message.startswith(prefix)


def test_json_string_input():
    assert parse_request(NoteRequest, '{"action": "list"}').action == "list"

    with pytest.raises(ToolValidationError, match="not valid JSON"):
        parse_request(NoteRequest, "{action: list}")
