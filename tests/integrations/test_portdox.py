import json

import pytest

from action_tools.integrations.portdox import PortdoxTool
from action_tools.tools.exceptions import ToolCredentialsMissingError

BASE = "https://portdox.test/api"


@pytest.fixture
def portdox(session):
    return PortdoxTool("tok-123", base_url=BASE, session=session)


def _invoke(tool, request):
    return json.loads(tool.invoke(request))


def _listing(items, *, page=1, total=None, last_page=1):
    return {
        "success": True,
        "data": {
            "current_page": page,
            "data": items,
            "total": len(items) if total is None else total,
            "last_page": last_page,
        },
    }


def test_missing_token(monkeypatch):
    monkeypatch.delenv("PORTDOX_AUTH_TOKEN", raising=False)

    with pytest.raises(ToolCredentialsMissingError, match="PORTDOX_AUTH_TOKEN"):
        PortdoxTool()


def test_list_load_requests_uses_default_paging(portdox, session, ok):
    session.queue(
        ok(_listing([{"load_id": "L1", "ref_number": "REF-1", "total_cars": 3, "shipper": "ACME"}], total=41, last_page=3))
    )

    result = _invoke(portdox, {"action": "list_load_requests"})

    assert result == {
        "page": 1,
        "perPage": 20,
        "total": 41,
        "lastPage": 3,
        "loadRequests": [{"load_id": "L1", "ref_number": "REF-1", "total_cars": 3}],
    }
    call = session.last()
    assert call["method"] == "GET"
    assert call["url"] == f"{BASE}/list_load_requests"
    assert call["params"] == {"auth_token": "tok-123", "page": 1, "per_page": 20}


def test_list_load_requests_explicit_paging(portdox, session, ok):
    session.queue(ok(_listing([], page=2, total=5, last_page=2)))

    result = _invoke(portdox, {"action": "list_load_requests", "page": 2, "per_page": 3})

    assert result["page"] == 2
    assert result["perPage"] == 3
    assert result["loadRequests"] == []
    assert session.last()["params"]["per_page"] == 3


def test_search_by_ref(portdox, session, ok):
    session.queue(ok(_listing([{"load_id": "L9", "ref_number": "ABC", "total_cars": 1}])))

    result = _invoke(portdox, {"action": "search_by_ref", "ref_number": "ABC"})

    assert result["loadRequests"][0]["load_id"] == "L9"
    assert session.last()["params"]["ref_number"] == "ABC"


def test_search_by_ref_requires_reference(portdox, session):
    result = _invoke(portdox, {"action": "search_by_ref"})

    assert result == {"error": "Reference number is required for searching."}
    assert session.calls == []


def test_unsuccessful_listing(portdox, session, ok):
    session.queue(ok({"success": False, "error": "Invalid token"}))

    result = _invoke(portdox, {"action": "list_load_requests"})

    assert result == {"error": "API Error: Invalid token"}


def test_malformed_listing(portdox, session, ok):
    session.queue(ok({"success": True, "data": []}))

    result = _invoke(portdox, {"action": "list_load_requests"})

    assert "data.data" in result["error"]


def test_listing_http_failure(portdox, session, fail):
    session.queue(fail(500, "Server exploded"))

    result = _invoke(portdox, {"action": "list_load_requests"})

    assert result == {"error": "API Error with status 500: Server exploded"}


def test_update_container_sends_only_supplied_fields(portdox, session, ok):
    session.queue(ok({"success": True}))

    result = _invoke(
        portdox,
        {"action": "update_container", "container_number": "MSCU1234567", "load_id": "L1", "seal_no_1": "S-77"},
    )

    assert result == {"message": "Container MSCU1234567 updated successfully.", "container_number": "MSCU1234567"}
    call = session.last()
    assert call["method"] == "POST"
    assert call["url"] == f"{BASE}/submit_temp_container"
    assert call["json"] == {
        "auth_token": "tok-123",
        "container_number": "MSCU1234567",
        "seal_no_1": "S-77",
        "load_id": "L1",
    }


@pytest.mark.parametrize(
    "request_, message",
    [
        ({"action": "update_container", "load_id": "L1"}, "Container number is required for updating."),
        ({"action": "update_container", "container_number": "C1"}, "Load ID is required for updating."),
        (
            {"action": "update_container", "container_number": "C1", "load_id": "L1"},
            "Nothing to update: provide at least one container field.",
        ),
    ],
)
def test_update_container_required_fields(portdox, session, request_, message):
    assert _invoke(portdox, request_) == {"error": message}
    assert session.calls == []


def test_update_container_rejected(portdox, session, ok):
    session.queue(ok({"success": False, "error": "Container locked"}))

    result = _invoke(
        portdox,
        {"action": "update_container", "container_number": "C1", "load_id": "L1", "container_status": "loaded"},
    )

    assert result == {"error": "Update Error: Container locked"}


def test_unknown_field_is_rejected(portdox, session):
    result = _invoke(portdox, {"action": "list_load_requests", "pageSize": 5})

    assert result["error"].startswith("Validation error: pageSize:")
    assert session.calls == []
