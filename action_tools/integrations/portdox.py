"""Portdox logistics tool: list, search and update load requests."""
from __future__ import annotations

import os
from typing import Any, ClassVar, Dict, Literal, Optional

from pydantic import Field

from action_tools.tools.action import ActionTool, InvocationContext, action
from action_tools.tools.credentials import StaticKey
from action_tools.tools.exceptions import ToolCredentialsMissingError, ToolExecutionError, ToolResponseError
from action_tools.tools.http import RestClient
from action_tools.tools.schema import ActionRequest, AllOf, AnyOf

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 20

UPDATE_FIELDS = (
    "container_type",
    "seal_no_1",
    "seal_no_2",
    "empty_pickup_date",
    "full_return_date",
    "booking_id",
    "container_status",
)
CONTAINER_FIELDS = ("container_number", *UPDATE_FIELDS, "load_id")


class PortdoxRequest(ActionRequest):
    action: Literal["list_load_requests", "search_by_ref", "update_container"] = Field(
        description=(
            "'list_load_requests' to fetch load requests, 'search_by_ref' to search by reference number, "
            "or 'update_container' to modify a container."
        )
    )
    page: Optional[int] = Field(None, ge=1, description="Page number for pagination (default 1).")
    per_page: Optional[int] = Field(None, ge=1, description="Number of results per page (default 20).")
    ref_number: Optional[str] = Field(None, min_length=1, description="Reference number to filter by.")
    container_number: Optional[str] = Field(None, min_length=1, description="Container number to update.")
    container_type: Optional[str] = Field(None, description="Updated container type.")
    seal_no_1: Optional[str] = Field(None, description="Updated first seal number.")
    seal_no_2: Optional[str] = Field(None, description="Updated second seal number.")
    empty_pickup_date: Optional[str] = Field(None, description="Updated empty pickup date.")
    full_return_date: Optional[str] = Field(None, description="Updated full return date.")
    booking_id: Optional[str] = Field(None, description="Updated booking ID.")
    container_status: Optional[str] = Field(None, description="Updated container status.")
    load_id: Optional[str] = Field(None, min_length=1, description="Load the container belongs to.")

    ACTION_RULES: ClassVar = {
        "search_by_ref": [AllOf(("ref_number",), "Reference number is required for searching.")],
        "update_container": [
            AllOf(("container_number",), "Container number is required for updating."),
            AllOf(("load_id",), "Load ID is required for updating."),
            AnyOf(UPDATE_FIELDS, "Nothing to update: provide at least one container field."),
        ],
    }


def _check_success(data: Any, prefix: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ToolResponseError(f"{prefix}: unexpected response")
    if not data.get("success"):
        raise ToolExecutionError(f"{prefix}: {data.get('error') or 'Unknown error'}")
    return data


class PortdoxTool(ActionTool):
    """Fetch and update load requests in the Portdox logistics API."""

    TOOL_ID = "portdox"
    request_model = PortdoxRequest
    keywords = ("load", "container", "logistics", "shipment", "portdox", "booking", "seal")

    def __init__(
        self,
        auth_token: Optional[str] = None,
        *,
        base_url: str = "https://login.portdox.com/api",
        session=None,
        timeout: float = 30.0,
    ):
        auth_token = auth_token or os.getenv("PORTDOX_AUTH_TOKEN")
        if not auth_token:
            raise ToolCredentialsMissingError("PORTDOX_AUTH_TOKEN")
        super().__init__(StaticKey(auth_token))
        self.client = RestClient(base_url, session=session, timeout=timeout)
        self.name = "Portdox"
        self.description = "Fetch load requests, search them by reference number, and update container details."

    def _load_requests(self, request: PortdoxRequest, context: InvocationContext) -> Dict[str, Any]:
        page = request.page if request.page is not None else DEFAULT_PAGE
        per_page = request.per_page if request.per_page is not None else DEFAULT_PER_PAGE
        params: Dict[str, Any] = {"auth_token": context.token, "page": page, "per_page": per_page}
        if request.ref_number:
            params["ref_number"] = request.ref_number

        data = _check_success(
            self.client.send_json("GET", "/list_load_requests", params=params, failure="API Error"),
            "API Error",
        )
        # Laravel paginator: {"data": {"data": [...], "current_page": ..., ...}}
        paginator = data.get("data")
        if not isinstance(paginator, dict) or not isinstance(paginator.get("data"), list):
            raise ToolResponseError("Missing 'data.data' in load request listing")
        return {
            "page": paginator.get("current_page", page),
            "perPage": per_page,
            "total": paginator.get("total"),
            "lastPage": paginator.get("last_page"),
            "loadRequests": [
                {
                    "load_id": item.get("load_id"),
                    "ref_number": item.get("ref_number"),
                    "total_cars": item.get("total_cars"),
                }
                for item in paginator["data"]
            ],
        }

    @action("list_load_requests")
    def _list_load_requests(self, request, context):
        return self._load_requests(request, context)

    @action("search_by_ref")
    def _search_by_ref(self, request, context):
        return self._load_requests(request, context)

    @action("update_container")
    def _update_container(self, request: PortdoxRequest, context: InvocationContext) -> Dict[str, Any]:
        payload = {"auth_token": context.token, **request.supplied(*CONTAINER_FIELDS)}
        _check_success(
            self.client.send_json("POST", "/submit_temp_container", json=payload, failure="Update API Error"),
            "Update Error",
        )
        return {
            "message": f"Container {request.container_number} updated successfully.",
            "container_number": request.container_number,
        }
