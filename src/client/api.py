"""
Async client for the helpdesk JSON API (httpx).

Every response is expected in the server envelope:
    {"success": true, "data": ..., "meta": {...}}
Failures surface as ClientError subclasses (see errors.py).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from src.core.tickets import policy
from src.core.tickets.dtos import (
    ChangeAssignmentCommand,
    ChangeCategoryCommand,
    ChangePriorityCommand,
    ChangeStatusCommand,
    UpdateCommand,
)

from .errors import (
    HTTPStatusError,
    LocalValidationError,
    MalformedResponseError,
    TransportError,
)
from .filters import TicketFilters
from .session import SessionContext

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


@dataclass
class TicketPage:
    items: List[Dict[str, Any]]
    pagination: Dict[str, Any] = field(default_factory=dict)


def command_to_body(command: UpdateCommand) -> Dict[str, Any]:
    """Wire keys of one typed update command."""
    if isinstance(command, ChangeStatusCommand):
        body = {"status": command.status}
        if command.comment:
            body["statusComment"] = command.comment
        return body
    if isinstance(command, ChangeCategoryCommand):
        body = {"category": command.category}
        if command.comment:
            body["categoryComment"] = command.comment
        return body
    if isinstance(command, ChangePriorityCommand):
        body = {"priority": command.priority}
        if command.comment:
            body["priorityComment"] = command.comment
        return body
    if isinstance(command, ChangeAssignmentCommand):
        return {"assignedTo": command.assignee_id}
    raise TypeError(f"Unsupported update command: {command!r}")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.text or response.reason_phrase


def _require(payload: Any, *keys: str) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise MalformedResponseError("Expected a JSON object")
    missing = [key for key in keys if key not in payload]
    if missing:
        raise MalformedResponseError(f"Response is missing: {', '.join(missing)}")
    return payload


class HelpdeskClient:
    """
    Thin async wrapper over the helpdesk endpoints.

    Example:
        session = SessionContext()
        async with HelpdeskClient("http://localhost:8000", session) as api:
            await api.login("ana@example.com", "secret123")
            ticket = await api.get_ticket(ticket_id)
    """

    def __init__(
        self,
        base_url: str,
        session: SessionContext,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.session = session
        self._http = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "HelpdeskClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # =========================================================================
    # Transport
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict] = None,
        params: Optional[Dict] = None,
    ) -> Dict[str, Any]:
        """
        Send a request and return the decoded envelope.

        Raises:
            TransportError: Network failure or timeout
            HTTPStatusError: Non-2xx status
            MalformedResponseError: Non-JSON body or no "data" key
        """
        try:
            response = await self._http.request(
                method,
                path,
                json=json,
                params=params,
                headers=self.session.auth_headers(),
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out: {method} {path}") from e
        except httpx.TransportError as e:
            raise TransportError(f"Connection error: {e}") from e

        if not response.is_success:
            logger.debug(f"{method} {path} -> {response.status_code}")
            raise HTTPStatusError(response.status_code, _error_message(response))

        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Invalid JSON from {method} {path}") from e

        return _require(body, "data")

    async def _data(self, method: str, path: str, **kwargs) -> Any:
        envelope = await self._request(method, path, **kwargs)
        return envelope["data"]

    # =========================================================================
    # Auth
    # =========================================================================

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """Sign in and store the token in the session. Returns the user."""
        if not email or not password:
            raise LocalValidationError("Email and password are required", field="email")

        data = _require(
            await self._data("POST", "/api/auth/login/", json={"email": email, "password": password}),
            "token",
            "user",
        )
        self.session.login(data["token"], data["user"])
        return data["user"]

    def logout(self) -> None:
        self.session.logout()

    async def me(self) -> Dict[str, Any]:
        return _require(await self._data("GET", "/api/auth/me/"), "id", "role")

    # =========================================================================
    # Tickets
    # =========================================================================

    async def list_tickets(
        self,
        filters: Optional[TicketFilters] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> TicketPage:
        params = (filters or TicketFilters()).to_params(
            page=page,
            limit=limit,
            include_mood=policy.can_view_mood(self.session.role),
        )
        envelope = await self._request("GET", "/api/tickets/", params=params)

        items = envelope["data"]
        if not isinstance(items, list):
            raise MalformedResponseError("Ticket list is not an array")
        meta = envelope.get("meta") or {}
        return TicketPage(items=items, pagination=meta.get("pagination", {}))

    async def get_ticket(self, ticket_id: str) -> Dict[str, Any]:
        return _require(await self._data("GET", f"/api/tickets/{ticket_id}/"), "id", "status")

    async def create_ticket(
        self,
        title: str,
        description: str,
        priority: str = "Medium",
    ) -> Dict[str, Any]:
        if not (title or "").strip():
            raise LocalValidationError("Title is required", field="title")
        if not (description or "").strip():
            raise LocalValidationError("Description is required", field="description")

        body = {"title": title.strip(), "description": description.strip(), "priority": priority}
        return _require(await self._data("POST", "/api/tickets/", json=body), "id", "status")

    async def status_options(self, ticket_id: str) -> List[Dict[str, str]]:
        options = await self._data("GET", f"/api/tickets/{ticket_id}/status-options/")
        if not isinstance(options, list):
            raise MalformedResponseError("Status options are not an array")
        return [_require(option, "value", "label") for option in options]

    async def update_ticket(self, ticket_id: str, *commands: UpdateCommand) -> Dict[str, Any]:
        """
        Apply typed commands in one request; returns the updated ticket.

        Example:
            await api.update_ticket(ticket_id, ChangeStatusCommand("Resolved"))
        """
        if not commands:
            raise LocalValidationError("Nothing to update")

        body: Dict[str, Any] = {}
        for command in commands:
            body.update(command_to_body(command))

        return _require(
            await self._data("PATCH", f"/api/tickets/{ticket_id}/", json=body),
            "id",
            "status",
        )

    async def add_comment(
        self,
        ticket_id: str,
        content: str,
        is_internal: bool = False,
    ) -> Dict[str, Any]:
        if not (content or "").strip():
            raise LocalValidationError("Comment cannot be empty", field="content")

        body = {"content": content.strip(), "isInternal": is_internal}
        return _require(
            await self._data("POST", f"/api/tickets/{ticket_id}/comments/", json=body),
            "id",
        )
