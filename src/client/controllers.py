"""
View controllers for the ticket screens.

A controller owns the local state of one view. Every request runs
inside the view's ViewScope; state is only touched while the scope
is open, and only after a successful response.

Errors never escape as exceptions from the async actions: they are
recorded as dismissable Notifications.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from src.core.accounts.entities import ActorRole
from src.core.tickets import policy
from src.core.tickets.dtos import ChangeStatusCommand
from src.core.tickets.entities import TicketStatus

from .api import HelpdeskClient
from .errors import ClientError, LocalValidationError
from .filters import FilterBarConfig, TicketFilters
from .scope import ViewScope
from .session import SessionContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    level: str = "error"


class BaseController:
    """State guard, change listeners and notifications."""

    def __init__(self, api: HelpdeskClient, session: SessionContext, scope: ViewScope):
        self.api = api
        self.session = session
        self.scope = scope
        self.notifications: List[Notification] = []
        self._listeners: List[Callable] = []

    def subscribe(self, listener: Callable[["BaseController"], None]) -> None:
        """listener(controller) is scheduled after every state change."""
        self._listeners.append(listener)

    def dismiss(self, notification: Notification) -> None:
        if notification in self.notifications:
            self.notifications.remove(notification)

    def _apply(self, mutate: Callable, *args) -> bool:
        """Run a state mutation unless the scope is closed."""
        if self.scope.closed:
            return False
        mutate(*args)
        for listener in self._listeners:
            self.scope.call_soon(listener, self)
        return True

    def _record_error(self, error: ClientError) -> None:
        logger.info(f"{error.__class__.__name__}: {error.message}")
        self.notifications.append(Notification(error.title, error.message, "error"))

    def _record_success(self, title: str, message: str) -> None:
        self.notifications.append(Notification(title, message, "success"))


class TicketDetailController(BaseController):
    """
    Ticket detail view: load, status change with confirmation, comments.

    Status change is a two-step commit:
        controller.request_status_change("Resolved")
        await controller.confirm_status_change()
    On success the whole ticket is replaced by the server's copy.
    """

    def __init__(
        self,
        api: HelpdeskClient,
        session: SessionContext,
        ticket_id: str,
        scope: ViewScope,
    ):
        super().__init__(api, session, scope)
        self.ticket_id = ticket_id
        self.ticket: Optional[Dict[str, Any]] = None
        self.status_options: List[Tuple[str, str]] = []
        self.pending_status: Optional[str] = None
        self.loading = False
        self.committing = False
        self.load_error: Optional[ClientError] = None

    # =========================================================================
    # Loading
    # =========================================================================

    async def load(self) -> None:
        if self.scope.closed:
            return
        self._apply(self._start_loading)
        try:
            ticket = await self.scope.run(self.api.get_ticket(self.ticket_id))
        except ClientError as e:
            self._apply(self._load_failed, e)
            return
        self._apply(self._replace_ticket, ticket)

    async def retry_load(self) -> None:
        """Explicit retry after a failed load."""
        await self.load()

    def _start_loading(self) -> None:
        self.loading = True
        self.load_error = None

    def _load_failed(self, error: ClientError) -> None:
        self.loading = False
        self.load_error = error
        self._record_error(error)

    def _replace_ticket(self, ticket: Dict[str, Any]) -> None:
        self.loading = False
        self.ticket = ticket
        self.status_options = self._compute_status_options(ticket)

    def _compute_status_options(self, ticket: Dict[str, Any]) -> List[Tuple[str, str]]:
        role = self.session.role
        if role is None:
            return []
        try:
            current = TicketStatus.from_string(ticket.get("status"))
        except ValueError:
            return []

        requester = ticket.get("requester") or {}
        is_requester = (
            role == ActorRole.EMPLOYEE
            and self.session.user_id is not None
            and requester.get("id") == self.session.user_id
        )
        return [
            (status.value, label)
            for status, label in policy.status_options(role, is_requester, current)
        ]

    # =========================================================================
    # Status change
    # =========================================================================

    def request_status_change(self, target) -> None:
        """
        Record the target awaiting confirmation.

        Raises:
            LocalValidationError: If target is not in status_options
        """
        value = target.value if isinstance(target, TicketStatus) else target
        allowed = [option for option, _ in self.status_options]
        if value not in allowed:
            raise LocalValidationError(f"Status '{value}' is not available", field="status")
        self._apply(setattr, self, "pending_status", value)

    def cancel_status_change(self) -> None:
        self._apply(setattr, self, "pending_status", None)

    async def confirm_status_change(self, comment: str = "") -> bool:
        """
        Send the pending status change once.

        Ignored while another commit is in flight or nothing is pending.

        Returns:
            True if the server accepted the change
        """
        if self.scope.closed or self.committing or self.pending_status is None:
            return False

        target = self.pending_status
        self.committing = True
        try:
            ticket = await self.scope.run(
                self.api.update_ticket(self.ticket_id, ChangeStatusCommand(target, comment))
            )
        except ClientError as e:
            self._apply(self._record_error, e)
            return False
        else:
            self._apply(self._replace_ticket, ticket)
            return True
        finally:
            self._apply(self._finish_commit)

    def _finish_commit(self) -> None:
        self.committing = False
        self.pending_status = None

    # =========================================================================
    # Comments
    # =========================================================================

    async def add_comment(self, content: str, is_internal: bool = False) -> Optional[Dict]:
        if self.scope.closed:
            return None
        try:
            comment = await self.scope.run(
                self.api.add_comment(self.ticket_id, content, is_internal=is_internal)
            )
        except ClientError as e:
            self._apply(self._record_error, e)
            return None
        self._apply(self._append_comment, comment)
        return comment

    def _append_comment(self, comment: Dict[str, Any]) -> None:
        if self.ticket is not None:
            comments = list(self.ticket.get("comments") or [])
            comments.append(comment)
            self.ticket = {**self.ticket, "comments": comments}
        self._record_success("Comment added", "Your comment was posted.")


class TicketListController(BaseController):
    """Ticket list view: filters, pagination and the filter bar layout."""

    def __init__(
        self,
        api: HelpdeskClient,
        session: SessionContext,
        scope: ViewScope,
        limit: Optional[int] = None,
        show_create_shortcut: bool = False,
    ):
        super().__init__(api, session, scope)
        self.limit = limit
        self.show_create_shortcut = show_create_shortcut
        self.filters = TicketFilters()
        self.page = 1
        self.tickets: List[Dict[str, Any]] = []
        self.pagination: Dict[str, Any] = {}
        self.loading = False
        self.load_error: Optional[ClientError] = None

    @property
    def filter_bar(self) -> FilterBarConfig:
        return FilterBarConfig.for_role(
            self.session.role,
            show_create_shortcut=self.show_create_shortcut,
        )

    async def load(self) -> None:
        if self.scope.closed:
            return
        self._apply(self._start_loading)
        try:
            page = await self.scope.run(
                self.api.list_tickets(self.filters, page=self.page, limit=self.limit)
            )
        except ClientError as e:
            self._apply(self._load_failed, e)
            return
        self._apply(self._replace_page, page)

    async def retry_load(self) -> None:
        await self.load()

    async def apply_filters(self, filters: TicketFilters) -> None:
        """New filters always restart from page 1."""
        try:
            filters.validate()
        except LocalValidationError as e:
            self._apply(self._record_error, e)
            return
        self._apply(self._set_query, filters, 1)
        await self.load()

    async def go_to_page(self, page: int) -> None:
        total_pages = self.pagination.get("total_pages")
        if page < 1 or (total_pages and page > total_pages):
            self._apply(self._record_error, LocalValidationError(f"Page {page} does not exist"))
            return
        self._apply(self._set_query, self.filters, page)
        await self.load()

    def _set_query(self, filters: TicketFilters, page: int) -> None:
        self.filters = filters
        self.page = page

    def _start_loading(self) -> None:
        self.loading = True
        self.load_error = None

    def _load_failed(self, error: ClientError) -> None:
        self.loading = False
        self.load_error = error
        self._record_error(error)

    def _replace_page(self, page) -> None:
        self.loading = False
        self.tickets = page.items
        self.pagination = page.pagination
