"""
JSON API views for the Tickets domain.

Endpoints:
- GET  /api/tickets/ - List tickets (role-scoped, paginated)
- POST /api/tickets/ - Create ticket
- GET  /api/tickets/stats/ - Dashboard statistics
- GET  /api/tickets/department-stats/<category>/ - Resolution forecast
- GET  /api/tickets/<id>/ - Ticket detail
- PUT/PATCH /api/tickets/<id>/ - Apply update commands
- GET  /api/tickets/<id>/status-options/ - Statuses the user may pick
- POST /api/tickets/<id>/comments/ - Add a comment
- GET  /api/tickets/<id>/suggestions/ - AI response suggestions (staff)

Every endpoint requires a bearer token.
"""

import logging
from typing import Dict, List

from django.http import HttpRequest, JsonResponse

from src.adapters.django_app.shared.api import (
    BaseAPIView,
    bool_field,
    json_response,
    page_response,
    str_field,
)
from src.core.shared.exceptions import ValidationError
from src.core.tickets.dtos import (
    AddCommentInputDTO,
    AttachmentInputDTO,
    ChangeAssignmentCommand,
    ChangeCategoryCommand,
    ChangePriorityCommand,
    ChangeStatusCommand,
    CreateTicketInputDTO,
    TicketQueryDTO,
    UpdateCommand,
    UpdateTicketInputDTO,
)

logger = logging.getLogger(__name__)


def commands_from_body(data: Dict) -> List[UpdateCommand]:
    """
    Turn an update body into typed commands, one per present key.

    Body JSON (every key optional):
    {
        "status": "Open|In Progress|Resolved|Closed",
        "statusComment": "string",
        "category": "IT|HR|Admin",
        "categoryComment": "string",
        "priority": "Low|Medium|High|Critical",
        "priorityComment": "string",
        "assignedTo": "user id" | null
    }
    """
    commands: List[UpdateCommand] = []

    if 'status' in data:
        commands.append(ChangeStatusCommand(
            status=str_field(data, 'status'),
            comment=str_field(data, 'statusComment'),
        ))
    if 'category' in data:
        commands.append(ChangeCategoryCommand(
            category=str_field(data, 'category'),
            comment=str_field(data, 'categoryComment'),
        ))
    if 'priority' in data:
        commands.append(ChangePriorityCommand(
            priority=str_field(data, 'priority'),
            comment=str_field(data, 'priorityComment'),
        ))
    if 'assignedTo' in data:
        assignee_id = str_field(data, 'assignedTo', None) or None
        commands.append(ChangeAssignmentCommand(assignee_id=assignee_id))

    return commands


def attachments_from_body(data: Dict) -> tuple:
    raw = data.get('attachments') or []
    if not isinstance(raw, list):
        raise ValidationError("Attachments must be a list", field="attachments")

    attachments = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("Invalid attachment", field="attachments")
        attachments.append(AttachmentInputDTO(
            url=str_field(item, 'url'),
            original_name=str_field(item, 'originalName') or str_field(item, 'original_name'),
        ))
    return tuple(attachments)


class TicketListView(BaseAPIView):
    """
    GET /api/tickets/ - List tickets
    POST /api/tickets/ - Create ticket
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        """
        Query params:
        - status, category, priority, mood (staff only), search
        - page (default: 1), limit (default: TICKETS_PAGE_SIZE)
        """
        try:
            actor = self.get_actor(request)
            query = TicketQueryDTO(
                status=request.GET.get('status') or None,
                category=request.GET.get('category') or None,
                priority=request.GET.get('priority') or None,
                mood=request.GET.get('mood') or None,
                search=request.GET.get('search') or None,
                page=request.GET.get('page'),
                limit=request.GET.get('limit'),
            )

            page = self.get_service('list_tickets_service').execute(actor, query)
            return page_response(page)

        except Exception as e:
            return self.handle_exception(e)

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "title": "string (required)",
            "description": "string (required)",
            "priority": "Low|Medium|High|Critical (optional)",
            "attachments": [{"url": "...", "originalName": "..."}] (optional)
        }
        """
        try:
            actor = self.get_actor(request)
            data = self.parse_body(request)

            input_dto = CreateTicketInputDTO(
                title=str_field(data, 'title'),
                description=str_field(data, 'description'),
                priority=str_field(data, 'priority') or 'Medium',
                attachments=attachments_from_body(data),
            )

            output = self.get_service('create_ticket_service').execute(actor, input_dto)

            logger.info(f"API: Ticket created: {output.ticket.ticket_number}")

            return json_response(success=True, data=output.to_dict(), status=201)

        except Exception as e:
            return self.handle_exception(e)


class TicketDetailView(BaseAPIView):
    """
    GET /api/tickets/<id>/ - Ticket detail
    PUT/PATCH /api/tickets/<id>/ - Update ticket
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            actor = self.get_actor(request)
            ticket = self.get_service('get_ticket_service').execute(actor, pk)
            return json_response(success=True, data=ticket.to_dict())

        except Exception as e:
            return self.handle_exception(e)

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            actor = self.get_actor(request)
            data = self.parse_body(request)

            input_dto = UpdateTicketInputDTO(
                ticket_id=pk,
                commands=tuple(commands_from_body(data)),
            )
            ticket = self.get_service('update_ticket_service').execute(actor, input_dto)

            return json_response(success=True, data=ticket.to_dict())

        except Exception as e:
            return self.handle_exception(e)

    def put(self, request: HttpRequest, pk: str) -> JsonResponse:
        return self.patch(request, pk)


class TicketStatusOptionsView(BaseAPIView):
    """GET /api/tickets/<id>/status-options/"""

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            actor = self.get_actor(request)
            options = self.get_service('status_options_service').execute(actor, pk)
            return json_response(success=True, data=options)

        except Exception as e:
            return self.handle_exception(e)


class TicketCommentsView(BaseAPIView):
    """POST /api/tickets/<id>/comments/"""

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Body JSON:
        {
            "content": "string (required)",
            "isInternal": false
        }
        """
        try:
            actor = self.get_actor(request)
            data = self.parse_body(request)

            input_dto = AddCommentInputDTO(
                ticket_id=pk,
                content=str_field(data, 'content'),
                is_internal=bool_field(data, 'isInternal'),
            )
            comment = self.get_service('add_comment_service').execute(actor, input_dto)

            return json_response(success=True, data=comment.to_dict(), status=201)

        except Exception as e:
            return self.handle_exception(e)


class TicketSuggestionsView(BaseAPIView):
    """GET /api/tickets/<id>/suggestions/?role=it"""

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            actor = self.get_actor(request)
            result = self.get_service('suggest_responses_service').execute(
                actor,
                pk,
                role=request.GET.get('role') or None,
            )
            return json_response(success=True, data=result)

        except Exception as e:
            return self.handle_exception(e)


class TicketStatsView(BaseAPIView):
    """GET /api/tickets/stats/"""

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            actor = self.get_actor(request)
            stats = self.get_service('ticket_stats_service').execute(actor)
            return json_response(success=True, data=stats)

        except Exception as e:
            return self.handle_exception(e)


class DepartmentStatsView(BaseAPIView):
    """GET /api/tickets/department-stats/<category>/ - e.g. IT, HR, Admin"""

    def get(self, request: HttpRequest, category: str) -> JsonResponse:
        try:
            actor = self.get_actor(request)
            stats = self.get_service('department_stats_service').execute(actor, category)
            return json_response(success=True, data=stats)

        except Exception as e:
            return self.handle_exception(e)
