"""
JSON API views for the Accounts domain.

Endpoints:
- POST /api/auth/register/ - Self-service registration (employee)
- POST /api/auth/login/ - Credentials -> {token, user}
- GET  /api/auth/me/ - Current user
- POST /api/users/change-password/ - Change own password
- GET  /api/users/ - User directory (staff)
- POST /api/users/ - Create a user with any role (super-admin)
- GET  /api/users/stats/ - Counts by role and department (staff)
- PATCH/DELETE /api/users/<id>/ - Edit or remove a user (super-admin)
"""

import logging
from typing import Dict

from django.http import HttpRequest, JsonResponse

from src.adapters.django_app.shared.api import (
    BaseAPIView,
    bool_field,
    json_response,
    page_response,
    str_field,
)
from src.core.accounts.dtos import (
    ChangePasswordInputDTO,
    ListUsersQueryDTO,
    LoginInputDTO,
    RegisterUserInputDTO,
    UpdateUserInputDTO,
    UserOutputDTO,
)

logger = logging.getLogger(__name__)


def register_dto_from_body(data: Dict) -> RegisterUserInputDTO:
    return RegisterUserInputDTO(
        name=str_field(data, 'name'),
        email=str_field(data, 'email'),
        password=str_field(data, 'password'),
        role=str_field(data, 'role') or 'employee',
        department=str_field(data, 'department'),
    )


class RegisterView(BaseAPIView):
    """POST /api/auth/register/ - no token required."""

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "name": "string", "email": "string", "password": "string",
            "department": "string (optional)"
        }
        """
        try:
            data = self.parse_body(request)
            user = self.get_service('register_user_service').execute(register_dto_from_body(data))
            return json_response(success=True, data=user.to_dict(), status=201)

        except Exception as e:
            return self.handle_exception(e)


class LoginView(BaseAPIView):
    """POST /api/auth/login/ - no token required."""

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            data = self.parse_body(request)
            output = self.get_service('login_service').execute(LoginInputDTO(
                email=str_field(data, 'email'),
                password=str_field(data, 'password'),
            ))
            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)


class MeView(BaseAPIView):
    """GET /api/auth/me/"""

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            actor = self.get_actor(request)
            return json_response(success=True, data=UserOutputDTO.from_entity(actor).to_dict())

        except Exception as e:
            return self.handle_exception(e)


class ChangePasswordView(BaseAPIView):
    """POST /api/users/change-password/"""

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "currentPassword": "string",
            "newPassword": "string (min 8 characters)"
        }
        """
        try:
            actor = self.get_actor(request)
            data = self.parse_body(request)

            self.get_service('change_password_service').execute(actor, ChangePasswordInputDTO(
                current_password=str_field(data, 'currentPassword'),
                new_password=str_field(data, 'newPassword'),
            ))
            return json_response(success=True, data={'message': 'Password updated'})

        except Exception as e:
            return self.handle_exception(e)


class UserListView(BaseAPIView):
    """
    GET /api/users/ - List users
    POST /api/users/ - Create user (super-admin)
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        """Query params: role, department, page, limit"""
        try:
            actor = self.get_actor(request)
            query = ListUsersQueryDTO(
                role=request.GET.get('role') or None,
                department=request.GET.get('department') or None,
                page=request.GET.get('page'),
                limit=request.GET.get('limit'),
            )
            page = self.get_service('list_users_service').execute(actor, query)
            return page_response(page)

        except Exception as e:
            return self.handle_exception(e)

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            actor = self.get_actor(request)
            data = self.parse_body(request)

            user = self.get_service('register_user_service').execute(
                register_dto_from_body(data),
                actor=actor,
            )

            logger.info(f"API: User {user.id} created by {actor.id}")
            return json_response(success=True, data=user.to_dict(), status=201)

        except Exception as e:
            return self.handle_exception(e)


class UserStatsView(BaseAPIView):
    """GET /api/users/stats/"""

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            actor = self.get_actor(request)
            stats = self.get_service('user_stats_service').execute(actor)
            return json_response(success=True, data=stats)

        except Exception as e:
            return self.handle_exception(e)


class UserDetailView(BaseAPIView):
    """
    PATCH /api/users/<id>/ - Update user
    DELETE /api/users/<id>/ - Delete user
    """

    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Body JSON (every key optional):
        {
            "name": "string", "role": "string",
            "department": "string", "isActive": true
        }
        """
        try:
            actor = self.get_actor(request)
            data = self.parse_body(request)

            user = self.get_service('update_user_service').execute(actor, UpdateUserInputDTO(
                user_id=pk,
                name=str_field(data, 'name', None),
                role=str_field(data, 'role', None),
                department=str_field(data, 'department', None),
                is_active=bool_field(data, 'isActive', None),
            ))
            return json_response(success=True, data=user.to_dict())

        except Exception as e:
            return self.handle_exception(e)

    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            actor = self.get_actor(request)
            self.get_service('delete_user_service').execute(actor, pk)
            return json_response(success=True, data={'id': pk})

        except Exception as e:
            return self.handle_exception(e)
