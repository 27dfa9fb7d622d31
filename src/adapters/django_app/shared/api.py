"""
Shared building blocks for the JSON API views.

Format:
- Input: JSON body, query-string filters
- Output: {success, data/error, meta}

Authentication:
- Authorization: Bearer <jwt> resolved through CurrentUserService
"""

import json
import logging
from typing import Any, Dict, Optional

from django.http import HttpRequest, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from src.config.container import get_container
from src.core.accounts.entities import UserEntity
from src.core.shared.exceptions import (
    AuthenticationError,
    BusinessRuleViolationError,
    ConcurrencyError,
    DomainException,
    EntityNotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from src.core.shared.pagination import Page

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


# =============================================================================
# Helpers
# =============================================================================

def json_response(success: bool, data: Any = None, error: str = None,
                  status: int = 200, meta: Dict = None) -> JsonResponse:
    """
    Build the standard JSON envelope.

    Args:
        success: Whether the operation succeeded
        data: Response payload
        error: Error message (failures only)
        status: HTTP status code
        meta: Extra metadata (pagination, error details)
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    return JsonResponse(response, status=status)


def page_response(page: Page) -> JsonResponse:
    """Envelope for a Page of output DTOs, pagination in meta."""
    return json_response(
        success=True,
        data=[item.to_dict() for item in page.items],
        meta={'pagination': page.pagination()},
    )


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Parse the request body.

    Raises:
        ValueError: If the body is not a JSON object
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValueError(f"Invalid JSON: {e}")

    if not isinstance(data, dict):
        raise ValueError("JSON body must be an object")
    return data


def str_field(data: Dict, key: str, default: Optional[str] = '') -> Optional[str]:
    """
    String value of a body key; missing or null gives default.

    Raises:
        ValidationError: If the value is present but not a JSON string
    """
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string", field=key)
    return value


def bool_field(data: Dict, key: str, default: Optional[bool] = False) -> Optional[bool]:
    """
    Boolean value of a body key; only JSON true/false are accepted.

    Raises:
        ValidationError: If the value is present but not a JSON boolean
    """
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be true or false", field=key)
    return value


def bearer_token(request: HttpRequest) -> Optional[str]:
    header = request.META.get('HTTP_AUTHORIZATION', '')
    if header.lower().startswith(BEARER_PREFIX):
        return header[len(BEARER_PREFIX):].strip() or None
    return None


# =============================================================================
# Base API View
# =============================================================================

@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    Base view for the JSON API.

    Provides:
    - JSON parsing
    - DI container access
    - Bearer-token authentication
    - Uniform error translation
    """

    def get_container(self):
        return get_container()

    def get_service(self, service_name: str):
        """Service provider from the container, e.g. 'create_ticket_service'."""
        return getattr(self.get_container(), service_name)()

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def get_actor(self, request: HttpRequest) -> UserEntity:
        """
        User behind the bearer token.

        Raises:
            AuthenticationError: Missing, invalid or expired token
        """
        service = self.get_service('current_user_service')
        return service.execute(bearer_token(request))

    def handle_exception(self, e: Exception) -> JsonResponse:
        """Translate an exception to the JSON error envelope."""
        if isinstance(e, ValidationError):
            return json_response(
                success=False,
                error=e.message,
                status=400,
                meta={'field': e.field}
            )

        if isinstance(e, AuthenticationError):
            return json_response(success=False, error=e.message, status=401)

        if isinstance(e, PermissionDeniedError):
            return json_response(
                success=False,
                error=e.message,
                status=403,
                meta={'action': e.action}
            )

        if isinstance(e, EntityNotFoundError):
            return json_response(success=False, error=e.message, status=404)

        if isinstance(e, BusinessRuleViolationError):
            return json_response(
                success=False,
                error=e.message,
                status=422,
                meta={'rule': e.rule}
            )

        if isinstance(e, ConcurrencyError):
            return json_response(success=False, error=e.message, status=409)

        if isinstance(e, DomainException):
            return json_response(success=False, error=e.message, status=400)

        if isinstance(e, ValueError):
            return json_response(success=False, error=str(e), status=400)

        logger.exception(f"Unexpected API error: {e}")
        return json_response(
            success=False,
            error="Internal server error",
            status=500
        )


class HealthView(BaseAPIView):
    """GET /health/ - liveness probe, no authentication."""

    def get(self, request: HttpRequest) -> JsonResponse:
        return JsonResponse({'status': 'ok'})
