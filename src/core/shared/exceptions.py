"""
Domain exceptions for the Helpdesk.

Typed errors that travel from entities and use cases up to the
adapters, where they are translated to transport-level responses.

Hierarchy:
    DomainException (base)
    ├── ValidationError (bad input)
    ├── AuthenticationError (unknown or invalid credentials)
    ├── PermissionDeniedError (actor not allowed to do this)
    ├── EntityNotFoundError (entity does not exist)
    ├── BusinessRuleViolationError (business rule broken)
    ├── ConcurrencyError (conflicting modification)
    └── AssistantUnavailableError (AI provider unreachable/unconfigured)
"""


class DomainException(Exception):
    """
    Base class for every domain error.

    Catching DomainException catches any error raised by the core.

    Example:
        try:
            ticket.add_comment(...)
        except DomainException as e:
            logger.error(f"Domain error: {e}")
    """

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serialize the error (used by the JSON API)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Input data does not satisfy the minimum requirements.

    Example:
        if not content.strip():
            raise ValidationError("Comment Required", field="content")
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class AuthenticationError(DomainException):
    """Credentials or bearer token missing, wrong or expired."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, "AUTHENTICATION_FAILED")


class PermissionDeniedError(DomainException):
    """
    The actor is authenticated but not allowed to perform the action.

    Example:
        if target not in allowed:
            raise PermissionDeniedError(
                "Status change not allowed", action="change_status"
            )
    """

    def __init__(self, message: str, action: str = None):
        self.action = action
        super().__init__(message, "PERMISSION_DENIED")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.action:
            result["action"] = self.action
        return result


class EntityNotFoundError(DomainException):
    """
    Lookup by id returned nothing.

    Example:
        ticket = repo.get_by_id(ticket_id)
        if not ticket:
            raise EntityNotFoundError(
                f"Ticket {ticket_id} not found",
                entity_type="Ticket",
                entity_id=ticket_id,
            )
    """

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class BusinessRuleViolationError(DomainException):
    """
    An operation would break an established business rule.

    Example:
        if repo.get_by_email(email):
            raise BusinessRuleViolationError(
                "Email already registered", rule="unique_email"
            )
    """

    def __init__(self, message: str, rule: str = None):
        self.rule = rule
        super().__init__(message, "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class ConcurrencyError(DomainException):
    """The entity was modified concurrently by another process."""

    def __init__(self, message: str):
        super().__init__(message, "CONCURRENCY_ERROR")


class AssistantUnavailableError(DomainException):
    """
    The language model could not be reached or is not configured.

    Never leaves the assistant services: they catch it and fall back
    to deterministic answers.
    """

    def __init__(self, message: str = "Assistant unavailable"):
        super().__init__(message, "ASSISTANT_UNAVAILABLE")
