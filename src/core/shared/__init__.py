"""
Shared Domain Components.

Components used by every domain:
- Domain exceptions
- Interfaces (Ports)
- Base class for Domain Events
- Pagination primitives
"""

from .exceptions import (
    DomainException,
    ValidationError,
    AuthenticationError,
    PermissionDeniedError,
    EntityNotFoundError,
    BusinessRuleViolationError,
    ConcurrencyError,
    AssistantUnavailableError,
)
from .events import DomainEvent
from .interfaces import UnitOfWork, EventPublisher, EventStore
from .pagination import PageRequest, Page

__all__ = [
    "DomainException",
    "ValidationError",
    "AuthenticationError",
    "PermissionDeniedError",
    "EntityNotFoundError",
    "BusinessRuleViolationError",
    "ConcurrencyError",
    "AssistantUnavailableError",
    "DomainEvent",
    "UnitOfWork",
    "EventPublisher",
    "EventStore",
    "PageRequest",
    "Page",
]
