"""
Accounts Domain - users, roles and authentication.

Contains:
- Entities (UserEntity, ActorRole, ActorRef)
- Use Cases (register, login, current user, user management)
- Ports (UserRepository, PasswordHasher, TokenService)
"""

from .entities import ActorRef, ActorRole, UserEntity, STAFF_ROLES
from .events import UserRegisteredEvent
from .ports import (
    InMemoryUserRepository,
    PasswordHasher,
    TokenClaims,
    TokenService,
    UserRepository,
)

__all__ = [
    "ActorRef",
    "ActorRole",
    "UserEntity",
    "STAFF_ROLES",
    "UserRegisteredEvent",
    "InMemoryUserRepository",
    "PasswordHasher",
    "TokenClaims",
    "TokenService",
    "UserRepository",
]
