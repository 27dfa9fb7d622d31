"""
Ports (Interfaces) of the Accounts domain.

- UserRepository: persistence of users
- PasswordHasher: one-way hashing of passwords
- TokenService: issue/decode bearer tokens

Adapters live in src/adapters/django_app/accounts/.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Protocol, runtime_checkable

from src.core.shared.pagination import Page, PageRequest

from .entities import ActorRole, UserEntity


@dataclass(frozen=True)
class TokenClaims:
    """Decoded content of a bearer token."""

    user_id: str
    role: str
    issued_at: datetime
    expires_at: datetime


@runtime_checkable
class UserRepository(Protocol):
    """
    Persistence of users.

    Implementations:
    - DjangoUserRepository (ORM)
    - InMemoryUserRepository (tests)
    """

    def save(self, user: UserEntity) -> None:
        ...

    def get_by_id(self, user_id: str) -> Optional[UserEntity]:
        ...

    def get_by_email(self, email: str) -> Optional[UserEntity]:
        """Lookup by (already normalized) email."""
        ...

    def delete(self, user_id: str) -> None:
        ...

    def list_page(
        self,
        page_request: PageRequest,
        role: Optional[ActorRole] = None,
        department: Optional[str] = None,
    ) -> Page[UserEntity]:
        """Users ordered by name, optionally filtered."""
        ...

    def count_by_role(self) -> Dict[str, int]:
        ...

    def count_by_department(self) -> Dict[str, int]:
        ...


class PasswordHasher(Protocol):
    """One-way password hashing."""

    def hash(self, raw_password: str) -> str:
        ...

    def verify(self, raw_password: str, password_hash: str) -> bool:
        ...


class TokenService(Protocol):
    """Issues and decodes signed bearer tokens."""

    def issue(self, user: UserEntity) -> str:
        ...

    def decode(self, token: str) -> Optional[TokenClaims]:
        """Claims of a valid token, None if invalid or expired."""
        ...


class InMemoryUserRepository:
    """
    In-memory UserRepository.

    Useful for unit tests and prototyping. Not for production.
    """

    def __init__(self):
        self._users: dict[str, UserEntity] = {}

    def save(self, user: UserEntity) -> None:
        self._users[user.id] = user

    def get_by_id(self, user_id: str) -> Optional[UserEntity]:
        return self._users.get(user_id)

    def get_by_email(self, email: str) -> Optional[UserEntity]:
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    def delete(self, user_id: str) -> None:
        self._users.pop(user_id, None)

    def list_page(
        self,
        page_request: PageRequest,
        role: Optional[ActorRole] = None,
        department: Optional[str] = None,
    ) -> Page[UserEntity]:
        users: List[UserEntity] = list(self._users.values())
        if role:
            users = [u for u in users if u.role == role]
        if department:
            users = [u for u in users if u.department == department]
        users.sort(key=lambda u: u.name.lower())
        return Page.slice(users, page_request)

    def count_by_role(self) -> Dict[str, int]:
        return dict(Counter(u.role.value for u in self._users.values()))

    def count_by_department(self) -> Dict[str, int]:
        return dict(Counter(u.department for u in self._users.values()))

    def clear(self) -> None:
        self._users.clear()
