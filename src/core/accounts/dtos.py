"""
Data Transfer Objects of the Accounts domain.

Input DTOs carry validated request data; output DTOs control what is
exposed (the password hash never leaves the core).
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .entities import UserEntity


# =============================================================================
# INPUT DTOs
# =============================================================================

@dataclass(frozen=True)
class RegisterUserInputDTO:
    """
    Attributes:
        name: Display name
        email: Login email
        password: Raw password (min 8 characters)
        role: Role value (e.g. "employee", "it")
        department: Department name
    """

    name: str
    email: str
    password: str
    role: str = "employee"
    department: str = ""


@dataclass(frozen=True)
class LoginInputDTO:
    email: str
    password: str


@dataclass(frozen=True)
class ChangePasswordInputDTO:
    current_password: str
    new_password: str


@dataclass(frozen=True)
class UpdateUserInputDTO:
    """Partial update; None means "leave unchanged"."""

    user_id: str
    name: Optional[str] = None
    role: Optional[str] = None
    department: Optional[str] = None
    is_active: Optional[bool] = None


@dataclass(frozen=True)
class ListUsersQueryDTO:
    role: Optional[str] = None
    department: Optional[str] = None
    page: int = 1
    limit: int = 10


# =============================================================================
# OUTPUT DTOs
# =============================================================================

@dataclass
class UserOutputDTO:
    """Public representation of a user."""

    id: str
    name: str
    email: str
    role: str
    department: str
    is_active: bool
    created_at: datetime
    last_login_at: Optional[datetime]

    @classmethod
    def from_entity(cls, entity: UserEntity) -> "UserOutputDTO":
        return cls(
            id=entity.id,
            name=entity.name,
            email=entity.email,
            role=entity.role.value,
            department=entity.department,
            is_active=entity.is_active,
            created_at=entity.created_at,
            last_login_at=entity.last_login_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "department": self.department,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
            "last_login_at": self.last_login_at.isoformat() if self.last_login_at else None,
        }


@dataclass
class AuthTokenOutputDTO:
    """Result of a successful login."""

    token: str
    user: UserOutputDTO

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "user": self.user.to_dict(),
        }
