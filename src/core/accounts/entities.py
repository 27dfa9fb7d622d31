"""
Entities of the Accounts domain.

Entities:
- ActorRole: Roles a user can hold
- ActorRef: Read-only snapshot of a user as seen by other aggregates
- UserEntity: A person who can log into the helpdesk

Encapsulated rules:
- Email is required, well formed and stored lowercased
- Staff = admin, hr, it, super-admin
- Inactive users cannot authenticate
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
import re
import uuid

from src.core.shared.clock import utcnow
from src.core.shared.exceptions import ValidationError


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ActorRole(Enum):
    """
    Roles of helpdesk users.

    Staff roles (admin, hr, it, super-admin) triage tickets.
    Employees file tickets and follow their own.
    """

    EMPLOYEE = "employee"
    HR = "hr"
    ADMIN = "admin"
    IT = "it"
    SUPER_ADMIN = "super-admin"

    @property
    def is_staff(self) -> bool:
        return self in STAFF_ROLES

    @classmethod
    def from_string(cls, value: str) -> "ActorRole":
        """
        Convert a string to a role.

        Accepts the value ("super-admin") or the name ("SUPER_ADMIN").

        Raises:
            ValueError: If the value is not a known role or not a string
        """
        if isinstance(value, cls):
            return value
        if value is not None and not isinstance(value, str):
            raise ValueError(f"Invalid role: {value!r}")
        normalized = (value or "").strip()
        for role in cls:
            if role.value == normalized.lower():
                return role
        try:
            return cls[normalized.upper().replace("-", "_")]
        except KeyError:
            raise ValueError(f"Invalid role: {value}")


STAFF_ROLES = frozenset({
    ActorRole.ADMIN,
    ActorRole.HR,
    ActorRole.IT,
    ActorRole.SUPER_ADMIN,
})


@dataclass(frozen=True)
class ActorRef:
    """
    Snapshot of a user referenced from another aggregate.

    Tickets keep ActorRefs for the requester, the assignee and the
    authors of comments and history entries.
    """

    id: str
    name: str = ""
    email: str = ""
    role: ActorRole = ActorRole.EMPLOYEE
    department: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "department": self.department,
        }


@dataclass
class UserEntity:
    """
    Domain Entity: User.

    Invariants:
    - Name is required (max 150 characters)
    - Email is well formed and lowercased
    - Role is one of ActorRole

    Attributes:
        id: Unique identifier (UUID)
        name: Display name
        email: Login email (unique)
        password_hash: Hash produced by the PasswordHasher port
        role: Role of the user
        department: Department the user belongs to
        is_active: Whether the user can log in
        created_at: Creation timestamp
        last_login_at: Last successful login
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    email: str = ""
    password_hash: str = ""
    role: ActorRole = ActorRole.EMPLOYEE
    department: str = ""
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    last_login_at: Optional[datetime] = None

    NAME_MAX_LENGTH = 150
    PASSWORD_MIN_LENGTH = 8

    @classmethod
    def create(
        cls,
        name: str,
        email: str,
        password_hash: str,
        role: ActorRole = ActorRole.EMPLOYEE,
        department: str = "",
    ) -> "UserEntity":
        """
        Factory with validation.

        Args:
            name: Display name
            email: Login email
            password_hash: Already hashed password
            role: Role (default: employee)
            department: Department name

        Returns:
            New UserEntity

        Raises:
            ValidationError: If name or email are invalid
        """
        cls._validate_name(name)
        normalized_email = cls.normalize_email(email)

        return cls(
            name=name.strip(),
            email=normalized_email,
            password_hash=password_hash,
            role=role,
            department=(department or "").strip(),
        )

    @staticmethod
    def normalize_email(email: str) -> str:
        """Lowercase and validate an email address."""
        normalized = (email or "").strip().lower()
        if not normalized:
            raise ValidationError("Email is required", field="email")
        if not EMAIL_PATTERN.match(normalized):
            raise ValidationError(f"Invalid email: {email}", field="email")
        return normalized

    @classmethod
    def validate_password(cls, password: str) -> None:
        if not password or len(password) < cls.PASSWORD_MIN_LENGTH:
            raise ValidationError(
                f"Password must have at least {cls.PASSWORD_MIN_LENGTH} characters",
                field="password",
            )

    @classmethod
    def _validate_name(cls, name: str) -> None:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Name is required", field="name")
        if len(cleaned) > cls.NAME_MAX_LENGTH:
            raise ValidationError(
                f"Name must have at most {cls.NAME_MAX_LENGTH} characters",
                field="name",
            )

    def rename(self, name: str) -> None:
        self._validate_name(name)
        self.name = name.strip()

    def change_role(self, role: ActorRole) -> None:
        self.role = role

    def move_to_department(self, department: str) -> None:
        self.department = (department or "").strip()

    def set_active(self, active: bool) -> None:
        self.is_active = active

    def set_password_hash(self, password_hash: str) -> None:
        self.password_hash = password_hash

    def record_login(self) -> None:
        self.last_login_at = utcnow()

    @property
    def is_staff(self) -> bool:
        return self.role.is_staff

    def to_ref(self) -> ActorRef:
        """Snapshot used when another aggregate references this user."""
        return ActorRef(
            id=self.id,
            name=self.name,
            email=self.email,
            role=self.role,
            department=self.department,
        )

    def __repr__(self) -> str:
        return f"UserEntity(id={self.id[:8]}..., email={self.email}, role={self.role.value})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UserEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
