"""
Domain Events of the Accounts domain.

- UserRegisteredEvent: a new user account exists
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from src.core.shared.events import DomainEvent


@dataclass
class UserRegisteredEvent(DomainEvent):
    """
    A user account was created.

    Typical handlers:
    - Welcome notification
    - Directory sync

    Attributes:
        email: Login email of the new user
        role: Role value
        department: Department name
        registered_by_id: Super-admin who created the account (None = self)
    """

    email: str = ""
    role: str = ""
    department: str = ""
    registered_by_id: Optional[str] = None

    def __post_init__(self):
        pass

    @property
    def aggregate_type(self) -> str:
        return "User"

    def _get_event_data(self) -> Dict[str, Any]:
        data = {
            "email": self.email,
            "role": self.role,
            "department": self.department,
        }
        if self.registered_by_id:
            data["registered_by_id"] = self.registered_by_id
        return data
