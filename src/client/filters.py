"""
Ticket list filters and the filter bar layout.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from src.core.accounts.entities import ActorRole
from src.core.tickets import policy
from src.core.tickets.entities import (
    TicketCategory,
    TicketMood,
    TicketPriority,
    TicketStatus,
)

from .errors import LocalValidationError


@dataclass(frozen=True)
class TicketFilters:
    """
    Typed filters of the ticket list.

    Values use the wire vocabulary ("In Progress", "IT", "angry").
    mood is only sent when include_mood is set (staff sessions).
    """

    status: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    mood: Optional[str] = None
    search: Optional[str] = None

    def validate(self) -> None:
        """
        Raises:
            LocalValidationError: If a value is outside its vocabulary
        """
        vocabularies = (
            ("status", TicketStatus),
            ("category", TicketCategory),
            ("priority", TicketPriority),
            ("mood", TicketMood),
        )
        for name, vocabulary in vocabularies:
            value = getattr(self, name)
            if value is None:
                continue
            try:
                vocabulary.from_string(value)
            except ValueError:
                raise LocalValidationError(f"Unknown {name}: {value}", field=name)

    def to_params(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        include_mood: bool = True,
    ) -> Dict[str, str]:
        """Query-string parameters; unset filters are left out."""
        self.validate()
        params = {"page": str(page)}
        if limit is not None:
            params["limit"] = str(limit)
        for name in ("status", "category", "priority", "mood"):
            value = getattr(self, name)
            if value is None or (name == "mood" and not include_mood):
                continue
            params[name] = value
        if self.search and self.search.strip():
            params["search"] = self.search.strip()
        return params


@dataclass(frozen=True)
class FilterBarConfig:
    """Which controls the ticket filter bar shows."""

    show_status: bool = True
    show_category: bool = True
    show_priority: bool = True
    show_mood: bool = False
    show_search: bool = True
    show_create_shortcut: bool = False

    @classmethod
    def for_role(
        cls,
        role: Optional[ActorRole],
        show_create_shortcut: bool = False,
    ) -> "FilterBarConfig":
        """
        Controls for a viewer.

        The mood filter is staff-only. The "Create Ticket" shortcut shows
        only when requested and the viewer is not staff.
        """
        staff = policy.is_staff(role)
        return cls(
            show_mood=staff,
            show_create_shortcut=show_create_shortcut and not staff,
        )
