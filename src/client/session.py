"""
Explicit authentication state shared by the API client and controllers.
"""

from typing import Dict, Optional

from src.core.accounts.entities import ActorRole


class SessionContext:
    """
    Token and signed-in user for one client session.

    Passed explicitly to HelpdeskClient; nothing reads the token from
    ambient storage. Lifecycle is login() / logout().
    """

    def __init__(self, token: Optional[str] = None, user: Optional[Dict] = None):
        self.token = token
        self.user = user

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def user_id(self) -> Optional[str]:
        return self.user.get("id") if self.user else None

    @property
    def role(self) -> Optional[ActorRole]:
        """Role of the signed-in user, None when signed out or unknown."""
        if not self.user or not self.user.get("role"):
            return None
        try:
            return ActorRole.from_string(self.user["role"])
        except ValueError:
            return None

    def login(self, token: str, user: Dict) -> None:
        self.token = token
        self.user = user

    def logout(self) -> None:
        self.token = None
        self.user = None

    def auth_headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
