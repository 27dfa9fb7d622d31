"""
Security adapters of the Accounts domain.

- DjangoPasswordHasher: PasswordHasher on django.contrib.auth.hashers
  (algorithm chosen by settings.PASSWORD_HASHERS)
- JwtTokenService: TokenService issuing HS256 JWTs with PyJWT
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from django.contrib.auth.hashers import check_password, make_password

from src.core.accounts.entities import UserEntity
from src.core.accounts.ports import TokenClaims
from src.core.shared.clock import utcnow

logger = logging.getLogger(__name__)


class DjangoPasswordHasher:
    def hash(self, raw_password: str) -> str:
        return make_password(raw_password)

    def verify(self, raw_password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        return check_password(raw_password, password_hash)


class JwtTokenService:
    """
    Signed bearer tokens.

    Claims:
        sub: User id
        role: Role value at issue time (informative; the user is reloaded)
        iat / exp: Issue and expiry timestamps
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_hours: int = 24):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_hours = expire_hours

    def issue(self, user: UserEntity) -> str:
        issued_at = utcnow()
        payload = {
            "sub": user.id,
            "role": user.role.value,
            "iat": issued_at,
            "exp": issued_at + timedelta(hours=self.expire_hours),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> Optional[TokenClaims]:
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.PyJWTError as e:
            logger.debug(f"Rejected token: {e}")
            return None

        return TokenClaims(
            user_id=str(payload["sub"]),
            role=payload.get("role", ""),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
