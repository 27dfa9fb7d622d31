"""
Mapper between UserEntity (Core) and UserModel (Django).
"""

from typing import List

from src.core.accounts.entities import ActorRole, UserEntity

from .models import UserModel


class UserMapper:
    """Stateless UserEntity <-> UserModel conversion."""

    @staticmethod
    def to_entity(model: UserModel) -> UserEntity:
        return UserEntity(
            id=model.id,
            name=model.name,
            email=model.email,
            password_hash=model.password_hash,
            role=ActorRole.from_string(model.role),
            department=model.department,
            is_active=model.is_active,
            created_at=model.created_at,
            last_login_at=model.last_login_at,
        )

    @staticmethod
    def to_entity_list(models: List[UserModel]) -> List[UserEntity]:
        return [UserMapper.to_entity(m) for m in models]

    @staticmethod
    def fields(entity: UserEntity) -> dict:
        return {
            "name": entity.name,
            "email": entity.email,
            "password_hash": entity.password_hash,
            "role": entity.role.value,
            "department": entity.department,
            "is_active": entity.is_active,
            "created_at": entity.created_at,
            "last_login_at": entity.last_login_at,
        }
