"""
UserRepository on the Django ORM.
"""

import logging
from typing import Dict, Optional

from django.db.models import Count

from src.core.accounts.entities import ActorRole, UserEntity
from src.core.shared.pagination import Page, PageRequest

from .mappers import UserMapper
from .models import UserModel

logger = logging.getLogger(__name__)


class DjangoUserRepository:
    """Django implementation of src/core/accounts/ports.py:UserRepository."""

    def save(self, user: UserEntity) -> None:
        logger.debug(f"Saving user: {user.id}")
        UserModel.objects.update_or_create(id=user.id, defaults=UserMapper.fields(user))

    def get_by_id(self, user_id: str) -> Optional[UserEntity]:
        model = UserModel.objects.filter(id=user_id).first()
        return UserMapper.to_entity(model) if model else None

    def get_by_email(self, email: str) -> Optional[UserEntity]:
        model = UserModel.objects.filter(email=email).first()
        return UserMapper.to_entity(model) if model else None

    def delete(self, user_id: str) -> None:
        deleted, _ = UserModel.objects.filter(id=user_id).delete()
        if deleted:
            logger.info(f"User deleted: {user_id}")

    def list_page(
        self,
        page_request: PageRequest,
        role: Optional[ActorRole] = None,
        department: Optional[str] = None,
    ) -> Page[UserEntity]:
        queryset = UserModel.objects.all()
        if role:
            queryset = queryset.filter(role=role.value)
        if department:
            queryset = queryset.filter(department=department)
        queryset = queryset.order_by('name', 'id')

        total = queryset.count()
        window = queryset[page_request.offset:page_request.offset + page_request.limit]
        return Page(
            items=UserMapper.to_entity_list(window),
            total=total,
            page=page_request.page,
            limit=page_request.limit,
        )

    def count_by_role(self) -> Dict[str, int]:
        rows = UserModel.objects.values('role').annotate(count=Count('id')).order_by()
        return {row['role']: row['count'] for row in rows}

    def count_by_department(self) -> Dict[str, int]:
        rows = UserModel.objects.values('department').annotate(count=Count('id')).order_by()
        return {row['department']: row['count'] for row in rows}
