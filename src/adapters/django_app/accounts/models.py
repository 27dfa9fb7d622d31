"""
Django Models for the Accounts domain.

Persist src/core/accounts/entities.py:UserEntity. Kept separate from
django.contrib.auth: the admin site keeps its own superusers while
helpdesk users authenticate with bearer tokens.
"""

from django.db import models
from django.utils import timezone


class RoleChoices(models.TextChoices):
    """Mirrors ActorRole of the Core."""
    EMPLOYEE = 'employee', 'Employee'
    HR = 'hr', 'HR'
    ADMIN = 'admin', 'Admin'
    IT = 'it', 'IT'
    SUPER_ADMIN = 'super-admin', 'Super Admin'


class UserModel(models.Model):
    """
    Persistence of UserEntity.

    Fields:
        id: UUID primary key (generated by the entity)
        email: Lowercased, unique login
        password_hash: Output of the PasswordHasher port
    """

    id = models.CharField(
        max_length=36,
        primary_key=True,
        editable=False,
        help_text="User UUID"
    )

    name = models.CharField(max_length=150)

    email = models.EmailField(max_length=254, unique=True)

    password_hash = models.CharField(max_length=255)

    role = models.CharField(
        max_length=20,
        choices=RoleChoices.choices,
        default=RoleChoices.EMPLOYEE,
        db_index=True,
    )

    department = models.CharField(max_length=100, blank=True, default='', db_index=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(default=timezone.now)

    last_login_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} <{self.email}>"

    def __repr__(self):
        return f"<UserModel id={self.id[:8]} role={self.role}>"
