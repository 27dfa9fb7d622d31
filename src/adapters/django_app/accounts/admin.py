"""
Django Admin for helpdesk users.

Passwords are never edited here; use the change-password endpoint.
"""

from django.contrib import admin

from .models import UserModel


@admin.register(UserModel)
class UserAdmin(admin.ModelAdmin):
    list_display = [
        'name',
        'email',
        'role',
        'department',
        'is_active',
        'last_login_at',
    ]

    list_filter = [
        'role',
        'department',
        'is_active',
    ]

    search_fields = [
        'id',
        'name',
        'email',
    ]

    readonly_fields = [
        'id',
        'password_hash',
        'created_at',
        'last_login_at',
    ]

    ordering = ['name']
