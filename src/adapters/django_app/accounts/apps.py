"""
Django App configuration for Accounts.
"""

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """Accounts app: helpdesk users (not django.contrib.auth users)."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.accounts'
    label = 'accounts'
    verbose_name = 'Helpdesk Accounts'
