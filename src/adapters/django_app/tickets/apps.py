"""
Django App configuration for Tickets.
"""

from django.apps import AppConfig


class TicketsConfig(AppConfig):
    """Tickets app: ticket aggregate tables and the event store."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.tickets'
    label = 'tickets'
    verbose_name = 'Helpdesk Tickets'
