"""
Helpdesk project configuration.

Modules:
- settings: Django settings
- urls: Root URL routes
- wsgi: WSGI application
- celery: Celery app for asynchronous tasks
- container: Dependency Injection container
"""

from .celery import app as celery_app

__all__ = ('celery_app',)
