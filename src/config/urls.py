"""
Root URL configuration for the Helpdesk.

Layout:
- /admin/ - Django Admin
- /api/auth/, /api/users/ - Accounts
- /api/tickets/ - Tickets
- /api/assistant/, /api/translation/ - AI assistant
- /health/ - Liveness probe
"""

from django.contrib import admin
from django.urls import include, path

from src.adapters.django_app.accounts.urls import auth_patterns, user_patterns
from src.adapters.django_app.assistant.urls import assistant_patterns, translation_patterns
from src.adapters.django_app.shared.api import HealthView

urlpatterns = [
    path('admin/', admin.site.urls),

    path('api/auth/', include((auth_patterns, 'auth'))),
    path('api/users/', include((user_patterns, 'users'))),
    path('api/tickets/', include('src.adapters.django_app.tickets.urls')),
    path('api/assistant/', include((assistant_patterns, 'assistant'))),
    path('api/translation/', include((translation_patterns, 'translation'))),

    path('health/', HealthView.as_view(), name='health'),
]
