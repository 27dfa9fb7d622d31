"""
URL patterns for the Accounts API.

auth_patterns are mounted at /api/auth/, user_patterns at /api/users/.
"""

from django.urls import path

from . import api_views

auth_patterns = [
    path('register/', api_views.RegisterView.as_view(), name='register'),
    path('login/', api_views.LoginView.as_view(), name='login'),
    path('me/', api_views.MeView.as_view(), name='me'),
]

user_patterns = [
    path('', api_views.UserListView.as_view(), name='list'),
    path('change-password/', api_views.ChangePasswordView.as_view(), name='change_password'),
    path('stats/', api_views.UserStatsView.as_view(), name='stats'),
    path('<str:pk>/', api_views.UserDetailView.as_view(), name='detail'),
]
