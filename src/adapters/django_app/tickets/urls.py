"""
URL patterns for the Tickets API (mounted at /api/tickets/).

Fixed paths come before <pk> so they do not collide with ticket ids.
"""

from django.urls import path

from . import api_views

app_name = 'tickets'

urlpatterns = [
    path('', api_views.TicketListView.as_view(), name='list'),
    path('stats/', api_views.TicketStatsView.as_view(), name='stats'),
    path(
        'department-stats/<str:category>/',
        api_views.DepartmentStatsView.as_view(),
        name='department_stats',
    ),

    path('<str:pk>/', api_views.TicketDetailView.as_view(), name='detail'),
    path(
        '<str:pk>/status-options/',
        api_views.TicketStatusOptionsView.as_view(),
        name='status_options',
    ),
    path('<str:pk>/comments/', api_views.TicketCommentsView.as_view(), name='comments'),
    path('<str:pk>/suggestions/', api_views.TicketSuggestionsView.as_view(), name='suggestions'),
]
