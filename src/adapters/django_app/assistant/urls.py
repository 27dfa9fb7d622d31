"""
URL patterns for the assistant (mounted at /api/assistant/) and
translation (mounted at /api/translation/) endpoints.
"""

from django.urls import path

from . import api_views

assistant_patterns = [
    path('chat/', api_views.ChatView.as_view(), name='chat'),
    path('summarize-ticket/', api_views.SummarizeTicketView.as_view(), name='summarize_ticket'),
    path('voice-ticket/', api_views.VoiceTicketView.as_view(), name='voice_ticket'),
    path('classify/', api_views.ClassifyView.as_view(), name='classify'),
]

translation_patterns = [
    path('languages/', api_views.LanguagesView.as_view(), name='languages'),
    path('translate/', api_views.TranslateView.as_view(), name='translate'),
]
