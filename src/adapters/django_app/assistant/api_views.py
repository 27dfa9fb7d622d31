"""
JSON API views for the AI assistant and translation.

Endpoints:
- POST /api/assistant/chat/ - Help-desk chat
- POST /api/assistant/summarize-ticket/ - Ticket summary
- POST /api/assistant/voice-ticket/ - Draft a ticket from speech
- POST /api/assistant/classify/ - Category/mood of a text
- GET  /api/translation/languages/ - Supported languages
- POST /api/translation/translate/ - Translate text

These endpoints never fail because the model is down: the services
answer with deterministic fallbacks.
"""

import logging

from django.http import HttpRequest, JsonResponse

from src.adapters.django_app.shared.api import BaseAPIView, json_response, str_field
from src.core.shared.exceptions import ValidationError

logger = logging.getLogger(__name__)


class ChatView(BaseAPIView):
    """POST /api/assistant/chat/ - {"message": "..."}"""

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            actor = self.get_actor(request)
            data = self.parse_body(request)
            result = self.get_service('chat_service').execute(actor, str_field(data, 'message'))
            return json_response(success=True, data=result)

        except Exception as e:
            return self.handle_exception(e)


class SummarizeTicketView(BaseAPIView):
    """POST /api/assistant/summarize-ticket/ - {"ticketId": "..."}"""

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            actor = self.get_actor(request)
            data = self.parse_body(request)

            ticket_id = str_field(data, 'ticketId')
            if not ticket_id:
                raise ValidationError("ticketId is required", field="ticketId")

            result = self.get_service('summarize_ticket_service').execute(actor, ticket_id)
            return json_response(success=True, data=result)

        except Exception as e:
            return self.handle_exception(e)


class VoiceTicketView(BaseAPIView):
    """POST /api/assistant/voice-ticket/ - {"speech": "..."}"""

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            self.get_actor(request)
            data = self.parse_body(request)
            draft = self.get_service('voice_ticket_draft_service').execute(str_field(data, 'speech'))
            return json_response(success=True, data=draft)

        except Exception as e:
            return self.handle_exception(e)


class ClassifyView(BaseAPIView):
    """POST /api/assistant/classify/ - {"title": "...", "description": "..."}"""

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            self.get_actor(request)
            data = self.parse_body(request)
            classification = self.get_service('classify_ticket_service').execute(
                str_field(data, 'title'),
                str_field(data, 'description'),
            )
            return json_response(success=True, data=classification.to_dict())

        except Exception as e:
            return self.handle_exception(e)


class LanguagesView(BaseAPIView):
    """GET /api/translation/languages/"""

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            self.get_actor(request)
            languages = self.get_service('supported_languages_service').execute()
            return json_response(success=True, data=languages)

        except Exception as e:
            return self.handle_exception(e)


class TranslateView(BaseAPIView):
    """POST /api/translation/translate/ - {"text": "...", "targetLanguage": "es"}"""

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            self.get_actor(request)
            data = self.parse_body(request)
            result = self.get_service('translate_service').execute(
                str_field(data, 'text'),
                str_field(data, 'targetLanguage'),
            )
            return json_response(success=True, data=result)

        except Exception as e:
            return self.handle_exception(e)
