"""Languages the translation feature accepts."""

SUPPORTED_LANGUAGES = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "hi": "Hindi",
    "zh": "Chinese",
    "ja": "Japanese",
    "ar": "Arabic",
}


def is_supported(code: str) -> bool:
    return (code or "").strip().lower() in SUPPORTED_LANGUAGES
