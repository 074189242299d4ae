"""
i18n (Internationalization) package

Locale fallback for translated field values and labels, and
Accept-Language negotiation for the HTTP API.
"""

from .locale import (
    base_language,
    localize_text,
    parse_accept_language,
    resolve_translation,
)

__all__ = [
    "base_language",
    "localize_text",
    "parse_accept_language",
    "resolve_translation",
]
