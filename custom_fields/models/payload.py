"""Stored value payloads.

A field value is persisted as one of two JSON shapes:

    {"value": <v>}                                  -> ScalarPayload
    {"translatable": true, "value": {locale: <v>}}  -> TranslatedPayload

Rows written by older versions may hold a bare locale map
(``{"en": "...", "ar": "..."}``); those decode as TranslatedPayload too.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class ScalarPayload:
    """A single, locale-independent value."""

    value: Any

    def to_json(self) -> dict[str, Any]:
        return {"value": self.value}


@dataclass(frozen=True)
class TranslatedPayload:
    """One value per locale, in insertion order."""

    values: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        return {"translatable": True, "value": dict(self.values)}

    def with_locale(self, locale: str, value: Any) -> TranslatedPayload:
        merged = dict(self.values)
        merged[locale] = value
        return TranslatedPayload(merged)

    def without_locale(self, locale: str) -> TranslatedPayload:
        return TranslatedPayload({code: value for code, value in self.values.items() if code != locale})


Payload = Union[ScalarPayload, TranslatedPayload]


def payload_from_json(data: Any) -> Payload | None:
    """Decode a stored JSON document into a payload, or None if empty."""
    if not isinstance(data, dict) or not data:
        return None

    if "value" in data:
        value = data["value"]
        if data.get("translatable") and isinstance(value, dict):
            return TranslatedPayload(dict(value))
        return ScalarPayload(value)

    return TranslatedPayload(dict(data))
