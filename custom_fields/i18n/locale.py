"""
Locale helpers

Pure functions for locale handling:
- Translation lookup with locale fallback
- Accept-Language header parsing with quality-value (q=) support
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def base_language(locale: str) -> str:
    """Return the base language tag of a BCP 47 locale ("fr-CA" -> "fr")."""
    return locale.split("-")[0].split("_")[0].lower()


def resolve_translation(
    values: Mapping[str, Any],
    locale: str | None,
    default_locale: str,
) -> Any:
    """Pick the best value out of a locale -> value mapping.

    Tries in order:
    1. Exact locale match (e.g. "ar")
    2. Base language match (e.g. "fr" when "fr-CA" not found)
    3. Default locale
    4. First available locale, in insertion order

    Returns None for an empty mapping.
    """
    if not values:
        return None

    if locale:
        if locale in values:
            return values[locale]

        base = base_language(locale)
        if base in values:
            return values[base]

    if default_locale in values:
        return values[default_locale]

    return next(iter(values.values()))


def parse_accept_language(header: str, supported: list[str]) -> str | None:
    """Parse an Accept-Language header and return the best matching locale.

    Algorithm:
    1. Split header into tags with optional q-values (default q=1.0).
    2. Sort by q-value descending.
    3. For each tag, try exact match in `supported`, then base-language match.
    4. Return the first match or None if nothing matches.

    Args:
        header:    Value of the Accept-Language HTTP header, e.g.
                   "fr-CA,fr;q=0.9,en-US;q=0.8,en;q=0.7".
        supported: Ordered list of locale codes the server supports.

    Returns:
        The best matching locale from `supported`, or None.
    """
    if not header:
        return None

    weighted: list[tuple[float, str]] = []
    for part in header.split(","):
        part = part.strip()
        if not part:
            continue
        if ";q=" in part:
            tag, q_str = part.split(";q=", 1)
            try:
                q = float(q_str.strip())
            except ValueError:
                q = 1.0
        else:
            tag = part
            q = 1.0
        weighted.append((q, tag.strip()))

    # Stable sort keeps header order for equal q-values
    weighted.sort(key=lambda x: x[0], reverse=True)

    supported_lower = [s.lower() for s in supported]

    for _, tag in weighted:
        tag_lower = tag.lower()
        if tag_lower in supported_lower:
            return supported[supported_lower.index(tag_lower)]
        base = base_language(tag_lower)
        if base in supported_lower:
            return supported[supported_lower.index(base)]

    return None


def localize_text(
    text: str | Mapping[str, str] | None,
    locale: str | None,
    default_locale: str,
) -> str | None:
    """Render a plain-or-translated label in the requested locale."""
    if text is None or isinstance(text, str):
        return text
    return resolve_translation(text, locale, default_locale)
