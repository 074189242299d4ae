"""
Validation & Casting Engine

Turns raw submitted values (scalars, lists or locale maps) into stored
payloads, or rejects them with a ValidationError / CastError.

Rules are "name:argument" strings, e.g. ``["required", "numeric", "min:0"]``.
The type's own rules (``string``, ``numeric``, ``boolean``, ``date``) are
enforced by casting; the parametrised ones are checked against the cast value.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from custom_fields.exceptions import ValidationError
from custom_fields.models.field_type import FieldType
from custom_fields.models.payload import Payload, ScalarPayload, TranslatedPayload
from custom_fields.schemas.field_definition import FieldDefinition, rule_pattern

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@]+@[^@]+\.[^@]+$")
URL_PATTERN = re.compile(r"^https?://")

# Satisfied by casting, or markers with no check of their own
_CAST_RULES = frozenset({"required", "nullable", "string", "numeric", "boolean", "date"})

_LENGTH_TYPES = frozenset({FieldType.TEXT, FieldType.TEXTAREA, FieldType.SELECT})


def is_empty(raw: Any) -> bool:
    """Whether a submitted value counts as absent.

    None, blank strings and empty collections are absent; so is a locale map
    whose every value is absent.
    """
    if raw is None:
        return True
    if isinstance(raw, str):
        return raw.strip() == ""
    if isinstance(raw, Mapping):
        return all(is_empty(value) for value in raw.values())
    if isinstance(raw, (list, tuple, set)):
        return len(raw) == 0
    return False


def cast_value(field_type: FieldType | str, raw: Any, field: str | None = None) -> Any:
    """Coerce ``raw`` to the Python type of ``field_type``.

    Raises:
        CastError: if the value is not coercible.
    """
    return FieldType(field_type).cast(raw, field=field)


def validation_rules_for(definition: FieldDefinition) -> list[str]:
    """Required flag, then type defaults, then the definition's own rules."""
    rules: list[str] = []
    if definition.required:
        rules.append("required")
    rules.extend(definition.type.default_rules)
    rules.extend(definition.validation_rules)
    return rules


def _is_locale_map(definition: FieldDefinition, raw: Any) -> bool:
    return definition.type.supports_translation and isinstance(raw, Mapping)


def _rule_number(rule: str, argument: str) -> float:
    try:
        return float(argument)
    except ValueError:
        raise ValidationError(f"Invalid validation rule '{rule}'") from None


def _check_rule(definition: FieldDefinition, rule: str, value: Any) -> str | None:
    """Return an error message if ``value`` breaks ``rule``."""
    key = definition.key
    name, _, argument = rule.partition(":")
    name = name.strip().lower()

    if name in _CAST_RULES:
        return None

    if name in ("min", "max"):
        limit = _rule_number(rule, argument)
        if definition.type is FieldType.NUMBER:
            measured, unit = value, ""
        elif definition.type in _LENGTH_TYPES:
            measured, unit = len(value), " characters"
        else:
            logger.debug("Rule %s does not apply to %s field %s", rule, definition.type.value, key)
            return None
        if name == "min" and measured < limit:
            return f"Custom field '{key}' must be at least {argument}{unit}."
        if name == "max" and measured > limit:
            return f"Custom field '{key}' must not be greater than {argument}{unit}."
        return None

    if name == "in":
        allowed = [item.strip() for item in argument.split(",")]
        if str(value) not in allowed:
            return f"Custom field '{key}' must be one of: {', '.join(allowed)}."
        return None

    if name == "regex":
        try:
            pattern = rule_pattern(argument)
        except re.error:
            raise ValidationError(f"Invalid validation rule '{rule}'", field=key) from None
        if not pattern.search(str(value)):
            return f"Custom field '{key}' does not match the required pattern."
        return None

    if name == "email":
        if not EMAIL_PATTERN.match(str(value)):
            return f"Custom field '{key}' must be a valid email address."
        return None

    if name == "url":
        if not URL_PATTERN.match(str(value)):
            return f"Custom field '{key}' must be a valid URL."
        return None

    logger.debug("Unknown validation rule %r on field %s ignored", rule, key)
    return None


def _validate_present(definition: FieldDefinition, value: Any) -> None:
    key = definition.key
    cast = definition.type.cast(value, field=key)

    if definition.type.requires_options and cast not in definition.option_values():
        raise ValidationError(f"Invalid option '{cast}' for select field '{key}'.", field=key)

    for rule in validation_rules_for(definition):
        message = _check_rule(definition, rule, cast)
        if message:
            raise ValidationError(message, field=key)


def validate(definition: FieldDefinition, raw: Any) -> None:
    """Validate one raw value against its field definition.

    Order: required-ness, type cast, select membership, custom rules.
    Absent values pass unless the field is required.

    Raises:
        ValidationError: on the first failing check (CastError for uncastable input).
    """
    key = definition.key

    if is_empty(raw):
        if definition.required:
            raise ValidationError(f"Custom field '{key}' is required.", field=key)
        return

    if _is_locale_map(definition, raw):
        for locale, value in raw.items():
            if not isinstance(locale, str) or not locale:
                raise ValidationError(f"Custom field '{key}' has an invalid locale {locale!r}.", field=key)
            if not is_empty(value):
                _validate_present(definition, value)
        return

    _validate_present(definition, raw)


def collect_errors(
    definitions: Iterable[FieldDefinition],
    values: Mapping[str, Any],
) -> dict[str, list[str]]:
    """Validate a whole submission without raising.

    Every defined field is checked (missing keys as absent values) and every
    submitted key that is not defined is reported.
    """
    errors: dict[str, list[str]] = {}
    by_key = {definition.key: definition for definition in definitions}

    for key in values:
        if key not in by_key:
            errors[key] = [f"Custom field '{key}' is not defined for this model."]

    for key, definition in by_key.items():
        try:
            validate(definition, values.get(key))
        except ValidationError as exc:
            errors.setdefault(key, []).append(exc.message)

    return errors


def build_payload(
    definition: FieldDefinition,
    raw: Any,
    locale: str | None = None,
    current: Payload | None = None,
) -> Payload:
    """Cast a validated raw value into the payload to store.

    - a locale map on a translatable field becomes a TranslatedPayload, one
      cast per locale;
    - a scalar with ``locale`` on a translatable field is merged into the
      current translations (a previous scalar value is dropped);
    - anything else becomes a ScalarPayload, collapsing prior translations.
    """
    field_type = definition.type
    key = definition.key

    if _is_locale_map(definition, raw):
        return TranslatedPayload(
            {
                locale_code: field_type.serialize(field_type.cast(value, field=key))
                for locale_code, value in raw.items()
                if not is_empty(value)
            }
        )

    serialized = field_type.serialize(field_type.cast(raw, field=key))

    if field_type.supports_translation and locale:
        base = current if isinstance(current, TranslatedPayload) else TranslatedPayload()
        return base.with_locale(locale, serialized)

    return ScalarPayload(serialized)


def decode_payload(definition: FieldDefinition, payload: Payload) -> Any:
    """Cast stored values back to Python types.

    Returns the cast scalar, or a locale -> cast value dict for translations.

    Raises:
        CastError: if stored data no longer fits the field's type.
    """
    field_type = definition.type
    key = definition.key

    if isinstance(payload, TranslatedPayload):
        return {
            locale: None if value is None else field_type.cast(value, field=key)
            for locale, value in payload.values.items()
        }

    if payload.value is None:
        return None
    return field_type.cast(payload.value, field=key)
