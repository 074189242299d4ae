"""Field type taxonomy for custom field definitions."""

import enum
import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from custom_fields.exceptions import CastError

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off"})


def _cast_string(raw: Any) -> str:
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float, Decimal)):
        raise TypeError(f"expected a string, got {type(raw).__name__}")
    return str(raw)


def _cast_number(raw: Any) -> float:
    if isinstance(raw, bool):
        raise TypeError("booleans are not numbers")
    if isinstance(raw, str):
        raw = raw.strip()
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError("number must be finite")
    return value


def _cast_boolean(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValueError(f"{raw!r} is not a boolean")


def _cast_date(raw: Any) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str):
        raise TypeError(f"expected an ISO-8601 string, got {type(raw).__name__}")
    text = raw.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text).date()


@dataclass(frozen=True)
class FieldTypeSpec:
    """Behaviour carried by one field type."""

    label: str
    caster: Callable[[Any], Any]
    default_rules: tuple[str, ...]
    supports_translation: bool = False
    requires_options: bool = False


class FieldType(str, enum.Enum):
    """Types of custom fields."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    SELECT = "select"

    @property
    def spec(self) -> FieldTypeSpec:
        return _SPECS[self]

    @property
    def label(self) -> str:
        return self.spec.label

    @property
    def default_rules(self) -> list[str]:
        return list(self.spec.default_rules)

    @property
    def supports_translation(self) -> bool:
        return self.spec.supports_translation

    @property
    def requires_options(self) -> bool:
        return self.spec.requires_options

    def cast(self, raw: Any, field: str | None = None) -> Any:
        """Coerce a raw value to this type's Python representation.

        Raises:
            CastError: if the value is not coercible.
        """
        try:
            return self.spec.caster(raw)
        except (TypeError, ValueError) as exc:
            raise CastError(self.value, raw, field=field) from exc

    def serialize(self, value: Any) -> Any:
        """Return a JSON-safe form of an already cast value."""
        if isinstance(value, date):
            return value.isoformat()
        return value

    @classmethod
    def choices(cls) -> dict[str, str]:
        """Value -> label mapping for admin pickers."""
        return {field_type.value: field_type.label for field_type in cls}


_SPECS: dict[FieldType, FieldTypeSpec] = {
    FieldType.TEXT: FieldTypeSpec(
        label="Text",
        caster=_cast_string,
        default_rules=("string", "max:255"),
        supports_translation=True,
    ),
    FieldType.TEXTAREA: FieldTypeSpec(
        label="Textarea",
        caster=_cast_string,
        default_rules=("string",),
        supports_translation=True,
    ),
    FieldType.NUMBER: FieldTypeSpec(
        label="Number",
        caster=_cast_number,
        default_rules=("numeric",),
    ),
    FieldType.BOOLEAN: FieldTypeSpec(
        label="Boolean",
        caster=_cast_boolean,
        default_rules=("boolean",),
    ),
    FieldType.DATE: FieldTypeSpec(
        label="Date",
        caster=_cast_date,
        default_rules=("date",),
    ),
    FieldType.SELECT: FieldTypeSpec(
        label="Select",
        caster=_cast_string,
        default_rules=("string",),
        requires_options=True,
    ),
}
