"""Pydantic models for the field definitions stored inside a schema."""

import re
from collections.abc import Mapping
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from custom_fields.exceptions import ValidationError
from custom_fields.i18n.locale import localize_text
from custom_fields.models.field_type import FieldType

# Either a plain string or a locale -> string mapping, e.g. {"en": "Industry", "ar": "الصناعة"}
LocalizedText = Union[str, dict[str, str]]

FIELD_KEY_PATTERN = r"^[a-z0-9_]+$"


def rule_pattern(argument: str) -> re.Pattern[str]:
    """Compile the argument of a ``regex:`` rule, with or without /.../ delimiters.

    Raises:
        re.error: if the pattern does not compile.
    """
    # "/^[A-Z]+$/" -> "^[A-Z]+$"
    if len(argument) > 1 and argument.startswith("/") and argument.rfind("/") > 0:
        argument = argument[1 : argument.rfind("/")]
    return re.compile(argument)


class FieldOption(BaseModel):
    """One choice of a select field."""

    value: str = Field(..., min_length=1)
    label: LocalizedText | None = None

    @model_validator(mode="after")
    def default_label(self) -> "FieldOption":
        if self.label is None:
            self.label = self.value
        return self


class FieldDefinition(BaseModel):
    """Metadata of one custom field within a schema."""

    model_config = ConfigDict(extra="ignore")

    key: str = Field(..., min_length=1, max_length=100, pattern=FIELD_KEY_PATTERN)
    label: LocalizedText
    type: FieldType
    required: bool = False
    show_in_table: bool = False
    options: list[FieldOption] | None = None
    validation_rules: list[str] = Field(default_factory=list)
    help_text: LocalizedText | None = None
    order: int | None = None

    @field_validator("validation_rules")
    @classmethod
    def check_regex_rules(cls, rules: list[str]) -> list[str]:
        for rule in rules:
            name, _, argument = rule.partition(":")
            if name.strip().lower() == "regex":
                try:
                    rule_pattern(argument)
                except re.error as exc:
                    raise ValueError(f"Invalid validation rule '{rule}': {exc}") from None
        return rules

    @model_validator(mode="after")
    def check_options(self) -> "FieldDefinition":
        if self.type.requires_options:
            if not self.options:
                raise ValueError(f"{self.type.label} fields require at least one option")
            values = [option.value for option in self.options]
            if len(set(values)) != len(values):
                raise ValueError("Option values must be unique within a field")
        else:
            # Options only mean something for select fields
            self.options = None
        return self

    def option_values(self) -> list[str]:
        return [option.value for option in self.options or []]

    def option_label(self, value: str, locale: str | None, default_locale: str) -> str | None:
        for option in self.options or []:
            if option.value == value:
                return localize_text(option.label, locale, default_locale)
        return None

    def translated_label(self, locale: str | None, default_locale: str) -> str:
        return localize_text(self.label, locale, default_locale) or self.key

    def translated_help_text(self, locale: str | None, default_locale: str) -> str | None:
        return localize_text(self.help_text, locale, default_locale)

    def to_storage(self) -> dict[str, Any]:
        """JSON document persisted in the schema's field_definitions column."""
        return self.model_dump(mode="json", exclude_none=True)


def parse_field_definition(data: FieldDefinition | Mapping[str, Any]) -> FieldDefinition:
    """Validate raw definition data.

    Raises:
        ValidationError: with a per-location error mapping when the data is malformed.
    """
    if isinstance(data, FieldDefinition):
        return data

    try:
        return FieldDefinition.model_validate(dict(data))
    except PydanticValidationError as exc:
        errors: dict[str, list[str]] = {}
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"]) or "definition"
            errors.setdefault(location, []).append(error["msg"])
        key = data.get("key") if isinstance(data.get("key"), str) else None
        message = f"Invalid field definition '{key}'" if key else "Invalid field definition"
        raise ValidationError(message, field=key, errors=errors) from exc
