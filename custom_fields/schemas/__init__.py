from custom_fields.schemas.field_definition import (
    FIELD_KEY_PATTERN,
    FieldDefinition,
    FieldOption,
    LocalizedText,
    parse_field_definition,
)

__all__ = [
    "FIELD_KEY_PATTERN",
    "FieldDefinition",
    "FieldOption",
    "LocalizedText",
    "parse_field_definition",
]
