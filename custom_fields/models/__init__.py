# custom_fields/models/__init__.py
from custom_fields.database import Base

from .field_type import FieldType, FieldTypeSpec
from .payload import Payload, ScalarPayload, TranslatedPayload, payload_from_json
from .custom_field_schema import CustomFieldSchema
from .custom_field_value import CustomFieldValue

__all__ = [
    "Base",
    "CustomFieldSchema",
    "CustomFieldValue",
    "FieldType",
    "FieldTypeSpec",
    "Payload",
    "ScalarPayload",
    "TranslatedPayload",
    "payload_from_json",
]
