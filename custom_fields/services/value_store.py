"""
Value Store

Async read/write of CustomFieldValue rows for one host instance, validated
and cast through the owning schema.

Functions:
    set_values      - validate a batch and upsert one row per key
    set_value       - single-field variant of set_values
    get_values      - translated key -> value mapping for a host instance
    get_value       - single-field variant of get_values
    get_raw_values  - key -> value mapping with translations kept whole
    delete_value    - explicit unset of one field
    delete_values   - remove every row of a host instance (host deletion cascade)
    display_value   - human-readable rendering of a decoded value
    has_value       - whether a stored payload holds anything

Writes go through the dialect's INSERT ... ON CONFLICT (or ON DUPLICATE KEY)
construct so the unique index on (schema_id, owner_type, owner_id, field_key)
is the only serialisation point for concurrent writers.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: TC002

from custom_fields.config import settings
from custom_fields.exceptions import CastError, ValidationError
from custom_fields.i18n.locale import resolve_translation
from custom_fields.models.custom_field_schema import CustomFieldSchema
from custom_fields.models.custom_field_value import CustomFieldValue
from custom_fields.models.field_type import FieldType
from custom_fields.models.payload import Payload, TranslatedPayload
from custom_fields.schemas.field_definition import FieldDefinition
from custom_fields.services.schema_registry import get_active_schema, get_field_definition
from custom_fields.services.validation import build_payload, decode_payload, is_empty, validate

logger = logging.getLogger(__name__)

_IDENTITY_COLUMNS = ["schema_id", "owner_type", "owner_id", "field_key"]


def _not_defined(key: str) -> ValidationError:
    return ValidationError(f"Custom field '{key}' is not defined for this model.", field=key)


def _upsert_statement(db: AsyncSession, row: dict[str, Any]):
    dialect = db.get_bind().dialect.name

    if dialect == "postgresql":
        stmt = postgresql.insert(CustomFieldValue).values(**row)
        return stmt.on_conflict_do_update(
            index_elements=_IDENTITY_COLUMNS,
            set_={"payload": stmt.excluded.payload, "updated_at": stmt.excluded.updated_at},
        )
    if dialect == "sqlite":
        stmt = sqlite.insert(CustomFieldValue).values(**row)
        return stmt.on_conflict_do_update(
            index_elements=_IDENTITY_COLUMNS,
            set_={"payload": stmt.excluded.payload, "updated_at": stmt.excluded.updated_at},
        )
    if dialect in ("mysql", "mariadb"):
        stmt = mysql.insert(CustomFieldValue).values(**row)
        return stmt.on_duplicate_key_update(payload=stmt.inserted.payload, updated_at=stmt.inserted.updated_at)

    raise NotImplementedError(f"Upsert is not supported for the {dialect} dialect")


async def _load_rows(
    db: AsyncSession,
    schema_id: int,
    owner_type: str,
    owner_id: int,
) -> dict[str, CustomFieldValue]:
    result = await db.execute(
        select(CustomFieldValue)
        .where(
            CustomFieldValue.schema_id == schema_id,
            CustomFieldValue.owner_type == owner_type,
            CustomFieldValue.owner_id == owner_id,
        )
        .order_by(CustomFieldValue.id)
        # Rows may have been rewritten by Core upserts since they were last loaded
        .execution_options(populate_existing=True)
    )
    return {row.field_key: row for row in result.scalars().all()}


def _unset(definition: FieldDefinition, locale: str | None, current: Payload | None) -> Payload | None:
    """Payload left after clearing a field, or None when the row should go.

    Clearing one locale of a translated value keeps the other locales.
    """
    if not (locale and definition.type.supports_translation and isinstance(current, TranslatedPayload)):
        return None
    remaining = current.without_locale(locale)
    return remaining if has_value(remaining) else None


async def _write(
    db: AsyncSession,
    schema: CustomFieldSchema,
    owner_type: str,
    owner_id: int,
    items: list[tuple[FieldDefinition, Any]],
    locale: str | None,
) -> None:
    existing = await _load_rows(db, schema.id, owner_type, owner_id)
    now = datetime.now(timezone.utc)

    for definition, raw in items:
        row_id = existing[definition.key].id if definition.key in existing else None
        current = existing[definition.key].decoded_payload if row_id is not None else None

        if is_empty(raw):
            payload = _unset(definition, locale, current)
            if payload is None:
                # Submitting an empty optional value unsets the field
                if row_id is not None:
                    await db.execute(delete(CustomFieldValue).where(CustomFieldValue.id == row_id))
                continue
        else:
            payload = build_payload(definition, raw, locale=locale, current=current)

        row = {
            "schema_id": schema.id,
            "owner_type": owner_type,
            "owner_id": owner_id,
            "field_key": definition.key,
            "payload": payload.to_json(),
            "created_at": now,
            "updated_at": now,
        }
        await db.execute(_upsert_statement(db, row))

    await db.commit()


async def set_values(
    db: AsyncSession,
    schema: CustomFieldSchema,
    owner_type: str,
    owner_id: int,
    values: Mapping[str, Any],
    locale: str | None = None,
) -> None:
    """Validate a batch of values and upsert one row per key.

    Every key must be defined in the schema, and required fields missing from
    ``values`` are validated as absent. Nothing is written unless the whole
    batch validates.

    Raises:
        ValidationError: on an undefined key or the first invalid value.
    """
    definitions = {definition.key: definition for definition in schema.definitions}

    for key in values:
        if key not in definitions:
            raise _not_defined(key)

    for key, definition in definitions.items():
        if key in values or definition.required:
            validate(definition, values.get(key))

    items = [(definitions[key], raw) for key, raw in values.items()]
    await _write(db, schema, owner_type, owner_id, items, locale)
    logger.info("Custom field values set: owner=%s:%s keys=%s", owner_type, owner_id, list(values))


async def set_value(
    db: AsyncSession,
    schema: CustomFieldSchema,
    owner_type: str,
    owner_id: int,
    key: str,
    raw: Any,
    locale: str | None = None,
) -> None:
    """Validate and upsert a single field value.

    With ``locale`` on a translatable field the value is stored for that
    locale only, next to the other translations.

    Raises:
        ValidationError: if the key is not defined or the value is invalid.
    """
    definition = get_field_definition(schema, key)
    if definition is None:
        raise _not_defined(key)

    validate(definition, raw)
    await _write(db, schema, owner_type, owner_id, [(definition, raw)], locale)
    logger.info("Custom field value set: owner=%s:%s key=%s", owner_type, owner_id, key)


def _decode(definition: FieldDefinition, payload: Payload) -> Any:
    try:
        return decode_payload(definition, payload)
    except CastError:
        # Stored before the field's type changed; hand back what is stored
        logger.warning("Stale value for field %s does not fit type %s", definition.key, definition.type.value)
        if isinstance(payload, TranslatedPayload):
            return dict(payload.values)
        return payload.value


async def get_raw_values(
    db: AsyncSession,
    owner_type: str,
    owner_id: int,
) -> dict[str, Any]:
    """Decoded values with translations kept as locale -> value dicts.

    Keys follow the schema's field order; rows for undefined keys are skipped.
    """
    schema = await get_active_schema(db, owner_type)
    if schema is None:
        return {}

    rows = await _load_rows(db, schema.id, owner_type, owner_id)
    values: dict[str, Any] = {}
    for definition in schema.definitions:
        row = rows.get(definition.key)
        payload = row.decoded_payload if row is not None else None
        if payload is None:
            continue
        values[definition.key] = _decode(definition, payload)
    return values


async def get_values(
    db: AsyncSession,
    owner_type: str,
    owner_id: int,
    locale: str | None = None,
    default_locale: str | None = None,
) -> dict[str, Any]:
    """Return the key -> value mapping of a host instance.

    Translated values resolve to ``locale``, falling back to its base
    language, then ``default_locale``, then the first stored locale.
    Returns {} when the owner type has no active schema.
    """
    default_locale = default_locale or settings.default_locale
    schema = await get_active_schema(db, owner_type)
    if schema is None:
        return {}

    rows = await _load_rows(db, schema.id, owner_type, owner_id)
    values: dict[str, Any] = {}
    for definition in schema.definitions:
        row = rows.get(definition.key)
        payload = row.decoded_payload if row is not None else None
        if payload is None:
            continue
        decoded = _decode(definition, payload)
        if isinstance(payload, TranslatedPayload):
            decoded = resolve_translation(decoded, locale, default_locale)
        values[definition.key] = decoded
    return values


async def get_value(
    db: AsyncSession,
    owner_type: str,
    owner_id: int,
    key: str,
    locale: str | None = None,
    default_locale: str | None = None,
) -> Any:
    """Return one field's value, or None if the schema, field or row is absent."""
    default_locale = default_locale or settings.default_locale
    schema = await get_active_schema(db, owner_type)
    if schema is None:
        return None

    definition = get_field_definition(schema, key)
    if definition is None:
        return None

    result = await db.execute(
        select(CustomFieldValue)
        .where(
            CustomFieldValue.schema_id == schema.id,
            CustomFieldValue.owner_type == owner_type,
            CustomFieldValue.owner_id == owner_id,
            CustomFieldValue.field_key == key,
        )
        .execution_options(populate_existing=True)
    )
    row = result.scalars().first()
    payload = row.decoded_payload if row is not None else None
    if payload is None:
        return None

    decoded = _decode(definition, payload)
    if isinstance(payload, TranslatedPayload):
        return resolve_translation(decoded, locale, default_locale)
    return decoded


async def delete_value(
    db: AsyncSession,
    owner_type: str,
    owner_id: int,
    key: str,
) -> int:
    """Unset one field of a host instance. Returns the number of rows removed."""
    result = await db.execute(
        delete(CustomFieldValue).where(
            CustomFieldValue.owner_type == owner_type,
            CustomFieldValue.owner_id == owner_id,
            CustomFieldValue.field_key == key,
        )
    )
    await db.commit()
    logger.info("Custom field value deleted: owner=%s:%s key=%s", owner_type, owner_id, key)
    return result.rowcount or 0


async def delete_values(
    db: AsyncSession,
    owner_type: str,
    owner_id: int,
) -> int:
    """Remove every value of a host instance; called when the host is deleted."""
    result = await db.execute(
        delete(CustomFieldValue).where(
            CustomFieldValue.owner_type == owner_type,
            CustomFieldValue.owner_id == owner_id,
        )
    )
    await db.commit()
    removed = result.rowcount or 0
    logger.info("Custom field values deleted: owner=%s:%s rows=%d", owner_type, owner_id, removed)
    return removed


def display_value(
    definition: FieldDefinition,
    value: Any,
    locale: str | None = None,
    default_locale: str | None = None,
) -> str:
    """Render a decoded value for list views and read-only displays."""
    default_locale = default_locale or settings.default_locale

    if isinstance(value, Mapping):
        value = resolve_translation(value, locale, default_locale)

    if value is None or value == "":
        return ""

    if definition.type is FieldType.BOOLEAN:
        return "Yes" if value else "No"
    if definition.type is FieldType.DATE and isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    if definition.type is FieldType.NUMBER and isinstance(value, float) and value.is_integer():
        return str(int(value))
    if definition.type is FieldType.SELECT:
        return definition.option_label(str(value), locale, default_locale) or str(value)
    return str(value)


def has_value(payload: Payload | None) -> bool:
    if payload is None:
        return False
    if isinstance(payload, TranslatedPayload):
        return any(not is_empty(value) for value in payload.values.values())
    return not is_empty(payload.value)
