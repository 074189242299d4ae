"""
Schema Registry

Async CRUD for CustomFieldSchema records and the ordered field-definition
list each of them holds.

Functions:
    create_schema          - insert a schema for a host model type
    get_schema             - fetch by id
    require_schema         - fetch by id or raise SchemaNotFoundError
    get_schema_for_owner   - fetch by owner type, active or not
    get_active_schema      - fetch the active schema for an owner type
    list_schemas           - paginated listing
    has_custom_fields      - whether an owner type has an active schema
    update_schema          - change name / description / is_active
    delete_schema          - hard-delete (values cascade at the storage layer)
    get_field_definition   - look up one definition by key
    add_field              - append a definition
    update_field           - replace a definition in place
    remove_field           - drop a definition (no-op when absent)
    reorder_fields         - rewrite the list order
    table_fields           - definitions flagged show_in_table

Uniqueness of ``owner_type`` is left to the storage layer: a duplicate
``create_schema`` surfaces as ``sqlalchemy.exc.IntegrityError``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: TC002

from custom_fields.config import settings
from custom_fields.exceptions import FieldNotFoundError, SchemaNotFoundError, ValidationError
from custom_fields.models.custom_field_schema import CustomFieldSchema
from custom_fields.schemas.field_definition import FieldDefinition, parse_field_definition

logger = logging.getLogger(__name__)

DefinitionInput = FieldDefinition | Mapping[str, Any]


def _check_unique_keys(definitions: list[FieldDefinition]) -> None:
    seen: set[str] = set()
    for definition in definitions:
        if definition.key in seen:
            raise ValidationError(
                f"Field '{definition.key}' already exists in schema",
                field=definition.key,
            )
        seen.add(definition.key)


def _check_field_limit(definitions: list[FieldDefinition]) -> None:
    if len(definitions) > settings.max_fields_per_schema:
        raise ValidationError(f"A schema may hold at most {settings.max_fields_per_schema} fields")


async def _save_definitions(
    db: AsyncSession,
    schema: CustomFieldSchema,
    definitions: list[FieldDefinition],
) -> CustomFieldSchema:
    # Assign a fresh list so the JSON column is flagged dirty as a whole
    schema.field_definitions = [definition.to_storage() for definition in definitions]
    await db.commit()
    await db.refresh(schema)
    return schema


async def create_schema(
    db: AsyncSession,
    owner_type: str,
    name: str | dict[str, str],
    description: str | dict[str, str] | None = None,
    field_definitions: Iterable[DefinitionInput] | None = None,
    is_active: bool = True,
) -> CustomFieldSchema:
    """Create a schema for a host model type.

    Raises:
        ValidationError: if a definition is malformed or keys repeat.
        sqlalchemy.exc.IntegrityError: if the owner type already has a schema.
    """
    if not owner_type or not owner_type.strip():
        raise ValidationError("Owner type is required", field="owner_type")

    definitions = [parse_field_definition(item) for item in field_definitions or []]
    _check_unique_keys(definitions)
    _check_field_limit(definitions)

    schema = CustomFieldSchema(
        owner_type=owner_type,
        name=name,
        description=description,
        field_definitions=[definition.to_storage() for definition in definitions],
        is_active=is_active,
    )
    db.add(schema)
    await db.commit()
    await db.refresh(schema)
    logger.info("Schema created: owner_type=%s fields=%d", owner_type, len(definitions))
    return schema


async def get_schema(db: AsyncSession, schema_id: int) -> CustomFieldSchema | None:
    """Get schema by ID."""
    result = await db.execute(select(CustomFieldSchema).where(CustomFieldSchema.id == schema_id))
    return result.scalar_one_or_none()


async def require_schema(db: AsyncSession, schema_id: int) -> CustomFieldSchema:
    schema = await get_schema(db, schema_id)
    if schema is None:
        raise SchemaNotFoundError(schema_id)
    return schema


async def get_schema_for_owner(db: AsyncSession, owner_type: str) -> CustomFieldSchema | None:
    """Get the schema of an owner type regardless of its active flag."""
    result = await db.execute(select(CustomFieldSchema).where(CustomFieldSchema.owner_type == owner_type))
    return result.scalar_one_or_none()


async def get_active_schema(db: AsyncSession, owner_type: str) -> CustomFieldSchema | None:
    """Return the active schema for an owner type, or None if absent or inactive."""
    result = await db.execute(
        select(CustomFieldSchema).where(
            CustomFieldSchema.owner_type == owner_type,
            CustomFieldSchema.is_active.is_(True),
        )
    )
    return result.scalar_one_or_none()


async def list_schemas(
    db: AsyncSession,
    active_only: bool = False,
    skip: int = 0,
    limit: int = 50,
) -> list[CustomFieldSchema]:
    """Get all schemas with optional filter."""
    query = select(CustomFieldSchema)

    if active_only:
        query = query.where(CustomFieldSchema.is_active.is_(True))

    query = query.order_by(CustomFieldSchema.owner_type).offset(skip).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def has_custom_fields(db: AsyncSession, owner_type: str) -> bool:
    return await get_active_schema(db, owner_type) is not None


async def update_schema(
    db: AsyncSession,
    schema: CustomFieldSchema,
    **changes: Any,
) -> CustomFieldSchema:
    """Update schema metadata.

    Only ``name``, ``description`` and ``is_active`` are mutable here;
    field definitions go through the field operations below. ``description``
    may be cleared with None; the other two ignore None.
    """
    mutable_fields = {"name", "description", "is_active"}
    for key, value in changes.items():
        if key not in mutable_fields:
            continue
        if value is None and key != "description":
            continue
        setattr(schema, key, value)

    await db.commit()
    await db.refresh(schema)
    logger.info("Schema updated: owner_type=%s", schema.owner_type)
    return schema


async def activate_schema(db: AsyncSession, schema: CustomFieldSchema) -> CustomFieldSchema:
    return await update_schema(db, schema, is_active=True)


async def deactivate_schema(db: AsyncSession, schema: CustomFieldSchema) -> CustomFieldSchema:
    return await update_schema(db, schema, is_active=False)


async def delete_schema(db: AsyncSession, schema: CustomFieldSchema) -> bool:
    """Delete a schema. Its values are removed by the foreign-key cascade."""
    owner_type = schema.owner_type
    await db.delete(schema)
    await db.commit()
    logger.info("Schema deleted: owner_type=%s", owner_type)
    return True


def get_field_definition(schema: CustomFieldSchema, key: str) -> FieldDefinition | None:
    """Look up one field definition by key."""
    for definition in schema.definitions:
        if definition.key == key:
            return definition
    return None


def table_fields(schema: CustomFieldSchema) -> list[FieldDefinition]:
    """Definitions a list view should render as columns."""
    return [definition for definition in schema.definitions if definition.show_in_table]


async def add_field(
    db: AsyncSession,
    schema: CustomFieldSchema,
    definition: DefinitionInput,
) -> CustomFieldSchema:
    """Append a field definition to a schema.

    Raises:
        ValidationError: if the definition is malformed or its key already exists.
    """
    new_definition = parse_field_definition(definition)
    definitions = schema.definitions

    if any(existing.key == new_definition.key for existing in definitions):
        raise ValidationError(
            f"Field '{new_definition.key}' already exists in schema",
            field=new_definition.key,
        )

    definitions.append(new_definition)
    _check_field_limit(definitions)

    schema = await _save_definitions(db, schema, definitions)
    logger.info("Field added: owner_type=%s key=%s", schema.owner_type, new_definition.key)
    return schema


async def update_field(
    db: AsyncSession,
    schema: CustomFieldSchema,
    key: str,
    definition: DefinitionInput,
) -> CustomFieldSchema:
    """Replace the definition stored under ``key``, keeping its position.

    A mapping without a ``key`` entry keeps the current key.

    Raises:
        FieldNotFoundError: if ``key`` is not defined in the schema.
        ValidationError: if the new definition is malformed or renames onto an existing key.
    """
    if isinstance(definition, Mapping) and "key" not in definition:
        definition = {**definition, "key": key}
    new_definition = parse_field_definition(definition)

    definitions = schema.definitions
    position = next((index for index, existing in enumerate(definitions) if existing.key == key), None)
    if position is None:
        raise FieldNotFoundError(key)

    if new_definition.key != key and any(existing.key == new_definition.key for existing in definitions):
        raise ValidationError(
            f"Field '{new_definition.key}' already exists in schema",
            field=new_definition.key,
        )

    definitions[position] = new_definition
    schema = await _save_definitions(db, schema, definitions)
    logger.info("Field updated: owner_type=%s key=%s", schema.owner_type, key)
    return schema


async def remove_field(db: AsyncSession, schema: CustomFieldSchema, key: str) -> CustomFieldSchema:
    """Remove the definition stored under ``key``. Missing keys are ignored."""
    definitions = schema.definitions
    remaining = [definition for definition in definitions if definition.key != key]

    if len(remaining) == len(definitions):
        logger.debug("Field removal skipped, key not defined: owner_type=%s key=%s", schema.owner_type, key)
        return schema

    schema = await _save_definitions(db, schema, remaining)
    logger.info("Field removed: owner_type=%s key=%s", schema.owner_type, key)
    return schema


async def reorder_fields(
    db: AsyncSession,
    schema: CustomFieldSchema,
    keys: list[str],
) -> CustomFieldSchema:
    """Reorder definitions to follow ``keys``.

    Raises:
        ValidationError: unless ``keys`` is a permutation of the schema's keys.
    """
    by_key = {definition.key: definition for definition in schema.definitions}

    if len(keys) != len(by_key) or set(keys) != set(by_key):
        raise ValidationError(
            "Field order must list every field key exactly once",
            details={"expected": sorted(by_key), "received": list(keys)},
        )

    reordered = [by_key[key] for key in keys]
    schema = await _save_definitions(db, schema, reordered)
    logger.info("Fields reordered: owner_type=%s", schema.owner_type)
    return schema
