"""Schema routes for managing custom field definitions per host model type."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from custom_fields.database import get_db
from custom_fields.exceptions import DuplicateResourceError
from custom_fields.models.custom_field_schema import CustomFieldSchema
from custom_fields.models.field_type import FieldType
from custom_fields.schemas.field_definition import LocalizedText
from custom_fields.services import schema_registry

router = APIRouter(prefix="/schemas", tags=["Custom Field Schemas"])


# Pydantic schemas
class SchemaCreate(BaseModel):
    """Schema for creating a custom field schema."""

    owner_type: str = Field(..., min_length=1, max_length=255)
    name: LocalizedText
    description: LocalizedText | None = None
    field_definitions: list[dict[str, Any]] = Field(default_factory=list)
    is_active: bool = True


class SchemaUpdate(BaseModel):
    """Schema for updating schema metadata."""

    name: LocalizedText | None = None
    description: LocalizedText | None = None
    is_active: bool | None = None


class SchemaResponse(BaseModel):
    """Schema for schema response."""

    id: int
    owner_type: str
    name: LocalizedText
    description: LocalizedText | None
    field_definitions: list[dict[str, Any]]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FieldOrderUpdate(BaseModel):
    """Schema for updating field order."""

    keys: list[str]


# Routes
@router.get("/field-types")
async def get_field_types():
    """Get list of available field types."""
    return {
        "field_types": [
            {
                "value": field_type.value,
                "label": field_type.label,
                "supports_translation": field_type.supports_translation,
                "requires_options": field_type.requires_options,
            }
            for field_type in FieldType
        ]
    }


@router.post("", response_model=SchemaResponse, status_code=status.HTTP_201_CREATED)
async def create_schema(
    schema_data: SchemaCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a schema for a host model type."""
    try:
        schema = await schema_registry.create_schema(
            db=db,
            owner_type=schema_data.owner_type,
            name=schema_data.name,
            description=schema_data.description,
            field_definitions=schema_data.field_definitions,
            is_active=schema_data.is_active,
        )
    except IntegrityError:
        await db.rollback()
        raise DuplicateResourceError("Schema", "owner_type", schema_data.owner_type) from None
    return _schema_to_response(schema)


@router.get("", response_model=list[SchemaResponse])
async def get_schemas(
    active_only: bool = False,
    skip: int = 0,
    limit: int = 50,
    db: AsyncSession = Depends(get_db),
):
    """Get all schemas."""
    schemas = await schema_registry.list_schemas(db, active_only=active_only, skip=skip, limit=limit)
    return [_schema_to_response(s) for s in schemas]


@router.get("/{schema_id}", response_model=SchemaResponse)
async def get_schema(
    schema_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get schema by ID."""
    schema = await schema_registry.require_schema(db, schema_id)
    return _schema_to_response(schema)


@router.patch("/{schema_id}", response_model=SchemaResponse)
async def update_schema(
    schema_id: int,
    schema_data: SchemaUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update schema name, description or active flag."""
    schema = await schema_registry.require_schema(db, schema_id)
    schema = await schema_registry.update_schema(db, schema, **schema_data.model_dump(exclude_unset=True))
    return _schema_to_response(schema)


@router.delete("/{schema_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schema(
    schema_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Delete a schema together with every value stored under it."""
    schema = await schema_registry.require_schema(db, schema_id)
    await schema_registry.delete_schema(db, schema)


# Field management
@router.post("/{schema_id}/fields", response_model=SchemaResponse, status_code=status.HTTP_201_CREATED)
async def add_field(
    schema_id: int,
    definition: dict[str, Any],
    db: AsyncSession = Depends(get_db),
):
    """Append a field definition to a schema."""
    schema = await schema_registry.require_schema(db, schema_id)
    schema = await schema_registry.add_field(db, schema, definition)
    return _schema_to_response(schema)


@router.put("/{schema_id}/field-order", response_model=SchemaResponse)
async def reorder_fields(
    schema_id: int,
    order_data: FieldOrderUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Reorder the fields of a schema."""
    schema = await schema_registry.require_schema(db, schema_id)
    schema = await schema_registry.reorder_fields(db, schema, order_data.keys)
    return _schema_to_response(schema)


@router.put("/{schema_id}/fields/{key}", response_model=SchemaResponse)
async def update_field(
    schema_id: int,
    key: str,
    definition: dict[str, Any],
    db: AsyncSession = Depends(get_db),
):
    """Replace a field definition in place."""
    schema = await schema_registry.require_schema(db, schema_id)
    schema = await schema_registry.update_field(db, schema, key, definition)
    return _schema_to_response(schema)


@router.delete("/{schema_id}/fields/{key}", response_model=SchemaResponse)
async def remove_field(
    schema_id: int,
    key: str,
    db: AsyncSession = Depends(get_db),
):
    """Remove a field definition. Stored values of the field are left untouched."""
    schema = await schema_registry.require_schema(db, schema_id)
    schema = await schema_registry.remove_field(db, schema, key)
    return _schema_to_response(schema)


def _schema_to_response(schema: CustomFieldSchema) -> SchemaResponse:
    """Convert schema to response schema."""
    return SchemaResponse(
        id=schema.id,
        owner_type=schema.owner_type,
        name=schema.name,
        description=schema.description,
        field_definitions=list(schema.field_definitions or []),
        is_active=schema.is_active,
        created_at=schema.created_at,
        updated_at=schema.updated_at,
    )
