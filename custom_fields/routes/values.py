"""Value routes for reading and writing the custom fields of one host instance."""

from typing import Any

from fastapi import APIRouter, Depends, Header, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from custom_fields.config import settings
from custom_fields.database import get_db
from custom_fields.host import CustomFields, HostAdapter
from custom_fields.i18n.locale import parse_accept_language

router = APIRouter(prefix="/values", tags=["Custom Field Values"])


# Pydantic schemas
class ValuesUpdate(BaseModel):
    """Schema for writing custom field values."""

    values: dict[str, Any] = Field(default_factory=dict)
    locale: str | None = None


class ValidationRequest(BaseModel):
    """Schema for validation request."""

    values: dict[str, Any] = Field(default_factory=dict)


class ValidationResponse(BaseModel):
    """Schema for validation response."""

    is_valid: bool
    errors: dict[str, list[str]]


class ValuesResponse(BaseModel):
    """Schema for values response."""

    owner_type: str
    owner_id: int
    locale: str | None = None
    values: dict[str, Any]


class DeleteResponse(BaseModel):
    """Schema for delete response."""

    deleted: int


def get_request_locale(
    locale: str | None = Query(None, description="Locale to resolve translated values to"),
    accept_language: str | None = Header(None),
) -> str | None:
    """Resolve the read locale from ?locale= first, then Accept-Language."""
    if locale:
        return locale
    if accept_language:
        return parse_accept_language(accept_language, settings.supported_locales)
    return None


def get_custom_fields(
    owner_type: str,
    owner_id: int,
    db: AsyncSession = Depends(get_db),
) -> CustomFields:
    return CustomFields(db, HostAdapter(owner_type, owner_id))


# Routes
@router.get("/{owner_type}/{owner_id}", response_model=ValuesResponse)
async def get_values(
    raw: bool = False,
    display: bool = False,
    locale: str | None = Depends(get_request_locale),
    fields: CustomFields = Depends(get_custom_fields),
):
    """Get the custom field values of a host instance.

    ``raw`` keeps translations as locale maps; ``display`` renders
    human-readable strings instead of typed values.
    """
    if raw:
        values = await fields.get_raw_custom_field_values()
    elif display:
        values = await fields.get_custom_field_display_values(locale=locale)
    else:
        values = await fields.get_custom_field_values(locale=locale)
    return ValuesResponse(owner_type=fields.owner_type, owner_id=fields.owner_id, locale=locale, values=values)


@router.put("/{owner_type}/{owner_id}", response_model=ValuesResponse)
async def set_values(
    values_data: ValuesUpdate,
    fields: CustomFields = Depends(get_custom_fields),
):
    """Validate and store custom field values. Nothing is written on error."""
    await fields.set_custom_field_values(values_data.values, locale=values_data.locale)
    values = await fields.get_custom_field_values(locale=values_data.locale)
    return ValuesResponse(
        owner_type=fields.owner_type,
        owner_id=fields.owner_id,
        locale=values_data.locale,
        values=values,
    )


@router.post("/{owner_type}/{owner_id}/validate", response_model=ValidationResponse)
async def validate_values(
    validation_data: ValidationRequest,
    fields: CustomFields = Depends(get_custom_fields),
):
    """Validate custom field values without storing them."""
    errors = await fields.validate_custom_field_values(validation_data.values)
    return ValidationResponse(is_valid=not errors, errors=errors)


@router.delete("/{owner_type}/{owner_id}", response_model=DeleteResponse)
async def delete_values(
    fields: CustomFields = Depends(get_custom_fields),
):
    """Delete every custom field value of a host instance."""
    deleted = await fields.delete_custom_field_values()
    return DeleteResponse(deleted=deleted)


@router.delete("/{owner_type}/{owner_id}/{key}", response_model=DeleteResponse)
async def delete_value(
    key: str,
    fields: CustomFields = Depends(get_custom_fields),
):
    """Unset one custom field of a host instance."""
    deleted = await fields.delete_custom_field_value(key)
    return DeleteResponse(deleted=deleted)
