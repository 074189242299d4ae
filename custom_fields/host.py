"""
Host integration

The single entry point application code uses to read and write custom
fields of a host instance (a Partner row, a Product row, ...).

A host is anything exposing a stable type name and a stable integer id,
either by implementing ``CustomizableHost`` itself or through a
``HostAdapter``. SQLAlchemy model instances are adapted automatically from
their class name and primary key:

    fields = CustomFields(db, partner)
    await fields.set_custom_field_values({"industry": "Technology", "priority": "high"})
    await fields.get_custom_field_values(locale="ar")

Hosts call ``delete_custom_field_values()`` when the instance is deleted.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: TC002

from custom_fields.config import settings
from custom_fields.exceptions import SchemaNotFoundError
from custom_fields.models.custom_field_schema import CustomFieldSchema
from custom_fields.services import schema_registry, value_store
from custom_fields.services.validation import collect_errors

logger = logging.getLogger(__name__)


@runtime_checkable
class CustomizableHost(Protocol):
    """Capability of a host: a stable type name and a stable identity."""

    @property
    def custom_field_owner_type(self) -> str: ...

    @property
    def custom_field_owner_id(self) -> int: ...


@dataclass(frozen=True)
class HostAdapter:
    """Explicit host identity for objects that do not describe themselves."""

    custom_field_owner_type: str
    custom_field_owner_id: int


def host_for(obj: Any) -> CustomizableHost:
    """Return ``obj`` if it is a host, else adapt a persisted SQLAlchemy instance."""
    if isinstance(obj, CustomizableHost):
        return obj

    try:
        state = inspect(obj)
    except NoInspectionAvailable:
        raise TypeError(f"{type(obj).__name__} is neither a CustomizableHost nor a mapped instance") from None

    identity = state.identity
    if identity is None or len(identity) != 1:
        raise TypeError(f"{type(obj).__name__} must be persisted with a single-column primary key")

    return HostAdapter(type(obj).__name__, identity[0])


class CustomFields:
    """Custom field operations bound to one host instance and one session."""

    def __init__(self, db: AsyncSession, host: Any, default_locale: str | None = None):
        self.db = db
        self.host = host_for(host)
        self.default_locale = default_locale or settings.default_locale

    @property
    def owner_type(self) -> str:
        return self.host.custom_field_owner_type

    @property
    def owner_id(self) -> int:
        return self.host.custom_field_owner_id

    async def _require_definition(self) -> CustomFieldSchema:
        schema = await self.get_custom_field_definition()
        if schema is None:
            raise SchemaNotFoundError(self.owner_type)
        return schema

    async def get_custom_field_definition(self) -> CustomFieldSchema | None:
        """Active schema of the host's type, or None."""
        return await schema_registry.get_active_schema(self.db, self.owner_type)

    async def get_custom_field_values(self, locale: str | None = None) -> dict[str, Any]:
        return await value_store.get_values(
            self.db, self.owner_type, self.owner_id, locale=locale, default_locale=self.default_locale
        )

    async def get_custom_field_value(self, key: str, locale: str | None = None) -> Any:
        return await value_store.get_value(
            self.db, self.owner_type, self.owner_id, key, locale=locale, default_locale=self.default_locale
        )

    async def get_raw_custom_field_values(self) -> dict[str, Any]:
        """Values with translations kept whole, for pre-filling edit forms."""
        return await value_store.get_raw_values(self.db, self.owner_type, self.owner_id)

    async def get_custom_field_display_values(
        self,
        locale: str | None = None,
        table_only: bool = False,
    ) -> dict[str, str]:
        """Human-readable values, optionally limited to ``show_in_table`` fields."""
        schema = await self.get_custom_field_definition()
        if schema is None:
            return {}

        definitions = schema_registry.table_fields(schema) if table_only else schema.definitions
        values = await self.get_custom_field_values(locale=locale)
        return {
            definition.key: value_store.display_value(
                definition, values.get(definition.key), locale, self.default_locale
            )
            for definition in definitions
        }

    async def set_custom_field_values(self, values: Mapping[str, Any], locale: str | None = None) -> None:
        """Validate and store a batch of values.

        Raises:
            SchemaNotFoundError: if the host's type has no active schema.
            ValidationError: if any value is invalid; nothing is written.
        """
        schema = await self._require_definition()
        await value_store.set_values(self.db, schema, self.owner_type, self.owner_id, values, locale=locale)

    async def set_custom_field_value(self, key: str, value: Any, locale: str | None = None) -> None:
        schema = await self._require_definition()
        await value_store.set_value(self.db, schema, self.owner_type, self.owner_id, key, value, locale=locale)

    async def validate_custom_field_values(self, values: Mapping[str, Any]) -> dict[str, list[str]]:
        """Field key -> error messages; empty when the submission is valid."""
        schema = await self.get_custom_field_definition()
        if schema is None:
            return {}
        return collect_errors(schema.definitions, values)

    async def delete_custom_field_value(self, key: str) -> int:
        return await value_store.delete_value(self.db, self.owner_type, self.owner_id, key)

    async def delete_custom_field_values(self) -> int:
        """Remove every stored value of the host; call on host deletion."""
        removed = await value_store.delete_values(self.db, self.owner_type, self.owner_id)
        logger.debug("Host %s:%s released %d custom field values", self.owner_type, self.owner_id, removed)
        return removed
