"""
CustomFieldSchema model

One schema per host model type (``owner_type``), holding the ordered list
of field definitions as a JSON array. Inactive schemas stay stored but are
ignored by lookups.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from custom_fields.database import Base


class CustomFieldSchema(Base):
    """Administrator-defined set of custom fields for one host model type."""

    __tablename__ = "schemas"

    id = Column(Integer, primary_key=True, index=True)
    owner_type = Column(String(255), nullable=False)  # e.g. "Partner"

    # Translatable metadata: plain string or {"en": ..., "ar": ...}
    name = Column(JSON, nullable=False)
    description = Column(JSON, nullable=True)

    # Ordered list of FieldDefinition documents
    field_definitions = Column(JSON, nullable=False, default=list)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(
        DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        # One schema per host model type
        UniqueConstraint("owner_type", name="uq_schemas_owner_type"),
        Index("idx_schemas_owner_type_active", "owner_type", "is_active"),
        Index("idx_schemas_owner_type", "owner_type"),
    )

    @property
    def definitions(self) -> list["FieldDefinition"]:
        """Field definitions parsed into their pydantic models, in list order."""
        from custom_fields.schemas.field_definition import FieldDefinition

        return [FieldDefinition.model_validate(item) for item in self.field_definitions or []]

    def __repr__(self) -> str:
        return f"CustomFieldSchema(id={self.id!r}, owner_type={self.owner_type!r}, active={self.is_active!r})"
