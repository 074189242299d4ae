"""
CustomFieldValue model

One stored value per (schema, owner_type, owner_id, field_key). The
``payload`` column holds the JSON form of a ScalarPayload or a
TranslatedPayload; see ``custom_fields.models.payload``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)

from custom_fields.database import Base
from custom_fields.models.payload import Payload, payload_from_json


class CustomFieldValue(Base):
    """A single custom field value attached to one host instance."""

    __tablename__ = "field_values"

    id = Column(Integer, primary_key=True, index=True)
    schema_id = Column(
        Integer,
        ForeignKey("schemas.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Host instance reference, e.g. ("Partner", 42)
    owner_type = Column(String(255), nullable=False)
    owner_id = Column(BigInteger().with_variant(Integer, "sqlite"), nullable=False)

    field_key = Column(String(100), nullable=False)
    payload = Column(JSON, nullable=False)

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
        # One value per field per host instance
        UniqueConstraint(
            "schema_id",
            "owner_type",
            "owner_id",
            "field_key",
            name="uq_field_values_identity",
        ),
        Index("idx_field_values_schema_id", "schema_id"),
        Index("idx_field_values_owner", "owner_type", "owner_id"),
        Index("idx_field_values_field_key", "field_key"),
    )

    @property
    def decoded_payload(self) -> Payload | None:
        return payload_from_json(self.payload)

    def __repr__(self) -> str:
        return (
            f"CustomFieldValue(owner={self.owner_type!r}:{self.owner_id!r}, "
            f"field_key={self.field_key!r}, payload={self.payload!r})"
        )
