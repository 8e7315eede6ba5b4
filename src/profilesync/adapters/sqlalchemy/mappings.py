"""SQLAlchemy table metadata for the embedded profile store."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    MetaData,
    String,
    Table,
    TypeDecorator,
    Uuid,
)

from profilesync.domain.model import IdentifierType

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

entity_table = Table(
    "entity",
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("obsolete", Boolean, nullable=False, default=False),
    Column("successor_id", UUIDColumnType, ForeignKey("entity.id"), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False, default=_utcnow),
)

entity_identifier_table = Table(
    "entity_identifier",
    metadata,
    Column("source", String, primary_key=True),
    Column("identifier", String, primary_key=True),
    Column(
        "identifier_type",
        Enum(IdentifierType, native_enum=False),
        nullable=False,
        default=IdentifierType.ANONYMOUS,
    ),
    Column(
        "entity_id",
        UUIDColumnType,
        ForeignKey("entity.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
)

entity_facet_table = Table(
    "entity_facet",
    metadata,
    Column(
        "entity_id",
        UUIDColumnType,
        ForeignKey("entity.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("name", String, primary_key=True),
    Column("payload", JSON, nullable=False),
    Column("updated_at", UTCDateTime(), nullable=True),
)


def create_all_tables(engine: Engine) -> None:
    """Create any embedded store tables that are missing; existing tables are left alone."""
    log.info("Creating embedded store tables")
    metadata.create_all(engine)
