"""Shared SQLAlchemy base definitions and enums."""

from __future__ import annotations

from sqlalchemy import Enum as SAEnum, MetaData
from sqlalchemy.orm import DeclarativeBase

from reftrends.shared.enums import CardType


# Shared metadata constant so Alembic sees every table
naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=naming_convention)


class Base(DeclarativeBase):
    metadata = metadata


# Stored as the enum values ('yellow', 'red') rather than member names
card_type_enum = SAEnum(
    CardType,
    name="card_type",
    metadata=metadata,
    values_callable=lambda enum_cls: [member.value for member in enum_cls],
    native_enum=False,
)


__all__ = [
    "Base",
    "metadata",
    "CardType",
    "card_type_enum",
]
