"""Core database package: declarative base, mixins, repository and ids.

Base Classes and Mixins:
    - Base: declarative base with constraint naming convention
    - UUIDv7PKMixin: string UUID v7 primary key
    - CreatedAtMixin: immutable created_at column

Repository:
    - BaseRepository[T]: get and create with explicit session passing

Identifiers:
    - generate_uuid7 / new_id: time-sortable UUID v7
"""

from order_service.core.database.base import (
    NAMING_CONVENTION,
    Base,
    CreatedAtMixin,
    UUIDv7PKMixin,
)
from order_service.core.database.repository import BaseRepository
from order_service.core.database.utils import generate_uuid7, new_id, uuid_to_timestamp

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "BaseRepository",
    "CreatedAtMixin",
    "UUIDv7PKMixin",
    "generate_uuid7",
    "new_id",
    "uuid_to_timestamp",
]
