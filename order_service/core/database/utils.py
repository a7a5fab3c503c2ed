"""Identifier helpers.

Every identifier in the workflow (order id / correlation id, payment id,
dead-letter id) is a UUID v7 rendered as its canonical string. UUID v7 encodes
the Unix timestamp in its first 48 bits, so identifiers sort by creation time.

Example:
    from order_service.core.database.utils import new_id, uuid_to_timestamp

    order_id = new_id()
    created_at = uuid_to_timestamp(order_id)
"""
from __future__ import annotations

import os
import time
import uuid
from datetime import UTC, datetime


def generate_uuid7() -> uuid.UUID:
    """Generate a UUID v7 (time-sortable).

    Layout (RFC 9562): 48-bit millisecond timestamp, 4-bit version, 12 random
    bits, 2-bit variant, 62 random bits.

    Example:
        >>> id1 = generate_uuid7()
        >>> id2 = generate_uuid7()
        >>> str(id1) < str(id2)
        True
    """
    timestamp_ms = int(time.time() * 1000)
    random_bytes = os.urandom(10)

    uuid_bytes = bytearray(16)
    uuid_bytes[0:6] = timestamp_ms.to_bytes(6, byteorder="big")
    uuid_bytes[6] = (random_bytes[0] & 0x0F) | 0x70
    uuid_bytes[7] = random_bytes[1]
    uuid_bytes[8] = (random_bytes[2] & 0x3F) | 0x80
    uuid_bytes[9:16] = random_bytes[3:10]

    return uuid.UUID(bytes=bytes(uuid_bytes))


def new_id() -> str:
    """Return a fresh UUID v7 as a canonical string."""
    return str(generate_uuid7())


def uuid_to_timestamp(value: str | uuid.UUID) -> datetime:
    """Extract the creation time embedded in a UUID v7.

    Raises:
        ValueError: If ``value`` is not a version 7 UUID.
    """
    uid = value if isinstance(value, uuid.UUID) else uuid.UUID(value)
    if uid.version != 7:
        msg = f"UUID {uid} is version {uid.version}, expected 7"
        raise ValueError(msg)
    timestamp_ms = int.from_bytes(uid.bytes[0:6], byteorder="big")
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)
