"""Custom SQLAlchemy column types."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import DateTime, String
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetimes on every backend.

    SQLite drops the offset on storage; values read back naive are
    re-attached to UTC so comparisons with ``datetime.now(UTC)`` stay valid.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class EnumSet(TypeDecorator):
    """Store a set of ``str`` enum members as a sorted comma-separated string.

    Python-side values are always ``frozenset`` instances, so duplicates are
    impossible and reassignment is the only way to change the column.
    """

    impl = String(64)
    cache_ok = True

    def __init__(self, enum_cls: type[Enum], *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.enum_cls = enum_cls

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        members = {self.enum_cls(v) for v in value}
        return ",".join(sorted(m.value for m in members))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return frozenset(self.enum_cls(v) for v in value.split(",") if v)
