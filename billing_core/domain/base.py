from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import BigInteger, DateTime, Integer
from sqlalchemy.types import TypeDecorator
from sqlmodel import SQLModel

# SQLite only autoincrements INTEGER PRIMARY KEY columns
BigIntPK = BigInteger().with_variant(Integer(), "sqlite")


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored and compared as naive UTC"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class UTCDateTime(TypeDecorator):
    """
    TIMESTAMP WITHOUT TIME ZONE holding UTC

    Aware values are converted to naive UTC on the way in, so they can be
    bound on asyncpg and compared with the naive values read back.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return to_naive_utc(value)


class BaseModel(SQLModel):
    """Base class for all table entities"""
