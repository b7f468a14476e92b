"""
Common mixins for models
"""
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Uuid
from uuid import uuid4


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UUIDPrimaryKeyMixin:
    """Mixin for models identified by a generated UUID"""

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4, index=True)


class TimestampMixin:
    """Mixin for models that need timestamp tracking.

    updated_at only moves through touch().
    """

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def touch(self, when: datetime = None):
        self.updated_at = when or utcnow()
