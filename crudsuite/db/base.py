"""
Declarative base and shared column mixins.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class TimestampMixin:
    """created_at / updated_at stored as naive UTC."""

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class SoftDeleteMixin:
    """Soft-delete marker; live rows have deleted_at IS NULL."""

    deleted_at = Column(DateTime, nullable=True, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class AccountMixin(TimestampMixin, SoftDeleteMixin):
    """
    Columns every login-capable account carries.

    Each product keeps its own account tables; the token ``type`` claim says
    which table the ``sub`` claim points into.
    """

    id = Column(Uuid, primary_key=True, default=uuid4)
    email = Column(String(254), unique=True, index=True, nullable=False)
    username = Column(String(64), unique=True, index=True, nullable=True)
    password_hash = Column(String(255), nullable=False, comment="Bcrypt hashed password")
    last_login_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<{self.__class__.__name__}(id={self.id}, email={self.email})>"
