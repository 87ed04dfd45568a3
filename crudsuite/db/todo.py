"""
Todo list ORM models.
"""

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text, Uuid

from .base import AccountMixin, Base, SoftDeleteMixin, TimestampMixin


class TodoMember(AccountMixin, Base):
    __tablename__ = "todo_members"


class TodoAdministrator(AccountMixin, Base):
    __tablename__ = "todo_administrators"


class Todo(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "todo_todos"

    id = Column(Uuid, primary_key=True, default=uuid4)
    member_id = Column(Uuid, ForeignKey("todo_members.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(String(8), nullable=False, default="Medium", comment="Low, Medium or High")
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)
    due_date = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_todo_todos_member_created", "member_id", "created_at"),
    )
