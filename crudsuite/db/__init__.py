"""
Database ORM Models
SQLAlchemy ORM models for every product's tables.
"""

from .base import Base
from . import community, discussion_board, shopping, todo

__all__ = [
    "Base",
    "community",
    "discussion_board",
    "shopping",
    "todo",
]
