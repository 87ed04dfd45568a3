"""
API Routers
FastAPI route handlers, one module per product plus auth and health.
"""

from .auth import router as auth_router
from .community import router as community_router
from .discussion_board import router as discussion_board_router
from .health import router as health_router
from .shopping import router as shopping_router
from .todo import router as todo_router

__all__ = [
    "health_router",
    "auth_router",
    "discussion_board_router",
    "community_router",
    "shopping_router",
    "todo_router",
]
