"""
API Services
One provider module per product plus the shared account service.
"""

from .accounts import AccountService

__all__ = [
    "AccountService",
]
