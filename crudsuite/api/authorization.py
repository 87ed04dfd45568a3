"""
Role-scoped JWT authorization.

Each role has one RoleAuthorizer dependency: it verifies the bearer token,
checks that the token's ``type`` claim names the expected role, and loads the
account row the ``sub`` claim points to. Every failure is a generic 403.
"""

import logging
from enum import Enum
from typing import Callable, Optional, Type
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from ..db import community, discussion_board, shopping, todo
from .dependencies import get_db
from .errors import ForbiddenError
from .security import ACCESS, verify_token

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Token ``type`` discriminator, one value per product role."""

    BOARD_MEMBER = "discussionBoardMember"
    BOARD_MODERATOR = "discussionBoardModerator"
    BOARD_ADMINISTRATOR = "discussionBoardAdministrator"
    COMMUNITY_MEMBER = "communityMember"
    COMMUNITY_MODERATOR = "communityModerator"
    COMMUNITY_ADMIN = "communityAdmin"
    SHOPPING_CUSTOMER = "shoppingCustomer"
    SHOPPING_SELLER = "shoppingSeller"
    SHOPPING_ADMIN = "shoppingAdmin"
    TODO_MEMBER = "todoMember"
    TODO_ADMINISTRATOR = "todoAdministrator"


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the raw token from an Authorization header value."""
    if not authorization:
        return None
    value = authorization.strip()
    if value.lower().startswith("bearer "):
        value = value[7:].strip()
    return value or None


class RoleAuthorizer:
    """
    FastAPI dependency that authorizes one role.

    Use as FastAPI dependency:
        require_member = RoleAuthorizer(Role.TODO_MEMBER, TodoMember)

        @app.get("/endpoint")
        def endpoint(member: TodoMember = Depends(require_member)):
            ...
    """

    def __init__(self, role: Role, model: Type, is_allowed: Optional[Callable] = None):
        """
        Args:
            role: Expected ``type`` claim
            model: Account ORM model looked up by the ``sub`` claim
            is_allowed: Extra account check (e.g. not rejected), defaults to always True
        """
        self.role = role
        self.model = model
        self.is_allowed = is_allowed

    def __call__(
        self,
        authorization: Optional[str] = Header(None),
        db: Session = Depends(get_db),
    ):
        token = extract_bearer(authorization)
        if token is None:
            raise ForbiddenError()

        payload = verify_token(token)
        if not payload or payload.get("kind") != ACCESS or payload.get("type") != self.role.value:
            raise ForbiddenError()

        try:
            account_id = UUID(str(payload.get("sub")))
        except ValueError:
            raise ForbiddenError()

        account = (
            db.query(self.model)
            .filter(self.model.id == account_id, self.model.deleted_at.is_(None))
            .first()
        )
        if account is None:
            logger.info(f"Authorization failed, no live {self.role.value} account: {account_id}")
            raise ForbiddenError()

        if self.is_allowed is not None and not self.is_allowed(account):
            raise ForbiddenError()

        return account


board_member = RoleAuthorizer(Role.BOARD_MEMBER, discussion_board.BoardMember)
board_moderator = RoleAuthorizer(
    Role.BOARD_MODERATOR, discussion_board.BoardModerator, lambda moderator: moderator.is_active
)
board_administrator = RoleAuthorizer(Role.BOARD_ADMINISTRATOR, discussion_board.BoardAdministrator)

community_member = RoleAuthorizer(Role.COMMUNITY_MEMBER, community.CommunityMember)
community_moderator = RoleAuthorizer(Role.COMMUNITY_MODERATOR, community.CommunityModerator)
community_admin = RoleAuthorizer(Role.COMMUNITY_ADMIN, community.CommunityAdmin)

shopping_customer = RoleAuthorizer(Role.SHOPPING_CUSTOMER, shopping.Customer)
shopping_seller = RoleAuthorizer(
    Role.SHOPPING_SELLER, shopping.Seller, lambda seller: seller.approval_status != "rejected"
)
shopping_admin = RoleAuthorizer(Role.SHOPPING_ADMIN, shopping.ShoppingAdmin)

todo_member = RoleAuthorizer(Role.TODO_MEMBER, todo.TodoMember)
todo_administrator = RoleAuthorizer(Role.TODO_ADMINISTRATOR, todo.TodoAdministrator)
