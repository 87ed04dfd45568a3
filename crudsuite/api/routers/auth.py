"""
Authentication routes.
Join, login and refresh for every role of every product.

Each role gets the same three endpoints under its own path; the issued
token's ``type`` claim is the role, so a token is only accepted by that
role's endpoints.
"""

import logging
from typing import Type

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..dependencies import get_db
from ..schemas import discussion_board as board_schemas
from ..schemas import shopping as shopping_schemas
from ..schemas.auth import (
    Authorized,
    ErrorResponse,
    JoinRequest,
    LoginRequest,
    RefreshRequest,
    StrongJoinRequest,
)
from ..services import community, discussion_board, shopping, todo
from ..services.accounts import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def mount_account_routes(
    path: str,
    accounts: AccountService,
    join_schema: Type[BaseModel],
    join=None,
) -> None:
    """
    Register join/login/refresh for one role.

    Args:
        path: Path under /auth, e.g. "/todo/member"
        accounts: Account service bound to the role's table
        join_schema: Request body model for join
        join: Optional join override taking (db, request)
    """
    name = path.strip("/").replace("/", "_")

    @router.post(
        f"{path}/join",
        response_model=Authorized,
        status_code=status.HTTP_201_CREATED,
        responses={409: {"model": ErrorResponse, "description": "Email or username taken"}},
        name=f"{name}_join",
    )
    async def join_account(request: join_schema, db: Session = Depends(get_db)) -> Authorized:
        if join is not None:
            return join(db, request)
        return accounts.join(db, request.model_dump())

    @router.post(
        f"{path}/login",
        response_model=Authorized,
        responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
        name=f"{name}_login",
    )
    async def login(request: LoginRequest, db: Session = Depends(get_db)) -> Authorized:
        return accounts.login(db, request)

    @router.post(
        f"{path}/refresh",
        response_model=Authorized,
        responses={401: {"model": ErrorResponse, "description": "Invalid refresh token"}},
        name=f"{name}_refresh",
    )
    async def refresh(request: RefreshRequest, db: Session = Depends(get_db)) -> Authorized:
        return accounts.refresh(db, request.refresh_token)


# Discussion board
mount_account_routes("/member", discussion_board.members, board_schemas.MemberJoin)
mount_account_routes(
    "/moderator",
    discussion_board.moderators,
    board_schemas.ModeratorJoin,
    join=discussion_board.join_moderator,
)
mount_account_routes("/administrator", discussion_board.administrators, board_schemas.AdministratorJoin)

# Community platform
mount_account_routes("/community/member", community.members, JoinRequest)
mount_account_routes("/community/moderator", community.moderators, JoinRequest)
mount_account_routes("/community/admin", community.admins, StrongJoinRequest)

# Shopping mall
mount_account_routes("/shopping/customer", shopping.customers, shopping_schemas.CustomerJoin)
mount_account_routes("/shopping/seller", shopping.sellers, shopping_schemas.SellerJoin)
mount_account_routes("/shopping/admin", shopping.admins, StrongJoinRequest)

# Todo
mount_account_routes("/todo/member", todo.members, JoinRequest)
mount_account_routes("/todo/administrator", todo.administrators, StrongJoinRequest)
