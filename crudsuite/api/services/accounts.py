"""
Account service.
Join, login and refresh for any role's account table.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Type
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..authorization import Role
from ..errors import ConflictError, ForbiddenError, UnauthorizedError
from ..schemas.auth import Authorized, LoginRequest
from ..security import REFRESH, hash_password, issue_token_pair, verify_password, verify_token

logger = logging.getLogger(__name__)


class AccountService:
    """
    Account lifecycle for one role.

    The token ``type`` claim is the role value, so a token minted here only
    passes the RoleAuthorizer built for the same role.
    """

    def __init__(self, model: Type, role: Role):
        self.model = model
        self.role = role

    def authorized(self, account) -> Authorized:
        """Build the Authorized response with a fresh token pair."""
        return Authorized(
            id=account.id,
            email=account.email,
            username=account.username,
            created_at=account.created_at,
            token=issue_token_pair(str(account.id), self.role.value),
        )

    def join(self, db: Session, data: Dict[str, Any]) -> Authorized:
        """
        Register a new account.

        Args:
            db: Database session
            data: Validated join payload including the plain ``password``

        Raises:
            ConflictError: email or username already taken
        """
        fields = dict(data)
        password = fields.pop("password")
        email = fields["email"].lower()
        fields["email"] = email
        username = fields.get("username")

        clauses = [self.model.email == email]
        if username:
            clauses.append(self.model.username == username)
        existing = db.query(self.model).filter(or_(*clauses)).first()
        if existing:
            field = "email" if existing.email == email else "username"
            raise ConflictError(f"An account with this {field} already exists", {"field": field})

        account = self.model(password_hash=hash_password(password), **fields)
        db.add(account)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Account already exists")
        db.refresh(account)

        logger.info(f"Account joined: role={self.role.value} id={account.id}")
        return self.authorized(account)

    def login(self, db: Session, request: LoginRequest) -> Authorized:
        """
        Validate credentials and issue tokens.

        Raises:
            UnauthorizedError: unknown email or wrong password
            ForbiddenError: account deleted
        """
        account = db.query(self.model).filter(self.model.email == request.email.lower()).first()
        if not account or not verify_password(request.password, account.password_hash):
            raise UnauthorizedError("Incorrect email or password")

        if account.deleted_at is not None:
            raise ForbiddenError("Account is disabled")

        account.last_login_at = datetime.utcnow()
        db.commit()

        return self.authorized(account)

    def refresh(self, db: Session, refresh_token: str) -> Authorized:
        """
        Exchange a refresh token for a new access/refresh pair.

        Raises:
            UnauthorizedError: token invalid, not a refresh token, wrong role,
                or the account no longer exists
        """
        payload = verify_token(refresh_token)
        if not payload or payload.get("kind") != REFRESH or payload.get("type") != self.role.value:
            raise UnauthorizedError("Invalid refresh token")

        try:
            account_id = UUID(str(payload.get("sub")))
        except ValueError:
            raise UnauthorizedError("Invalid token payload")

        account = (
            db.query(self.model)
            .filter(self.model.id == account_id, self.model.deleted_at.is_(None))
            .first()
        )
        if account is None:
            raise UnauthorizedError("Account not found or inactive")

        return self.authorized(account)
