"""
RedSocial Backend — Authentication Service (JWT Authentication Gate)
======================================================================

What:  Turns bearer credentials into an Identity, and serves the
       token-issuing /auth endpoints.
Who:   The request dependencies in app.dependencies call
       resolve_identity() and verify_gate_secret(); the /auth routes call
       gate_login() and gate_register().

Two kinds of bearer credential:
    1. Per-user access token (JWT) on /api routes.
       Signature and expiry are verified, then the `sub` claim (username)
       is looked up so that tokens of deleted users stop working.
    2. The static API gate secret on /auth routes.
       Compared in constant time against API_GATE_SECRET.
"""

import logging
import secrets
from typing import Optional

from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import UnauthorizedError
from app.schemas.auth import Identity, TokenResponse
from app.schemas.user import LoginRequest, RegisterRequest
from app.security import decode_access_token
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


class AuthService:

    async def resolve_identity(self, db: AsyncSession, token: str) -> Identity:
        """
        Validate an access token and load the user it names.

        Raises:
            UnauthorizedError: bad signature, malformed, expired, missing
                subject, or subject no longer registered
        """
        try:
            claims = decode_access_token(token)
        except JWTError as e:
            logger.info("Rejected access token: %s", str(e))
            raise UnauthorizedError(message="Invalid or expired token") from e

        username = claims.get("sub")
        if not username:
            raise UnauthorizedError(message="Token has no subject")

        user = await user_service.find_by_username(db, username)
        if user is None:
            logger.info("Rejected access token for unknown user %s", username)
            raise UnauthorizedError(message="Token subject no longer exists")

        return Identity(user_id=user.id, username=user.username)

    def verify_gate_secret(self, credentials: Optional[str]) -> None:
        """
        Check the raw credentials of an `Authorization: Bearer <secret>` header.

        Raises:
            UnauthorizedError: missing or wrong secret
        """
        if not credentials or not secrets.compare_digest(
            credentials.encode("utf-8"), settings.api_gate_secret.encode("utf-8")
        ):
            logger.warning("Rejected request with invalid API gate secret")
            raise UnauthorizedError(message="Invalid API gate token")

    # ── /auth endpoints ───────────────────────────────────────────────────

    async def gate_login(self, db: AsyncSession, request: LoginRequest) -> TokenResponse:
        user = await user_service.authenticate(db, request.username, request.password)
        logger.info("Token issued through API gate for %s", user.username)
        return TokenResponse(access_token=user_service.issue_token(user))

    async def gate_register(self, db: AsyncSession, request: RegisterRequest) -> TokenResponse:
        """Register through the gate and return a token for the new account."""
        created = await user_service.register(
            db,
            username=request.username,
            email=request.email,
            password=request.password,
            description=request.description,
        )
        user = await user_service.require_user(db, created.id)
        return TokenResponse(access_token=user_service.issue_token(user))


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
