"""
RedSocial Backend — Request Dependencies (Authentication Gate)
================================================================

What:  FastAPI dependencies that authenticate the caller of each request.
How:   HTTPBearer(auto_error=False) extracts `Authorization: Bearer <token>`
       without failing on its own, so the decision (public route or not)
       stays here and every failure surfaces as UnauthorizedError (401).

Dependencies:
    get_optional_identity  Attached to the whole /api router. No header
                           means anonymous; a header that is present but
                           invalid is rejected, even on public routes.
    get_current_identity   Declared by every protected route; requires an
                           authenticated caller.
    require_api_gate       Attached to the /auth router; checks the static
                           API gate secret instead of a user token.

The resolved Identity is also stored on request.state.identity so that
middleware and handlers can log who made the call.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import UnauthorizedError
from app.schemas.auth import Identity
from app.services.auth_service import auth_service

bearer_scheme = HTTPBearer(
    scheme_name="AccessToken", description="Per-user JWT access token", auto_error=False
)
gate_scheme = HTTPBearer(
    scheme_name="ApiGateSecret", description="Static API gate secret", auto_error=False
)


async def get_optional_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[Identity]:
    if credentials is None:
        request.state.identity = None
        return None

    identity = await auth_service.resolve_identity(db, credentials.credentials)
    request.state.identity = identity
    return identity


async def get_current_identity(
    identity: Optional[Identity] = Depends(get_optional_identity),
) -> Identity:
    """Resolve the caller or raise UnauthorizedError when no token was sent."""
    if identity is None:
        raise UnauthorizedError(message="Authentication required")
    return identity


async def require_api_gate(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(gate_scheme),
) -> None:
    auth_service.verify_gate_secret(credentials.credentials if credentials else None)
