"""
RedSocial Backend — API Gate Route Handlers
=============================================

What:  POST /auth/register and POST /auth/login.
How:   The whole router requires `Authorization: Bearer <API_GATE_SECRET>`
       (require_api_gate). Both endpoints share the users table with
       /api/register and /api/login and return only the token.
Who:   Trusted clients (other services, admin tooling) that hold the
       gate secret and need a user token without the profile payload.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import require_api_gate
from app.schemas.auth import TokenResponse
from app.schemas.common import ErrorResponse
from app.schemas.user import LoginRequest, RegisterRequest
from app.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["API Gate"],
    dependencies=[Depends(require_api_gate)],
    responses={401: {"description": "Missing or wrong gate secret", "model": ErrorResponse}},
)


@router.post(
    "/register",
    response_model=TokenResponse,
    responses={
        400: {"description": "Password too short", "model": ErrorResponse},
        409: {"description": "Username or email already in use", "model": ErrorResponse},
    },
    summary="Register through the API gate",
)
async def gate_register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    return await auth_service.gate_register(db, body)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={404: {"description": "Unknown username", "model": ErrorResponse}},
    summary="Obtain a user token through the API gate",
)
async def gate_login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    return await auth_service.gate_login(db, body)
