"""
RedSocial Backend — User Route Handlers
=========================================

What:  Registration, login and user directory endpoints under /api.
How:   Thin handlers; every rule lives in UserService.

Route order matters: /user/all is declared before /user/{user_id},
otherwise "all" would be captured as a user id and rejected with 422.
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_identity, get_optional_identity
from app.schemas.auth import Identity
from app.schemas.common import ErrorResponse
from app.schemas.user import (
    EditDetailsRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserResponse,
)
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Users"],
    dependencies=[Depends(get_optional_identity)],
)

_UNAUTHORIZED = {401: {"description": "Missing or invalid token", "model": ErrorResponse}}


@router.post(
    "/register",
    response_model=UserResponse,
    responses={
        400: {"description": "Password too short", "model": ErrorResponse},
        409: {"description": "Username or email already in use", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.register(
        db,
        username=body.username,
        email=body.email,
        password=body.password,
        description=body.description,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"description": "Wrong password", "model": ErrorResponse},
        404: {"description": "Unknown username", "model": ErrorResponse},
    },
    summary="Log in and obtain an access token",
    description=(
        "Verifies the credentials and returns the user together with a bearer "
        "token. Send it as `Authorization: Bearer <access_token>` on protected routes."
    ),
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    return await user_service.login(db, body.username, body.password)


@router.get(
    "/me",
    response_model=UserResponse,
    responses=_UNAUTHORIZED,
    summary="Get the authenticated user",
)
async def me(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_by_id(db, identity.user_id)


@router.get(
    "/user/all",
    response_model=List[UserResponse],
    responses=_UNAUTHORIZED,
    summary="List every registered user",
)
async def list_users(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> List[UserResponse]:
    return await user_service.list_all(db)


@router.get(
    "/profile/{username}",
    response_model=UserResponse,
    responses={404: {"description": "Unknown username", "model": ErrorResponse}},
    summary="Public profile by username",
)
async def get_profile(
    username: str,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_by_username(db, username)


@router.get(
    "/user/{user_id}",
    response_model=UserResponse,
    responses={**_UNAUTHORIZED, 404: {"description": "Unknown user", "model": ErrorResponse}},
    summary="Get a user by id",
)
async def get_user(
    user_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_by_id(db, user_id)


@router.put(
    "/{user_id}/edit/details",
    response_model=Dict[str, str],
    responses={
        **_UNAUTHORIZED,
        403: {"description": "Editing another user", "model": ErrorResponse},
        404: {"description": "Unknown user", "model": ErrorResponse},
        409: {"description": "Email already in use", "model": ErrorResponse},
    },
    summary="Edit description and/or email",
    description="Returns only the fields that were provided, keyed `newDescription` / `newEmail`.",
)
async def edit_details(
    user_id: int,
    body: EditDetailsRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, str]:
    return await user_service.edit_details(
        db,
        identity,
        user_id,
        new_description=body.new_description,
        new_email=body.new_email,
    )
