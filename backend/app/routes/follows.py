"""
RedSocial Backend — Follow Graph Route Handlers
=================================================

What:  Follow / unfollow and the followers / following listings.
Who:   Every endpoint requires an access token; follow and unfollow
       additionally require the caller to be {follower_id}.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_identity, get_optional_identity
from app.schemas.auth import Identity
from app.schemas.common import ErrorResponse
from app.schemas.follow import FollowResponse
from app.schemas.user import UserResponse
from app.services.follow_service import follow_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/user",
    tags=["Follows"],
    dependencies=[Depends(get_optional_identity)],
)


@router.post(
    "/{follower_id}/follow/{followed_id}",
    response_model=FollowResponse,
    responses={
        403: {"description": "Acting for another user", "model": ErrorResponse},
        404: {"description": "Unknown user", "model": ErrorResponse},
        409: {"description": "Already following", "model": ErrorResponse},
    },
    summary="Follow a user",
)
async def follow(
    follower_id: int,
    followed_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> FollowResponse:
    await follow_service.follow(db, identity, follower_id, followed_id)
    return FollowResponse(follower_id=follower_id, followed_id=followed_id)


@router.delete(
    "/{follower_id}/unfollow/{followed_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={403: {"description": "Acting for another user", "model": ErrorResponse}},
    summary="Unfollow a user",
    description="Idempotent: unfollowing someone you do not follow still returns 204.",
)
async def unfollow(
    follower_id: int,
    followed_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await follow_service.unfollow(db, identity, follower_id, followed_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{user_id}/followers",
    response_model=List[UserResponse],
    responses={404: {"description": "Unknown user", "model": ErrorResponse}},
    summary="Users following this user",
)
async def followers(
    user_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> List[UserResponse]:
    return await follow_service.followers_of(db, user_id)


@router.get(
    "/{user_id}/following",
    response_model=List[UserResponse],
    responses={404: {"description": "Unknown user", "model": ErrorResponse}},
    summary="Users this user follows",
)
async def following(
    user_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> List[UserResponse]:
    return await follow_service.following_of(db, user_id)
