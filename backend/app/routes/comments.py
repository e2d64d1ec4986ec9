"""
RedSocial Backend — Comment Route Handlers
============================================
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_identity, get_optional_identity
from app.schemas.auth import Identity
from app.schemas.comment import CommentCreate, CommentResponse
from app.schemas.common import ErrorResponse
from app.services.comment_service import comment_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/publication",
    tags=["Comments"],
    dependencies=[Depends(get_optional_identity)],
)


@router.get(
    "/{publication_id}/comments",
    response_model=List[CommentResponse],
    summary="Comments on a publication, oldest first",
    description="An unknown publication id yields an empty list.",
)
async def list_comments(
    publication_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> List[CommentResponse]:
    return await comment_service.list_by_publication(db, publication_id)


@router.post(
    "/{publication_id}/comments/user/{user_id}",
    response_model=CommentResponse,
    responses={
        403: {"description": "Commenting as another user", "model": ErrorResponse},
        404: {"description": "Unknown user or publication", "model": ErrorResponse},
    },
    summary="Comment on a publication",
)
async def add_comment(
    publication_id: int,
    user_id: int,
    body: CommentCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.add(db, identity, user_id, publication_id, text=body.text)
