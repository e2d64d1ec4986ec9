"""
RedSocial Backend — Publication Route Handlers
================================================

What:  Publication CRUD, per-author listings and feeds.
How:   Mutations live under /api/user/{user_id}/publication so the acting
       author is explicit in the path; PublicationService checks it against
       the token's identity and against the publication's real author.

Public:    GET /api/user/{user_id}/publications
Protected: everything else
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_identity, get_optional_identity
from app.schemas.auth import Identity
from app.schemas.common import ErrorResponse
from app.schemas.publication import (
    PublicationCreate,
    PublicationResponse,
    PublicationUpdate,
)
from app.services.publication_service import publication_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Publications"],
    dependencies=[Depends(get_optional_identity)],
)

_OWNER_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not the author", "model": ErrorResponse},
    404: {"description": "Unknown user or publication", "model": ErrorResponse},
}


# ── Reads ─────────────────────────────────────────────────────────────────

@router.get(
    "/publication",
    response_model=List[PublicationResponse],
    summary="List every publication, newest first",
)
async def list_publications(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> List[PublicationResponse]:
    return await publication_service.list_all(db)


@router.get(
    "/publication/{publication_id}",
    response_model=PublicationResponse,
    responses={404: {"description": "Unknown publication", "model": ErrorResponse}},
    summary="Get a publication by id",
)
async def get_publication(
    publication_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> PublicationResponse:
    return await publication_service.get_by_id(db, publication_id)


@router.get(
    "/user/{user_id}/publications",
    response_model=List[PublicationResponse],
    responses={404: {"description": "Unknown user", "model": ErrorResponse}},
    summary="Publications by one author, newest first",
)
async def list_user_publications(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> List[PublicationResponse]:
    return await publication_service.list_by_author(db, user_id)


@router.get(
    "/user/{user_id}/feed",
    response_model=List[PublicationResponse],
    responses={404: {"description": "Unknown user", "model": ErrorResponse}},
    summary="Publications of everyone the user follows",
)
async def feed(
    user_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> List[PublicationResponse]:
    return await publication_service.feed_for(db, user_id)


# ── Mutations ─────────────────────────────────────────────────────────────

@router.post(
    "/user/{user_id}/publication",
    response_model=PublicationResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_OWNER_ERRORS,
    summary="Publish",
)
async def create_publication(
    user_id: int,
    body: PublicationCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> PublicationResponse:
    return await publication_service.create(
        db, identity, user_id, text=body.text, image_url=body.image_url
    )


@router.put(
    "/user/{user_id}/publication/{publication_id}",
    response_model=PublicationResponse,
    responses=_OWNER_ERRORS,
    summary="Edit the text of a publication",
)
async def edit_publication(
    user_id: int,
    publication_id: int,
    body: PublicationUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> PublicationResponse:
    return await publication_service.edit(db, identity, user_id, publication_id, text=body.text)


@router.delete(
    "/user/{user_id}/publication/{publication_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_OWNER_ERRORS,
    summary="Delete a publication and its comments",
)
async def delete_publication(
    user_id: int,
    publication_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await publication_service.delete(db, identity, user_id, publication_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
