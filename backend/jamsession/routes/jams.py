"""
Jam Session Backend — Jam Route Handlers
==========================================

What:  /jams CRUD, joining a jam, proximity search, and the cleanup endpoint
       for jams created by integration tests.
How:   Every route requires a bearer token (router-level dependency) and
       delegates to JamService.

Proximity search:
    GET /jams?point[lng]=6.3&point[lat]=4&point[maxDistance]=1000
    Only jams within maxDistance meters (default 5000) are returned, nearest
    first. Without a numeric lng/lat pair every jam is returned.
"""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from jamsession.auth import TokenUser, get_current_user
from jamsession.database import get_db_session
from jamsession.schemas.common import MAX_ID, ErrorResponse
from jamsession.schemas.jam import JamCreate, JamResponse, JamUpdate
from jamsession.services.jam_service import build_near_query, jam_service

logger = logging.getLogger(__name__)

JamIdPath = Annotated[int, Path(ge=1, le=MAX_ID)]

router = APIRouter(
    tags=["Jam"],
    dependencies=[Depends(get_current_user)],
    responses={
        400: {"description": "Bad request", "model": ErrorResponse},
        401: {"description": "Unauthorized, missing/wrong jwt token", "model": ErrorResponse},
    },
)


@router.get("/jams", response_model=List[JamResponse], summary="Find all jams")
async def list_jams(
    lng: str | None = Query(
        default=None, alias="point[lng]", description="Longitude. Example: 6.3"
    ),
    lat: str | None = Query(
        default=None, alias="point[lat]", description="Latitude. Example: 4"
    ),
    max_distance: str | None = Query(
        default=None,
        alias="point[maxDistance]",
        description="In meters. Example: 1000 (default 5000)",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[JamResponse]:
    # Raw strings: a non-numeric value disables the filter instead of failing
    near = build_near_query(lng, lat, max_distance)
    return await jam_service.list_jams(db, near)


@router.get("/jams/{jam_id}", response_model=JamResponse, summary="Find jam by id")
async def get_jam(
    jam_id: JamIdPath,
    db: AsyncSession = Depends(get_db_session),
) -> JamResponse:
    return await jam_service.get_jam(db, jam_id)


@router.post(
    "/jams",
    status_code=status.HTTP_201_CREATED,
    response_model=JamResponse,
    summary="Create a jam",
)
async def create_jam(
    body: JamCreate,
    db: AsyncSession = Depends(get_db_session),
) -> JamResponse:
    return await jam_service.create_jam(db, body)


@router.put(
    "/jams/{jam_id}",
    status_code=status.HTTP_201_CREATED,
    response_model=JamResponse,
    summary="Update a jam",
)
async def update_jam(
    jam_id: JamIdPath,
    body: JamUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> JamResponse:
    return await jam_service.update_jam(db, jam_id, body)


@router.put(
    "/jams/{jam_id}/join",
    status_code=status.HTTP_201_CREATED,
    response_model=JamResponse,
    summary="Join a jam as the authenticated user",
)
async def join_jam(
    jam_id: JamIdPath,
    caller: TokenUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> JamResponse:
    return await jam_service.join_jam(db, jam_id, caller)


@router.delete(
    "/jams/{jam_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={403: {"description": "Only the author may delete a jam", "model": ErrorResponse}},
    summary="Delete jam by id",
)
async def delete_jam(
    jam_id: JamIdPath,
    caller: TokenUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await jam_service.delete_jam(db, jam_id, caller)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/testjams",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete jams generated by integration and load tests",
)
async def delete_test_jams(db: AsyncSession = Depends(get_db_session)) -> Response:
    await jam_service.delete_test_jams(db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
