"""
Jam Session Backend — User Route Handlers
===========================================

What:  /users CRUD, the caller's availability (/me/availability) and the
       cleanup endpoint for accounts created by integration tests.
How:   Every route requires a bearer token (router-level dependency) and
       delegates to UserService.
"""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from jamsession.auth import TokenUser, get_current_user
from jamsession.database import get_db_session
from jamsession.schemas.common import MAX_ID, ErrorResponse
from jamsession.schemas.user import (
    AvailabilityUpdate,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from jamsession.services.user_service import user_service

logger = logging.getLogger(__name__)

UserIdPath = Annotated[int, Path(ge=1, le=MAX_ID)]

router = APIRouter(
    tags=["User"],
    dependencies=[Depends(get_current_user)],
    responses={
        400: {"description": "Bad request", "model": ErrorResponse},
        401: {"description": "Unauthorized, missing/wrong jwt token", "model": ErrorResponse},
    },
)


@router.get("/users", response_model=List[UserResponse], summary="Find all users")
async def list_users(db: AsyncSession = Depends(get_db_session)) -> List[UserResponse]:
    return await user_service.list_users(db)


@router.get("/users/{user_id}", response_model=UserResponse, summary="Find user by id")
async def get_user(
    user_id: UserIdPath,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_user(db, user_id)


@router.post(
    "/users",
    status_code=status.HTTP_201_CREATED,
    response_model=UserResponse,
    summary="Create a user",
)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.create_user(db, body)


@router.put(
    "/users/{user_id}",
    status_code=status.HTTP_201_CREATED,
    response_model=UserResponse,
    summary="Update a user",
    description="Replaces nickname and e-mail. The e-mail must not belong to another user.",
)
async def update_user(
    user_id: UserIdPath,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.update_user(db, user_id, body)


@router.put(
    "/me/availability",
    status_code=status.HTTP_201_CREATED,
    response_model=UserResponse,
    summary="Update the availability of the authenticated user",
)
async def update_current_user_availability(
    body: AvailabilityUpdate,
    caller: TokenUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.update_availability(db, caller.email, body)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete user by id",
)
async def delete_user(
    user_id: UserIdPath,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await user_service.delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/testusers",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete users generated by integration and load tests",
)
async def delete_test_users(db: AsyncSession = Depends(get_db_session)) -> Response:
    await user_service.delete_test_users(db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
