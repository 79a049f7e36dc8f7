"""User administration (ADMIN only)."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Response, status
from pydantic import BaseModel, Field

from coursehub.api.dependencies import AdminUser, StoresDep
from coursehub.models.user import Role, User
from coursehub.services import progress_service, users_service
from coursehub.services.errors import ConflictError, NotFoundError
from coursehub.services.users_service import UserValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/users", tags=["admin"])


class UserOut(BaseModel):
    id: UUID
    email: str
    name: str
    role: Role
    created_at: int


class UserSummaryOut(UserOut):
    completions: int


class UserPageOut(BaseModel):
    items: list[UserSummaryOut]
    total: int
    page: int
    total_pages: int


class CreateUserIn(BaseModel):
    email: str = Field(max_length=320)
    password: str = Field(max_length=256)
    name: str = Field(default="", max_length=200)
    role: str = "USER"


class ChangeRoleIn(BaseModel):
    role: Role


class ResetProgressOut(BaseModel):
    removed: int


def _user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        created_at=user.created_at,
    )


@router.get("", response_model=UserPageOut)
async def list_users(
    principal: AdminUser,
    stores: StoresDep,
    q: str = "",
    page: int = Query(default=1, ge=1),
) -> UserPageOut:
    logger.info("Admin user list requested by user=%s", principal.user_id)
    result = await users_service.list_users(stores, q=q, page=page)
    return UserPageOut(
        items=[
            UserSummaryOut(**_user_out(s.user).model_dump(), completions=s.completions)
            for s in result.items
        ],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: CreateUserIn, principal: AdminUser, stores: StoresDep
) -> UserOut:
    try:
        user = await users_service.create_user(
            stores,
            email=body.email,
            password=body.password,
            name=body.name,
            role=body.role,
        )
    except UserValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None
    except ConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="email already registered"
        ) from None
    logger.info("User created id=%s by=%s", user.id, principal.user_id)
    return _user_out(user)


@router.patch("/{user_id}/role", response_model=UserOut)
async def change_role(
    user_id: UUID, body: ChangeRoleIn, principal: AdminUser, stores: StoresDep
) -> UserOut:
    try:
        user = await users_service.change_role(
            stores, actor_id=principal.user_id, user_id=user_id, next_role=body.role
        )
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="user not found"
        ) from None
    except ConflictError as e:
        logger.warning(
            "Role change rejected: actor=%s target=%s %s", principal.user_id, user_id, e
        )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None
    return _user_out(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID, principal: AdminUser, stores: StoresDep
) -> Response:
    try:
        await users_service.delete_user(
            stores, actor_id=principal.user_id, user_id=user_id
        )
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="user not found"
        ) from None
    except ConflictError as e:
        logger.warning(
            "User deletion rejected: actor=%s target=%s %s", principal.user_id, user_id, e
        )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{user_id}/progress/reset", response_model=ResetProgressOut)
async def reset_progress(
    user_id: UUID, principal: AdminUser, stores: StoresDep
) -> ResetProgressOut:
    if await stores.users.get_by_id(user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user not found")
    removed = await progress_service.reset_user_progress(stores, user_id)
    logger.info("Progress reset user=%s by=%s", user_id, principal.user_id)
    return ResetProgressOut(removed=removed)
