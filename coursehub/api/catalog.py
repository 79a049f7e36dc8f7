"""Public catalog and access-request submission."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from coursehub.api.dependencies import OptionalUser, StoresDep
from coursehub.services import access_request_service, course_service
from coursehub.services.access_request_service import AccessRequestValidationError
from coursehub.services.errors import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/catalog", tags=["catalog"])


class CatalogCourseOut(BaseModel):
    id: UUID
    slug: str
    title: str
    summary: str | None
    thumbnail: str | None
    session_count: int
    enrollment_count: int


class AccessRequestIn(BaseModel):
    course_id: UUID
    email: str | None = Field(default=None, max_length=320)
    name: str | None = Field(default=None, max_length=200)
    message: str | None = Field(default=None, max_length=2000)


class AccessRequestCreatedOut(BaseModel):
    id: UUID
    course_id: UUID
    email: str
    status: str


@router.get("", response_model=list[CatalogCourseOut])
async def list_catalog(stores: StoresDep) -> list[CatalogCourseOut]:
    entries = await course_service.catalog(stores)
    return [
        CatalogCourseOut(
            id=e.course.id,
            slug=e.course.slug,
            title=e.course.title,
            summary=e.course.summary,
            thumbnail=e.course.thumbnail,
            session_count=e.session_count,
            enrollment_count=e.enrollment_count,
        )
        for e in entries
    ]


@router.post(
    "/access-requests",
    response_model=AccessRequestCreatedOut,
    status_code=status.HTTP_201_CREATED,
)
async def submit_access_request(
    body: AccessRequestIn, principal: OptionalUser, stores: StoresDep
) -> AccessRequestCreatedOut:
    try:
        request = await access_request_service.submit(
            stores,
            course_id=body.course_id,
            email=body.email,
            name=body.name,
            message=body.message,
            requester=principal,
        )
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="course not found"
        ) from None
    except AccessRequestValidationError as e:
        raise HTTPException(
            status_code=422, detail=str(e)
        ) from None

    return AccessRequestCreatedOut(
        id=request.id,
        course_id=request.course_id,
        email=request.email,
        status=request.status.value,
    )
