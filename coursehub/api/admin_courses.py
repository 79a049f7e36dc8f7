"""Course administration.

Reads (list with completion grids, detail) are open to LEADER and ADMIN;
content writes are ADMIN only.
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, Field

from coursehub.api.dependencies import AdminUser, StaffUser, StoresDep
from coursehub.models.course import Course, CourseSession
from coursehub.models.progress import CompletionGrid
from coursehub.services import content_service
from coursehub.services.content_service import ContentValidationError
from coursehub.services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/courses", tags=["admin"])


class GridOut(BaseModel):
    completed_cells: int
    total_cells: int
    percent: int


class CourseOut(BaseModel):
    id: UUID
    slug: str
    title: str
    summary: str | None
    thumbnail: str | None
    is_published: bool
    created_at: int


class AdminCourseOut(CourseOut):
    session_count: int
    enrollment_count: int
    grid: GridOut


class SessionOut(BaseModel):
    id: UUID
    index: int
    title: str
    summary: str | None
    video_url: str | None
    captions_vtt_url: str | None
    transcript: str | None
    guide_online_url: str | None
    guide_pdf_url: str | None
    thumbnail: str | None


class AdminCourseDetailOut(CourseOut):
    sessions: list[SessionOut]
    enrollment_count: int
    grid: GridOut


class CreateCourseIn(BaseModel):
    slug: str = Field(max_length=100)
    title: str = Field(max_length=200)
    summary: str | None = None
    thumbnail: str | None = None
    is_published: bool = False


class CreateSessionIn(BaseModel):
    index: int
    title: str = Field(max_length=200)
    summary: str | None = None
    video_url: str | None = None
    captions_vtt_url: str | None = None
    transcript: str | None = None
    guide_online_url: str | None = None
    guide_pdf_url: str | None = None
    thumbnail: str | None = None


class PublishIn(BaseModel):
    is_published: bool


def _course_fields(course: Course) -> dict:
    return {
        "id": course.id,
        "slug": course.slug,
        "title": course.title,
        "summary": course.summary,
        "thumbnail": course.thumbnail,
        "is_published": course.is_published,
        "created_at": course.created_at,
    }


def _grid_out(grid: CompletionGrid) -> GridOut:
    return GridOut(
        completed_cells=grid.completed_cells,
        total_cells=grid.total_cells,
        percent=grid.percent,
    )


def _session_out(session: CourseSession) -> SessionOut:
    return SessionOut(
        id=session.id,
        index=session.index,
        title=session.title,
        summary=session.summary,
        video_url=session.video_url,
        captions_vtt_url=session.captions_vtt_url,
        transcript=session.transcript,
        guide_online_url=session.guide_online_url,
        guide_pdf_url=session.guide_pdf_url,
        thumbnail=session.thumbnail,
    )


def _not_found(e: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{e.kind} not found")


@router.get("", response_model=list[AdminCourseOut])
async def list_courses(principal: StaffUser, stores: StoresDep) -> list[AdminCourseOut]:
    items = await content_service.admin_course_list(stores)
    return [
        AdminCourseOut(
            **_course_fields(i.course),
            session_count=i.session_count,
            enrollment_count=i.enrollment_count,
            grid=_grid_out(i.grid),
        )
        for i in items
    ]


@router.get("/{course_id}", response_model=AdminCourseDetailOut)
async def course_detail(
    course_id: UUID, principal: StaffUser, stores: StoresDep
) -> AdminCourseDetailOut:
    try:
        detail = await content_service.admin_course_detail(stores, course_id)
    except NotFoundError as e:
        raise _not_found(e) from None
    return AdminCourseDetailOut(
        **_course_fields(detail.course),
        sessions=[_session_out(s) for s in detail.sessions],
        enrollment_count=detail.enrollment_count,
        grid=_grid_out(detail.grid),
    )


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
async def create_course(
    body: CreateCourseIn, principal: AdminUser, stores: StoresDep
) -> CourseOut:
    try:
        course = await content_service.create_course(
            stores,
            slug=body.slug,
            title=body.title,
            summary=body.summary,
            thumbnail=body.thumbnail,
            is_published=body.is_published,
        )
    except ContentValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None
    logger.info("Course created slug=%s by=%s", course.slug, principal.user_id)
    return CourseOut(**_course_fields(course))


@router.post(
    "/{course_id}/sessions",
    response_model=SessionOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_session(
    course_id: UUID, body: CreateSessionIn, principal: AdminUser, stores: StoresDep
) -> SessionOut:
    try:
        session = await content_service.add_session(
            stores,
            course_id=course_id,
            index=body.index,
            title=body.title,
            summary=body.summary,
            video_url=body.video_url,
            captions_vtt_url=body.captions_vtt_url,
            transcript=body.transcript,
            guide_online_url=body.guide_online_url,
            guide_pdf_url=body.guide_pdf_url,
            thumbnail=body.thumbnail,
        )
    except NotFoundError as e:
        raise _not_found(e) from None
    except ContentValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None
    return _session_out(session)


@router.delete(
    "/{course_id}/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_session(
    course_id: UUID, session_id: UUID, principal: AdminUser, stores: StoresDep
) -> Response:
    try:
        await content_service.delete_session(
            stores, course_id=course_id, session_id=session_id
        )
    except NotFoundError as e:
        raise _not_found(e) from None
    logger.info("Session deleted id=%s by=%s", session_id, principal.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{course_id}/published", response_model=CourseOut)
async def set_published(
    course_id: UUID, body: PublishIn, principal: AdminUser, stores: StoresDep
) -> CourseOut:
    try:
        course = await content_service.set_published(
            stores, course_id=course_id, is_published=body.is_published
        )
    except NotFoundError as e:
        raise _not_found(e) from None
    return CourseOut(**_course_fields(course))
