"""Learner course endpoints.

  GET  /v1/courses                              courses visible to the caller
  GET  /v1/courses/{slug}                       overview with per-session status
  GET  /v1/courses/{slug}/sessions/{index}      one session's content
  POST /v1/courses/{slug}/sessions/{index}/complete

Every content route resolves the course first (404) and then asks the
access engine (403).  A store outage surfaces as 503 from the app-level
handler; it is never rendered as a denial page or partial content.
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from coursehub.api.dependencies import CurrentUser, StoresDep
from coursehub.models.principal import Principal
from coursehub.services import course_service
from coursehub.services.errors import ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/courses", tags=["courses"])


class ProgressOut(BaseModel):
    completed: int
    total: int
    percent: int


class MyCourseOut(BaseModel):
    id: UUID
    slug: str
    title: str
    summary: str | None
    thumbnail: str | None
    is_published: bool
    progress: ProgressOut


class SessionSummaryOut(BaseModel):
    index: int
    title: str
    summary: str | None
    thumbnail: str | None
    completed: bool


class CourseOverviewOut(BaseModel):
    id: UUID
    slug: str
    title: str
    summary: str | None
    thumbnail: str | None
    sessions: list[SessionSummaryOut]
    progress: ProgressOut


class SessionOut(BaseModel):
    course_slug: str
    index: int
    title: str
    summary: str | None
    video_url: str | None
    captions_vtt_url: str | None
    transcript: str | None
    guide_online_url: str | None
    guide_pdf_url: str | None
    thumbnail: str | None
    completed: bool


class CompleteOut(BaseModel):
    created: bool


def _translate(e: Exception, principal: Principal) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    logger.warning("Forbidden: user=%s %s", principal.user_id, e)
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN, detail="Not enrolled in this course"
    )


@router.get("", response_model=list[MyCourseOut])
async def list_my_courses(
    principal: CurrentUser, stores: StoresDep
) -> list[MyCourseOut]:
    entries = await course_service.list_my_courses(stores, principal)
    return [
        MyCourseOut(
            id=e.course.id,
            slug=e.course.slug,
            title=e.course.title,
            summary=e.course.summary,
            thumbnail=e.course.thumbnail,
            is_published=e.course.is_published,
            progress=ProgressOut(
                completed=e.progress.completed,
                total=e.progress.total,
                percent=e.progress.percent,
            ),
        )
        for e in entries
    ]


@router.get("/{slug}", response_model=CourseOverviewOut)
async def course_overview(
    slug: str, principal: CurrentUser, stores: StoresDep
) -> CourseOverviewOut:
    try:
        overview = await course_service.course_overview(stores, principal, slug)
    except (NotFoundError, ForbiddenError) as e:
        raise _translate(e, principal) from None

    return CourseOverviewOut(
        id=overview.course.id,
        slug=overview.course.slug,
        title=overview.course.title,
        summary=overview.course.summary,
        thumbnail=overview.course.thumbnail,
        sessions=[
            SessionSummaryOut(
                index=s.session.index,
                title=s.session.title,
                summary=s.session.summary,
                thumbnail=s.session.thumbnail,
                completed=s.completed,
            )
            for s in overview.sessions
        ],
        progress=ProgressOut(
            completed=overview.progress.completed,
            total=overview.progress.total,
            percent=overview.progress.percent,
        ),
    )


@router.get("/{slug}/sessions/{index}", response_model=SessionOut)
async def session_view(
    slug: str, index: int, principal: CurrentUser, stores: StoresDep
) -> SessionOut:
    try:
        view = await course_service.session_view(stores, principal, slug, index)
    except (NotFoundError, ForbiddenError) as e:
        raise _translate(e, principal) from None

    return SessionOut(
        course_slug=view.course.slug,
        index=view.session.index,
        title=view.session.title,
        summary=view.session.summary,
        video_url=view.session.video_url,
        captions_vtt_url=view.session.captions_vtt_url,
        transcript=view.session.transcript,
        guide_online_url=view.session.guide_online_url,
        guide_pdf_url=view.session.guide_pdf_url,
        thumbnail=view.session.thumbnail,
        completed=view.completed,
    )


@router.post("/{slug}/sessions/{index}/complete", response_model=CompleteOut)
async def complete_session(
    slug: str, index: int, principal: CurrentUser, stores: StoresDep
) -> CompleteOut:
    try:
        created = await course_service.complete_session(
            stores, principal, slug, index
        )
    except (NotFoundError, ForbiddenError) as e:
        raise _translate(e, principal) from None
    return CompleteOut(created=created)
