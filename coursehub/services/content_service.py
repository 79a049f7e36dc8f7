"""Staff course administration: overview grids and minimal content writes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from coursehub.models.course import Course, CourseSession, is_valid_slug
from coursehub.models.progress import CompletionGrid
from coursehub.repos.stores import Stores
from coursehub.services.errors import ConflictError, NotFoundError
from coursehub.services.progress_service import course_completion_grid

logger = logging.getLogger(__name__)


class ContentValidationError(ValueError):
    pass


class DuplicateContentError(ConflictError):
    pass


@dataclass(frozen=True, slots=True)
class AdminCourseSummary:
    course: Course
    session_count: int
    enrollment_count: int
    grid: CompletionGrid


@dataclass(frozen=True, slots=True)
class AdminCourseDetail:
    course: Course
    sessions: list[CourseSession]
    enrollment_count: int
    grid: CompletionGrid


async def _require_course(stores: Stores, course_id: UUID) -> Course:
    course = await stores.content.get_course(course_id)
    if course is None:
        raise NotFoundError("course", course_id)
    return course


async def admin_course_list(stores: Stores) -> list[AdminCourseSummary]:
    courses = await stores.content.list_courses()
    ids = [c.id for c in courses]
    sessions = await stores.content.count_sessions_by_course(ids)
    enrollments = await stores.enrollments.count_active_by_course(ids)

    items = []
    for course in courses:
        items.append(
            AdminCourseSummary(
                course=course,
                session_count=sessions.get(course.id, 0),
                enrollment_count=enrollments.get(course.id, 0),
                grid=await course_completion_grid(stores, course.id),
            )
        )
    return items


async def admin_course_detail(stores: Stores, course_id: UUID) -> AdminCourseDetail:
    course = await _require_course(stores, course_id)
    return AdminCourseDetail(
        course=course,
        sessions=await stores.content.list_sessions(course_id),
        enrollment_count=await stores.enrollments.count_active(course_id),
        grid=await course_completion_grid(stores, course_id),
    )


async def create_course(
    stores: Stores,
    *,
    slug: str,
    title: str,
    summary: str | None = None,
    thumbnail: str | None = None,
    is_published: bool = False,
) -> Course:
    slug = slug.strip().lower()
    title = title.strip()
    if not is_valid_slug(slug):
        raise ContentValidationError(
            "slug must be lowercase letters, digits and single hyphens"
        )
    if not title:
        raise ContentValidationError("title must be non-empty")

    course = Course.new(
        slug=slug,
        title=title,
        summary=summary,
        thumbnail=thumbnail,
        is_published=is_published,
    )
    try:
        await stores.content.add_course(course)
    except ValueError:
        logger.warning("Rejected duplicate course slug=%s", slug)
        raise DuplicateContentError(f"slug already exists: {slug}") from None
    logger.info("Created course id=%s slug=%s", course.id, slug)
    return course


async def add_session(
    stores: Stores,
    *,
    course_id: UUID,
    index: int,
    title: str,
    summary: str | None = None,
    video_url: str | None = None,
    captions_vtt_url: str | None = None,
    transcript: str | None = None,
    guide_online_url: str | None = None,
    guide_pdf_url: str | None = None,
    thumbnail: str | None = None,
) -> CourseSession:
    await _require_course(stores, course_id)
    if index < 1:
        raise ContentValidationError("index must be >= 1")
    title = title.strip()
    if not title:
        raise ContentValidationError("title must be non-empty")

    session = CourseSession.new(
        course_id=course_id,
        index=index,
        title=title,
        summary=summary,
        video_url=video_url,
        captions_vtt_url=captions_vtt_url,
        transcript=transcript,
        guide_online_url=guide_online_url,
        guide_pdf_url=guide_pdf_url,
        thumbnail=thumbnail,
    )
    try:
        await stores.content.add_session(session)
    except ValueError:
        logger.warning("Rejected duplicate session course=%s index=%d", course_id, index)
        raise DuplicateContentError(f"session {index} already exists") from None
    logger.info("Added session course=%s index=%d", course_id, index)
    return session


async def delete_session(stores: Stores, *, course_id: UUID, session_id: UUID) -> None:
    """Remove a session.  Its completions stop counting immediately."""
    session = await stores.content.get_session(session_id)
    if session is None or session.course_id != course_id:
        raise NotFoundError("session", session_id)
    await stores.content.delete_session(session_id)
    logger.info("Deleted session course=%s index=%d", course_id, session.index)


async def set_published(
    stores: Stores, *, course_id: UUID, is_published: bool
) -> Course:
    course = await stores.content.set_published(course_id, is_published)
    if course is None:
        raise NotFoundError("course", course_id)
    logger.info("Course %s published=%s", course.slug, is_published)
    return course
