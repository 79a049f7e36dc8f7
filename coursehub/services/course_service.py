"""Learner-facing course views.

Every content view goes through ``ensure_course_access`` after the course
has been resolved, so a missing course is a 404 and a denied one a 403,
never the other way around.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from coursehub.models.course import Course, CourseSession
from coursehub.models.principal import Principal
from coursehub.models.progress import CourseProgress
from coursehub.repos.stores import Stores
from coursehub.services.access_service import can_access_course
from coursehub.services.errors import ForbiddenError, NotFoundError
from coursehub.services.progress_service import (
    mark_session_complete,
    progress_by_course,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    course: Course
    session_count: int
    enrollment_count: int


@dataclass(frozen=True, slots=True)
class MyCourse:
    course: Course
    progress: CourseProgress


@dataclass(frozen=True, slots=True)
class SessionStatus:
    session: CourseSession
    completed: bool


@dataclass(frozen=True, slots=True)
class CourseOverview:
    course: Course
    sessions: list[SessionStatus]
    progress: CourseProgress


@dataclass(frozen=True, slots=True)
class SessionView:
    course: Course
    session: CourseSession
    completed: bool


async def get_course_by_slug(stores: Stores, slug: str) -> Course:
    course = await stores.content.get_course_by_slug(slug)
    if course is None:
        raise NotFoundError("course", slug)
    return course


async def ensure_course_access(
    stores: Stores, principal: Principal, course: Course
) -> None:
    if not await can_access_course(
        stores, principal.user_id, principal.role, course.id
    ):
        logger.warning(
            "Course access denied user=%s course=%s",
            principal.user_id,
            course.slug,
            extra={"user_id": str(principal.user_id), "course_id": str(course.id)},
        )
        raise ForbiddenError(f"no active enrollment in {course.slug}")


async def _get_session(
    stores: Stores, course: Course, index: int
) -> CourseSession:
    if index < 1:
        raise NotFoundError("session", (course.slug, index))
    session = await stores.content.get_session_by_index(course.id, index)
    if session is None:
        raise NotFoundError("session", (course.slug, index))
    return session


async def catalog(stores: Stores) -> list[CatalogEntry]:
    """Published courses, by title, with session and ACTIVE enrollment counts."""
    courses = await stores.content.list_courses(published_only=True)
    courses.sort(key=lambda c: c.title.lower())
    ids = [c.id for c in courses]
    sessions = await stores.content.count_sessions_by_course(ids)
    enrollments = await stores.enrollments.count_active_by_course(ids)
    return [
        CatalogEntry(
            course=c,
            session_count=sessions.get(c.id, 0),
            enrollment_count=enrollments.get(c.id, 0),
        )
        for c in courses
    ]


async def list_my_courses(stores: Stores, principal: Principal) -> list[MyCourse]:
    if principal.is_staff():
        courses = await stores.content.list_courses()
    else:
        enrolled = await stores.enrollments.list_active_course_ids(principal.user_id)
        if not enrolled:
            return []
        courses = await stores.content.list_courses(
            published_only=True, course_ids=enrolled
        )

    ids = [c.id for c in courses]
    totals = await stores.content.count_sessions_by_course(ids)
    completed = await progress_by_course(stores, principal.user_id, ids)
    return [
        MyCourse(
            course=c,
            progress=CourseProgress(
                completed=completed.get(c.id, 0), total=totals.get(c.id, 0)
            ),
        )
        for c in courses
    ]


async def course_overview(
    stores: Stores, principal: Principal, slug: str
) -> CourseOverview:
    course = await get_course_by_slug(stores, slug)
    await ensure_course_access(stores, principal, course)

    sessions = await stores.content.list_sessions(course.id)
    done = await stores.completions.completed_session_ids(
        principal.user_id, course.id
    )
    statuses = [SessionStatus(session=s, completed=s.id in done) for s in sessions]
    return CourseOverview(
        course=course,
        sessions=statuses,
        progress=CourseProgress(
            completed=sum(1 for s in statuses if s.completed), total=len(sessions)
        ),
    )


async def session_view(
    stores: Stores, principal: Principal, slug: str, index: int
) -> SessionView:
    course = await get_course_by_slug(stores, slug)
    await ensure_course_access(stores, principal, course)
    session = await _get_session(stores, course, index)
    completed = await stores.completions.exists(principal.user_id, session.id)
    return SessionView(course=course, session=session, completed=completed)


async def complete_session(
    stores: Stores, principal: Principal, slug: str, index: int
) -> bool:
    course = await get_course_by_slug(stores, slug)
    await ensure_course_access(stores, principal, course)
    session = await _get_session(stores, course, index)
    return await mark_session_complete(stores, principal.user_id, session.id)
