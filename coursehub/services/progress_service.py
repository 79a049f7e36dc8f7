"""Progress aggregation and the two progress mutations.

Every aggregate is recomputed from the stores on each call; nothing
derived is cached.  Counts join completions through the session table,
so completions of deleted sessions drop out, and the population grid
additionally requires a current ACTIVE enrollment, so completions of
unenrolled learners drop out too.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from uuid import UUID

from coursehub.core.metrics import SESSION_COMPLETIONS
from coursehub.models.progress import CompletionGrid, CourseProgress
from coursehub.repos.stores import Stores
from coursehub.services.errors import NotFoundError

logger = logging.getLogger(__name__)


async def user_course_progress(
    stores: Stores, user_id: UUID, course_id: UUID
) -> CourseProgress:
    total = await stores.content.count_sessions(course_id)
    if total == 0:
        return CourseProgress(completed=0, total=0)
    completed = await stores.completions.count_for_course(user_id, course_id)
    return CourseProgress(completed=completed, total=total)


async def course_completion_grid(stores: Stores, course_id: UUID) -> CompletionGrid:
    """Completion over the (session x ACTIVE enrollee) grid of one course."""
    sessions = await stores.content.count_sessions(course_id)
    enrollees = await stores.enrollments.count_active(course_id)
    total_cells = sessions * enrollees
    if total_cells == 0:
        return CompletionGrid(completed_cells=0, total_cells=0)
    completed = await stores.completions.count_for_active_enrollees(course_id)
    return CompletionGrid(completed_cells=completed, total_cells=total_cells)


async def progress_by_course(
    stores: Stores, user_id: UUID, course_ids: Iterable[UUID]
) -> dict[UUID, int]:
    """Completed-session count per course for one user, in one query.

    Every requested course is present in the result; no completions -> 0.
    """
    return await stores.completions.count_by_course(user_id, list(course_ids))


async def mark_session_complete(
    stores: Stores, user_id: UUID, session_id: UUID
) -> bool:
    """Record that ``user_id`` finished ``session_id``.

    Idempotent: returns True when a completion was created, False when one
    already existed.  Raises NotFoundError for an unknown session.
    """
    session = await stores.content.get_session(session_id)
    if session is None:
        raise NotFoundError("session", session_id)

    created = await stores.completions.insert_if_absent(user_id, session_id)
    SESSION_COMPLETIONS.labels(result="created" if created else "duplicate").inc()
    if created:
        logger.info(
            "Session completed user=%s course=%s session=%d",
            user_id,
            session.course_id,
            session.index,
        )
    return created


async def reset_user_progress(stores: Stores, user_id: UUID) -> int:
    """Delete every completion of ``user_id``; returns how many were removed."""
    removed = await stores.completions.delete_all(user_id)
    logger.info("Progress reset user=%s removed=%d", user_id, removed)
    return removed
