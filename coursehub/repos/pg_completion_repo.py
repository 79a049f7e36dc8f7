"""PostgreSQL implementation of CompletionRepo.

Counts join completions to course_sessions (and to enrollments for the
population grid) inside a single statement, so each aggregate is one round
trip and reflects one consistent snapshot.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.db.engine import store_errors
from coursehub.db.tables import CompletionRow, CourseSessionRow, EnrollmentRow
from coursehub.models.enrollment import EnrollmentStatus


class PgCompletionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def exists(self, user_id: UUID, session_id: UUID) -> bool:
        stmt = select(CompletionRow.user_id).where(
            CompletionRow.user_id == user_id,
            CompletionRow.session_id == session_id,
        )
        with store_errors():
            return (await self._session.execute(stmt)).first() is not None

    async def insert_if_absent(self, user_id: UUID, session_id: UUID) -> bool:
        stmt = (
            insert(CompletionRow)
            .values(
                user_id=user_id,
                session_id=session_id,
                completed_at=int(time.time()),
            )
            .on_conflict_do_nothing(
                index_elements=[CompletionRow.user_id, CompletionRow.session_id]
            )
        )
        with store_errors():
            result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def completed_session_ids(
        self, user_id: UUID, course_id: UUID
    ) -> set[UUID]:
        stmt = (
            select(CompletionRow.session_id)
            .join(CourseSessionRow, CourseSessionRow.id == CompletionRow.session_id)
            .where(
                CompletionRow.user_id == user_id,
                CourseSessionRow.course_id == course_id,
            )
        )
        with store_errors():
            return set((await self._session.execute(stmt)).scalars().all())

    async def count_for_course(self, user_id: UUID, course_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(CompletionRow)
            .join(CourseSessionRow, CourseSessionRow.id == CompletionRow.session_id)
            .where(
                CompletionRow.user_id == user_id,
                CourseSessionRow.course_id == course_id,
            )
        )
        with store_errors():
            return (await self._session.execute(stmt)).scalar_one()

    async def count_by_course(
        self, user_id: UUID, course_ids: Iterable[UUID]
    ) -> dict[UUID, int]:
        counts = dict.fromkeys(course_ids, 0)
        if not counts:
            return counts
        stmt = (
            select(CourseSessionRow.course_id, func.count())
            .join(CompletionRow, CompletionRow.session_id == CourseSessionRow.id)
            .where(
                CompletionRow.user_id == user_id,
                CourseSessionRow.course_id.in_(list(counts)),
            )
            .group_by(CourseSessionRow.course_id)
        )
        with store_errors():
            result = await self._session.execute(stmt)
        for course_id, n in result.all():
            counts[course_id] = n
        return counts

    async def count_for_active_enrollees(self, course_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(CompletionRow)
            .join(CourseSessionRow, CourseSessionRow.id == CompletionRow.session_id)
            .join(
                EnrollmentRow,
                (EnrollmentRow.user_id == CompletionRow.user_id)
                & (EnrollmentRow.course_id == CourseSessionRow.course_id),
            )
            .where(
                CourseSessionRow.course_id == course_id,
                EnrollmentRow.status == EnrollmentStatus.ACTIVE.value,
            )
        )
        with store_errors():
            return (await self._session.execute(stmt)).scalar_one()

    async def count_by_user(self, user_ids: Iterable[UUID]) -> dict[UUID, int]:
        counts = dict.fromkeys(user_ids, 0)
        if not counts:
            return counts
        stmt = (
            select(CompletionRow.user_id, func.count())
            .join(CourseSessionRow, CourseSessionRow.id == CompletionRow.session_id)
            .where(CompletionRow.user_id.in_(list(counts)))
            .group_by(CompletionRow.user_id)
        )
        with store_errors():
            result = await self._session.execute(stmt)
        for user_id, n in result.all():
            counts[user_id] = n
        return counts

    async def delete_all(self, user_id: UUID) -> int:
        stmt = delete(CompletionRow).where(CompletionRow.user_id == user_id)
        with store_errors():
            result = await self._session.execute(stmt)
        return result.rowcount
