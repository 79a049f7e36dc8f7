"""PostgreSQL implementation of ContentRepo."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.db.engine import store_errors
from coursehub.db.tables import CourseRow, CourseSessionRow
from coursehub.models.course import Course, CourseSession


class PgContentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_course(self, course_id: UUID) -> Course | None:
        stmt = select(CourseRow).where(CourseRow.id == course_id)
        with store_errors():
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_course(row) if row is not None else None

    async def get_course_by_slug(self, slug: str) -> Course | None:
        stmt = select(CourseRow).where(CourseRow.slug == slug)
        with store_errors():
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_course(row) if row is not None else None

    async def list_courses(
        self,
        *,
        published_only: bool = False,
        course_ids: Iterable[UUID] | None = None,
    ) -> list[Course]:
        stmt = select(CourseRow).order_by(CourseRow.created_at.desc(), CourseRow.id)
        if published_only:
            stmt = stmt.where(CourseRow.is_published.is_(True))
        if course_ids is not None:
            ids = list(course_ids)
            if not ids:
                return []
            stmt = stmt.where(CourseRow.id.in_(ids))
        with store_errors():
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def add_course(self, course: Course) -> None:
        self._session.add(
            CourseRow(
                id=course.id,
                slug=course.slug,
                title=course.title,
                summary=course.summary,
                thumbnail=course.thumbnail,
                is_published=course.is_published,
                created_at=course.created_at,
            )
        )
        try:
            with store_errors():
                await self._session.flush()
        except IntegrityError:
            raise ValueError("slug already exists") from None

    async def set_published(
        self, course_id: UUID, is_published: bool
    ) -> Course | None:
        stmt = (
            update(CourseRow)
            .where(CourseRow.id == course_id)
            .values(is_published=is_published)
        )
        with store_errors():
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_course(course_id)

    async def list_sessions(self, course_id: UUID) -> list[CourseSession]:
        stmt = (
            select(CourseSessionRow)
            .where(CourseSessionRow.course_id == course_id)
            .order_by(CourseSessionRow.index)
        )
        with store_errors():
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_session(r) for r in rows]

    async def count_sessions(self, course_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(CourseSessionRow)
            .where(CourseSessionRow.course_id == course_id)
        )
        with store_errors():
            return (await self._session.execute(stmt)).scalar_one()

    async def count_sessions_by_course(
        self, course_ids: Iterable[UUID]
    ) -> dict[UUID, int]:
        counts = dict.fromkeys(course_ids, 0)
        if not counts:
            return counts
        stmt = (
            select(CourseSessionRow.course_id, func.count())
            .where(CourseSessionRow.course_id.in_(list(counts)))
            .group_by(CourseSessionRow.course_id)
        )
        with store_errors():
            result = await self._session.execute(stmt)
        for course_id, n in result.all():
            counts[course_id] = n
        return counts

    async def get_session(self, session_id: UUID) -> CourseSession | None:
        stmt = select(CourseSessionRow).where(CourseSessionRow.id == session_id)
        with store_errors():
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_session(row) if row is not None else None

    async def get_session_by_index(
        self, course_id: UUID, index: int
    ) -> CourseSession | None:
        stmt = select(CourseSessionRow).where(
            CourseSessionRow.course_id == course_id,
            CourseSessionRow.index == index,
        )
        with store_errors():
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_session(row) if row is not None else None

    async def add_session(self, session: CourseSession) -> None:
        self._session.add(
            CourseSessionRow(
                id=session.id,
                course_id=session.course_id,
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
        )
        try:
            with store_errors():
                await self._session.flush()
        except IntegrityError:
            raise ValueError("session index already exists in course") from None

    async def delete_session(self, session_id: UUID) -> bool:
        stmt = delete(CourseSessionRow).where(CourseSessionRow.id == session_id)
        with store_errors():
            result = await self._session.execute(stmt)
        return result.rowcount > 0


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        slug=row.slug,
        title=row.title,
        summary=row.summary,
        thumbnail=row.thumbnail,
        is_published=row.is_published,
        created_at=row.created_at,
    )


def _row_to_session(row: CourseSessionRow) -> CourseSession:
    return CourseSession(
        id=row.id,
        course_id=row.course_id,
        index=row.index,
        title=row.title,
        summary=row.summary,
        video_url=row.video_url,
        captions_vtt_url=row.captions_vtt_url,
        transcript=row.transcript,
        guide_online_url=row.guide_online_url,
        guide_pdf_url=row.guide_pdf_url,
        thumbnail=row.thumbnail,
    )
