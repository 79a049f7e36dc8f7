"""PostgreSQL implementation of EnrollmentRepo."""

from __future__ import annotations

import time
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.db.engine import store_errors
from coursehub.db.tables import EnrollmentRow
from coursehub.models.enrollment import Enrollment, EnrollmentStatus

_ACTIVE = EnrollmentStatus.ACTIVE.value


class PgEnrollmentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find(self, user_id: UUID, course_id: UUID) -> Enrollment | None:
        stmt = select(EnrollmentRow).where(
            EnrollmentRow.user_id == user_id,
            EnrollmentRow.course_id == course_id,
        )
        with store_errors():
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_enrollment(row) if row is not None else None

    async def upsert(
        self, user_id: UUID, course_id: UUID, status: EnrollmentStatus
    ) -> Enrollment:
        stmt = (
            insert(EnrollmentRow)
            .values(
                user_id=user_id,
                course_id=course_id,
                status=status.value,
                enrolled_at=int(time.time()),
            )
            .on_conflict_do_update(
                index_elements=[EnrollmentRow.user_id, EnrollmentRow.course_id],
                set_={"status": status.value},
            )
            .returning(EnrollmentRow)
            .execution_options(populate_existing=True)
        )
        with store_errors():
            row = (await self._session.execute(stmt)).scalar_one()
        return _row_to_enrollment(row)

    async def delete(self, user_id: UUID, course_id: UUID) -> bool:
        stmt = delete(EnrollmentRow).where(
            EnrollmentRow.user_id == user_id,
            EnrollmentRow.course_id == course_id,
        )
        with store_errors():
            result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def delete_all_for_user(self, user_id: UUID) -> int:
        stmt = delete(EnrollmentRow).where(EnrollmentRow.user_id == user_id)
        with store_errors():
            result = await self._session.execute(stmt)
        return result.rowcount

    async def count_active(self, course_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(EnrollmentRow)
            .where(
                EnrollmentRow.course_id == course_id,
                EnrollmentRow.status == _ACTIVE,
            )
        )
        with store_errors():
            return (await self._session.execute(stmt)).scalar_one()

    async def count_active_by_course(
        self, course_ids: Iterable[UUID]
    ) -> dict[UUID, int]:
        counts = dict.fromkeys(course_ids, 0)
        if not counts:
            return counts
        stmt = (
            select(EnrollmentRow.course_id, func.count())
            .where(
                EnrollmentRow.course_id.in_(list(counts)),
                EnrollmentRow.status == _ACTIVE,
            )
            .group_by(EnrollmentRow.course_id)
        )
        with store_errors():
            result = await self._session.execute(stmt)
        for course_id, n in result.all():
            counts[course_id] = n
        return counts

    async def list_active_course_ids(self, user_id: UUID) -> list[UUID]:
        stmt = select(EnrollmentRow.course_id).where(
            EnrollmentRow.user_id == user_id,
            EnrollmentRow.status == _ACTIVE,
        )
        with store_errors():
            return list((await self._session.execute(stmt)).scalars().all())

    async def list_by_course(self, course_id: UUID) -> list[Enrollment]:
        stmt = (
            select(EnrollmentRow)
            .where(EnrollmentRow.course_id == course_id)
            .order_by(EnrollmentRow.enrolled_at)
        )
        with store_errors():
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_enrollment(r) for r in rows]


def _row_to_enrollment(row: EnrollmentRow) -> Enrollment:
    return Enrollment(
        user_id=row.user_id,
        course_id=row.course_id,
        status=EnrollmentStatus(row.status),
        enrolled_at=row.enrolled_at,
    )
