"""PostgreSQL implementation of AccessRequestRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.db.engine import store_errors
from coursehub.db.tables import AccessRequestRow, CourseRow
from coursehub.models.access_request import AccessRequest, AccessRequestStatus


class PgAccessRequestRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, request: AccessRequest) -> None:
        self._session.add(
            AccessRequestRow(
                id=request.id,
                course_id=request.course_id,
                name=request.name,
                email=request.email,
                message=request.message,
                status=request.status.value,
                created_at=request.created_at,
            )
        )
        with store_errors():
            await self._session.flush()

    async def get(self, request_id: UUID) -> AccessRequest | None:
        stmt = select(AccessRequestRow).where(AccessRequestRow.id == request_id)
        with store_errors():
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_request(row) if row is not None else None

    async def set_status(
        self, request_id: UUID, status: AccessRequestStatus
    ) -> AccessRequest | None:
        stmt = (
            update(AccessRequestRow)
            .where(AccessRequestRow.id == request_id)
            .values(status=status.value)
        )
        with store_errors():
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get(request_id)

    async def search(
        self,
        *,
        status: AccessRequestStatus | None,
        course_id: UUID | None,
        q: str,
        offset: int,
        limit: int,
    ) -> tuple[list[AccessRequest], int]:
        where = []
        if status is not None:
            where.append(AccessRequestRow.status == status.value)
        if course_id is not None:
            where.append(AccessRequestRow.course_id == course_id)
        needle = q.strip()
        if needle:
            where.append(
                or_(
                    AccessRequestRow.email.icontains(needle, autoescape=True),
                    AccessRequestRow.name.icontains(needle, autoescape=True),
                    CourseRow.title.icontains(needle, autoescape=True),
                )
            )

        base = select(AccessRequestRow).join(
            CourseRow, CourseRow.id == AccessRequestRow.course_id
        )
        count_stmt = select(func.count()).select_from(
            base.where(*where).subquery()
        )
        page_stmt = (
            base.where(*where)
            .order_by(AccessRequestRow.created_at.desc(), AccessRequestRow.id)
            .offset(offset)
            .limit(limit)
        )
        with store_errors():
            total = (await self._session.execute(count_stmt)).scalar_one()
            rows = (await self._session.execute(page_stmt)).scalars().all()
        return [_row_to_request(r) for r in rows], total


def _row_to_request(row: AccessRequestRow) -> AccessRequest:
    return AccessRequest(
        id=row.id,
        course_id=row.course_id,
        name=row.name,
        email=row.email,
        message=row.message,
        status=AccessRequestStatus(row.status),
        created_at=row.created_at,
    )
