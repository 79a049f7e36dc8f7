"""PostgreSQL implementation of UserRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.db.engine import store_errors
from coursehub.db.tables import UserRow
from coursehub.models.user import Role, User


class PgUserRepo:
    """Satisfies the UserRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        stmt = select(UserRow).where(UserRow.id == user_id)
        with store_errors():
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_user(row) if row is not None else None

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(UserRow).where(UserRow.email == email)
        with store_errors():
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_user(row) if row is not None else None

    async def list_by_emails(self, emails: list[str]) -> list[User]:
        if not emails:
            return []
        stmt = select(UserRow).where(UserRow.email.in_(emails))
        with store_errors():
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_user(r) for r in rows]

    async def search(
        self, q: str, *, offset: int, limit: int
    ) -> tuple[list[User], int]:
        where = []
        needle = q.strip()
        if needle:
            where.append(
                or_(
                    UserRow.email.icontains(needle, autoescape=True),
                    UserRow.name.icontains(needle, autoescape=True),
                    UserRow.role.icontains(needle, autoescape=True),
                )
            )
        count_stmt = select(func.count()).select_from(UserRow).where(*where)
        page_stmt = (
            select(UserRow)
            .where(*where)
            .order_by(UserRow.created_at.desc(), UserRow.id)
            .offset(offset)
            .limit(limit)
        )
        with store_errors():
            total = (await self._session.execute(count_stmt)).scalar_one()
            rows = (await self._session.execute(page_stmt)).scalars().all()
        return [_row_to_user(r) for r in rows], total

    async def add(self, user: User) -> None:
        row = UserRow(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role.value,
            password_hash=user.password_hash,
            created_at=user.created_at,
        )
        self._session.add(row)
        try:
            with store_errors():
                await self._session.flush()
        except IntegrityError:
            raise ValueError("email already exists") from None

    async def update_role(self, user_id: UUID, role: Role) -> User | None:
        stmt = update(UserRow).where(UserRow.id == user_id).values(role=role.value)
        with store_errors():
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_by_id(user_id)

    async def delete(self, user_id: UUID) -> bool:
        stmt = delete(UserRow).where(UserRow.id == user_id)
        with store_errors():
            result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def count_by_role(self, role: Role) -> int:
        stmt = select(func.count()).select_from(UserRow).where(UserRow.role == role.value)
        with store_errors():
            return (await self._session.execute(stmt)).scalar_one()


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        name=row.name or "",
        role=Role(row.role),
        password_hash=row.password_hash,
        created_at=row.created_at,
    )
