from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from coursehub.models.user import Role, User


class UserRepo(Protocol):
    async def get_by_id(self, user_id: UUID) -> User | None: ...
    async def get_by_email(self, email: str) -> User | None: ...
    async def list_by_emails(self, emails: list[str]) -> list[User]: ...
    async def search(
        self, q: str, *, offset: int, limit: int
    ) -> tuple[list[User], int]: ...
    async def add(self, user: User) -> None: ...
    async def update_role(self, user_id: UUID, role: Role) -> User | None: ...
    async def delete(self, user_id: UUID) -> bool: ...
    async def count_by_role(self, role: Role) -> int: ...


class InMemoryUserRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, User] = {}

    async def get_by_id(self, user_id: UUID) -> User | None:
        return self._by_id.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        return next((u for u in self._by_id.values() if u.email == email), None)

    async def list_by_emails(self, emails: list[str]) -> list[User]:
        wanted = set(emails)
        return [u for u in self._by_id.values() if u.email in wanted]

    async def search(
        self, q: str, *, offset: int, limit: int
    ) -> tuple[list[User], int]:
        needle = q.strip().lower()
        matches = [
            u
            for u in self._by_id.values()
            if not needle
            or needle in u.email.lower()
            or needle in u.name.lower()
            or needle in u.role.value.lower()
        ]
        matches.sort(key=lambda u: u.created_at, reverse=True)
        return matches[offset : offset + limit], len(matches)

    async def add(self, user: User) -> None:
        if await self.get_by_email(user.email) is not None:
            raise ValueError("email already exists")
        self._by_id[user.id] = user

    async def update_role(self, user_id: UUID, role: Role) -> User | None:
        u = self._by_id.get(user_id)
        if u is None:
            return None
        updated = replace(u, role=role)
        self._by_id[user_id] = updated
        return updated

    async def delete(self, user_id: UUID) -> bool:
        return self._by_id.pop(user_id, None) is not None

    async def count_by_role(self, role: Role) -> int:
        return sum(1 for u in self._by_id.values() if u.role == role)
