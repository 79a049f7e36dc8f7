from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from coursehub.models.access_request import AccessRequest, AccessRequestStatus
from coursehub.repos.content_repo import InMemoryContentRepo


class AccessRequestRepo(Protocol):
    async def add(self, request: AccessRequest) -> None: ...
    async def get(self, request_id: UUID) -> AccessRequest | None: ...
    async def set_status(
        self, request_id: UUID, status: AccessRequestStatus
    ) -> AccessRequest | None: ...
    async def search(
        self,
        *,
        status: AccessRequestStatus | None,
        course_id: UUID | None,
        q: str,
        offset: int,
        limit: int,
    ) -> tuple[list[AccessRequest], int]: ...


class InMemoryAccessRequestRepo:
    def __init__(self, content: InMemoryContentRepo) -> None:
        self._content = content
        self._by_id: dict[UUID, AccessRequest] = {}

    async def add(self, request: AccessRequest) -> None:
        self._by_id[request.id] = request

    async def get(self, request_id: UUID) -> AccessRequest | None:
        return self._by_id.get(request_id)

    async def set_status(
        self, request_id: UUID, status: AccessRequestStatus
    ) -> AccessRequest | None:
        existing = self._by_id.get(request_id)
        if existing is None:
            return None
        updated = replace(existing, status=status)
        self._by_id[request_id] = updated
        return updated

    async def search(
        self,
        *,
        status: AccessRequestStatus | None,
        course_id: UUID | None,
        q: str,
        offset: int,
        limit: int,
    ) -> tuple[list[AccessRequest], int]:
        needle = q.strip().lower()
        titles = self._content.course_titles()

        def _matches(r: AccessRequest) -> bool:
            if status is not None and r.status != status:
                return False
            if course_id is not None and r.course_id != course_id:
                return False
            if not needle:
                return True
            return (
                needle in r.email.lower()
                or needle in (r.name or "").lower()
                or needle in titles.get(r.course_id, "").lower()
            )

        matches = [r for r in self._by_id.values() if _matches(r)]
        matches.sort(key=lambda r: r.created_at, reverse=True)
        return matches[offset : offset + limit], len(matches)
