"""Enrollment Store: at most one row per (user, course)."""

from __future__ import annotations

import time
from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from coursehub.models.enrollment import Enrollment, EnrollmentStatus


class EnrollmentRepo(Protocol):
    async def find(self, user_id: UUID, course_id: UUID) -> Enrollment | None: ...
    async def upsert(
        self, user_id: UUID, course_id: UUID, status: EnrollmentStatus
    ) -> Enrollment: ...
    async def delete(self, user_id: UUID, course_id: UUID) -> bool: ...
    async def delete_all_for_user(self, user_id: UUID) -> int: ...
    async def count_active(self, course_id: UUID) -> int: ...
    async def count_active_by_course(
        self, course_ids: Iterable[UUID]
    ) -> dict[UUID, int]: ...
    async def list_active_course_ids(self, user_id: UUID) -> list[UUID]: ...
    async def list_by_course(self, course_id: UUID) -> list[Enrollment]: ...


class InMemoryEnrollmentRepo:
    def __init__(self) -> None:
        self._store: dict[tuple[UUID, UUID], Enrollment] = {}

    async def find(self, user_id: UUID, course_id: UUID) -> Enrollment | None:
        return self._store.get((user_id, course_id))

    async def upsert(
        self, user_id: UUID, course_id: UUID, status: EnrollmentStatus
    ) -> Enrollment:
        key = (user_id, course_id)
        existing = self._store.get(key)
        enrolled_at = existing.enrolled_at if existing else int(time.time())
        enrollment = Enrollment(
            user_id=user_id,
            course_id=course_id,
            status=status,
            enrolled_at=enrolled_at,
        )
        self._store[key] = enrollment
        return enrollment

    async def delete(self, user_id: UUID, course_id: UUID) -> bool:
        return self._store.pop((user_id, course_id), None) is not None

    async def delete_all_for_user(self, user_id: UUID) -> int:
        keys = [k for k in self._store if k[0] == user_id]
        for k in keys:
            del self._store[k]
        return len(keys)

    async def count_active(self, course_id: UUID) -> int:
        return sum(
            1 for e in self._store.values() if e.course_id == course_id and e.is_active
        )

    async def count_active_by_course(
        self, course_ids: Iterable[UUID]
    ) -> dict[UUID, int]:
        counts = dict.fromkeys(course_ids, 0)
        for e in self._store.values():
            if e.is_active and e.course_id in counts:
                counts[e.course_id] += 1
        return counts

    async def list_active_course_ids(self, user_id: UUID) -> list[UUID]:
        return [
            e.course_id
            for e in self._store.values()
            if e.user_id == user_id and e.is_active
        ]

    async def list_by_course(self, course_id: UUID) -> list[Enrollment]:
        rows = [e for e in self._store.values() if e.course_id == course_id]
        rows.sort(key=lambda e: e.enrolled_at)
        return rows

    def active_user_ids(self, course_id: UUID) -> set[UUID]:
        return {
            e.user_id
            for e in self._store.values()
            if e.course_id == course_id and e.is_active
        }
