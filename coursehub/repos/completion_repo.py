"""Completion Store: at most one row per (user, session).

Every count joins through the session table to find a completion's course.
A completion whose session has since been deleted therefore never counts,
whatever is left behind in the store.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from coursehub.models.progress import Completion
from coursehub.repos.content_repo import InMemoryContentRepo
from coursehub.repos.enrollment_repo import InMemoryEnrollmentRepo


class CompletionRepo(Protocol):
    async def exists(self, user_id: UUID, session_id: UUID) -> bool: ...
    async def insert_if_absent(self, user_id: UUID, session_id: UUID) -> bool: ...
    async def completed_session_ids(
        self, user_id: UUID, course_id: UUID
    ) -> set[UUID]: ...
    async def count_for_course(self, user_id: UUID, course_id: UUID) -> int: ...
    async def count_by_course(
        self, user_id: UUID, course_ids: Iterable[UUID]
    ) -> dict[UUID, int]: ...
    async def count_for_active_enrollees(self, course_id: UUID) -> int: ...
    async def count_by_user(self, user_ids: Iterable[UUID]) -> dict[UUID, int]: ...
    async def delete_all(self, user_id: UUID) -> int: ...


class InMemoryCompletionRepo:
    def __init__(
        self, content: InMemoryContentRepo, enrollments: InMemoryEnrollmentRepo
    ) -> None:
        self._content = content
        self._enrollments = enrollments
        self._store: dict[tuple[UUID, UUID], Completion] = {}

    async def exists(self, user_id: UUID, session_id: UUID) -> bool:
        return (user_id, session_id) in self._store

    async def insert_if_absent(self, user_id: UUID, session_id: UUID) -> bool:
        key = (user_id, session_id)
        if key in self._store:
            return False
        self._store[key] = Completion(
            user_id=user_id, session_id=session_id, completed_at=int(time.time())
        )
        return True

    async def completed_session_ids(
        self, user_id: UUID, course_id: UUID
    ) -> set[UUID]:
        session_course = self._content.session_course_map()
        return {
            sid
            for (uid, sid) in self._store
            if uid == user_id and session_course.get(sid) == course_id
        }

    async def count_for_course(self, user_id: UUID, course_id: UUID) -> int:
        return len(await self.completed_session_ids(user_id, course_id))

    async def count_by_course(
        self, user_id: UUID, course_ids: Iterable[UUID]
    ) -> dict[UUID, int]:
        session_course = self._content.session_course_map()
        counts = dict.fromkeys(course_ids, 0)
        for uid, sid in self._store:
            cid = session_course.get(sid)
            if uid == user_id and cid in counts:
                counts[cid] += 1
        return counts

    async def count_for_active_enrollees(self, course_id: UUID) -> int:
        session_course = self._content.session_course_map()
        active = self._enrollments.active_user_ids(course_id)
        return sum(
            1
            for uid, sid in self._store
            if uid in active and session_course.get(sid) == course_id
        )

    async def count_by_user(self, user_ids: Iterable[UUID]) -> dict[UUID, int]:
        # Only completions of sessions that still exist.
        live = self._content.session_course_map()
        counts = dict.fromkeys(user_ids, 0)
        for uid, sid in self._store:
            if uid in counts and sid in live:
                counts[uid] += 1
        return counts

    async def delete_all(self, user_id: UUID) -> int:
        keys = [k for k in self._store if k[0] == user_id]
        for k in keys:
            del self._store[k]
        return len(keys)
