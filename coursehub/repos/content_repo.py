"""Content Store: courses and their ordered sessions."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from typing import Protocol
from uuid import UUID

from coursehub.models.course import Course, CourseSession


class ContentRepo(Protocol):
    async def get_course(self, course_id: UUID) -> Course | None: ...
    async def get_course_by_slug(self, slug: str) -> Course | None: ...
    async def list_courses(
        self,
        *,
        published_only: bool = False,
        course_ids: Iterable[UUID] | None = None,
    ) -> list[Course]: ...
    async def add_course(self, course: Course) -> None: ...
    async def set_published(
        self, course_id: UUID, is_published: bool
    ) -> Course | None: ...
    async def list_sessions(self, course_id: UUID) -> list[CourseSession]: ...
    async def count_sessions(self, course_id: UUID) -> int: ...
    async def count_sessions_by_course(
        self, course_ids: Iterable[UUID]
    ) -> dict[UUID, int]: ...
    async def get_session(self, session_id: UUID) -> CourseSession | None: ...
    async def get_session_by_index(
        self, course_id: UUID, index: int
    ) -> CourseSession | None: ...
    async def add_session(self, session: CourseSession) -> None: ...
    async def delete_session(self, session_id: UUID) -> bool: ...


class InMemoryContentRepo:
    def __init__(self) -> None:
        self._courses: dict[UUID, Course] = {}
        self._sessions: dict[UUID, CourseSession] = {}

    async def get_course(self, course_id: UUID) -> Course | None:
        return self._courses.get(course_id)

    async def get_course_by_slug(self, slug: str) -> Course | None:
        return next((c for c in self._courses.values() if c.slug == slug), None)

    async def list_courses(
        self,
        *,
        published_only: bool = False,
        course_ids: Iterable[UUID] | None = None,
    ) -> list[Course]:
        wanted = set(course_ids) if course_ids is not None else None
        courses = [
            c
            for c in self._courses.values()
            if (not published_only or c.is_published)
            and (wanted is None or c.id in wanted)
        ]
        courses.sort(key=lambda c: c.created_at, reverse=True)
        return courses

    async def add_course(self, course: Course) -> None:
        if await self.get_course_by_slug(course.slug) is not None:
            raise ValueError("slug already exists")
        self._courses[course.id] = course

    async def set_published(
        self, course_id: UUID, is_published: bool
    ) -> Course | None:
        c = self._courses.get(course_id)
        if c is None:
            return None
        updated = replace(c, is_published=is_published)
        self._courses[course_id] = updated
        return updated

    async def list_sessions(self, course_id: UUID) -> list[CourseSession]:
        sessions = [s for s in self._sessions.values() if s.course_id == course_id]
        sessions.sort(key=lambda s: s.index)
        return sessions

    async def count_sessions(self, course_id: UUID) -> int:
        return sum(1 for s in self._sessions.values() if s.course_id == course_id)

    async def count_sessions_by_course(
        self, course_ids: Iterable[UUID]
    ) -> dict[UUID, int]:
        counts = dict.fromkeys(course_ids, 0)
        for s in self._sessions.values():
            if s.course_id in counts:
                counts[s.course_id] += 1
        return counts

    async def get_session(self, session_id: UUID) -> CourseSession | None:
        return self._sessions.get(session_id)

    async def get_session_by_index(
        self, course_id: UUID, index: int
    ) -> CourseSession | None:
        return next(
            (
                s
                for s in self._sessions.values()
                if s.course_id == course_id and s.index == index
            ),
            None,
        )

    async def add_session(self, session: CourseSession) -> None:
        if session.course_id not in self._courses:
            raise ValueError("course does not exist")
        if await self.get_session_by_index(session.course_id, session.index):
            raise ValueError("session index already exists in course")
        self._sessions[session.id] = session

    async def delete_session(self, session_id: UUID) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def session_course_map(self) -> dict[UUID, UUID]:
        """session_id -> course_id for every session that currently exists."""
        return {s.id: s.course_id for s in self._sessions.values()}

    def course_titles(self) -> dict[UUID, str]:
        return {c.id: c.title for c in self._courses.values()}
