"""The five stores a unit of work operates on, bundled for injection.

Routes receive a ``Stores`` from ``coursehub.api.dependencies.get_stores``:
PostgreSQL repositories sharing one request-scoped session when
DATABASE_URL is set, otherwise the process-wide in-memory stores.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.repos.access_request_repo import (
    AccessRequestRepo,
    InMemoryAccessRequestRepo,
)
from coursehub.repos.completion_repo import CompletionRepo, InMemoryCompletionRepo
from coursehub.repos.content_repo import ContentRepo, InMemoryContentRepo
from coursehub.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from coursehub.repos.pg_access_request_repo import PgAccessRequestRepo
from coursehub.repos.pg_completion_repo import PgCompletionRepo
from coursehub.repos.pg_content_repo import PgContentRepo
from coursehub.repos.pg_enrollment_repo import PgEnrollmentRepo
from coursehub.repos.pg_user_repo import PgUserRepo
from coursehub.repos.user_repo import InMemoryUserRepo, UserRepo


@dataclass(frozen=True, slots=True)
class Stores:
    users: UserRepo
    content: ContentRepo
    enrollments: EnrollmentRepo
    completions: CompletionRepo
    access_requests: AccessRequestRepo


def in_memory_stores() -> Stores:
    content = InMemoryContentRepo()
    enrollments = InMemoryEnrollmentRepo()
    return Stores(
        users=InMemoryUserRepo(),
        content=content,
        enrollments=enrollments,
        completions=InMemoryCompletionRepo(content, enrollments),
        access_requests=InMemoryAccessRequestRepo(content),
    )


def pg_stores(session: AsyncSession) -> Stores:
    return Stores(
        users=PgUserRepo(session),
        content=PgContentRepo(session),
        enrollments=PgEnrollmentRepo(session),
        completions=PgCompletionRepo(session),
        access_requests=PgAccessRequestRepo(session),
    )
