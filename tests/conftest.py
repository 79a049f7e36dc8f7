from __future__ import annotations

import asyncio
import os
import sys
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

# Keep the demo seed and a developer's database out of the test run.
os.environ.setdefault("APP_ENV", "test")
os.environ.pop("DATABASE_URL", None)

# Ensure repo root is on sys.path so `import coursehub` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from coursehub.api.dependencies import reset_memory_stores  # noqa: E402
from coursehub.main import app  # noqa: E402
from coursehub.models.course import Course, CourseSession  # noqa: E402
from coursehub.models.enrollment import EnrollmentStatus  # noqa: E402
from coursehub.models.user import Role, User  # noqa: E402
from coursehub.repos.stores import Stores  # noqa: E402
from coursehub.services import token_service  # noqa: E402

T = TypeVar("T")


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Drive an async service or repo call from a sync test."""
    return asyncio.run(coro)


@pytest.fixture(autouse=True)
def stores() -> Stores:
    """Fresh in-memory stores for every test; the app reads the same ones."""
    return reset_memory_stores()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(user_id: UUID | str, role: Role | str = Role.USER) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=str(user_id), role=str(role))


def auth(token: str | None) -> dict[str, str]:
    if token is None:
        return {}
    return {"Authorization": f"Bearer {token}"}


def auth_for(user: User) -> dict[str, str]:
    return auth(mint_token(user.id, user.role))


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def add_user(
    stores: Stores, email: str, role: Role = Role.USER, name: str = ""
) -> User:
    user = User.new(email=email, name=name, role=role)
    run(stores.users.add(user))
    return user


def add_course(
    stores: Stores,
    slug: str = "basics",
    *,
    sessions: int = 3,
    published: bool = True,
    title: str | None = None,
) -> tuple[Course, list[CourseSession]]:
    course = Course.new(
        slug=slug, title=title or slug.title(), is_published=published
    )
    run(stores.content.add_course(course))
    created = []
    for index in range(1, sessions + 1):
        session = CourseSession.new(
            course_id=course.id, index=index, title=f"Week {index}"
        )
        run(stores.content.add_session(session))
        created.append(session)
    return course, created


def enroll(
    stores: Stores,
    user: User,
    course: Course,
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE,
) -> None:
    run(stores.enrollments.upsert(user.id, course.id, status))


def complete(stores: Stores, user: User, session: CourseSession) -> None:
    run(stores.completions.insert_if_absent(user.id, session.id))
