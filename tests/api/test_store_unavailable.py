"""A store outage fails the whole request with 503.

No partially computed page is returned and the failure is never read as
an access decision.
"""

from __future__ import annotations

from dataclasses import replace
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from coursehub.api.dependencies import get_stores
from coursehub.main import app
from coursehub.repos.stores import Stores
from coursehub.services.errors import StoreUnavailableError
from tests.conftest import add_course, add_user, auth_for, enroll


class _DownEnrollments:
    async def find(self, user_id: UUID, course_id: UUID):
        raise StoreUnavailableError("connection refused")


class _DownCompletions:
    async def count_by_course(self, user_id, course_ids):
        raise StoreUnavailableError("connection refused")

    async def insert_if_absent(self, user_id, session_id):
        raise StoreUnavailableError("connection refused")


@pytest.fixture
def broken(stores: Stores):
    def _install(**overrides) -> None:
        degraded = replace(stores, **overrides)

        async def _get_stores():
            yield degraded

        app.dependency_overrides[get_stores] = _get_stores

    yield _install
    app.dependency_overrides.pop(get_stores, None)


def _failures() -> float:
    return REGISTRY.get_sample_value("store_unavailable_total") or 0.0


def test_access_check_outage_is_503_not_403(
    client: TestClient, stores: Stores, broken
) -> None:
    user = add_user(stores, "learner@example.com")
    add_course(stores)
    broken(enrollments=_DownEnrollments())
    before = _failures()

    resp = client.get("/v1/courses/basics", headers=auth_for(user))

    assert resp.status_code == 503
    assert resp.json() == {"detail": "Service temporarily unavailable"}
    assert _failures() - before == 1


def test_progress_outage_returns_no_partial_list(
    client: TestClient, stores: Stores, broken
) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores)
    enroll(stores, user, course)
    broken(completions=_DownCompletions())

    resp = client.get("/v1/courses", headers=auth_for(user))

    assert resp.status_code == 503
    assert "progress" not in resp.text


def test_completion_outage_is_503(client: TestClient, stores: Stores, broken) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores)
    enroll(stores, user, course)
    broken(completions=_DownCompletions())

    resp = client.post("/v1/courses/basics/sessions/1/complete", headers=auth_for(user))
    assert resp.status_code == 503
