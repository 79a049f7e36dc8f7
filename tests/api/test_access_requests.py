"""Access request review endpoints."""

from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from coursehub.models.user import Role, User
from coursehub.repos.stores import Stores
from tests.conftest import add_course, add_user, auth_for


@pytest.fixture
def leader(stores: Stores) -> User:
    return add_user(stores, "leader@example.com", Role.LEADER)


def _submit(client: TestClient, course_id, email: str) -> str:
    resp = client.post(
        "/v1/catalog/access-requests",
        json={"course_id": str(course_id), "email": email},
    )
    assert resp.status_code == 201
    return resp.json()["id"]


def test_list_defaults_to_pending(client: TestClient, stores: Stores, leader: User) -> None:
    course, _ = add_course(stores)
    first = _submit(client, course.id, "a@example.com")
    _submit(client, course.id, "b@example.com")
    client.post(f"/admin/access-requests/{first}/reject", headers=auth_for(leader))

    pending = client.get("/admin/access-requests", headers=auth_for(leader)).json()
    assert [r["email"] for r in pending["items"]] == ["b@example.com"]

    everything = client.get(
        "/admin/access-requests", params={"status": "ALL"}, headers=auth_for(leader)
    ).json()
    assert everything["total"] == 2


def test_approve_enrolls_existing_account(
    client: TestClient, stores: Stores, leader: User
) -> None:
    learner = add_user(stores, "ada@example.com")
    course, _ = add_course(stores)
    request_id = _submit(client, course.id, "ada@example.com")

    resp = client.post(
        f"/admin/access-requests/{request_id}/approve", headers=auth_for(leader)
    )

    assert resp.status_code == 200
    assert resp.json()["request"]["status"] == "APPROVED"
    assert resp.json()["enrolled_user_id"] == str(learner.id)
    assert client.get("/v1/courses/basics", headers=auth_for(learner)).status_code == 200


def test_approve_without_enrolling(
    client: TestClient, stores: Stores, leader: User
) -> None:
    learner = add_user(stores, "ada@example.com")
    course, _ = add_course(stores)
    request_id = _submit(client, course.id, "ada@example.com")

    resp = client.post(
        f"/admin/access-requests/{request_id}/approve",
        json={"enroll": False},
        headers=auth_for(leader),
    )

    assert resp.json()["enrolled_user_id"] is None
    assert client.get("/v1/courses/basics", headers=auth_for(learner)).status_code == 403


def test_second_decision_conflicts(client: TestClient, stores: Stores, leader: User) -> None:
    course, _ = add_course(stores)
    request_id = _submit(client, course.id, "ada@example.com")

    assert client.post(
        f"/admin/access-requests/{request_id}/approve", headers=auth_for(leader)
    ).status_code == 200
    assert client.post(
        f"/admin/access-requests/{request_id}/reject", headers=auth_for(leader)
    ).status_code == 409


def test_unknown_request(client: TestClient, leader: User) -> None:
    resp = client.post(f"/admin/access-requests/{uuid4()}/approve", headers=auth_for(leader))
    assert resp.status_code == 404
