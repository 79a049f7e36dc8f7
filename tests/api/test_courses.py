"""Learner course endpoints: listing, overview, session view, completion."""

from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient

from coursehub.models.enrollment import EnrollmentStatus
from coursehub.models.user import Role
from coursehub.repos.stores import Stores
from tests.conftest import (
    add_course,
    add_user,
    auth,
    auth_for,
    complete,
    enroll,
    mint_token,
    run,
)

# ---- 401: unauthenticated ----


def test_list_courses_rejects_missing_token(client: TestClient) -> None:
    resp = client.get("/v1/courses")
    assert resp.status_code == 401


def test_complete_rejects_missing_token(client: TestClient, stores: Stores) -> None:
    add_course(stores)
    resp = client.post("/v1/courses/basics/sessions/1/complete")
    assert resp.status_code == 401


# ---- my courses ----


def test_user_sees_only_published_active_enrollments(
    client: TestClient, stores: Stores
) -> None:
    user = add_user(stores, "learner@example.com")
    basics, sessions = add_course(stores, "basics", sessions=3)
    draft, _ = add_course(stores, "draft", published=False)
    dropped, _ = add_course(stores, "dropped")
    add_course(stores, "unrelated")
    enroll(stores, user, basics)
    enroll(stores, user, draft)
    enroll(stores, user, dropped, EnrollmentStatus.INACTIVE)
    complete(stores, user, sessions[0])
    complete(stores, user, sessions[1])

    resp = client.get("/v1/courses", headers=auth_for(user))

    assert resp.status_code == 200
    body = resp.json()
    assert [c["slug"] for c in body] == ["basics"]
    assert body[0]["progress"] == {"completed": 2, "total": 3, "percent": 67}


def test_staff_see_every_course(client: TestClient, stores: Stores) -> None:
    add_course(stores, "basics")
    add_course(stores, "draft", published=False)

    resp = client.get("/v1/courses", headers=auth(mint_token(uuid4(), Role.LEADER)))

    assert resp.status_code == 200
    assert {c["slug"] for c in resp.json()} == {"basics", "draft"}


# ---- overview ----


def test_overview_marks_completed_sessions(client: TestClient, stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    course, sessions = add_course(stores, sessions=3)
    enroll(stores, user, course)
    complete(stores, user, sessions[1])

    resp = client.get("/v1/courses/basics", headers=auth_for(user))

    assert resp.status_code == 200
    body = resp.json()
    assert [(s["index"], s["completed"]) for s in body["sessions"]] == [
        (1, False),
        (2, True),
        (3, False),
    ]
    assert body["progress"] == {"completed": 1, "total": 3, "percent": 33}


def test_overview_forbidden_without_enrollment(
    client: TestClient, stores: Stores
) -> None:
    user = add_user(stores, "learner@example.com")
    add_course(stores)

    resp = client.get("/v1/courses/basics", headers=auth_for(user))
    assert resp.status_code == 403


def test_overview_unknown_course_is_404_before_access(
    client: TestClient, stores: Stores
) -> None:
    user = add_user(stores, "learner@example.com")
    resp = client.get("/v1/courses/nope", headers=auth_for(user))
    assert resp.status_code == 404


def test_admin_views_course_without_enrollment(
    client: TestClient, stores: Stores
) -> None:
    add_course(stores)
    resp = client.get("/v1/courses/basics", headers=auth(mint_token(uuid4(), Role.ADMIN)))
    assert resp.status_code == 200


# ---- session view ----


def test_session_view_returns_content(client: TestClient, stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores)
    enroll(stores, user, course)

    resp = client.get("/v1/courses/basics/sessions/2", headers=auth_for(user))

    assert resp.status_code == 200
    body = resp.json()
    assert body["index"] == 2
    assert body["title"] == "Week 2"
    assert body["completed"] is False


def test_session_view_rejects_bad_index(client: TestClient, stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores, sessions=3)
    enroll(stores, user, course)

    for index in (0, -1, 4):
        resp = client.get(f"/v1/courses/basics/sessions/{index}", headers=auth_for(user))
        assert resp.status_code == 404, index


def test_session_view_forbidden_after_unenroll(
    client: TestClient, stores: Stores
) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores)
    enroll(stores, user, course)
    assert client.get("/v1/courses/basics/sessions/1", headers=auth_for(user)).status_code == 200

    run(stores.enrollments.delete(user.id, course.id))

    resp = client.get("/v1/courses/basics/sessions/1", headers=auth_for(user))
    assert resp.status_code == 403


# ---- mark complete ----


def test_mark_complete_is_idempotent(client: TestClient, stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores, sessions=3)
    enroll(stores, user, course)
    headers = auth_for(user)

    first = client.post("/v1/courses/basics/sessions/1/complete", headers=headers)
    second = client.post("/v1/courses/basics/sessions/1/complete", headers=headers)

    assert (first.status_code, first.json()) == (200, {"created": True})
    assert (second.status_code, second.json()) == (200, {"created": False})

    overview = client.get("/v1/courses/basics", headers=headers).json()
    assert overview["progress"]["completed"] == 1


def test_mark_complete_forbidden_without_enrollment(
    client: TestClient, stores: Stores
) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores)

    resp = client.post("/v1/courses/basics/sessions/1/complete", headers=auth_for(user))

    assert resp.status_code == 403
    session = run(stores.content.get_session_by_index(course.id, 1))
    assert run(stores.completions.exists(user.id, session.id)) is False


def test_mark_complete_unknown_session(client: TestClient, stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores, sessions=2)
    enroll(stores, user, course)

    resp = client.post("/v1/courses/basics/sessions/9/complete", headers=auth_for(user))
    assert resp.status_code == 404
