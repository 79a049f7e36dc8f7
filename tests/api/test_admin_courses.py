"""Course administration endpoints."""

from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from coursehub.models.user import Role, User
from coursehub.repos.stores import Stores
from tests.conftest import add_course, add_user, auth_for, complete, enroll


@pytest.fixture
def admin(stores: Stores) -> User:
    return add_user(stores, "admin@example.com", Role.ADMIN)


@pytest.fixture
def leader(stores: Stores) -> User:
    return add_user(stores, "leader@example.com", Role.LEADER)


def test_leader_sees_grid(client: TestClient, stores: Stores, leader: User) -> None:
    course, sessions = add_course(stores, sessions=3)
    a = add_user(stores, "a@example.com")
    b = add_user(stores, "b@example.com")
    enroll(stores, a, course)
    enroll(stores, b, course)
    complete(stores, a, sessions[0])
    complete(stores, a, sessions[1])

    resp = client.get("/admin/courses", headers=auth_for(leader))

    assert resp.status_code == 200
    [item] = resp.json()
    assert item["session_count"] == 3
    assert item["enrollment_count"] == 2
    assert item["grid"] == {"completed_cells": 2, "total_cells": 6, "percent": 33}


def test_course_detail(client: TestClient, stores: Stores, leader: User) -> None:
    course, _ = add_course(stores, sessions=2)
    resp = client.get(f"/admin/courses/{course.id}", headers=auth_for(leader))
    assert resp.status_code == 200
    body = resp.json()
    assert [s["index"] for s in body["sessions"]] == [1, 2]
    assert body["grid"]["percent"] == 0


def test_course_detail_unknown(client: TestClient, leader: User) -> None:
    resp = client.get(f"/admin/courses/{uuid4()}", headers=auth_for(leader))
    assert resp.status_code == 404


def test_admin_builds_a_course(client: TestClient, admin: User) -> None:
    headers = auth_for(admin)
    created = client.post(
        "/admin/courses", json={"slug": "intro", "title": "Intro"}, headers=headers
    )
    assert created.status_code == 201
    course_id = created.json()["id"]
    assert created.json()["is_published"] is False

    session = client.post(
        f"/admin/courses/{course_id}/sessions",
        json={"index": 1, "title": "Week 1"},
        headers=headers,
    )
    assert session.status_code == 201

    dup = client.post(
        f"/admin/courses/{course_id}/sessions",
        json={"index": 1, "title": "Again"},
        headers=headers,
    )
    assert dup.status_code == 409

    published = client.put(
        f"/admin/courses/{course_id}/published",
        json={"is_published": True},
        headers=headers,
    )
    assert published.json()["is_published"] is True

    catalog = client.get("/v1/catalog").json()
    assert [c["slug"] for c in catalog] == ["intro"]

    deleted = client.delete(
        f"/admin/courses/{course_id}/sessions/{session.json()['id']}", headers=headers
    )
    assert deleted.status_code == 204


def test_create_course_validation(client: TestClient, admin: User) -> None:
    resp = client.post(
        "/admin/courses", json={"slug": "Bad Slug", "title": "X"}, headers=auth_for(admin)
    )
    assert resp.status_code == 422


def test_create_course_duplicate_slug(
    client: TestClient, stores: Stores, admin: User
) -> None:
    add_course(stores, "basics")
    resp = client.post(
        "/admin/courses", json={"slug": "basics", "title": "B"}, headers=auth_for(admin)
    )
    assert resp.status_code == 409


def test_leader_cannot_write_content(client: TestClient, leader: User) -> None:
    resp = client.post(
        "/admin/courses", json={"slug": "intro", "title": "Intro"}, headers=auth_for(leader)
    )
    assert resp.status_code == 403


def test_media_links_round_trip_to_learner_views(
    client: TestClient, stores: Stores, admin: User
) -> None:
    headers = auth_for(admin)
    created = client.post(
        "/admin/courses",
        json={
            "slug": "media",
            "title": "Media",
            "thumbnail": "/thumbs/media.jpg",
            "is_published": True,
        },
        headers=headers,
    )
    assert created.json()["thumbnail"] == "/thumbs/media.jpg"
    links = {
        "video_url": "/videos/week1.mp4",
        "captions_vtt_url": "/captions/week1.vtt",
        "transcript": "Hello, week one.",
        "guide_online_url": "/guides/week1.html",
        "guide_pdf_url": "/guides/week1.pdf",
        "thumbnail": "/thumbs/week1.jpg",
    }
    added = client.post(
        f"/admin/courses/{created.json()['id']}/sessions",
        json={"index": 1, "title": "Week 1", **links},
        headers=headers,
    )
    assert added.status_code == 201
    assert {k: added.json()[k] for k in links} == links

    overview = client.get("/v1/courses/media", headers=headers).json()
    assert overview["thumbnail"] == "/thumbs/media.jpg"
    assert overview["sessions"][0]["thumbnail"] == "/thumbs/week1.jpg"

    view = client.get("/v1/courses/media/sessions/1", headers=headers).json()
    assert {k: view[k] for k in links} == links

    catalog = client.get("/v1/catalog").json()
    assert catalog[0]["thumbnail"] == "/thumbs/media.jpg"


def test_media_links_default_to_none(client: TestClient, admin: User) -> None:
    headers = auth_for(admin)
    course_id = client.post(
        "/admin/courses", json={"slug": "plain", "title": "Plain"}, headers=headers
    ).json()["id"]
    session = client.post(
        f"/admin/courses/{course_id}/sessions",
        json={"index": 1, "title": "Week 1"},
        headers=headers,
    ).json()

    assert session["captions_vtt_url"] is None
    assert session["guide_pdf_url"] is None
