"""Table-driven RBAC tests.

Each row describes: endpoint, method, role, expected HTTP status.
Staff routes admit LEADER and ADMIN, admin routes ADMIN only; an anonymous
caller is always 401 and a USER is 403 on anything behind a role guard.
"""

from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from coursehub.models.user import Role
from tests.conftest import add_course, auth, mint_token


_RBAC_CASES = [
    # (endpoint, method, role, expected_status)
    # /v1/courses: any authenticated user
    ("/v1/courses", "GET", Role.USER, 200),
    ("/v1/courses", "GET", Role.LEADER, 200),
    ("/v1/courses", "GET", None, 401),
    # /v1/catalog: public
    ("/v1/catalog", "GET", None, 200),
    ("/v1/catalog", "GET", Role.USER, 200),
    # /admin/users: ADMIN only
    ("/admin/users", "GET", Role.ADMIN, 200),
    ("/admin/users", "GET", Role.LEADER, 403),
    ("/admin/users", "GET", Role.USER, 403),
    ("/admin/users", "GET", None, 401),
    ("/admin/users", "POST", Role.ADMIN, 201),
    ("/admin/users", "POST", Role.LEADER, 403),
    ("/admin/users", "POST", None, 401),
    # /admin/courses: staff read, ADMIN write
    ("/admin/courses", "GET", Role.ADMIN, 200),
    ("/admin/courses", "GET", Role.LEADER, 200),
    ("/admin/courses", "GET", Role.USER, 403),
    ("/admin/courses", "GET", None, 401),
    ("/admin/courses", "POST", Role.ADMIN, 201),
    ("/admin/courses", "POST", Role.LEADER, 403),
    ("/admin/courses", "POST", Role.USER, 403),
    # /admin/access-requests: staff
    ("/admin/access-requests", "GET", Role.ADMIN, 200),
    ("/admin/access-requests", "GET", Role.LEADER, 200),
    ("/admin/access-requests", "GET", Role.USER, 403),
    ("/admin/access-requests", "GET", None, 401),
    # enrollments: staff
    ("/admin/courses/{course_id}/enrollments", "GET", Role.LEADER, 200),
    ("/admin/courses/{course_id}/enrollments", "GET", Role.USER, 403),
    ("/admin/courses/{course_id}/enrollments", "GET", None, 401),
]


def _case_id(case: tuple) -> str:
    endpoint, method, role, expected = case
    role_label = role or "anon"
    return f"{method} {endpoint} [{role_label}] -> {expected}"


_BODIES = {
    "/admin/users": {"email": "rbac-test@example.com", "password": "password123"},
    "/admin/courses": {"slug": "rbac-course", "title": "RBAC"},
}


@pytest.mark.parametrize(
    "endpoint,method,role,expected",
    _RBAC_CASES,
    ids=[_case_id(c) for c in _RBAC_CASES],
)
def test_rbac(
    client: TestClient,
    stores,
    endpoint: str,
    method: str,
    role: Role | None,
    expected: int,
) -> None:
    course, _ = add_course(stores, "existing")
    url = endpoint.format(course_id=course.id)
    headers = auth(mint_token(uuid4(), role) if role else None)

    if method == "GET":
        resp = client.get(url, headers=headers)
    elif method == "POST":
        resp = client.post(url, json=_BODIES.get(endpoint, {}), headers=headers)
    else:
        pytest.fail(f"Unsupported method: {method}")

    assert resp.status_code == expected, (
        f"{method} {endpoint} role={role}: expected {expected}, got {resp.status_code}"
    )
