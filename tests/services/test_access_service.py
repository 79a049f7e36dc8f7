"""Course access predicate.

Staff always pass; a USER passes only with an ACTIVE enrollment in that
exact course.  Store failures are never converted into a decision.
"""

from __future__ import annotations

from dataclasses import replace
from uuid import UUID, uuid4

import pytest
from prometheus_client import REGISTRY

from coursehub.models.enrollment import EnrollmentStatus
from coursehub.models.user import Role
from coursehub.repos.stores import Stores
from coursehub.services.access_service import can_access_course
from coursehub.services.errors import StoreUnavailableError
from tests.conftest import add_course, add_user, enroll, run


def _decisions(result: str, basis: str) -> float:
    value = REGISTRY.get_sample_value(
        "course_access_decisions_total", {"result": result, "basis": basis}
    )
    return value or 0.0


class _UnreachableEnrollments:
    async def find(self, user_id: UUID, course_id: UUID):
        raise StoreUnavailableError("connection refused")


@pytest.mark.parametrize("role", [Role.LEADER, Role.ADMIN])
def test_staff_allowed_without_enrollment(stores: Stores, role: Role) -> None:
    course, _ = add_course(stores)
    assert run(can_access_course(stores, uuid4(), role, course.id)) is True


@pytest.mark.parametrize("role", [Role.LEADER, Role.ADMIN])
def test_staff_never_touch_the_enrollment_store(stores: Stores, role: Role) -> None:
    course, _ = add_course(stores)
    broken = replace(stores, enrollments=_UnreachableEnrollments())
    assert run(can_access_course(broken, uuid4(), role, course.id)) is True


def test_user_with_active_enrollment_allowed(stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores)
    enroll(stores, user, course)
    assert run(can_access_course(stores, user.id, Role.USER, course.id)) is True


def test_user_without_enrollment_denied(stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores)
    assert run(can_access_course(stores, user.id, Role.USER, course.id)) is False


def test_user_with_inactive_enrollment_denied(stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores)
    enroll(stores, user, course, EnrollmentStatus.INACTIVE)
    assert run(can_access_course(stores, user.id, Role.USER, course.id)) is False


def test_enrollment_in_another_course_does_not_grant_access(stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    basics, _ = add_course(stores, "basics")
    advanced, _ = add_course(stores, "advanced")
    enroll(stores, user, basics)
    assert run(can_access_course(stores, user.id, Role.USER, advanced.id)) is False


def test_access_revoked_after_unenroll(stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores)
    enroll(stores, user, course)
    run(stores.enrollments.delete(user.id, course.id))
    assert run(can_access_course(stores, user.id, Role.USER, course.id)) is False


def test_store_failure_propagates(stores: Stores) -> None:
    course, _ = add_course(stores)
    broken = replace(stores, enrollments=_UnreachableEnrollments())
    with pytest.raises(StoreUnavailableError):
        run(can_access_course(broken, uuid4(), Role.USER, course.id))


def test_decisions_are_counted(stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores)

    denied_before = _decisions("denied", "enrollment")
    staff_before = _decisions("allowed", "staff")
    run(can_access_course(stores, user.id, Role.USER, course.id))
    run(can_access_course(stores, user.id, Role.ADMIN, course.id))

    assert _decisions("denied", "enrollment") - denied_before == 1
    assert _decisions("allowed", "staff") - staff_before == 1
