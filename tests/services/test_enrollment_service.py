from __future__ import annotations

from uuid import uuid4

import pytest

from coursehub.models.enrollment import EnrollmentStatus
from coursehub.repos.stores import Stores
from coursehub.services import enrollment_service
from coursehub.services.errors import NotFoundError
from tests.conftest import add_course, add_user, enroll, run


def test_parse_email_list_splits_normalizes_and_dedupes() -> None:
    raw = "A@Example.com, b@example.com\n\n a@example.com ,,c@example.com\n"
    assert enrollment_service.parse_email_list(raw) == [
        "a@example.com",
        "b@example.com",
        "c@example.com",
    ]


def test_parse_email_list_empty() -> None:
    assert enrollment_service.parse_email_list(" ,\n, ") == []


def test_enroll_creates_active_enrollment(stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores)

    enrollment = run(
        enrollment_service.enroll(stores, user_id=user.id, course_id=course.id)
    )
    assert enrollment.status == EnrollmentStatus.ACTIVE


def test_enroll_reactivates_inactive_and_keeps_single_row(stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores)
    enroll(stores, user, course, EnrollmentStatus.INACTIVE)
    before = run(stores.enrollments.find(user.id, course.id))

    run(enrollment_service.enroll(stores, user_id=user.id, course_id=course.id))
    run(enrollment_service.enroll(stores, user_id=user.id, course_id=course.id))

    rows = run(enrollment_service.list_enrollments(stores, course.id))
    assert len(rows) == 1
    assert rows[0].status == EnrollmentStatus.ACTIVE
    assert rows[0].enrolled_at == before.enrolled_at


def test_enroll_unknown_course_or_user(stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores)
    with pytest.raises(NotFoundError):
        run(enrollment_service.enroll(stores, user_id=user.id, course_id=uuid4()))
    with pytest.raises(NotFoundError):
        run(enrollment_service.enroll(stores, user_id=uuid4(), course_id=course.id))


def test_unenroll_removes_enrollment(stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores)
    enroll(stores, user, course)

    run(enrollment_service.unenroll(stores, user_id=user.id, course_id=course.id))
    assert run(stores.enrollments.find(user.id, course.id)) is None


def test_unenroll_when_not_enrolled(stores: Stores) -> None:
    user = add_user(stores, "learner@example.com")
    course, _ = add_course(stores)
    with pytest.raises(NotFoundError):
        run(enrollment_service.unenroll(stores, user_id=user.id, course_id=course.id))


def test_bulk_enroll_reports_unknown_emails(stores: Stores) -> None:
    a = add_user(stores, "a@example.com")
    b = add_user(stores, "b@example.com")
    course, _ = add_course(stores)

    result = run(
        enrollment_service.bulk_enroll(
            stores,
            course_id=course.id,
            emails_raw="a@example.com\nghost@example.com, B@example.com",
        )
    )
    assert result.enrolled == ["a@example.com", "b@example.com"]
    assert result.unknown == ["ghost@example.com"]
    assert run(stores.enrollments.count_active(course.id)) == 2
    assert run(stores.enrollments.find(a.id, course.id)).is_active
    assert run(stores.enrollments.find(b.id, course.id)).is_active


def test_bulk_enroll_unknown_course(stores: Stores) -> None:
    with pytest.raises(NotFoundError):
        run(
            enrollment_service.bulk_enroll(
                stores, course_id=uuid4(), emails_raw="a@example.com"
            )
        )
