from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from uuid import UUID

from coursehub.models.enrollment import Enrollment, EnrollmentStatus
from coursehub.models.user import normalize_email
from coursehub.repos.stores import Stores
from coursehub.services.errors import NotFoundError

logger = logging.getLogger(__name__)

_EMAIL_SEPARATORS = re.compile(r"[\n,]+")


@dataclass(frozen=True, slots=True)
class BulkEnrollResult:
    enrolled: list[str]
    unknown: list[str]


def parse_email_list(raw: str) -> list[str]:
    """Split a comma/newline separated list, normalized and de-duplicated."""
    seen: dict[str, None] = {}
    for part in _EMAIL_SEPARATORS.split(raw):
        email = normalize_email(part)
        if email:
            seen.setdefault(email, None)
    return list(seen)


async def _require_course(stores: Stores, course_id: UUID) -> None:
    if await stores.content.get_course(course_id) is None:
        raise NotFoundError("course", course_id)


async def enroll(stores: Stores, *, user_id: UUID, course_id: UUID) -> Enrollment:
    """Grant (or re-activate) an ACTIVE enrollment.  Re-enrolling is a no-op."""
    await _require_course(stores, course_id)
    if await stores.users.get_by_id(user_id) is None:
        raise NotFoundError("user", user_id)

    enrollment = await stores.enrollments.upsert(
        user_id, course_id, EnrollmentStatus.ACTIVE
    )
    logger.info("Enrolled user=%s course=%s", user_id, course_id)
    return enrollment


async def unenroll(stores: Stores, *, user_id: UUID, course_id: UUID) -> None:
    removed = await stores.enrollments.delete(user_id, course_id)
    if not removed:
        raise NotFoundError("enrollment", (user_id, course_id))
    logger.info("Unenrolled user=%s course=%s", user_id, course_id)


async def bulk_enroll(
    stores: Stores, *, course_id: UUID, emails_raw: str
) -> BulkEnrollResult:
    """Enroll every existing user in the list; report the emails not found."""
    await _require_course(stores, course_id)
    emails = parse_email_list(emails_raw)
    if not emails:
        return BulkEnrollResult(enrolled=[], unknown=[])

    found = await stores.users.list_by_emails(emails)
    for user in found:
        await stores.enrollments.upsert(user.id, course_id, EnrollmentStatus.ACTIVE)

    found_emails = {u.email for u in found}
    result = BulkEnrollResult(
        enrolled=[e for e in emails if e in found_emails],
        unknown=[e for e in emails if e not in found_emails],
    )
    logger.info(
        "Bulk enroll course=%s enrolled=%d unknown=%d",
        course_id,
        len(result.enrolled),
        len(result.unknown),
    )
    return result


async def list_enrollments(stores: Stores, course_id: UUID) -> list[Enrollment]:
    await _require_course(stores, course_id)
    return await stores.enrollments.list_by_course(course_id)
