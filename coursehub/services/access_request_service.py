"""Access requests: prospective learners ask, staff approve or reject.

Approval enrolls the requester only when an account with the request's
email already exists.  No account is ever provisioned here.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from uuid import UUID

from coursehub.models.access_request import AccessRequest, AccessRequestStatus
from coursehub.models.enrollment import EnrollmentStatus
from coursehub.models.principal import Principal
from coursehub.models.user import normalize_email
from coursehub.repos.stores import Stores
from coursehub.services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

PAGE_SIZE = 20


class AccessRequestValidationError(ValueError):
    pass


class InvalidTransitionError(ConflictError):
    pass


@dataclass(frozen=True, slots=True)
class AccessRequestPage:
    items: list[AccessRequest]
    total: int
    page: int
    total_pages: int


@dataclass(frozen=True, slots=True)
class ApprovalResult:
    request: AccessRequest
    enrolled_user_id: UUID | None


def parse_status_filter(raw: str | None) -> AccessRequestStatus | None:
    """``None``/``""``/``ALL`` mean no filter; anything unknown also means none."""
    if not raw:
        return None
    try:
        return AccessRequestStatus(raw.strip().upper())
    except ValueError:
        return None


async def submit(
    stores: Stores,
    *,
    course_id: UUID,
    email: str | None,
    name: str | None,
    message: str | None,
    requester: Principal | None,
) -> AccessRequest:
    course = await stores.content.get_course(course_id)
    if course is None or not course.is_published:
        raise NotFoundError("course", course_id)

    email = normalize_email(email or "")
    name = (name or "").strip()
    if requester is not None and (not email or not name):
        account = await stores.users.get_by_id(requester.user_id)
        if account is not None:
            email = email or account.email
            name = name or account.name
    if not email:
        raise AccessRequestValidationError("email is required")

    request = AccessRequest.new(
        course_id=course_id,
        email=email,
        name=name or None,
        message=(message or "").strip() or None,
    )
    await stores.access_requests.add(request)
    logger.info("Access requested course=%s email=%s", course.slug, email)
    return request


async def list_requests(
    stores: Stores,
    *,
    status: AccessRequestStatus | None = None,
    course_id: UUID | None = None,
    q: str = "",
    page: int = 1,
) -> AccessRequestPage:
    page = max(page, 1)
    items, total = await stores.access_requests.search(
        status=status,
        course_id=course_id,
        q=q,
        offset=(page - 1) * PAGE_SIZE,
        limit=PAGE_SIZE,
    )
    return AccessRequestPage(
        items=items,
        total=total,
        page=page,
        total_pages=max(math.ceil(total / PAGE_SIZE), 1),
    )


async def _transition(
    stores: Stores, request_id: UUID, status: AccessRequestStatus
) -> AccessRequest:
    existing = await stores.access_requests.get(request_id)
    if existing is None:
        raise NotFoundError("access request", request_id)
    if existing.status != AccessRequestStatus.PENDING:
        raise InvalidTransitionError(
            f"request is already {existing.status.value.lower()}"
        )
    updated = await stores.access_requests.set_status(request_id, status)
    if updated is None:
        raise NotFoundError("access request", request_id)
    return updated


async def approve(
    stores: Stores, request_id: UUID, *, enroll: bool = True
) -> ApprovalResult:
    request = await _transition(stores, request_id, AccessRequestStatus.APPROVED)

    enrolled_user_id = None
    if enroll:
        user = await stores.users.get_by_email(request.email)
        if user is not None:
            await stores.enrollments.upsert(
                user.id, request.course_id, EnrollmentStatus.ACTIVE
            )
            enrolled_user_id = user.id
        else:
            logger.info(
                "Approved request=%s has no matching account email=%s",
                request_id,
                request.email,
            )

    logger.info(
        "Access request approved request=%s enrolled_user=%s",
        request_id,
        enrolled_user_id,
    )
    return ApprovalResult(request=request, enrolled_user_id=enrolled_user_id)


async def reject(stores: Stores, request_id: UUID) -> AccessRequest:
    request = await _transition(stores, request_id, AccessRequestStatus.REJECTED)
    logger.info("Access request rejected request=%s", request_id)
    return request
