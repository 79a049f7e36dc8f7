"""Course access control.

A single predicate decides whether a user may view a course's content.
Staff (LEADER, ADMIN) see every course; a USER needs an ACTIVE enrollment.
"""

from __future__ import annotations

import logging
from uuid import UUID

from coursehub.core.metrics import ACCESS_DECISIONS
from coursehub.models.user import Role
from coursehub.repos.stores import Stores

logger = logging.getLogger(__name__)


async def can_access_course(
    stores: Stores, user_id: UUID, role: Role, course_id: UUID
) -> bool:
    """Return whether ``user_id`` with ``role`` may view ``course_id``.

    The caller checks that the course exists first.  A store failure
    propagates as StoreUnavailableError; it is never turned into a decision.
    """
    if role.is_staff:
        ACCESS_DECISIONS.labels(result="allowed", basis="staff").inc()
        return True

    enrollment = await stores.enrollments.find(user_id, course_id)
    allowed = enrollment is not None and enrollment.is_active

    ACCESS_DECISIONS.labels(
        result="allowed" if allowed else "denied", basis="enrollment"
    ).inc()
    if not allowed:
        logger.debug(
            "No active enrollment user=%s course=%s status=%s",
            user_id,
            course_id,
            enrollment.status if enrollment else None,
        )
    return allowed
