from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import StrEnum
from uuid import UUID, uuid4


class AccessRequestStatus(StrEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


@dataclass(frozen=True, slots=True)
class AccessRequest:
    id: UUID
    course_id: UUID
    email: str
    name: str | None = None
    message: str | None = None
    status: AccessRequestStatus = AccessRequestStatus.PENDING
    created_at: int = field(default_factory=lambda: int(time.time()))

    @staticmethod
    def new(
        *,
        course_id: UUID,
        email: str,
        name: str | None = None,
        message: str | None = None,
    ) -> AccessRequest:
        return AccessRequest(
            id=uuid4(),
            course_id=course_id,
            email=email,
            name=name,
            message=message,
        )
