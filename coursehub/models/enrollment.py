from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID


class EnrollmentStatus(StrEnum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


@dataclass(frozen=True, slots=True)
class Enrollment:
    user_id: UUID
    course_id: UUID
    status: EnrollmentStatus
    enrolled_at: int

    @property
    def is_active(self) -> bool:
        return self.status == EnrollmentStatus.ACTIVE
