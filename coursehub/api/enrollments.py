"""Enrollment administration (LEADER or ADMIN)."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, Field

from coursehub.api.dependencies import StaffUser, StoresDep
from coursehub.models.enrollment import Enrollment, EnrollmentStatus
from coursehub.services import enrollment_service
from coursehub.services.errors import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/courses/{course_id}/enrollments", tags=["admin"])


class EnrollmentOut(BaseModel):
    user_id: UUID
    course_id: UUID
    status: EnrollmentStatus
    enrolled_at: int


class EnrollIn(BaseModel):
    user_id: UUID


class BulkEnrollIn(BaseModel):
    emails: str = Field(max_length=100_000)


class BulkEnrollOut(BaseModel):
    enrolled: list[str]
    unknown: list[str]


def _enrollment_out(e: Enrollment) -> EnrollmentOut:
    return EnrollmentOut(
        user_id=e.user_id,
        course_id=e.course_id,
        status=e.status,
        enrolled_at=e.enrolled_at,
    )


def _not_found(e: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{e.kind} not found")


@router.get("", response_model=list[EnrollmentOut])
async def list_enrollments(
    course_id: UUID, principal: StaffUser, stores: StoresDep
) -> list[EnrollmentOut]:
    try:
        items = await enrollment_service.list_enrollments(stores, course_id)
    except NotFoundError as e:
        raise _not_found(e) from None
    return [_enrollment_out(e) for e in items]


@router.post("", response_model=EnrollmentOut)
async def enroll_user(
    course_id: UUID, body: EnrollIn, principal: StaffUser, stores: StoresDep
) -> EnrollmentOut:
    try:
        enrollment = await enrollment_service.enroll(
            stores, user_id=body.user_id, course_id=course_id
        )
    except NotFoundError as e:
        raise _not_found(e) from None
    logger.info(
        "Enrollment granted user=%s course=%s by=%s",
        body.user_id,
        course_id,
        principal.user_id,
    )
    return _enrollment_out(enrollment)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unenroll_user(
    course_id: UUID, user_id: UUID, principal: StaffUser, stores: StoresDep
) -> Response:
    try:
        await enrollment_service.unenroll(stores, user_id=user_id, course_id=course_id)
    except NotFoundError as e:
        raise _not_found(e) from None
    logger.info(
        "Enrollment removed user=%s course=%s by=%s", user_id, course_id, principal.user_id
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/bulk", response_model=BulkEnrollOut)
async def bulk_enroll(
    course_id: UUID, body: BulkEnrollIn, principal: StaffUser, stores: StoresDep
) -> BulkEnrollOut:
    try:
        result = await enrollment_service.bulk_enroll(
            stores, course_id=course_id, emails_raw=body.emails
        )
    except NotFoundError as e:
        raise _not_found(e) from None
    return BulkEnrollOut(enrolled=result.enrolled, unknown=result.unknown)
