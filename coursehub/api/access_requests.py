"""Access request review (LEADER or ADMIN)."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from coursehub.api.dependencies import StaffUser, StoresDep
from coursehub.models.access_request import AccessRequest, AccessRequestStatus
from coursehub.services import access_request_service
from coursehub.services.access_request_service import InvalidTransitionError
from coursehub.services.errors import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/access-requests", tags=["admin"])


class AccessRequestOut(BaseModel):
    id: UUID
    course_id: UUID
    email: str
    name: str | None
    message: str | None
    status: AccessRequestStatus
    created_at: int


class AccessRequestPageOut(BaseModel):
    items: list[AccessRequestOut]
    total: int
    page: int
    total_pages: int


class ApproveIn(BaseModel):
    enroll: bool = True


class ApproveOut(BaseModel):
    request: AccessRequestOut
    enrolled_user_id: UUID | None


def _request_out(r: AccessRequest) -> AccessRequestOut:
    return AccessRequestOut(
        id=r.id,
        course_id=r.course_id,
        email=r.email,
        name=r.name,
        message=r.message,
        status=r.status,
        created_at=r.created_at,
    )


@router.get("", response_model=AccessRequestPageOut)
async def list_access_requests(
    principal: StaffUser,
    stores: StoresDep,
    status_filter: str | None = Query(default="PENDING", alias="status"),
    course_id: UUID | None = None,
    q: str = "",
    page: int = Query(default=1, ge=1),
) -> AccessRequestPageOut:
    result = await access_request_service.list_requests(
        stores,
        status=access_request_service.parse_status_filter(status_filter),
        course_id=course_id,
        q=q,
        page=page,
    )
    return AccessRequestPageOut(
        items=[_request_out(r) for r in result.items],
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
    )


@router.post("/{request_id}/approve", response_model=ApproveOut)
async def approve_request(
    request_id: UUID,
    principal: StaffUser,
    stores: StoresDep,
    body: ApproveIn | None = None,
) -> ApproveOut:
    enroll = body.enroll if body is not None else True
    try:
        result = await access_request_service.approve(
            stores, request_id, enroll=enroll
        )
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="access request not found"
        ) from None
    except InvalidTransitionError as e:
        logger.warning(
            "Approve rejected: request=%s by=%s %s", request_id, principal.user_id, e
        )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None
    return ApproveOut(
        request=_request_out(result.request),
        enrolled_user_id=result.enrolled_user_id,
    )


@router.post("/{request_id}/reject", response_model=AccessRequestOut)
async def reject_request(
    request_id: UUID, principal: StaffUser, stores: StoresDep
) -> AccessRequestOut:
    try:
        request = await access_request_service.reject(stores, request_id)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="access request not found"
        ) from None
    except InvalidTransitionError as e:
        logger.warning(
            "Reject rejected: request=%s by=%s %s", request_id, principal.user_id, e
        )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from None
    return _request_out(request)
