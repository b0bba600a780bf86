"""FastAPI router for complaint endpoints.

Handlers only translate HTTP into ``ComplaintService`` calls; authorization,
validation and side effects all happen below this layer and surface as
``ComplaintError`` subclasses mapped to status codes by the app.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel

from smartcity.auth.middleware import require_actor
from smartcity.complaints.models import (
    Comment,
    ComplaintCreate,
    ComplaintFilter,
    ComplaintPage,
    ComplaintStats,
    ComplaintView,
)
from smartcity.complaints.service import ComplaintService
from smartcity.core.types import Actor, ComplaintStatus

router = APIRouter(prefix="/api/complaints")


def get_service(request: Request) -> ComplaintService:
    return request.app.state.complaint_service


# --- Request models ---


class StatusUpdateRequest(BaseModel):
    status: str
    rejection_reason: str | None = None


class AssignTechnicianRequest(BaseModel):
    assigned_to: str


class AssignDepartmentRequest(BaseModel):
    department_id: str


class PriorityUpdateRequest(BaseModel):
    urgency: str | None = None
    priority_score: int | None = None


class CommentRequest(BaseModel):
    text: str


# --- Routes ---


@router.post("", response_model=ComplaintView, status_code=201)
async def create_complaint(
    body: ComplaintCreate,
    actor: Actor = Depends(require_actor),
    service: ComplaintService = Depends(get_service),
) -> ComplaintView:
    return await service.create_complaint(actor, body)


@router.get("", response_model=ComplaintPage)
async def list_complaints(
    status: ComplaintStatus | None = None,
    category: str | None = None,
    governorate: str | None = None,
    municipality: str | None = None,
    search: str | None = None,
    mine: bool = False,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    actor: Actor = Depends(require_actor),
    service: ComplaintService = Depends(get_service),
) -> ComplaintPage:
    """List the complaints the caller may see, newest first."""
    filters = ComplaintFilter(
        status=status,
        category=category,
        governorate=governorate,
        municipality=municipality,
        search=search,
        mine=mine,
        page=page,
        limit=limit,
    )
    return await service.list_complaints(actor, filters)


@router.get("/stats", response_model=ComplaintStats)
async def complaint_stats(
    actor: Actor = Depends(require_actor),
    service: ComplaintService = Depends(get_service),
) -> ComplaintStats:
    return await service.stats(actor)


@router.get("/{complaint_id}", response_model=ComplaintView)
async def get_complaint(
    complaint_id: str,
    actor: Actor = Depends(require_actor),
    service: ComplaintService = Depends(get_service),
) -> ComplaintView:
    return await service.get_complaint(actor, complaint_id)


@router.patch("/{complaint_id}/status", response_model=ComplaintView)
async def update_status(
    complaint_id: str,
    body: StatusUpdateRequest,
    actor: Actor = Depends(require_actor),
    service: ComplaintService = Depends(get_service),
) -> ComplaintView:
    return await service.update_status(actor, complaint_id, body.status, body.rejection_reason)


@router.post("/{complaint_id}/assign", response_model=ComplaintView)
async def assign_technician(
    complaint_id: str,
    body: AssignTechnicianRequest,
    actor: Actor = Depends(require_actor),
    service: ComplaintService = Depends(get_service),
) -> ComplaintView:
    return await service.assign_technician(actor, complaint_id, body.assigned_to)


@router.post("/{complaint_id}/department", response_model=ComplaintView)
async def assign_department(
    complaint_id: str,
    body: AssignDepartmentRequest,
    actor: Actor = Depends(require_actor),
    service: ComplaintService = Depends(get_service),
) -> ComplaintView:
    return await service.assign_department(actor, complaint_id, body.department_id)


@router.patch("/{complaint_id}/priority", response_model=ComplaintView)
async def update_priority(
    complaint_id: str,
    body: PriorityUpdateRequest,
    actor: Actor = Depends(require_actor),
    service: ComplaintService = Depends(get_service),
) -> ComplaintView:
    return await service.update_priority(actor, complaint_id, body.urgency, body.priority_score)


@router.post("/{complaint_id}/comments", response_model=Comment, status_code=201)
async def add_comment(
    complaint_id: str,
    body: CommentRequest,
    actor: Actor = Depends(require_actor),
    service: ComplaintService = Depends(get_service),
) -> Comment:
    return await service.add_comment(actor, complaint_id, body.text)


@router.delete("/{complaint_id}", status_code=204)
async def delete_complaint(
    complaint_id: str,
    actor: Actor = Depends(require_actor),
    service: ComplaintService = Depends(get_service),
) -> None:
    await service.delete_complaint(actor, complaint_id)
