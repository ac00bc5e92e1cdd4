from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from typing import List, Optional

from complaint_api.core.database import get_db
from complaint_api.core.config import settings
from complaint_api.core.exceptions import ValidationError, ComplaintNotFoundError
from complaint_api.core.logging_config import logger
from complaint_api.core.rate_limiter import limiter
from complaint_api.models.admin import Admin
from complaint_api.models.complaint import Complaint, ComplaintStatus
from complaint_api.modules.auth.dependencies import get_current_admin
from complaint_api.schemas.auth import MessageResponse
from complaint_api.schemas.complaint import (
    ComplaintCreate,
    ComplaintStatusUpdate,
    ComplaintResponse,
    ComplaintSubmitted,
    ComplaintStats,
)


router = APIRouter()


async def _get_complaint_or_404(db: AsyncSession, complaint_id: str) -> Complaint:
    result = await db.execute(select(Complaint).where(Complaint.id == complaint_id))
    complaint = result.scalar_one_or_none()
    if complaint is None:
        raise ComplaintNotFoundError(complaint_id)
    return complaint


@router.post("/complaintform", response_model=ComplaintSubmitted, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_SUBMIT)
async def submit_complaint(
    request: Request,
    payload: ComplaintCreate,
    db: AsyncSession = Depends(get_db)
):
    """Submit a complaint from the public form (no login required)"""
    missing = payload.missing_fields()
    if missing:
        logger.warning(
            f"Complaint rejected, missing: {', '.join(missing)}",
            extra={"event_type": "complaint_rejected", "missing_fields": missing}
        )
        raise ValidationError("Missing required fields")

    complaint = Complaint(
        name=payload.name,
        matric=payload.matric,
        email=payload.email,
        department=payload.department,
        title=payload.title,
        details=payload.details,
        status=ComplaintStatus.PENDING.value,
    )
    db.add(complaint)
    await db.commit()
    await db.refresh(complaint)
    logger.log_complaint_event("submitted", complaint.id, department=complaint.department)

    return ComplaintSubmitted(
        message="Complaint submitted successfully",
        complaint=ComplaintResponse.model_validate(complaint),
    )


@router.get("/complaints", response_model=List[ComplaintResponse])
async def list_complaints(
    status_filter: Optional[ComplaintStatus] = Query(None, alias="status"),
    department: Optional[str] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    admin: Admin = Depends(get_current_admin)
):
    """List complaints, newest first"""
    query = select(Complaint)

    if status_filter is not None:
        query = query.where(Complaint.status == status_filter.value)
    if department:
        query = query.where(Complaint.department == department)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(
            Complaint.title.ilike(pattern),
            Complaint.name.ilike(pattern),
            Complaint.matric.ilike(pattern),
            Complaint.details.ilike(pattern),
        ))

    result = await db.execute(query.order_by(Complaint.created_at.desc()))
    return result.scalars().all()


@router.get("/complaints/stats", response_model=ComplaintStats)
async def complaint_stats(
    db: AsyncSession = Depends(get_db),
    admin: Admin = Depends(get_current_admin)
):
    """Counts per status for the dashboard cards"""
    result = await db.execute(
        select(Complaint.status, func.count(Complaint.id)).group_by(Complaint.status)
    )
    counts = {row[0]: row[1] for row in result.all()}

    return ComplaintStats(
        total=sum(counts.values()),
        pending=counts.get(ComplaintStatus.PENDING.value, 0),
        in_progress=counts.get(ComplaintStatus.IN_PROGRESS.value, 0),
        resolved=counts.get(ComplaintStatus.RESOLVED.value, 0),
    )


@router.get("/complaints/{complaint_id}", response_model=ComplaintResponse)
async def get_complaint(
    complaint_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Admin = Depends(get_current_admin)
):
    """Get a single complaint"""
    return await _get_complaint_or_404(db, complaint_id)


@router.put("/complaints/{complaint_id}/status", response_model=ComplaintResponse)
async def update_complaint_status(
    complaint_id: str,
    update: ComplaintStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: Admin = Depends(get_current_admin)
):
    """Move a complaint to a new status"""
    complaint = await _get_complaint_or_404(db, complaint_id)
    previous = complaint.status
    complaint.status = update.status.value
    await db.commit()
    await db.refresh(complaint)

    logger.log_complaint_event(
        f"moved {previous} -> {complaint.status}",
        complaint_id,
        previous_status=previous,
        new_status=complaint.status,
    )
    return complaint


@router.delete("/complaints/{complaint_id}", response_model=MessageResponse)
async def delete_complaint(
    complaint_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Admin = Depends(get_current_admin)
):
    """Delete a complaint"""
    complaint = await _get_complaint_or_404(db, complaint_id)
    await db.delete(complaint)
    await db.commit()
    logger.log_complaint_event("deleted", complaint_id, admin_username=admin.username)

    return {"success": True, "message": "Complaint deleted"}
