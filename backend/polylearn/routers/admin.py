"""Admin router — upload review, resource removal, promotions, and stats."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from polylearn.database import get_db
from polylearn.middleware.auth import require_admin
from polylearn.models.user import User
from polylearn.routers.auth import user_to_response
from polylearn.routers.resources import upload_to_response
from polylearn.schemas.admin import (
    AdminStatsResponse,
    DeleteResourceResponse,
    PromoteRequest,
    RejectRequest,
)
from polylearn.schemas.auth import UserResponse
from polylearn.schemas.upload import UploadListResponse, UploadResponse
from polylearn.services import stats_service, upload_service, user_service

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/uploads", response_model=UploadListResponse)
def list_uploads(
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """All uploads, optionally filtered by status (pending|approved|rejected|all) and search text."""
    uploads = upload_service.list_uploads(db, current_user, status=status, search=search)
    return UploadListResponse(
        uploads=[upload_to_response(u, include_submitter=True) for u in uploads],
        total=len(uploads),
    )


@router.post("/uploads/{upload_id}/approve", response_model=UploadResponse)
def approve_upload(
    upload_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Approve a pending upload (pending -> approved)."""
    upload = upload_service.approve(db, upload_id, current_user)
    return upload_to_response(upload, include_submitter=True)


@router.post("/uploads/{upload_id}/reject", response_model=UploadResponse)
def reject_upload(
    upload_id: str,
    req: Optional[RejectRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Reject a pending upload with a reason (pending -> rejected)."""
    reason = req.reason if req else None
    upload = upload_service.reject(db, upload_id, current_user, reason)
    return upload_to_response(upload, include_submitter=True)


@router.delete("/resources/{upload_id}", response_model=DeleteResourceResponse)
def delete_resource(
    upload_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Permanently delete an approved resource and its file."""
    deleted = upload_service.delete_resource(db, upload_id, current_user)
    return DeleteResourceResponse(
        message="Resource deleted permanently",
        id=deleted["id"],
        title=deleted["title"],
    )


@router.post("/promote-user", response_model=UserResponse)
def promote_user(
    req: PromoteRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Grant admin privileges to another account (super-administrator only)."""
    user = user_service.promote_user(db, req.email, current_user)
    return user_to_response(user)


@router.get("/stats", response_model=AdminStatsResponse)
def admin_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return AdminStatsResponse(**stats_service.admin_stats(db))
