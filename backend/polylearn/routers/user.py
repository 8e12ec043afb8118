"""User router — a signed-in user's own submissions and search history."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from polylearn.database import get_db
from polylearn.middleware.auth import get_current_user
from polylearn.models.search_history import SearchHistory
from polylearn.models.user import User
from polylearn.routers.resources import upload_to_response
from polylearn.schemas.upload import (
    SearchHistoryCreate,
    SearchHistoryResponse,
    UploadListResponse,
)
from polylearn.services import upload_service, user_service

router = APIRouter(prefix="/api/user", tags=["user"])


def _history_to_response(entry: SearchHistory) -> SearchHistoryResponse:
    return SearchHistoryResponse(
        id=entry.id,
        search_query=entry.search_query,
        department=entry.department,
        resource_type=entry.resource_type,
        semester=entry.semester,
        year=entry.year,
        searched_at=entry.searched_at.isoformat(),
    )


@router.get("/uploads", response_model=UploadListResponse)
def my_uploads(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Every submission the current user has made, with its review status."""
    uploads = upload_service.list_user_uploads(db, current_user.id)
    return UploadListResponse(
        uploads=[upload_to_response(u) for u in uploads],
        total=len(uploads),
    )


@router.post("/history", response_model=SearchHistoryResponse, status_code=201)
def save_search(
    req: SearchHistoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entry = user_service.record_search(
        db,
        current_user.id,
        search_query=req.search_query,
        department=req.department,
        resource_type=req.resource_type,
        semester=req.semester,
        year=req.year,
    )
    return _history_to_response(entry)


@router.get("/history", response_model=list[SearchHistoryResponse])
def my_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return [_history_to_response(e) for e in user_service.list_search_history(db, current_user.id)]
