"""Public stats router — homepage counters."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from polylearn.database import get_db
from polylearn.schemas.admin import PublicStatsResponse
from polylearn.services import stats_service

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats", response_model=PublicStatsResponse)
def public_stats(db: Session = Depends(get_db)):
    return PublicStatsResponse(**stats_service.public_stats(db))
