"""Stats service — headline counts for the admin panel and the homepage."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from polylearn.models.department import Department
from polylearn.models.search_history import SearchHistory
from polylearn.models.upload import (
    Upload,
    RESOURCE_QUESTION_PAPER,
    RESOURCE_STUDY_NOTE,
    STATUSES,
    STATUS_APPROVED,
)
from polylearn.models.user import User


def admin_stats(db: Session) -> dict:
    by_status = dict(
        db.query(Upload.status, func.count(Upload.id))
        .group_by(Upload.status)
        .all()
    )
    return {
        "users": db.query(func.count(User.id)).scalar() or 0,
        "uploads": sum(by_status.values()),
        "search_history": db.query(func.count(SearchHistory.id)).scalar() or 0,
        "upload_stats": {status: by_status.get(status, 0) for status in STATUSES},
    }


def public_stats(db: Session) -> dict:
    approved = dict(
        db.query(Upload.resource_type, func.count(Upload.id))
        .filter(Upload.status == STATUS_APPROVED)
        .group_by(Upload.resource_type)
        .all()
    )
    return {
        "departments": db.query(func.count(Department.id)).scalar() or 0,
        "question_papers": approved.get(RESOURCE_QUESTION_PAPER, 0),
        "study_notes": approved.get(RESOURCE_STUDY_NOTE, 0),
        "active_students": db.query(func.count(User.id)).scalar() or 0,
    }
