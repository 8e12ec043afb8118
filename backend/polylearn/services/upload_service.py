"""Upload service — submission, review lifecycle, and listings.

An upload starts ``pending`` and is moved exactly once by an admin to
``approved`` or ``rejected``. Both transitions are conditional updates on
``status = 'pending'`` so that two admins acting on the same record cannot
both succeed.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from polylearn.errors import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from polylearn.models.audit_log import AuditLog
from polylearn.models.department import Department
from polylearn.models.upload import (
    Upload,
    RESOURCE_TYPES,
    STATUSES,
    STATUS_APPROVED,
    STATUS_PENDING,
    STATUS_REJECTED,
)
from polylearn.models.user import User
from polylearn.services.file_storage import FileStorageService, file_storage

logger = logging.getLogger(__name__)

STATUS_ALL = "all"
SESSIONS = ("Winter", "Summer")


def _audit(db: Session, upload_id: str, action: str, actor_id: str,
           old_data: Optional[dict] = None, new_data: Optional[dict] = None) -> None:
    db.add(AuditLog(
        entity_type="upload",
        entity_id=upload_id,
        action=action,
        actor_id=actor_id,
        old_data=json.dumps(old_data) if old_data is not None else None,
        new_data=json.dumps(new_data) if new_data is not None else None,
    ))


def _require_admin(actor: Optional[User]) -> None:
    if actor is None or not actor.is_admin:
        raise AuthorizationError("Admin access required")


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_int(value, field: str) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a whole number")


def submit(
    db: Session,
    user_id: str,
    resource_type: str,
    content: bytes,
    filename: str,
    title: Optional[str],
    subject: Optional[str],
    department: Optional[str],
    semester=None,
    year=None,
    session: Optional[str] = None,
    marks=None,
    chapter: Optional[str] = None,
    description: Optional[str] = None,
    content_type: Optional[str] = None,
    storage: Optional[FileStorageService] = None,
) -> Upload:
    """Validate metadata, store the file, and create a pending upload."""
    storage = storage or file_storage

    resource_type = _clean(resource_type)
    title = _clean(title)
    subject = _clean(subject)
    department = _clean(department)

    missing = [
        name for name, value in (
            ("title", title),
            ("resource_type", resource_type),
            ("department", department),
            ("subject", subject),
        ) if not value
    ]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")
    if resource_type not in RESOURCE_TYPES:
        raise ValidationError(
            f"resource_type must be one of: {', '.join(RESOURCE_TYPES)}"
        )

    semester_value = _parse_int(semester, "semester")
    year_value = _parse_int(year, "year")
    marks_value = _parse_int(marks, "marks")
    session = _clean(session)
    if session is not None and session not in SESSIONS:
        raise ValidationError(f"session must be one of: {', '.join(SESSIONS)}")

    if not db.query(Department).filter(Department.id == department).first():
        raise ValidationError(f"Unknown department '{department}'")

    file_path = storage.save(content, filename, resource_type, content_type=content_type)

    upload = Upload(
        user_id=user_id,
        resource_type=resource_type,
        title=title,
        subject=subject,
        department=department,
        semester=semester_value,
        year=year_value,
        session=session,
        marks=marks_value,
        chapter=_clean(chapter),
        description=_clean(description),
        file_path=file_path,
        original_filename=filename or "upload.pdf",
        file_size=len(content),
        status=STATUS_PENDING,
    )
    try:
        db.add(upload)
        db.flush()
        _audit(db, upload.id, "submitted", user_id, new_data={
            "title": title,
            "resource_type": resource_type,
            "department": department,
        })
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        storage.delete(file_path)
        logger.error("Failed to record upload %r: %s", title, e)
        raise StorageError("Could not save upload") from e

    db.refresh(upload)
    logger.info("Upload %s (%s) submitted for review by %s", upload.id, title, user_id)
    return upload


def list_uploads(
    db: Session,
    actor: Optional[User] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    resource_type: Optional[str] = None,
    department: Optional[str] = None,
    semester: Optional[int] = None,
    year: Optional[int] = None,
    limit: Optional[int] = None,
) -> list[Upload]:
    """List uploads newest first.

    Admins may filter by any status. Everyone else only ever sees approved
    records; asking for another status yields an empty list.
    """
    status = _clean(status)
    if status is not None and status != STATUS_ALL and status not in STATUSES:
        raise ValidationError(
            f"status must be one of: {', '.join(STATUSES + (STATUS_ALL,))}"
        )

    query = db.query(Upload)
    if actor is not None and actor.is_admin:
        if status and status != STATUS_ALL:
            query = query.filter(Upload.status == status)
    else:
        if status not in (None, STATUS_ALL, STATUS_APPROVED):
            return []
        query = query.filter(Upload.status == STATUS_APPROVED)

    search = _clean(search)
    if search:
        needle = search.lower()
        query = query.filter(or_(
            func.lower(Upload.title).contains(needle, autoescape=True),
            func.lower(Upload.resource_type).contains(needle, autoescape=True),
            func.lower(Upload.subject).contains(needle, autoescape=True),
        ))
    if resource_type:
        query = query.filter(Upload.resource_type == resource_type)
    department = _clean(department)
    if department and department != STATUS_ALL:
        query = query.filter(Upload.department == department)
    if semester is not None:
        query = query.filter(Upload.semester == semester)
    if year is not None:
        query = query.filter(Upload.year == year)

    query = query.order_by(Upload.uploaded_at.desc())
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def get_upload(db: Session, upload_id: str, actor: Optional[User] = None) -> Upload:
    """Fetch one upload, hiding unreviewed records from everyone but owner and admins."""
    upload = db.query(Upload).filter(Upload.id == upload_id).first()
    if not upload:
        raise NotFoundError("Upload not found")
    if upload.status != STATUS_APPROVED:
        if actor is None or not (actor.is_admin or actor.id == upload.user_id):
            raise NotFoundError("Upload not found")
    return upload


def list_user_uploads(db: Session, user_id: str) -> list[Upload]:
    """All of a user's own submissions, any status."""
    return (
        db.query(Upload)
        .filter(Upload.user_id == user_id)
        .order_by(Upload.uploaded_at.desc())
        .all()
    )


def _transition(db: Session, upload_id: str, values: dict) -> int:
    """Apply ``values`` only if the upload is still pending. Returns rows changed."""
    return (
        db.query(Upload)
        .filter(Upload.id == upload_id, Upload.status == STATUS_PENDING)
        .update(values, synchronize_session=False)
    )


def _raise_transition_failure(db: Session, upload_id: str, verb: str) -> None:
    current = db.query(Upload.status).filter(Upload.id == upload_id).scalar()
    db.rollback()
    if current is None:
        raise NotFoundError("Upload not found")
    raise InvalidStateError(f"Cannot {verb} upload in status '{current}'")


def approve(db: Session, upload_id: str, actor: Optional[User]) -> Upload:
    """Transition pending -> approved."""
    _require_admin(actor)

    now = datetime.now(timezone.utc)
    changed = _transition(db, upload_id, {
        Upload.status: STATUS_APPROVED,
        Upload.approved_by: actor.id,
        Upload.approved_at: now,
    })
    if changed == 0:
        _raise_transition_failure(db, upload_id, "approve")

    _audit(db, upload_id, "approved", actor.id,
           old_data={"status": STATUS_PENDING},
           new_data={"status": STATUS_APPROVED})
    db.commit()

    upload = db.query(Upload).filter(Upload.id == upload_id).one()
    logger.info("Upload %s (%s) approved by %s", upload.id, upload.title, actor.id)
    return upload


def reject(db: Session, upload_id: str, actor: Optional[User], reason: Optional[str]) -> Upload:
    """Transition pending -> rejected with a non-empty reason."""
    _require_admin(actor)
    reason = _clean(reason)
    if not reason:
        raise ValidationError("A rejection reason is required")

    now = datetime.now(timezone.utc)
    changed = _transition(db, upload_id, {
        Upload.status: STATUS_REJECTED,
        Upload.rejected_by: actor.id,
        Upload.rejected_at: now,
        Upload.rejection_reason: reason,
    })
    if changed == 0:
        _raise_transition_failure(db, upload_id, "reject")

    _audit(db, upload_id, "rejected", actor.id,
           old_data={"status": STATUS_PENDING},
           new_data={"status": STATUS_REJECTED, "reason": reason})
    db.commit()

    upload = db.query(Upload).filter(Upload.id == upload_id).one()
    logger.info("Upload %s (%s) rejected by %s: %s", upload.id, upload.title, actor.id, reason)
    return upload


def delete_resource(
    db: Session,
    upload_id: str,
    actor: Optional[User],
    storage: Optional[FileStorageService] = None,
) -> dict:
    """Permanently remove an approved resource and its file."""
    storage = storage or file_storage
    _require_admin(actor)

    upload = db.query(Upload).filter(Upload.id == upload_id).first()
    if not upload:
        raise NotFoundError("Resource not found")
    if upload.status != STATUS_APPROVED:
        raise InvalidStateError("Can only delete approved resources")

    deleted = {"id": upload.id, "title": upload.title}
    storage.delete(upload.file_path)

    _audit(db, upload.id, "deleted", actor.id, old_data={
        "title": upload.title,
        "resource_type": upload.resource_type,
        "status": upload.status,
    })
    db.delete(upload)
    db.commit()

    logger.info("Resource %s (%s) deleted by %s", deleted["id"], deleted["title"], actor.id)
    return deleted
