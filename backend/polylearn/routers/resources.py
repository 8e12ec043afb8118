"""Resources router — submission and public browsing of question papers and study notes.

Both resource types share one set of endpoints, mounted under
``/api/question-papers`` and ``/api/study-notes``.
"""

from typing import Optional, Union

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from polylearn.database import get_db
from polylearn.errors import NotFoundError, ValidationError
from polylearn.middleware.auth import get_current_user, get_optional_user
from polylearn.models.upload import Upload, RESOURCE_QUESTION_PAPER, RESOURCE_STUDY_NOTE
from polylearn.models.user import User
from polylearn.schemas.upload import (
    ResourceListResponse,
    ResourceResponse,
    SubmitterResponse,
    UploadResponse,
)
from polylearn.services import upload_service
from polylearn.services.file_storage import file_storage

RESOURCE_PREFIXES = {
    RESOURCE_QUESTION_PAPER: "/api/question-papers",
    RESOURCE_STUDY_NOTE: "/api/study-notes",
}


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def upload_to_response(upload: Upload, include_submitter: bool = False) -> UploadResponse:
    """Convert an Upload ORM row to the full (owner/admin) response."""
    submitter = None
    if include_submitter and upload.user is not None:
        submitter = SubmitterResponse(
            id=upload.user.id,
            first_name=upload.user.first_name,
            last_name=upload.user.last_name,
            email=upload.user.email,
        )
    return UploadResponse(
        id=upload.id,
        user_id=upload.user_id,
        resource_type=upload.resource_type,
        title=upload.title,
        subject=upload.subject,
        department=upload.department,
        semester=upload.semester,
        year=upload.year,
        session=upload.session,
        marks=upload.marks,
        chapter=upload.chapter,
        description=upload.description,
        original_filename=upload.original_filename,
        file_size=upload.file_size,
        status=upload.status,
        approved_by=upload.approved_by,
        approved_at=_iso(upload.approved_at),
        rejected_by=upload.rejected_by,
        rejected_at=_iso(upload.rejected_at),
        rejection_reason=upload.rejection_reason,
        uploaded_at=_iso(upload.uploaded_at) or "",
        submitter=submitter,
    )


def resource_to_response(upload: Upload) -> ResourceResponse:
    """Convert an approved Upload to its public listing shape."""
    prefix = RESOURCE_PREFIXES[upload.resource_type]
    return ResourceResponse(
        id=upload.id,
        resource_type=upload.resource_type,
        title=upload.title,
        subject=upload.subject,
        department=upload.department,
        semester=upload.semester,
        year=upload.year,
        session=upload.session,
        marks=upload.marks,
        chapter=upload.chapter,
        description=upload.description,
        file_url=f"{prefix}/{upload.id}/download",
        uploaded_at=_iso(upload.uploaded_at) or "",
    )


def _listing(uploads: list[Upload]) -> ResourceListResponse:
    return ResourceListResponse(
        resources=[resource_to_response(u) for u in uploads],
        total=len(uploads),
    )


def _get_of_type(db: Session, upload_id: str, resource_type: str, actor: Optional[User]) -> Upload:
    upload = upload_service.get_upload(db, upload_id, actor)
    if upload.resource_type != resource_type:
        raise NotFoundError("Upload not found")
    return upload


def build_router(resource_type: str) -> APIRouter:
    prefix = RESOURCE_PREFIXES[resource_type]
    router = APIRouter(prefix=prefix, tags=[prefix.rsplit("/", 1)[-1]])

    @router.get("", response_model=ResourceListResponse)
    def list_resources(
        db: Session = Depends(get_db),
        current_user: Optional[User] = Depends(get_optional_user),
    ):
        """All approved resources of this type, newest first."""
        return _listing(upload_service.list_uploads(db, current_user, status="approved",
                                                    resource_type=resource_type))

    @router.get("/recent", response_model=ResourceListResponse)
    def recent_resources(
        limit: int = Query(10, ge=1, le=100),
        db: Session = Depends(get_db),
    ):
        return _listing(upload_service.list_uploads(db, None, resource_type=resource_type, limit=limit))

    @router.get("/department/{department_id}", response_model=ResourceListResponse)
    def department_resources(department_id: str, db: Session = Depends(get_db)):
        return _listing(upload_service.list_uploads(
            db, None, resource_type=resource_type, department=department_id,
        ))

    @router.get("/search", response_model=ResourceListResponse)
    def search_resources(
        q: Optional[str] = Query(None),
        department: Optional[str] = Query(None),
        semester: Optional[int] = Query(None),
        year: Optional[int] = Query(None),
        db: Session = Depends(get_db),
    ):
        """Search approved resources by title/subject with optional filters."""
        return _listing(upload_service.list_uploads(
            db, None,
            search=q,
            resource_type=resource_type,
            department=department,
            semester=semester,
            year=year,
        ))

    @router.post("", response_model=UploadResponse, status_code=201)
    async def submit_resource(
        title: Optional[str] = Form(None),
        subject: Optional[str] = Form(None),
        department: Optional[str] = Form(None),
        semester: Optional[str] = Form(None),
        year: Optional[str] = Form(None),
        session: Optional[str] = Form(None),
        marks: Optional[str] = Form(None),
        chapter: Optional[str] = Form(None),
        description: Optional[str] = Form(None),
        file: Optional[UploadFile] = File(None),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        """Submit a PDF for admin review. The new record starts out pending."""
        if file is None:
            raise ValidationError("PDF file is required")
        content = await file.read()
        upload = upload_service.submit(
            db,
            user_id=current_user.id,
            resource_type=resource_type,
            content=content,
            filename=file.filename or "upload.pdf",
            content_type=file.content_type,
            title=title,
            subject=subject,
            department=department,
            semester=semester,
            year=year,
            session=session,
            marks=marks,
            chapter=chapter,
            description=description,
        )
        return upload_to_response(upload)

    @router.get("/{upload_id}", response_model=Union[UploadResponse, ResourceResponse])
    def get_resource(
        upload_id: str,
        db: Session = Depends(get_db),
        current_user: Optional[User] = Depends(get_optional_user),
    ):
        """A single resource.

        Owners and admins get the full record, including review fields;
        everyone else gets the public shape, and only once it is approved.
        """
        upload = _get_of_type(db, upload_id, resource_type, current_user)
        if current_user is not None and (current_user.is_admin or current_user.id == upload.user_id):
            return upload_to_response(upload)
        return resource_to_response(upload)

    @router.get("/{upload_id}/download")
    def download_resource(
        upload_id: str,
        db: Session = Depends(get_db),
        current_user: Optional[User] = Depends(get_optional_user),
    ):
        upload = _get_of_type(db, upload_id, resource_type, current_user)
        path = file_storage.resolve(upload.file_path)
        return FileResponse(
            path=str(path),
            filename=upload.original_filename,
            media_type="application/pdf",
        )

    return router


question_papers_router = build_router(RESOURCE_QUESTION_PAPER)
study_notes_router = build_router(RESOURCE_STUDY_NOTE)
