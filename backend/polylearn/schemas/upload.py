"""Upload and public resource schemas."""

from typing import Optional

from pydantic import BaseModel


class SubmitterResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str


class UploadResponse(BaseModel):
    id: str
    user_id: str
    resource_type: str
    title: str
    subject: str
    department: str
    semester: Optional[int]
    year: Optional[int]
    session: Optional[str]
    marks: Optional[int]
    chapter: Optional[str]
    description: Optional[str]
    original_filename: str
    file_size: int
    status: str
    approved_by: Optional[str] = None
    approved_at: Optional[str] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[str] = None
    rejection_reason: Optional[str] = None
    uploaded_at: str
    submitter: Optional[SubmitterResponse] = None

    class Config:
        from_attributes = True


class UploadListResponse(BaseModel):
    uploads: list[UploadResponse]
    total: int


class ResourceResponse(BaseModel):
    """An approved upload as shown in public listings."""
    id: str
    resource_type: str
    title: str
    subject: str
    department: str
    semester: Optional[int]
    year: Optional[int]
    session: Optional[str]
    marks: Optional[int]
    chapter: Optional[str]
    description: Optional[str]
    file_url: str
    uploaded_at: str


class ResourceListResponse(BaseModel):
    resources: list[ResourceResponse]
    total: int


class SearchHistoryCreate(BaseModel):
    search_query: str
    department: Optional[str] = None
    resource_type: Optional[str] = None
    semester: Optional[int] = None
    year: Optional[int] = None


class SearchHistoryResponse(BaseModel):
    id: str
    search_query: str
    department: Optional[str]
    resource_type: Optional[str]
    semester: Optional[int]
    year: Optional[int]
    searched_at: str
