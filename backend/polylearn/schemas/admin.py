"""Admin panel request/response schemas."""

from typing import Optional

from pydantic import BaseModel


class RejectRequest(BaseModel):
    reason: Optional[str] = None


class PromoteRequest(BaseModel):
    email: str


class DeleteResourceResponse(BaseModel):
    message: str
    id: str
    title: str


class UploadStatusCounts(BaseModel):
    pending: int
    approved: int
    rejected: int


class AdminStatsResponse(BaseModel):
    users: int
    uploads: int
    search_history: int
    upload_stats: UploadStatusCounts


class PublicStatsResponse(BaseModel):
    departments: int
    question_papers: int
    study_notes: int
    active_students: int
