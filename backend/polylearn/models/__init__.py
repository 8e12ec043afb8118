"""SQLAlchemy ORM models."""

from polylearn.models.user import User
from polylearn.models.department import Department
from polylearn.models.upload import Upload
from polylearn.models.search_history import SearchHistory
from polylearn.models.audit_log import AuditLog

__all__ = [
    "User",
    "Department",
    "Upload",
    "SearchHistory",
    "AuditLog",
]
