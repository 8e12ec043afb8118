"""Upload model — a user-submitted resource moving through admin review."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Integer
from sqlalchemy.orm import relationship

from polylearn.database import Base

RESOURCE_QUESTION_PAPER = "question_paper"
RESOURCE_STUDY_NOTE = "study_note"
RESOURCE_TYPES = (RESOURCE_QUESTION_PAPER, RESOURCE_STUDY_NOTE)

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)


class Upload(Base):
    __tablename__ = "uploads"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    resource_type = Column(String(20), nullable=False)  # question_paper | study_note

    # Descriptive metadata, fixed at submission
    title = Column(String(500), nullable=False)
    subject = Column(String(255), nullable=False)
    department = Column(String(50), ForeignKey("departments.id"), nullable=False, index=True)
    semester = Column(Integer, nullable=True)
    year = Column(Integer, nullable=True)
    session = Column(String(20), nullable=True)  # Winter | Summer
    marks = Column(Integer, nullable=True)
    chapter = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)

    file_path = Column(Text, nullable=False)
    original_filename = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False, default=0)

    status = Column(String(20), nullable=False, default=STATUS_PENDING, index=True)  # pending | approved | rejected
    approved_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    rejected_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    uploaded_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc), index=True)

    # Relationships
    user = relationship("User", back_populates="uploads", foreign_keys=[user_id])
    department_ref = relationship("Department")
