"""User model."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from polylearn.database import Base

ROLE_STUDENT = "student"
ROLE_ADMIN = "admin"
ROLE_SUPERADMIN = "superadmin"
ROLES = (ROLE_STUDENT, ROLE_ADMIN, ROLE_SUPERADMIN)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(120), nullable=False)
    last_name = Column(String(120), nullable=False, default="")
    role = Column(String(20), nullable=False, default=ROLE_STUDENT)  # student | admin | superadmin
    promoted_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    promoted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    # Relationships
    uploads = relationship("Upload", back_populates="user", foreign_keys="[Upload.user_id]")
    search_history = relationship("SearchHistory", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role in (ROLE_ADMIN, ROLE_SUPERADMIN)

    @property
    def is_superadmin(self) -> bool:
        return self.role == ROLE_SUPERADMIN
