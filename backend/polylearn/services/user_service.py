"""User service — accounts, privilege changes, and search history."""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from polylearn.errors import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from polylearn.middleware.auth import hash_password, verify_password
from polylearn.models.audit_log import AuditLog
from polylearn.models.search_history import SearchHistory
from polylearn.models.user import User, ROLE_ADMIN, ROLE_STUDENT, ROLE_SUPERADMIN

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72  # bcrypt input limit


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def get_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def check_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")


def register_user(
    db: Session,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    role: str = ROLE_STUDENT,
) -> User:
    """Create an account. Every self-registered account is a student."""
    email = normalize_email(email)
    first_name = (first_name or "").strip()
    last_name = (last_name or "").strip()
    if not email or not password or not first_name or not last_name:
        raise ValidationError("All fields are required")
    if "@" not in email:
        raise ValidationError("A valid email address is required")
    check_password(password)
    if get_by_email(db, email):
        raise ConflictError("User with this email already exists")

    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.email)
    return user


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user for valid credentials, otherwise ``None``."""
    user = get_by_email(db, email)
    if not user or not verify_password(password or "", user.password_hash):
        return None
    return user


def promote_user(db: Session, email: str, requester: User) -> User:
    """Grant admin privileges. Only the super-administrator may do this."""
    if requester is None or not requester.is_superadmin:
        logger.warning("Promotion of %s refused for %s", email,
                       requester.email if requester else "anonymous")
        raise AuthorizationError("Only the super-administrator can promote users")

    email = normalize_email(email)
    if not email:
        raise ValidationError("Email is required")

    target = get_by_email(db, email)
    if not target:
        raise NotFoundError("User not found with this email address")
    if target.is_admin:
        raise InvalidStateError("User is already an administrator")

    old_role = target.role
    target.role = ROLE_ADMIN
    target.promoted_by = requester.id
    target.promoted_at = datetime.now(timezone.utc)
    db.add(AuditLog(
        entity_type="user",
        entity_id=target.id,
        action="promoted",
        actor_id=requester.id,
        old_data=json.dumps({"role": old_role}),
        new_data=json.dumps({"role": ROLE_ADMIN}),
    ))
    db.commit()
    db.refresh(target)
    logger.info("User %s promoted to admin by %s", target.email, requester.email)
    return target


def ensure_superadmin(
    db: Session,
    email: str,
    password: str,
    first_name: str = "Super",
    last_name: str = "Admin",
) -> User:
    """Create the super-administrator, or raise an existing account to that role.

    Any other account currently holding the role is demoted to admin so that
    exactly one super-administrator exists.
    """
    email = normalize_email(email)
    user = get_by_email(db, email)
    if user is None:
        if len((password or "").encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"SUPERADMIN_PASSWORD must be at most {MAX_PASSWORD_BYTES} bytes")
        user = User(
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=ROLE_SUPERADMIN,
        )
        db.add(user)
        logger.info("Created super-administrator account %s", email)
    elif user.role != ROLE_SUPERADMIN:
        user.role = ROLE_SUPERADMIN
        logger.info("Raised %s to super-administrator", email)

    db.flush()
    (
        db.query(User)
        .filter(User.role == ROLE_SUPERADMIN, User.id != user.id)
        .update({User.role: ROLE_ADMIN}, synchronize_session=False)
    )
    db.commit()
    db.refresh(user)
    return user


def record_search(
    db: Session,
    user_id: str,
    search_query: str,
    department: Optional[str] = None,
    resource_type: Optional[str] = None,
    semester: Optional[int] = None,
    year: Optional[int] = None,
) -> SearchHistory:
    search_query = (search_query or "").strip()
    if not search_query:
        raise ValidationError("search_query is required")
    entry = SearchHistory(
        user_id=user_id,
        search_query=search_query,
        department=department,
        resource_type=resource_type,
        semester=semester,
        year=year,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def list_search_history(db: Session, user_id: str, limit: int = HISTORY_LIMIT) -> list[SearchHistory]:
    return (
        db.query(SearchHistory)
        .filter(SearchHistory.user_id == user_id)
        .order_by(SearchHistory.searched_at.desc())
        .limit(limit)
        .all()
    )
