"""Auth router — registration, login, and user info."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from polylearn.config import settings
from polylearn.database import get_db
from polylearn.middleware.auth import get_current_user, issue_token
from polylearn.middleware.rate_limit import limiter
from polylearn.models.user import User
from polylearn.schemas.auth import RegisterRequest, LoginRequest, TokenResponse, UserResponse
from polylearn.services import user_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        is_admin=user.is_admin,
        promoted_at=user.promoted_at.isoformat() if user.promoted_at else None,
        created_at=user.created_at.isoformat(),
    )


@router.post("/register", response_model=UserResponse, status_code=201)
@limiter.limit(settings.AUTH_RATE_LIMIT)
def register(request: Request, req: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new student account."""
    user = user_service.register_user(
        db,
        email=req.email,
        password=req.password,
        first_name=req.first_name,
        last_name=req.last_name,
    )
    return user_to_response(user)


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
def login(request: Request, req: LoginRequest, db: Session = Depends(get_db)):
    """Login and get JWT token."""
    user = user_service.authenticate(db, req.email, req.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return TokenResponse(access_token=issue_token(user))


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Get current user info."""
    return user_to_response(current_user)
