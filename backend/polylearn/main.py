"""PolyLearn Hub — FastAPI Application Entry Point."""

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from polylearn.config import settings
from polylearn.database import SessionLocal, init_db
from polylearn.errors import PolyLearnError, status_code_for
from polylearn.middleware.rate_limit import limiter
from polylearn.routers import admin, auth, departments, stats, user
from polylearn.routers.resources import question_papers_router, study_notes_router
from polylearn.services.seed import seed_defaults

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
log = logging.getLogger("polylearn")

init_db()

# ── CORS origins from env (supports dev localhost + production domain) ──────
_cors_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]

app = FastAPI(
    title="PolyLearn Hub",
    description="Study notes and question papers, reviewed before they go public.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(PolyLearnError)
async def polylearn_error_handler(request: Request, exc: PolyLearnError):
    status_code = status_code_for(exc)
    if status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth.router)
app.include_router(user.router)
app.include_router(admin.router)
app.include_router(departments.router)
app.include_router(stats.router)
app.include_router(question_papers_router)
app.include_router(study_notes_router)


@app.on_event("startup")
def on_startup():
    """Create the upload directory and seed departments / super-admin."""
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    db = SessionLocal()
    try:
        seed_defaults(db)
    finally:
        db.close()
    log.info("PolyLearn Hub ready (uploads in %s)", settings.UPLOAD_DIR)


@app.get("/")
def root():
    return {
        "name": "PolyLearn Hub API",
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "ok"}
