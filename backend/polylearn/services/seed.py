"""Startup seeding: default departments and the super-administrator account."""

import logging

from sqlalchemy.orm import Session

from polylearn.config import settings
from polylearn.services import department_service, user_service

logger = logging.getLogger(__name__)


def seed_defaults(db: Session) -> None:
    added = department_service.seed_departments(db)
    if added:
        logger.info("Seeded %d department(s)", added)

    if settings.SUPERADMIN_EMAIL and settings.SUPERADMIN_PASSWORD:
        user_service.ensure_superadmin(
            db,
            email=settings.SUPERADMIN_EMAIL,
            password=settings.SUPERADMIN_PASSWORD,
            first_name=settings.SUPERADMIN_FIRST_NAME,
            last_name=settings.SUPERADMIN_LAST_NAME,
        )
    else:
        logger.warning(
            "SUPERADMIN_EMAIL / SUPERADMIN_PASSWORD not set; no one can promote admins"
        )
