"""Departments router — browse categories."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from polylearn.database import get_db
from polylearn.middleware.auth import require_admin
from polylearn.models.department import Department
from polylearn.models.user import User
from polylearn.schemas.department import DepartmentCreate, DepartmentResponse
from polylearn.services import department_service

router = APIRouter(prefix="/api/departments", tags=["departments"])


def _department_to_response(department: Department, counts: dict[str, int]) -> DepartmentResponse:
    return DepartmentResponse(
        id=department.id,
        name=department.name,
        short_name=department.short_name,
        description=department.description,
        accent_color=department.accent_color,
        resource_count=counts.get(department.id, 0),
    )


@router.get("", response_model=list[DepartmentResponse])
def list_departments(db: Session = Depends(get_db)):
    counts = department_service.resource_counts(db)
    return [_department_to_response(d, counts) for d in department_service.list_departments(db)]


@router.get("/{department_id}", response_model=DepartmentResponse)
def get_department(department_id: str, db: Session = Depends(get_db)):
    department = department_service.get_department(db, department_id)
    return _department_to_response(department, department_service.resource_counts(db))


@router.post("", response_model=DepartmentResponse, status_code=201)
def create_department(
    req: DepartmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    department = department_service.create_department(
        db,
        current_user,
        id=req.id,
        name=req.name,
        short_name=req.short_name,
        description=req.description,
        accent_color=req.accent_color,
    )
    return _department_to_response(department, {})
