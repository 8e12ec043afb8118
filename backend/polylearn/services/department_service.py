"""Department service — browse categories and their approved resource counts."""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from polylearn.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from polylearn.models.department import Department
from polylearn.models.upload import Upload, STATUS_APPROVED
from polylearn.models.user import User

DEFAULT_DEPARTMENTS = [
    {
        "id": "ai",
        "name": "Artificial Intelligence",
        "short_name": "AI & ML Technologies",
        "description": "Machine Learning, Deep Learning, Neural Networks, and cutting-edge AI applications.",
        "accent_color": "hsl(220, 100%, 50%)",
    },
    {
        "id": "civil",
        "name": "Civil Engineering",
        "short_name": "Infrastructure & Construction",
        "description": "Structural Engineering, Environmental Engineering, Transportation, and Construction Management.",
        "accent_color": "hsl(25, 100%, 45%)",
    },
    {
        "id": "mechanical",
        "name": "Mechanical Engineering",
        "short_name": "Manufacturing & Design",
        "description": "Thermodynamics, Machine Design, Manufacturing Processes, and Automation Systems.",
        "accent_color": "hsl(120, 60%, 40%)",
    },
    {
        "id": "computer",
        "name": "Computer Engineering",
        "short_name": "Software & Systems",
        "description": "Programming, Data Structures, Web Development, and Computer Networks fundamentals.",
        "accent_color": "hsl(270, 80%, 55%)",
    },
    {
        "id": "electrical",
        "name": "Electrical Engineering",
        "short_name": "Power & Control Systems",
        "description": "Power Systems, Control Theory, Electric Machines, and Renewable Energy Technologies.",
        "accent_color": "hsl(45, 90%, 50%)",
    },
    {
        "id": "electronics",
        "name": "Electronics Engineering",
        "short_name": "Circuits & Communication",
        "description": "Digital Electronics, Communication Systems, Microprocessors, and Signal Processing.",
        "accent_color": "hsl(340, 75%, 50%)",
    },
    {
        "id": "bigdata",
        "name": "Big Data",
        "short_name": "Data Analytics & Processing",
        "description": "Big Data Analytics, Data Mining, Hadoop, Spark, and Large-scale Data Processing Systems.",
        "accent_color": "hsl(200, 85%, 45%)",
    },
]


def seed_departments(db: Session) -> int:
    """Insert any default department that is missing. Returns how many were added."""
    existing = {d.id for d in db.query(Department.id).all()}
    added = 0
    for data in DEFAULT_DEPARTMENTS:
        if data["id"] not in existing:
            db.add(Department(**data))
            added += 1
    if added:
        db.commit()
    return added


def resource_counts(db: Session) -> dict[str, int]:
    """Approved uploads per department id."""
    rows = (
        db.query(Upload.department, func.count(Upload.id))
        .filter(Upload.status == STATUS_APPROVED)
        .group_by(Upload.department)
        .all()
    )
    return {department: count for department, count in rows}


def list_departments(db: Session) -> list[Department]:
    return db.query(Department).order_by(Department.name).all()


def get_department(db: Session, department_id: str) -> Department:
    department = db.query(Department).filter(Department.id == department_id).first()
    if not department:
        raise NotFoundError("Department not found")
    return department


def create_department(
    db: Session,
    actor: Optional[User],
    id: str,
    name: str,
    short_name: str,
    description: str,
    accent_color: str,
) -> Department:
    if actor is None or not actor.is_admin:
        raise AuthorizationError("Admin access required")
    department_id = (id or "").strip().lower()
    if not department_id or not (name or "").strip():
        raise ValidationError("Department id and name are required")
    if db.query(Department).filter(Department.id == department_id).first():
        raise ConflictError(f"Department '{department_id}' already exists")

    department = Department(
        id=department_id,
        name=name.strip(),
        short_name=(short_name or name).strip(),
        description=(description or "").strip(),
        accent_color=accent_color or "hsl(220, 100%, 50%)",
    )
    db.add(department)
    db.commit()
    db.refresh(department)
    return department
