"""Department schemas."""

from typing import Optional

from pydantic import BaseModel


class DepartmentCreate(BaseModel):
    id: str
    name: str
    short_name: Optional[str] = None
    description: str = ""
    accent_color: Optional[str] = None


class DepartmentResponse(BaseModel):
    id: str
    name: str
    short_name: str
    description: str
    accent_color: str
    resource_count: int = 0

    class Config:
        from_attributes = True
