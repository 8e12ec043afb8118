"""Department model — the browse categories resources are filed under."""

from sqlalchemy import Column, String, Text

from polylearn.database import Base


class Department(Base):
    __tablename__ = "departments"

    id = Column(String(50), primary_key=True)  # slug, e.g. "computer"
    name = Column(String(255), nullable=False)
    short_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    accent_color = Column(String(50), nullable=False)
