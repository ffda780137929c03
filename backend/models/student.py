from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, DateTime, Text, Uuid
from sqlalchemy.sql import func

from models.base import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    grade = Column(Text, nullable=False, index=True)
    section = Column(Text, nullable=False, default="")
    major = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
