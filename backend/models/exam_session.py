from __future__ import annotations

import uuid

from sqlalchemy import Column, Date, DateTime, Text, Uuid
from sqlalchemy.sql import func

from models.base import Base, JSON_DOC


class ExamSession(Base):
    __tablename__ = "exam_sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Text, nullable=True)
    end_time = Column(Text, nullable=True)
    grades = Column(JSON_DOC, nullable=False, default=list)
    major = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
