from __future__ import annotations

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.sql import func

from models.base import Base


class ExamRoom(Base):
    __tablename__ = "exam_rooms"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    building = Column(Text, nullable=False, default="")
    rows = Column("row_count", Integer, nullable=False)
    columns = Column("column_count", Integer, nullable=False)
    capacity = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("row_count >= 0", name="ck_exam_rooms_rows"),
        CheckConstraint("column_count >= 0", name="ck_exam_rooms_columns"),
        UniqueConstraint("school_id", "name", name="uq_exam_rooms_school_name"),
    )
