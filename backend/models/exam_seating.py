from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.sql import func

from models.base import Base


class ExamSeating(Base):
    """One occupied seat of a session's seating plan.

    Student fields are denormalized so the plan can be printed without joining the roster.
    """

    __tablename__ = "exam_seating"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(Text, nullable=False, index=True)
    session_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    run_id = Column(Uuid(as_uuid=True), nullable=True)
    room_id = Column(Uuid(as_uuid=True), nullable=False)
    student_id = Column(Uuid(as_uuid=True), nullable=False)
    student_name = Column(Text, nullable=False, default="")
    student_grade = Column(Text, nullable=False)
    student_section = Column(Text, nullable=False, default="")
    student_major = Column(Text, nullable=False, default="")
    seat_row = Column(Integer, nullable=False)
    seat_col = Column(Integer, nullable=False)
    assigned_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("session_id", "room_id", "seat_row", "seat_col", name="uq_exam_seating_seat"),
        UniqueConstraint("session_id", "student_id", name="uq_exam_seating_student"),
    )
