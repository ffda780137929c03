from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Integer, Text, Uuid
from sqlalchemy.sql import func

from models.base import Base, JSON_DOC


class SeatingRun(Base):
    __tablename__ = "seating_runs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(Text, nullable=False, index=True)
    session_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    # CREATED -> COMPLETE | PARTIAL | EMPTY | ERROR
    status = Column(Text, nullable=False, default="CREATED")
    seed = Column(Integer, nullable=True)
    parameters = Column(JSON_DOC, nullable=False, default=dict)
    placed_count = Column(Integer, nullable=False, default=0)
    unseated_count = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=True)
