from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class ExamRoomBase(BaseModel):
    name: str = Field(min_length=1)
    building: str = ""
    rows: int = Field(default=5, ge=0)
    columns: int = Field(default=5, ge=0)


class ExamRoomCreate(ExamRoomBase):
    pass


class ExamRoomOut(ExamRoomBase):
    id: uuid.UUID
    capacity: int
    created_at: datetime

    class Config:
        from_attributes = True
