from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class StudentBase(BaseModel):
    name: str = Field(min_length=1)
    grade: str = Field(min_length=1)
    section: str = ""
    major: str | None = None
    is_active: bool = True


class StudentCreate(StudentBase):
    pass


class StudentOut(StudentBase):
    id: uuid.UUID
    created_at: datetime

    class Config:
        from_attributes = True
