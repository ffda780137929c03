from __future__ import annotations

import uuid
import datetime as dt

from pydantic import BaseModel, Field


class ExamSessionBase(BaseModel):
    name: str = Field(min_length=1)
    date: dt.date
    start_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    end_time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    grades: list[str] = Field(default_factory=list)
    major: str = Field(min_length=1)


class ExamSessionCreate(ExamSessionBase):
    pass


class ExamSessionOut(ExamSessionBase):
    id: uuid.UUID
    created_at: dt.datetime

    class Config:
        from_attributes = True
