from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class SeatingScopeRequest(BaseModel):
    """Which students and rooms a seating run covers.

    `class_keys` are "<grade>-<section>" strings. Without them, `grades` (or, when generating,
    the session's grades) limits the roster; with neither, every class of the major is used.
    Rooms are used in the order given.
    """

    room_ids: list[uuid.UUID] = Field(default_factory=list)
    major: str | None = None
    class_keys: list[str] = Field(default_factory=list)
    grades: list[str] = Field(default_factory=list)


class GenerateSeatingRequest(SeatingScopeRequest):
    session_id: uuid.UUID
    seed: int | None = Field(default=None, ge=0, le=2**31 - 1)


class SeatingIssue(BaseModel):
    type: str
    explanation: str
    details: dict[str, Any] = Field(default_factory=dict)


class AnalyzeSeatingResponse(BaseModel):
    summary: dict[str, Any] = Field(default_factory=dict)
    issues: list[SeatingIssue] = Field(default_factory=list)


class GenerateSeatingResponse(BaseModel):
    run_id: uuid.UUID
    session_id: uuid.UUID
    status: Literal["COMPLETE", "PARTIAL", "EMPTY"]
    seed: int
    cleared_count: int = 0
    placed_count: int = 0
    unseated_count: int = 0
    unseated_student_ids: list[uuid.UUID] = Field(default_factory=list)
    message: str
    warnings: list[SeatingIssue] = Field(default_factory=list)
    stats: dict[str, Any] = Field(default_factory=dict)


class ExamSeatingOut(BaseModel):
    id: uuid.UUID
    session_id: uuid.UUID
    room_id: uuid.UUID
    student_id: uuid.UUID
    student_name: str
    student_grade: str
    student_section: str
    student_major: str
    seat_row: int
    seat_col: int
    assigned_at: datetime

    class Config:
        from_attributes = True


class ListSessionSeatingResponse(BaseModel):
    session_id: uuid.UUID
    seats: list[ExamSeatingOut] = Field(default_factory=list)


class SeatingRunOut(BaseModel):
    id: uuid.UUID
    session_id: uuid.UUID
    created_at: datetime
    status: str
    seed: int | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)
    placed_count: int = 0
    unseated_count: int = 0
    notes: str | None = None

    class Config:
        from_attributes = True


class ListSeatingRunsResponse(BaseModel):
    runs: list[SeatingRunOut] = Field(default_factory=list)
