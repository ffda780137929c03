from __future__ import annotations

from fastapi import APIRouter

from api.routes import exam_rooms, exam_sessions, seating, students


api_router = APIRouter()
api_router.include_router(exam_rooms.router, prefix="/exam-rooms", tags=["exam-rooms"])
api_router.include_router(exam_sessions.router, prefix="/exam-sessions", tags=["exam-sessions"])
api_router.include_router(students.router, prefix="/students", tags=["students"])
api_router.include_router(seating.router, prefix="/seating", tags=["seating"])
