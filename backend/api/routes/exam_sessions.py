from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from api.deps import get_school_id
from api.scope import get_by_id, where_school
from core.config import settings
from core.database import get_db
from models.exam_session import ExamSession
from schemas.exam_session import ExamSessionCreate, ExamSessionOut
from services.seating_service import clear_session_seating


router = APIRouter()


@router.get("/", response_model=list[ExamSessionOut])
def list_exam_sessions(
    db: Session = Depends(get_db),
    school_id: str = Depends(get_school_id),
) -> list[ExamSessionOut]:
    q = where_school(select(ExamSession), ExamSession, school_id)
    return db.execute(q.order_by(ExamSession.date.desc(), ExamSession.name.asc())).scalars().all()


@router.post("/", response_model=ExamSessionOut)
def create_exam_session(
    payload: ExamSessionCreate,
    db: Session = Depends(get_db),
    school_id: str = Depends(get_school_id),
) -> ExamSessionOut:
    data = payload.model_dump()
    data["name"] = str(data["name"]).strip()
    data["major"] = str(data["major"]).strip()
    if not data["name"]:
        raise HTTPException(status_code=400, detail="INVALID_NAME")
    if not data["major"]:
        raise HTTPException(status_code=400, detail="INVALID_MAJOR")

    session = ExamSession(school_id=school_id, **data)
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


@router.delete("/{session_id}")
def delete_exam_session(
    session_id: uuid.UUID,
    db: Session = Depends(get_db),
    school_id: str = Depends(get_school_id),
) -> dict:
    session = get_by_id(db, ExamSession, session_id, school_id)
    if session is None:
        raise HTTPException(status_code=404, detail="SESSION_NOT_FOUND")

    cleared = clear_session_seating(
        db,
        school_id=school_id,
        session_id=session_id,
        batch_size=settings.seating_write_batch_size,
    )
    db.delete(session)
    db.commit()
    return {"ok": True, "seats_cleared": cleared}
