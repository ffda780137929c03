from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.deps import get_school_id
from api.scope import get_by_id, where_school
from core.database import get_db
from models.exam_room import ExamRoom
from models.exam_seating import ExamSeating
from schemas.exam_room import ExamRoomCreate, ExamRoomOut


logger = logging.getLogger(__name__)


router = APIRouter()


def _ensure_unique_room_name(db: Session, *, name: str, school_id: str) -> None:
    q = where_school(select(ExamRoom.id).where(ExamRoom.name == name), ExamRoom, school_id)
    if db.execute(q.limit(1)).first() is not None:
        raise HTTPException(status_code=409, detail="ROOM_NAME_ALREADY_EXISTS")


@router.get("/", response_model=list[ExamRoomOut])
def list_exam_rooms(
    building: str | None = None,
    db: Session = Depends(get_db),
    school_id: str = Depends(get_school_id),
) -> list[ExamRoomOut]:
    q = where_school(select(ExamRoom), ExamRoom, school_id)
    if building:
        q = q.where(ExamRoom.building == building)
    return db.execute(q.order_by(ExamRoom.name.asc())).scalars().all()


@router.post("/", response_model=ExamRoomOut)
def create_exam_room(
    payload: ExamRoomCreate,
    db: Session = Depends(get_db),
    school_id: str = Depends(get_school_id),
) -> ExamRoomOut:
    data = payload.model_dump()
    data["name"] = str(data["name"]).strip()
    data["building"] = str(data.get("building") or "").strip()
    if not data["name"]:
        raise HTTPException(status_code=400, detail="INVALID_NAME")

    _ensure_unique_room_name(db, name=data["name"], school_id=school_id)

    room = ExamRoom(
        school_id=school_id,
        capacity=int(data["rows"]) * int(data["columns"]),
        **data,
    )
    db.add(room)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="ROOM_NAME_ALREADY_EXISTS")
    db.refresh(room)
    return room


@router.delete("/{room_id}")
def delete_exam_room(
    room_id: uuid.UUID,
    db: Session = Depends(get_db),
    school_id: str = Depends(get_school_id),
) -> dict:
    room = get_by_id(db, ExamRoom, room_id, school_id)
    if room is None:
        raise HTTPException(status_code=404, detail="ROOM_NOT_FOUND")

    # Stored plans reference the room; they must be cleared or regenerated first.
    q = where_school(select(ExamSeating.session_id).where(ExamSeating.room_id == room_id), ExamSeating, school_id)
    session_ids = sorted({str(sid) for sid in db.execute(q).scalars().all()})
    if session_ids:
        logger.info("Refusing to delete exam room %s (%s): used by %d sessions", str(room_id), room.name, len(session_ids))
        raise HTTPException(status_code=409, detail={"code": "ROOM_IN_USE", "session_ids": session_ids})

    db.delete(room)
    db.commit()
    return {"ok": True}
