from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session


def where_school(stmt, model, school_id: str):
    return stmt.where(model.school_id == school_id)


def get_by_id(db: Session, model, obj_id: uuid.UUID, school_id: str):
    q = select(model).where(model.id == obj_id)
    q = where_school(q, model, school_id)
    return db.execute(q).scalars().first()
