from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from api.deps import get_school_id
from api.scope import where_school
from core.database import get_db
from models.student import Student
from schemas.student import StudentCreate, StudentOut


router = APIRouter()


@router.get("/", response_model=list[StudentOut])
def list_students(
    major: str | None = None,
    grade: str | None = None,
    db: Session = Depends(get_db),
    school_id: str = Depends(get_school_id),
) -> list[StudentOut]:
    q = where_school(select(Student), Student, school_id)
    if major:
        q = q.where(Student.major == major)
    if grade:
        q = q.where(Student.grade == grade)
    return db.execute(q.order_by(Student.grade.asc(), Student.section.asc(), Student.name.asc())).scalars().all()


@router.post("/", response_model=StudentOut)
def create_student(
    payload: StudentCreate,
    db: Session = Depends(get_db),
    school_id: str = Depends(get_school_id),
) -> StudentOut:
    data = payload.model_dump()
    data["name"] = str(data["name"]).strip()
    data["grade"] = str(data["grade"]).strip()
    data["section"] = str(data.get("section") or "").strip()
    if data.get("major") is not None:
        data["major"] = str(data["major"]).strip() or None
    if not data["name"]:
        raise HTTPException(status_code=400, detail="INVALID_NAME")
    if not data["grade"]:
        raise HTTPException(status_code=400, detail="INVALID_GRADE")

    student = Student(school_id=school_id, **data)
    db.add(student)
    db.commit()
    db.refresh(student)
    return student
