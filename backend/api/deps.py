from __future__ import annotations

from fastapi import Header, HTTPException

from core.config import settings


def get_school_id(x_school_id: str | None = Header(default=None)) -> str:
    """Return the school used to scope data.

    Requests without an `X-School-Id` header use the configured default school.
    """

    if x_school_id is None:
        return settings.default_school_id
    school_id = x_school_id.strip()
    if not school_id:
        raise HTTPException(status_code=400, detail="INVALID_SCHOOL_ID")
    return school_id
