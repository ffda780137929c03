from __future__ import annotations

import os

# Settings and the engine are created at import time; point them at a throwaway database first.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.setdefault("ENVIRONMENT", "test")

import random

import pytest
from fastapi.testclient import TestClient


class IdentityRandom(random.Random):
    """Random source whose shuffle keeps input order."""

    def shuffle(self, x) -> None:  # type: ignore[override]
        return None


@pytest.fixture()
def identity_rng() -> IdentityRandom:
    return IdentityRandom()


@pytest.fixture()
def client():
    from core.bootstrap import ensure_schema
    from core.database import ENGINE
    from main import app
    from models import Base

    ensure_schema()
    with TestClient(app) as c:
        yield c
    Base.metadata.drop_all(bind=ENGINE)
