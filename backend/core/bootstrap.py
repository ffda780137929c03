from __future__ import annotations

import logging

from core.database import ENGINE
from models import Base


logger = logging.getLogger(__name__)


def ensure_schema() -> None:
    """Create any missing tables. Existing tables are left untouched.

    Safe to run on every startup.
    """

    Base.metadata.create_all(bind=ENGINE)
    logger.debug("Schema ensured for tables: %s", ", ".join(sorted(Base.metadata.tables)))
