from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from core.config import BACKEND_DIR


SEATING_LOGGERS = (
    "solver.seating_generator",
    "services.seating_service",
    "api.routes.seating",
)

LOG_FILE_NAME = "seating.log"


def resolve_log_level(environment: str, override: str | None = None) -> int:
    """Explicit LOG_LEVEL wins; otherwise INFO in production and DEBUG elsewhere."""

    if override:
        level = logging.getLevelName(override.strip().upper())
        if isinstance(level, int):
            return level
        raise ValueError(f"Unknown log level {override!r}")
    env = (environment or "development").lower().strip()
    return logging.INFO if env == "production" else logging.DEBUG


def build_handlers(*, environment: str, level: int, log_dir: str | Path | None = None) -> list[logging.Handler]:
    """Console handler always; a rotating `seating.log` in production or when a log dir is given."""

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    handlers: list[logging.Handler] = []

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    handlers.append(console)

    env = (environment or "development").lower().strip()
    if env == "production" or log_dir is not None:
        logs_dir = Path(log_dir) if log_dir is not None else Path(BACKEND_DIR) / "logs"
        logs_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            logs_dir / LOG_FILE_NAME,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    return handlers


def configure_seating_loggers(*, level: int, trace: bool = False) -> None:
    # With trace on, buffer/swap DEBUG records still need a handler that lets them through.
    seating_level = logging.DEBUG if trace else level
    for name in SEATING_LOGGERS:
        logging.getLogger(name).setLevel(seating_level)


def setup_logging(
    *,
    environment: str,
    level: str | None = None,
    log_dir: str | Path | None = None,
    seating_trace: bool = False,
) -> None:
    """Configure application logging.

    - Dev/test: console logs, DEBUG level.
    - Prod: console + rotating `logs/seating.log`, INFO level.
    - `level` (LOG_LEVEL) overrides both; `log_dir` (LOG_DIR) turns the file log on anywhere.
    - `seating_trace` (SEATING_TRACE) keeps the seating modules at DEBUG.

    Safe to call multiple times (won't double-add handlers).
    """

    root = logging.getLogger()
    if root.handlers:
        return

    resolved = resolve_log_level(environment, level)
    handlers = build_handlers(environment=environment, level=resolved, log_dir=log_dir)
    if seating_trace:
        for handler in handlers:
            handler.setLevel(logging.DEBUG)

    logging.basicConfig(level=resolved, handlers=handlers)

    configure_seating_loggers(level=resolved, trace=seating_trace)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(resolved)
    logging.getLogger("uvicorn.error").setLevel(resolved)
    logging.getLogger("uvicorn.access").setLevel(resolved)
