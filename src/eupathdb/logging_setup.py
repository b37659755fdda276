"""Logging configuration for EuPathDB annotation retrieval."""

from __future__ import annotations

import logging
import logging.handlers
import uuid
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import structlog
from structlog.stdlib import BoundLogger

# Context variables for structured logging
run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)
stage_var: ContextVar[str | None] = ContextVar("stage", default=None)

_SENSITIVE_KEYS = ("authorization", "api_key", "token", "password", "secret", "cookie", "auth")

_LOGGING_CONFIGURED = False


def _redact_secrets_processor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Remove sensitive values from the structlog event dictionary."""

    def redact(d: dict[str, Any]) -> dict[str, Any]:
        result = {}
        for key, value in d.items():
            if isinstance(value, dict):
                result[key] = redact(value)
            elif isinstance(value, str) and any(s in str(key).lower() for s in _SENSITIVE_KEYS):
                result[key] = "[REDACTED]"
            else:
                result[key] = value
        return result

    return redact(event_dict)


def _add_context_processor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Add context variables to structlog event dictionary."""
    event_dict.setdefault("run_id", run_id_var.get() or "unknown")
    event_dict.setdefault("stage", stage_var.get() or "unknown")
    return event_dict


def set_run_context(run_id: str | None = None, stage: str | None = None) -> None:
    """Set context variables for structured logging."""
    if run_id is not None:
        run_id_var.set(run_id)
    if stage is not None:
        stage_var.set(stage)


def get_run_context() -> dict[str, str | None]:
    """Get current context variables."""
    return {
        "run_id": run_id_var.get(),
        "stage": stage_var.get(),
    }


def generate_run_id() -> str:
    """Generate a short unique id for the current run."""
    return str(uuid.uuid4())[:8]


def configure_logging(
    level: str = "INFO",
    *,
    console_format: str = "text",
    file_enabled: bool = False,
    log_file: Path | None = None,
    max_bytes: int = 10485760,
    backup_count: int = 5,
    force: bool = False,
) -> BoundLogger:
    """Configure stdlib handlers and structlog processors.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        console_format: Console format (text or json)
        file_enabled: Whether to also write a rotating log file
        log_file: Custom log file path
        force: Reconfigure even if logging was already configured

    Returns:
        Configured structlog logger
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED and not force:
        return structlog.get_logger()

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    handlers: list[logging.Handler] = [console_handler]

    if file_enabled:
        file_path = log_file or Path("logs/eupathdb.log")
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=file_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    logging.basicConfig(level=numeric_level, handlers=handlers, format="%(message)s", force=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _add_context_processor,
            _redact_secrets_processor,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if console_format == "json" else structlog.dev.ConsoleRenderer(colors=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _LOGGING_CONFIGURED = True
    return structlog.get_logger()


def bind_stage(logger: BoundLogger, stage: str, **extra: Any) -> BoundLogger:
    """Attach contextual metadata to the logger."""
    set_run_context(stage=stage)
    return logger.bind(stage=stage, **extra)


__all__ = [
    "bind_stage",
    "configure_logging",
    "generate_run_id",
    "get_run_context",
    "set_run_context",
]
