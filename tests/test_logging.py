"""Tests for structured logging helpers."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Any

import pytest
import structlog

from eupathdb import logging_setup
from eupathdb.logging_setup import (
    _add_context_processor,
    _redact_secrets_processor,
    bind_stage,
    configure_logging,
    generate_run_id,
    get_run_context,
    set_run_context,
)


def test_redacts_sensitive_keys() -> None:
    event = {"event": "querying", "api_key": "abc", "nested": {"Authorization": "Bearer x"}, "url": "http://x"}

    redacted = _redact_secrets_processor(None, "info", event)

    assert redacted["api_key"] == "[REDACTED]"
    assert redacted["nested"]["Authorization"] == "[REDACTED]"
    assert redacted["url"] == "http://x"


def test_context_processor_keeps_explicit_stage() -> None:
    set_run_context(run_id="run12345", stage="fetch")

    event = _add_context_processor(None, "info", {"event": "x", "stage": "extract"})

    assert event["run_id"] == "run12345"
    assert event["stage"] == "extract"
    assert get_run_context() == {"run_id": "run12345", "stage": "fetch"}


def test_generate_run_id() -> None:
    first, second = generate_run_id(), generate_run_id()

    assert len(first) == 8
    assert first != second


def test_bind_stage_sets_context() -> None:
    logger = bind_stage(structlog.get_logger("test"), "extract", table="GoTerms")

    assert get_run_context()["stage"] == "extract"
    assert logger is not None


def test_configure_logging_with_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}
    monkeypatch.setattr(logging_setup, "_LOGGING_CONFIGURED", False)
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(basic=kwargs))
    monkeypatch.setattr(structlog, "configure", lambda **kwargs: captured.update(structlog=kwargs))

    log_file = tmp_path / "logs" / "run.log"
    configure_logging("DEBUG", console_format="json", file_enabled=True, log_file=log_file)

    handlers = captured["basic"]["handlers"]
    assert captured["basic"]["level"] == logging.DEBUG
    assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in handlers)
    assert log_file.parent.exists()
    assert isinstance(captured["structlog"]["processors"][-1], structlog.processors.JSONRenderer)
    for handler in handlers:
        handler.close()


def test_configure_logging_is_idempotent(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(logging_setup, "_LOGGING_CONFIGURED", True)
    monkeypatch.setattr(structlog, "configure", lambda **kwargs: calls.append(kwargs))

    configure_logging("INFO")

    assert calls == []
