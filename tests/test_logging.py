from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import pytest

from aiprimer_r3e.logging import JsonFormatter, setup_logging


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        "aiprimer_core.reconciler", logging.INFO, __file__, 1, "Applied %d", (5,), None
    )
    record.event = "reconciler.applied"
    record.category = "fit"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Applied 5"
    assert payload["level"] == "info"
    assert payload["logger"] == "aiprimer_core.reconciler"
    assert payload["event"] == "reconciler.applied"
    assert payload["category"] == "fit"
    assert "args" not in payload
    assert "timestamp" in payload


def test_setup_logging_writes_json_to_file(tmp_path: Path) -> None:
    target = tmp_path / "logs" / "run.jsonl"

    setup_logging({"logging": {"level": "debug", "output": str(target), "format": "json"}})
    logging.getLogger("aiprimer_core.fitting").debug(
        "debug line", extra={"event": "fitting.rejected"}
    )

    entries = [json.loads(line) for line in target.read_text(encoding="utf-8").splitlines()]
    assert entries[-1]["event"] == "fitting.rejected"
    assert entries[-1]["level"] == "debug"


def test_setup_logging_text_format_and_level(tmp_path: Path) -> None:
    target = tmp_path / "run.log"

    setup_logging({"logging": {"level": "warning", "output": str(target), "format": "text"}})
    logger = logging.getLogger("aiprimer_r3e.cli")
    logger.info("hidden")
    logger.warning("shown")

    assert target.read_text(encoding="utf-8") == "WARNING aiprimer_r3e.cli: shown\n"


def test_setup_logging_replaces_previous_handler() -> None:
    first = setup_logging({"logging": {"output": "stdout"}})
    second = setup_logging({"logging": {"output": "stderr"}})

    handlers = logging.getLogger("aiprimer_core").handlers
    assert second in handlers
    assert first not in handlers
    assert isinstance(first, logging.StreamHandler) and first.stream is sys.stdout
    assert logging.getLogger("aiprimer_r3e").handlers.count(second) == 1


def test_setup_logging_defaults() -> None:
    handler = setup_logging()

    assert isinstance(handler.formatter, JsonFormatter)
    assert logging.getLogger("aiprimer_core").level == logging.INFO


def test_unknown_level_is_rejected() -> None:
    with pytest.raises(ValueError):
        setup_logging({"logging": {"level": "chatty"}})
