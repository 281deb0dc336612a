"""Tests for the JSONL logging bootstrap."""

import json
import logging

from rich.logging import RichHandler

from profile_switcher.logging_setup import JsonlHandler, init_console_logging, init_json_logging


def test_writes_jsonl(tmp_path, restore_root_logger):
    """Records are written as one JSON object per line."""
    path = tmp_path / "logs" / "switch.jsonl"
    init_json_logging(str(path), "debug")

    logging.getLogger("profile_switcher.engine").info("Activated profile 'work'", extra={"context": "email"})

    record = json.loads(path.read_text().splitlines()[-1])
    assert record["lvl"] == "INFO"
    assert record["logger"] == "profile_switcher.engine"
    assert record["message"] == "Activated profile 'work'"
    assert record["context"] == "email"


def test_replaces_previous_handler(tmp_path, restore_root_logger):
    """Initializing twice keeps a single JSONL handler."""
    init_json_logging(str(tmp_path / "a.jsonl"), "info")
    init_json_logging(str(tmp_path / "b.jsonl"), "info")

    handlers = [h for h in restore_root_logger.handlers if isinstance(h, JsonlHandler)]
    assert len(handlers) == 1
    assert handlers[0].path == tmp_path / "b.jsonl"


def test_console_logging(restore_root_logger):
    """Console logging installs one rich stderr handler and sets the level."""
    init_console_logging("debug")
    init_console_logging("debug")

    handlers = [h for h in restore_root_logger.handlers if isinstance(h, RichHandler)]
    assert len(handlers) == 1
    assert handlers[0].console.stderr
    assert restore_root_logger.level == logging.DEBUG
