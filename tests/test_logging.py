from __future__ import annotations

import logging
from pathlib import Path

from roxiler_stats.logging_config import configure_logging


def test_configure_logging_adds_stream_handler() -> None:
    # Ensure configuring logging doesn't raise and attaches a StreamHandler
    configure_logging(None)
    root = logging.getLogger()
    assert any(isinstance(h, logging.StreamHandler) for h in root.handlers)


def test_configure_logging_writes_file_and_accepts_level_names(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "api.log"
    configure_logging(log_path, "warning")
    root = logging.getLogger()
    try:
        assert root.level == logging.WARNING
        logging.getLogger("roxiler_stats.test").warning("written to file")
        for h in root.handlers:
            h.flush()
        assert "written to file" in log_path.read_text(encoding="utf-8")
    finally:
        for h in list(root.handlers):
            if isinstance(h, logging.FileHandler):
                root.removeHandler(h)
                h.close()
        configure_logging(None)
