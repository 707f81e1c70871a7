from __future__ import annotations

import io
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from topup_report.logging_config import configure_logging


@contextmanager
def _bare_root() -> Iterator[logging.Logger]:
    """Empty the root logger's handlers for the block, then put the old ones back."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    root.handlers = []
    try:
        yield root
    finally:
        for h in root.handlers:
            h.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)


def test_configure_logging_writes_to_given_stream() -> None:
    stream = io.StringIO()
    with _bare_root() as root:
        configure_logging(None, stream=stream)
        logging.getLogger("topup_report.test").info("Processing 3 companies...")

        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    assert " | INFO | topup_report.test | Processing 3 companies..." in stream.getvalue()


def test_configure_logging_sets_level_and_file(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "topup.log"
    stream = io.StringIO()
    with _bare_root() as root:
        configure_logging(log_path, logging.WARNING, stream)
        log = logging.getLogger("topup_report.test")
        log.info("not shown")
        log.warning("Company Acme had no top ups")

        assert root.level == logging.WARNING
        assert any(isinstance(h, logging.FileHandler) for h in root.handlers)

    text = log_path.read_text(encoding="utf-8")
    assert "WARNING | topup_report.test | Company Acme had no top ups" in text
    assert "not shown" not in text
    assert "not shown" not in stream.getvalue()
