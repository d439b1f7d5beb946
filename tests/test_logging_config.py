import logging
from logging.handlers import TimedRotatingFileHandler

import pytest

from espn_scrape.logging_config import LOG_FILE_NAME, configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in list(root.handlers):
        if getattr(handler, "_espn_scrape", False):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_daily_log_file(tmp_path, restore_root_logger):
    configure_logging(level="debug", log_dir=str(tmp_path))

    handlers = [h for h in restore_root_logger.handlers if getattr(h, "_espn_scrape", False)]
    file_handlers = [h for h in handlers if isinstance(h, TimedRotatingFileHandler)]
    assert len(handlers) == 2
    assert len(file_handlers) == 1
    assert file_handlers[0].when == "MIDNIGHT"
    assert restore_root_logger.level == logging.DEBUG

    logging.getLogger("espn_scrape.test").info("hello")
    file_handlers[0].flush()
    assert "hello" in (tmp_path / LOG_FILE_NAME).read_text(encoding="utf-8")


def test_reconfiguring_replaces_handlers(tmp_path, restore_root_logger):
    configure_logging(log_dir=str(tmp_path))
    configure_logging(log_dir=str(tmp_path), to_file=False)

    handlers = [h for h in restore_root_logger.handlers if getattr(h, "_espn_scrape", False)]
    assert len(handlers) == 1
    assert logging.getLogger("httpx").level == logging.WARNING
