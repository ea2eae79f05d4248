# File: tests/test_logger.py
import logging

import pytest

from site_lingo.logger import LOGGER_NAME, SERVER_LOGGERS, configure, get_logger, init_logging


@pytest.fixture()
def restore_logging():
    yield
    init_logging()


def test_children_and_server_loggers_share_the_file(tmp_path, restore_logging):
    log_file = tmp_path / "proxy.log"
    project = configure(level="DEBUG", log_file=log_file, log_format="%(name)s %(message)s")

    get_logger("storage").debug("Repository opened")
    logging.getLogger("aiohttp.access").info("GET /view/example.com/")
    for handler in project.handlers:
        handler.flush()

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert lines == [f"{LOGGER_NAME}.storage Repository opened", "aiohttp.access GET /view/example.com/"]
    for name in SERVER_LOGGERS:
        assert logging.getLogger(name).handlers == project.handlers


def test_reconfigure_replaces_handlers(restore_logging):
    configure(level="WARNING")
    project = configure(level="INFO")
    assert len(project.handlers) == 1
    assert project.level == logging.INFO
    assert project.propagate is False


def test_append_keeps_existing_handlers(tmp_path, restore_logging):
    configure()
    project = configure(log_file=tmp_path / "extra.log", replace_handlers=False)
    assert len(project.handlers) == 3
