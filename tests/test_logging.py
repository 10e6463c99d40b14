import logging

import pytest

from todo_api.app.core.logging_config import owned_handlers, setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in owned_handlers(root):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)


def test_repeated_setup_installs_one_console_handler(root_logger):
    foreign = logging.NullHandler()
    root_logger.addHandler(foreign)
    try:
        setup_logging("DEBUG")
        setup_logging("WARNING")
        assert [h.get_name() for h in owned_handlers(root_logger)] == ["todo_api.console"]
        assert root_logger.level == logging.WARNING
        assert foreign in root_logger.handlers
    finally:
        root_logger.removeHandler(foreign)


def test_unknown_level_falls_back_to_info(root_logger):
    setup_logging("chatty")
    assert root_logger.level == logging.INFO


def test_log_file_receives_records(root_logger, tmp_path):
    logfile = tmp_path / "api.log"
    setup_logging("INFO", str(logfile))
    logging.getLogger("todo_api.test").info("written to file")
    for handler in owned_handlers(root_logger):
        handler.flush()
    assert "[INFO] todo_api.test: written to file" in logfile.read_text(encoding="utf-8")


def test_uvicorn_logs_reach_root(root_logger):
    logging.getLogger("uvicorn.access").addHandler(logging.NullHandler())
    logging.getLogger("uvicorn.access").propagate = False
    setup_logging()
    server_logger = logging.getLogger("uvicorn.access")
    assert server_logger.handlers == []
    assert server_logger.propagate is True
