import logging

import pytest

from src.utils.logging_config import setup_logging


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in saved_handlers:
        root.addHandler(h)
    root.setLevel(saved_level)


def test_category_files_split_by_logger_prefix(tmp_path, restore_root_logging):
    log_dir = setup_logging(tmp_path)
    assert log_dir == tmp_path

    logging.getLogger("src.onair.controller").info("onair line")
    logging.getLogger("src.capture.session").warning("capture line")
    for h in logging.getLogger().handlers:
        h.flush()

    onair = (tmp_path / "onair.log").read_text(encoding="utf-8")
    capture = (tmp_path / "capture.log").read_text(encoding="utf-8")
    app = (tmp_path / "app.log").read_text(encoding="utf-8")
    assert "onair line" in onair and "capture line" not in onair
    assert "capture line" in capture and "onair line" not in capture
    assert "onair line" in app and "capture line" in app
    assert (tmp_path / "error.log").read_text(encoding="utf-8") == ""


def test_repeated_setup_does_not_stack_handlers(tmp_path, restore_root_logging):
    setup_logging(tmp_path)
    count = len(logging.getLogger().handlers)
    setup_logging(tmp_path)
    assert len(logging.getLogger().handlers) == count


def test_noisy_loggers_follow_env(tmp_path, monkeypatch, restore_root_logging):
    monkeypatch.setenv("OBSWS_LOG_LEVEL", "ERROR")
    setup_logging(tmp_path)
    assert logging.getLogger("obsws_python").level == logging.ERROR
    assert logging.getLogger("uvicorn.access").level == logging.ERROR
