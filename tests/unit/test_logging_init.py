from __future__ import annotations

import logging

from elastic_ops.logging.init import SUMMARY_LEVEL, LabeledFormatter, get_logger, log_summary, setup_logging


def _record(level: int, msg: str) -> logging.LogRecord:
    return logging.LogRecord("elastic_ops", level, __file__, 1, msg, None, None)


def test_labels():
    fmt = LabeledFormatter()
    assert fmt.format(_record(logging.INFO, "hello")) == "INFO hello"
    assert fmt.format(_record(logging.WARNING, "careful")) == "WARN careful"
    assert fmt.format(_record(logging.ERROR, "boom")) == "ERROR boom"
    assert fmt.format(_record(SUMMARY_LEVEL, "files=1")) == "SUMMARY files=1"


def test_setup_is_idempotent():
    a = setup_logging()
    b = setup_logging()
    assert a is b
    assert len(a.handlers) == 1
    assert a.propagate is False


def test_module_loggers_share_handler(capsys):
    setup_logging()
    logging.getLogger("elastic_ops.services.orchestrator").info("from module")
    assert "INFO from module" in capsys.readouterr().out


def test_debug_level(capsys):
    logger = setup_logging(debug=True)
    logger.debug("details")
    assert "DEBUG details" in capsys.readouterr().out
    setup_logging(debug=False)
    logger.debug("hidden")
    assert "hidden" not in capsys.readouterr().out


def test_log_summary(capsys):
    log_summary("files=2 success=2")
    assert capsys.readouterr().out.strip() == "SUMMARY files=2 success=2"
    assert get_logger().name == "elastic_ops"
