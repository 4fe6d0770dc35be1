import json
import logging
import sys

from upspatch.exceptions import ChecksumMismatchError
from upspatch.logging_config import ConsoleFormatter, JsonFormatter, get_logger, setup_logging


def _record(level=logging.INFO, msg="hello", exc_info=None):
    return logging.LogRecord(
        name="upspatch.test",
        level=level,
        pathname=__file__,
        lineno=123,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


def test_json_formatter_outputs_expected_fields():
    payload = json.loads(JsonFormatter().format(_record()))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "upspatch.test"
    assert payload["message"] == "hello"
    assert payload["pathname"] == __file__
    assert payload["lineno"] == 123
    assert "timestamp" in payload
    assert "thread" in payload
    assert "process" in payload


def test_json_formatter_includes_exc_info():
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record(logging.ERROR, "failed", sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))
    assert "ValueError" in payload["exc_info"]


def test_json_formatter_includes_error_details():
    error = ChecksumMismatchError("wrong rom", details={"actual_size": 3})
    record = _record(logging.ERROR, "wrong rom")
    record.error = error.to_dict()

    payload = json.loads(JsonFormatter().format(record))
    assert payload["error"]["error_code"] == "CHECKSUM_MISMATCH"
    assert payload["error"]["details"]["actual_size"] == 3


def test_console_formatter_uses_level_format():
    formatter = ConsoleFormatter()
    assert "WARNING [upspatch.test] careful" in formatter.format(_record(logging.WARNING, "careful"))
    assert formatter.format(_record()).endswith("INFO    hello")


def test_setup_logging_replaces_handlers(tmp_path):
    log_file = tmp_path / "logs" / "upspatch.log"
    logger = setup_logging("debug", log_file=log_file)
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    logger = setup_logging(logging.WARNING, json_format=True)
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, JsonFormatter)


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "upspatch.log"
    setup_logging(logging.INFO, json_format=True, log_file=log_file)
    get_logger("patching").info("written")
    for handler in logging.getLogger("upspatch").handlers:
        handler.flush()

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[-1])["message"] == "written"
    assert json.loads(lines[-1])["logger"] == "upspatch.patching"
