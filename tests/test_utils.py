"""Tests for logging and build console helpers."""

import io
import json
import logging

from pipepub.utils import BuildConsole, StructuredFormatter, setup_logging


def test_build_console_prefixes_lines():
    stream = io.StringIO()
    console = BuildConsole(stream=stream)

    console.log("Publishing artifacts")

    assert stream.getvalue() == "[pipepub] Publishing artifacts\n"
    assert console.lines == ["[pipepub] Publishing artifacts"]


def test_build_console_logs_exception_traceback():
    console = BuildConsole(stream=io.StringIO())
    try:
        raise ValueError("bad output")
    except ValueError as e:
        console.log_exception(e)

    assert console.lines[-1] == "[pipepub] ValueError: bad output"


def test_structured_formatter_emits_json():
    record = logging.LogRecord("pipepub", logging.INFO, __file__, 1, "hello", None, None)
    record.build_id = "42"

    data = json.loads(StructuredFormatter().format(record))

    assert data["message"] == "hello"
    assert data["level"] == "INFO"
    assert data["build_id"] == "42"


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "pipepub.log"
    logger = setup_logging(log_file=log_file, log_level="DEBUG", console_output=False)

    logger.info("written")
    for handler in logger.handlers:
        handler.flush()

    assert json.loads(log_file.read_text().splitlines()[-1])["message"] == "written"
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
